"""
Inventory ledger: stock per item plus the append-only movement trail.

One implementation serves the three categories; the CategoryDescriptor
supplies the table, the field list and the validation schema.

Invariants kept here:
- cantidad never drops below zero; a 'salida' larger than the stock is
  rejected before anything is written.
- every quantity change made through create_item/adjust_quantity writes
  exactly one MovimientoInventario row in the same transaction.
- delete_item removes the item's movements and the item together.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import InsufficientStockError, NotFoundError, ValidationError
from db.inventory.movement import MovimientoInventario
from db.users import User
from services.base import SessionService
from services.categories import CategoryDescriptor

logger = logging.getLogger(__name__)

ENTRADA = "entrada"
SALIDA = "salida"
DIRECTIONS = (ENTRADA, SALIDA)


class InventoryLedger(SessionService):
    def __init__(self, session: AsyncSession, category: CategoryDescriptor):
        super().__init__(session)
        self.category = category
        self.model = category.model

    def _validate(self, fields: Union[BaseModel, Mapping[str, Any]]) -> Dict[str, Any]:
        if isinstance(fields, self.category.schema):
            payload = fields
        else:
            raw = fields.model_dump() if isinstance(fields, BaseModel) else dict(fields)
            try:
                payload = self.category.schema.model_validate(raw)
            except PydanticValidationError as exc:
                first = exc.errors()[0]
                field = ".".join(str(p) for p in first.get("loc", ()))
                raise ValidationError(f"{field}: {first.get('msg')}") from exc
        data = payload.model_dump()
        return {k: data.get(k) for k in self.category.fields}

    def _row(self, item, usuario_nombre: Optional[str]) -> Dict[str, Any]:
        out = item.to_schema
        out["usuario_nombre"] = usuario_nombre
        return out

    async def list_items(self) -> List[Dict[str, Any]]:
        stmt = (
            select(self.model, User.nombre.label("usuario_nombre"))
            .outerjoin(User, self.model.usuario_registro == User.id)
            .order_by(self.category.created_at().desc(), self.model.id.desc())
        )
        res = await self.session.execute(stmt)
        return [self._row(item, nombre) for item, nombre in res.all()]

    async def get_item(self, item_id: int) -> Dict[str, Any]:
        stmt = (
            select(self.model, User.nombre.label("usuario_nombre"))
            .outerjoin(User, self.model.usuario_registro == User.id)
            .where(self.model.id == item_id)
        )
        row = (await self.session.execute(stmt)).first()
        if row is None:
            raise NotFoundError(self.category.not_found_message)
        item, nombre = row
        return self._row(item, nombre)

    async def create_item(self, fields, acting_user_id: Optional[int]) -> int:
        data = self._validate(fields)
        async with self.transaction("Error al agregar item"):
            item = self.model(**data, usuario_registro=acting_user_id)
            self.session.add(item)
            await self.session.flush()
            self.session.add(
                MovimientoInventario(
                    tipo_inventario=self.category.key,
                    item_id=item.id,
                    movimiento=ENTRADA,
                    cantidad=item.cantidad,
                    usuario_id=acting_user_id,
                    observaciones=f"Ingreso inicial: {data[self.category.name_field]}",
                )
            )
        logger.info("%s item %s created by user %s (cantidad=%s)", self.category.key, item.id, acting_user_id, item.cantidad)
        return item.id

    async def update_item(self, item_id: int, fields) -> None:
        """Full replace of the mutable fields. Direct edits do not write a movement."""
        data = self._validate(fields)
        async with self.transaction("Error al actualizar item"):
            res = await self.session.execute(
                update(self.model).where(self.model.id == item_id).values(**data)
            )
            if not res.rowcount:
                raise NotFoundError(self.category.not_found_message)
        logger.info("%s item %s updated", self.category.key, item_id)

    async def delete_item(self, item_id: int) -> None:
        async with self.transaction("Error al eliminar item"):
            existing = await self.session.execute(select(self.model.id).where(self.model.id == item_id))
            if existing.scalar_one_or_none() is None:
                raise NotFoundError(self.category.not_found_message)
            await self.session.execute(
                delete(MovimientoInventario).where(
                    MovimientoInventario.tipo_inventario == self.category.key,
                    MovimientoInventario.item_id == item_id,
                )
            )
            await self.session.execute(delete(self.model).where(self.model.id == item_id))
        logger.info("%s item %s deleted with its movements", self.category.key, item_id)

    async def adjust_quantity(
        self,
        item_id: int,
        movimiento: str,
        cantidad: int,
        observaciones: Optional[str],
        acting_user_id: Optional[int],
    ) -> int:
        if movimiento not in DIRECTIONS:
            raise ValidationError("movimiento debe ser 'entrada' o 'salida'")
        if isinstance(cantidad, bool) or not isinstance(cantidad, int) or cantidad <= 0:
            raise ValidationError("cantidad debe ser un entero mayor a 0")

        async with self.transaction("Error al actualizar inventario"):
            res = await self.session.execute(
                select(self.model).where(self.model.id == item_id).with_for_update()
            )
            item = res.scalar_one_or_none()
            if item is None:
                raise NotFoundError(self.category.not_found_message)

            current = int(item.cantidad or 0)
            if movimiento == SALIDA and cantidad > current:
                raise InsufficientStockError("No hay suficiente stock")

            nueva_cantidad = current + cantidad if movimiento == ENTRADA else current - cantidad
            item.cantidad = nueva_cantidad
            self.session.add(
                MovimientoInventario(
                    tipo_inventario=self.category.key,
                    item_id=item_id,
                    movimiento=movimiento,
                    cantidad=cantidad,
                    usuario_id=acting_user_id,
                    observaciones=observaciones or f"Movimiento: {movimiento}",
                )
            )
        logger.info(
            "%s item %s %s %s -> %s (user %s)",
            self.category.key, item_id, movimiento, cantidad, nueva_cantidad, acting_user_id,
        )
        return nueva_cantidad
