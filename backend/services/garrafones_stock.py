"""
Jug/seal/cap stock views.

Two independent numbers exist for the same physical stock:
- the alternate ledger (movimientos_garrafones), where stock is the signed
  sum of entries per product;
- the stored cantidad column of inventario_garrafones.
Both are exposed; neither is reconciled against the other.
"""

import logging
from typing import Dict, Optional

from sqlalchemy import case, func, select

from core.errors import ValidationError
from db.inventory.alt_movement import MovimientoGarrafones
from db.inventory.item import InventarioGarrafon
from services.base import SessionService

logger = logging.getLogger(__name__)

PRODUCTS = ("garrafones", "tapones", "sellos")

# inventario_garrafones.tipo -> product name used by the alternate ledger
ITEM_TYPE_TO_PRODUCT = {
    "garrafon": "garrafones",
    "tapon": "tapones",
    "sello": "sellos",
}

INITIAL_STOCK = (
    ("garrafones", 125),
    ("tapones", 350),
    ("sellos", 210),
)


def _empty_stock() -> Dict[str, int]:
    return {p: 0 for p in PRODUCTS}


class AltStockLedger(SessionService):

    async def stock(self) -> Dict[str, int]:
        signed = case(
            (MovimientoGarrafones.tipo == "entrada", MovimientoGarrafones.cantidad),
            else_=-MovimientoGarrafones.cantidad,
        )
        res = await self.session.execute(
            select(MovimientoGarrafones.producto, func.sum(signed)).group_by(MovimientoGarrafones.producto)
        )
        out = _empty_stock()
        for producto, total in res.all():
            if producto in out:
                out[producto] = int(total or 0)
        return out

    async def item_stock(self) -> Dict[str, int]:
        """Stock as stored on inventario_garrafones rows, summed per tipo."""
        res = await self.session.execute(
            select(InventarioGarrafon.tipo, func.sum(InventarioGarrafon.cantidad)).group_by(InventarioGarrafon.tipo)
        )
        out = _empty_stock()
        for tipo, total in res.all():
            producto = ITEM_TYPE_TO_PRODUCT.get(tipo)
            if producto:
                out[producto] = int(total or 0)
        return out

    async def record(
        self,
        producto: str,
        tipo: str,
        cantidad: int,
        descripcion: Optional[str] = None,
        usuario_id: Optional[int] = None,
    ) -> int:
        if producto not in PRODUCTS:
            raise ValidationError(f"producto debe ser uno de {', '.join(PRODUCTS)}")
        if tipo not in ("entrada", "salida"):
            raise ValidationError("tipo debe ser 'entrada' o 'salida'")
        if cantidad <= 0:
            raise ValidationError("cantidad debe ser mayor a 0")

        async with self.transaction("Error al registrar movimiento de garrafones"):
            mv = MovimientoGarrafones(
                tipo=tipo,
                producto=producto,
                cantidad=cantidad,
                descripcion=descripcion,
                usuario_id=usuario_id,
            )
            self.session.add(mv)
            await self.session.flush()
        return mv.id

    async def seed_initial_stock(self, usuario_id: Optional[int] = None) -> bool:
        """Insert the starting balances once. Returns False when the ledger already has rows."""
        count = (await self.session.execute(select(func.count(MovimientoGarrafones.id)))).scalar_one()
        if count:
            logger.info("Alternate jug ledger already has %s rows, skipping seed", count)
            return False

        async with self.transaction("Error insertando datos iniciales de garrafones"):
            for producto, cantidad in INITIAL_STOCK:
                self.session.add(
                    MovimientoGarrafones(
                        tipo="entrada",
                        producto=producto,
                        cantidad=cantidad,
                        descripcion="Stock inicial",
                        usuario_id=usuario_id,
                    )
                )
        logger.info("Alternate jug ledger seeded: %s", ", ".join(f"{p}={q}" for p, q in INITIAL_STOCK))
        return True
