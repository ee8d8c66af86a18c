from typing import Any, Dict, List, Optional

from sqlalchemy import select

from db.inventory.movement import MovimientoInventario
from db.users import User
from services.base import SessionService

DEFAULT_LIMIT = 50


class MovementLog(SessionService):
    """Read-only view over the movement audit trail."""

    async def list_movements(
        self,
        limit: int = DEFAULT_LIMIT,
        tipo_inventario: Optional[str] = None,
        item_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        stmt = (
            select(MovimientoInventario, User.nombre.label("usuario_nombre"))
            .outerjoin(User, MovimientoInventario.usuario_id == User.id)
        )
        if tipo_inventario:
            stmt = stmt.where(MovimientoInventario.tipo_inventario == tipo_inventario)
        if item_id is not None:
            stmt = stmt.where(MovimientoInventario.item_id == item_id)

        stmt = stmt.order_by(
            MovimientoInventario.fecha_movimiento.desc(),
            MovimientoInventario.id.desc(),
        ).limit(limit)
        res = await self.session.execute(stmt)

        out = []
        for mv, usuario_nombre in res.all():
            row = mv.to_schema
            row["usuario_nombre"] = usuario_nombre
            out.append(row)
        return out
