from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class MovimientoInventario(Base):
    """Append-only audit row. item_id points into the table named by tipo_inventario."""
    __tablename__ = "movimientos_inventario"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # 'oficina' | 'limpieza' | 'garrafones'
    tipo_inventario = Column(String(20), nullable=False, index=True)
    item_id = Column(Integer, nullable=False, index=True)
    # 'entrada' | 'salida'
    movimiento = Column(String(10), nullable=False)
    cantidad = Column(Integer, nullable=False)
    usuario_id = Column(Integer, ForeignKey("usuarios.id", ondelete="SET NULL"), nullable=True)
    observaciones = Column(Text, nullable=True)
    fecha_movimiento = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    usuario = relationship("User")

    @property
    def to_schema(self):
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}
