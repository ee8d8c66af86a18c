from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base


class MovimientoGarrafones(Base):
    __tablename__ = "movimientos_garrafones"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # 'entrada' | 'salida'
    tipo = Column(String(10), nullable=False)
    # 'garrafones' | 'tapones' | 'sellos'
    producto = Column(String(20), nullable=False, index=True)
    cantidad = Column(Integer, nullable=False)
    descripcion = Column(Text, nullable=True)
    usuario_id = Column(Integer, ForeignKey("usuarios.id", ondelete="SET NULL"), nullable=True)
    fecha = Column(DateTime, nullable=False, server_default=func.now())
