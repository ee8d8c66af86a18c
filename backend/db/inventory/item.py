from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func

from ..database import Base


class InventoryItemMixin:
    """Columns shared by the three inventory categories."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    cantidad = Column(Integer, nullable=False, default=0)

    @declared_attr
    def usuario_registro(cls):
        return Column(Integer, ForeignKey("usuarios.id", ondelete="SET NULL"), nullable=True, index=True)

    @declared_attr.directive
    def __table_args__(cls):
        return (CheckConstraint("cantidad >= 0", name=f"ck_{cls.__tablename__}_cantidad"),)

    @property
    def to_schema(self):
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}


class InventarioOficina(InventoryItemMixin, Base):
    __tablename__ = "inventario_oficina"

    nombre = Column(String(255), nullable=False)
    descripcion = Column(Text, nullable=True)
    ubicacion = Column(String(100), nullable=True)
    fecha_ingreso = Column(DateTime, nullable=False, server_default=func.now(), index=True)


class InventarioLimpieza(InventoryItemMixin, Base):
    __tablename__ = "inventario_limpieza"

    producto = Column(String(255), nullable=False)
    tipo = Column(String(100), nullable=True)
    proveedor = Column(String(255), nullable=True)
    fecha_ingreso = Column(DateTime, nullable=False, server_default=func.now(), index=True)


class InventarioGarrafon(InventoryItemMixin, Base):
    __tablename__ = "inventario_garrafones"

    # 'garrafon' | 'sello' | 'tapon'
    tipo = Column(String(20), nullable=False, index=True)
    # 'nuevo' | 'usado' | 'danado'
    estado = Column(String(20), nullable=True, default="nuevo")
    ubicacion = Column(String(100), nullable=True)
    observaciones = Column(Text, nullable=True)
    fecha_registro = Column(DateTime, nullable=False, server_default=func.now(), index=True)
