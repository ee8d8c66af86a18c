from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class User(Base):
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    hashed_password = Column(String(1024), nullable=False)
    # 'master' | 'admin' | 'guest'
    tipo = Column(String(20), nullable=False, default="guest")
    fecha_registro = Column(DateTime, nullable=False, server_default=func.now())

    archivos = relationship("Archivo", back_populates="uploader", passive_deletes=True)

    @property
    def to_schema(self):
        """Public representation, never includes the password hash"""
        return {
            "id": self.id,
            "nombre": self.nombre,
            "email": self.email,
            "tipo": self.tipo,
        }
