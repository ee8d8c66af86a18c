from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Archivo(Base):
    """Metadata of an uploaded blob stored on disk."""
    __tablename__ = "archivos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nombre_original = Column(String(255), nullable=False)
    nombre_archivo = Column(String(255), nullable=False)
    ruta = Column(String(512), nullable=False)
    tipo_archivo = Column(String(100), nullable=True)
    tamano = Column(Integer, nullable=True)
    subido_por = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=True, index=True)
    fecha_subida = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    uploader = relationship("User", back_populates="archivos")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "nombre_original": self.nombre_original,
            "nombre_archivo": self.nombre_archivo,
            "ruta": self.ruta,
            "tipo_archivo": self.tipo_archivo,
            "tamano": self.tamano,
            "subido_por": self.subido_por,
            "fecha_subida": self.fecha_subida,
        }
