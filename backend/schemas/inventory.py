from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


MovementDirection = Literal["entrada", "salida"]
InventoryCategory = Literal["oficina", "limpieza", "garrafones"]
GarrafonTipo = Literal["garrafon", "sello", "tapon"]
GarrafonEstado = Literal["nuevo", "usado", "danado"]
AltProduct = Literal["garrafones", "tapones", "sellos"]
StockSource = Literal["movimientos", "inventario"]


def _strip_required(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("field is required")
    return v


class OficinaItemIn(BaseModel):
    nombre: str
    cantidad: int = Field(..., ge=0)
    descripcion: Optional[str] = None
    ubicacion: Optional[str] = None

    @field_validator("nombre")
    @classmethod
    def _nombre(cls, v: str) -> str:
        return _strip_required(v)


class LimpiezaItemIn(BaseModel):
    producto: str
    cantidad: int = Field(..., ge=0)
    tipo: Optional[str] = None
    proveedor: Optional[str] = None

    @field_validator("producto")
    @classmethod
    def _producto(cls, v: str) -> str:
        return _strip_required(v)


class GarrafonItemIn(BaseModel):
    tipo: GarrafonTipo
    cantidad: int = Field(..., ge=0)
    estado: Optional[GarrafonEstado] = "nuevo"
    ubicacion: Optional[str] = None
    observaciones: Optional[str] = None

    @field_validator("estado")
    @classmethod
    def _estado_default(cls, v: Optional[str]) -> str:
        return v or "nuevo"


class MovimientoIn(BaseModel):
    movimiento: MovementDirection
    cantidad: int = Field(..., gt=0)
    observaciones: Optional[str] = None

    @field_validator("observaciones")
    @classmethod
    def _blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class MovementRead(BaseModel):
    id: int
    tipo_inventario: InventoryCategory
    item_id: int
    movimiento: MovementDirection
    cantidad: int
    usuario_id: Optional[int] = None
    usuario_nombre: Optional[str] = None
    observaciones: Optional[str] = None
    fecha_movimiento: Optional[datetime] = None


class GarrafonesStock(BaseModel):
    garrafones: int = 0
    tapones: int = 0
    sellos: int = 0
