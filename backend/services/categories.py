"""
Inventory category descriptors.

The ledger is written once and parameterized by these descriptors: the model
backing the category, its descriptive name field, the payload schema that
carries its validation rules and the timestamp used for newest-first reads.
"""

from dataclasses import dataclass
from typing import Dict, Tuple, Type

from pydantic import BaseModel

from db.inventory.item import InventarioGarrafon, InventarioLimpieza, InventarioOficina
from schemas.inventory import GarrafonItemIn, LimpiezaItemIn, OficinaItemIn


@dataclass(frozen=True)
class CategoryDescriptor:
    key: str
    model: type
    schema: Type[BaseModel]
    name_field: str
    fields: Tuple[str, ...]
    created_field: str
    noun: str = "Item"

    @property
    def not_found_message(self) -> str:
        return f"{self.noun} no encontrado"

    def created_at(self):
        return getattr(self.model, self.created_field)


OFICINA = CategoryDescriptor(
    key="oficina",
    model=InventarioOficina,
    schema=OficinaItemIn,
    name_field="nombre",
    fields=("nombre", "cantidad", "descripcion", "ubicacion"),
    created_field="fecha_ingreso",
)

LIMPIEZA = CategoryDescriptor(
    key="limpieza",
    model=InventarioLimpieza,
    schema=LimpiezaItemIn,
    name_field="producto",
    fields=("producto", "cantidad", "tipo", "proveedor"),
    created_field="fecha_ingreso",
    noun="Producto",
)

GARRAFONES = CategoryDescriptor(
    key="garrafones",
    model=InventarioGarrafon,
    schema=GarrafonItemIn,
    name_field="tipo",
    fields=("tipo", "cantidad", "estado", "ubicacion", "observaciones"),
    created_field="fecha_registro",
)

CATEGORIES: Dict[str, CategoryDescriptor] = {c.key: c for c in (OFICINA, LIMPIEZA, GARRAFONES)}
