import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import SessionUser, current_admin_or_master, current_user
from db.database import get_async_session
from schemas.inventory import (
    GarrafonesStock,
    InventoryCategory,
    MovementRead,
    MovimientoIn,
    StockSource,
)
from services.categories import CATEGORIES, CategoryDescriptor
from services.garrafones_stock import AltStockLedger
from services.inventory_ledger import InventoryLedger
from services.movements import DEFAULT_LIMIT, MovementLog

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/movimientos", response_model=List[MovementRead])
async def list_movements(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=500),
    tipo_inventario: Optional[InventoryCategory] = None,
    user: SessionUser = Depends(current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Most recent movements across all categories, newest first."""
    return await MovementLog(db).list_movements(limit=limit, tipo_inventario=tipo_inventario)


# Registered before the category routers so "/garrafones/stock" is not read as an item id.
@router.get("/garrafones/stock", response_model=GarrafonesStock)
async def get_garrafones_stock(
    fuente: StockSource = "movimientos",
    user: SessionUser = Depends(current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """
    Jug/seal/cap stock.

    - fuente=movimientos (default): signed sum of the alternate ledger.
    - fuente=inventario: sum of the stored cantidad of inventario_garrafones rows.
    """
    ledger = AltStockLedger(db)
    if fuente == "inventario":
        return await ledger.item_stock()
    return await ledger.stock()


def build_category_router(category: CategoryDescriptor) -> APIRouter:
    """CRUD + movement routes for one inventory category."""
    category_router = APIRouter()
    ItemPayload = category.schema
    noun = category.noun

    @category_router.get("", response_model=List[Dict])
    async def list_items(
        user: SessionUser = Depends(current_user),
        db: AsyncSession = Depends(get_async_session),
    ):
        return await InventoryLedger(db, category).list_items()

    @category_router.get("/{item_id}", response_model=Dict)
    async def get_item(
        item_id: int,
        user: SessionUser = Depends(current_user),
        db: AsyncSession = Depends(get_async_session),
    ):
        return await InventoryLedger(db, category).get_item(item_id)

    @category_router.post("", response_model=Dict, status_code=status.HTTP_201_CREATED)
    async def create_item(
        payload: ItemPayload,
        user: SessionUser = Depends(current_admin_or_master),
        db: AsyncSession = Depends(get_async_session),
    ):
        item_id = await InventoryLedger(db, category).create_item(payload, acting_user_id=user.id)
        return {
            "success": True,
            "message": f"{noun} agregado exitosamente",
            "item": {"id": item_id, category.name_field: getattr(payload, category.name_field)},
        }

    @category_router.put("/{item_id}", response_model=Dict)
    async def update_item(
        item_id: int,
        payload: ItemPayload,
        user: SessionUser = Depends(current_admin_or_master),
        db: AsyncSession = Depends(get_async_session),
    ):
        await InventoryLedger(db, category).update_item(item_id, payload)
        return {"success": True, "message": f"{noun} actualizado exitosamente"}

    @category_router.delete("/{item_id}", response_model=Dict)
    async def delete_item(
        item_id: int,
        user: SessionUser = Depends(current_admin_or_master),
        db: AsyncSession = Depends(get_async_session),
    ):
        await InventoryLedger(db, category).delete_item(item_id)
        return {"success": True, "message": f"{noun} eliminado exitosamente"}

    @category_router.put("/{item_id}/movimiento", response_model=Dict)
    async def adjust_quantity(
        item_id: int,
        payload: MovimientoIn,
        user: SessionUser = Depends(current_admin_or_master),
        db: AsyncSession = Depends(get_async_session),
    ):
        nueva_cantidad = await InventoryLedger(db, category).adjust_quantity(
            item_id,
            payload.movimiento,
            payload.cantidad,
            payload.observaciones,
            acting_user_id=user.id,
        )
        return {
            "success": True,
            "message": f"Inventario actualizado - {payload.movimiento} de {payload.cantidad} unidades",
            "nuevaCantidad": nueva_cantidad,
        }

    return category_router


for _category in CATEGORIES.values():
    router.include_router(
        build_category_router(_category),
        prefix=f"/{_category.key}",
        tags=[f"inventario-{_category.key}"],
    )
