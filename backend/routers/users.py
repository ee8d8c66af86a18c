from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import SessionUser, current_master
from db.database import get_async_session
from schemas.users import UserListItem
from services.file_registry import FileRegistry
from services.storage import LocalBlobStorage, get_blob_storage
from services.users import UserService

router = APIRouter()


@router.get("", response_model=List[UserListItem])
async def list_users(
    user: SessionUser = Depends(current_master),
    db: AsyncSession = Depends(get_async_session),
):
    return await UserService(db).list_users()


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    user: SessionUser = Depends(current_master),
    db: AsyncSession = Depends(get_async_session),
    storage: LocalBlobStorage = Depends(get_blob_storage),
):
    """Delete a user and their files. Masters and the caller cannot be deleted."""
    service = UserService(db, FileRegistry(db, storage))
    await service.delete_user(user_id, acting_user_id=user.id)
    return {"success": True, "message": "Usuario eliminado exitosamente"}
