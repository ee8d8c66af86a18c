from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import SessionUser, current_master
from db.database import get_async_session
from services.file_registry import FileRegistry
from services.storage import LocalBlobStorage, get_blob_storage

router = APIRouter()


@router.get("/clean-orphaned-files")
async def clean_orphaned_files(
    user: SessionUser = Depends(current_master),
    db: AsyncSession = Depends(get_async_session),
    storage: LocalBlobStorage = Depends(get_blob_storage),
):
    """Remove file records (and blobs) whose uploader no longer exists."""
    removed = await FileRegistry(db, storage).purge_orphaned()
    if not removed:
        return {"success": True, "message": "No hay archivos huérfanos", "eliminados": 0}
    return {
        "success": True,
        "message": f"Se eliminaron {removed} archivos huérfanos",
        "eliminados": removed,
    }
