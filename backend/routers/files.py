import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import SessionUser, current_admin_or_master, current_user
from core.errors import ValidationError
from db.database import get_async_session
from services.file_registry import FileRegistry
from services.storage import LocalBlobStorage, get_blob_storage

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload")
async def upload_file(
    file: Optional[UploadFile] = File(None),
    user: SessionUser = Depends(current_admin_or_master),
    db: AsyncSession = Depends(get_async_session),
    storage: LocalBlobStorage = Depends(get_blob_storage),
):
    """Store the uploaded blob on disk and register its metadata (admin or master)."""
    if file is None:
        raise ValidationError("No se subió ningún archivo")

    logger.info("Uploading %s for user %s", file.filename, user.id)
    blob = await storage.save(file)
    record = await FileRegistry(db, storage).register_upload(blob, acting_user_id=user.id)
    return {
        "success": True,
        "message": "Archivo subido exitosamente",
        "file": {"id": record.id, "nombre": record.nombre_original},
    }


@router.get("/files", response_model=List[Dict])
async def list_files(
    user: SessionUser = Depends(current_user),
    db: AsyncSession = Depends(get_async_session),
    storage: LocalBlobStorage = Depends(get_blob_storage),
):
    return await FileRegistry(db, storage).list_files()


@router.delete("/files/{file_id}")
async def delete_file(
    file_id: int,
    user: SessionUser = Depends(current_admin_or_master),
    db: AsyncSession = Depends(get_async_session),
    storage: LocalBlobStorage = Depends(get_blob_storage),
):
    logger.info("Deleting file %s requested by user %s", file_id, user.id)
    await FileRegistry(db, storage).delete_file(file_id)
    return {"success": True, "message": "Archivo eliminado exitosamente"}
