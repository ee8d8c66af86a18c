import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFoundError, StoreFailure
from db.files import Archivo
from db.users import User
from services.base import SessionService
from services.storage import LocalBlobStorage, StoredBlob

logger = logging.getLogger(__name__)


class FileRegistry(SessionService):
    def __init__(self, session: AsyncSession, storage: LocalBlobStorage):
        super().__init__(session)
        self.storage = storage

    async def register_upload(self, blob: StoredBlob, acting_user_id: Optional[int]) -> Archivo:
        record = Archivo(
            nombre_original=blob.nombre_original,
            nombre_archivo=blob.nombre_archivo,
            ruta=blob.ruta,
            tipo_archivo=blob.tipo_archivo,
            tamano=blob.tamano,
            subido_por=acting_user_id,
        )
        try:
            self.session.add(record)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("Error guardando archivo %s en la base de datos: %r", blob.nombre_archivo, exc)
            # Compensate: the blob has no metadata row, remove it.
            self.storage.delete(blob.ruta)
            raise StoreFailure("Error al guardar archivo en la base de datos") from exc
        logger.info("File %s (%s bytes) uploaded by user %s", record.id, blob.tamano, acting_user_id)
        return record

    async def list_files(self) -> List[Dict[str, Any]]:
        stmt = (
            select(Archivo, User.nombre.label("subido_por_nombre"))
            .outerjoin(User, Archivo.subido_por == User.id)
            .order_by(Archivo.fecha_subida.desc(), Archivo.id.desc())
        )
        res = await self.session.execute(stmt)
        out = []
        for archivo, subido_por_nombre in res.all():
            row = archivo.to_schema
            row["subido_por_nombre"] = subido_por_nombre
            out.append(row)
        return out

    async def list_files_of_user(self, user_id: int) -> List[Archivo]:
        res = await self.session.execute(select(Archivo).where(Archivo.subido_por == user_id))
        return list(res.scalars().all())

    async def delete_file(self, file_id: int) -> None:
        res = await self.session.execute(select(Archivo).where(Archivo.id == file_id))
        archivo = res.scalar_one_or_none()
        if archivo is None:
            raise NotFoundError("Archivo no encontrado")

        self.storage.delete(archivo.ruta)
        async with self.transaction("Error al eliminar archivo de la base de datos"):
            await self.session.execute(delete(Archivo).where(Archivo.id == file_id))
        logger.info("File %s deleted", file_id)

    async def remove_user_files(self, user_id: int) -> int:
        """Delete blobs and rows of a user's files. The caller commits."""
        archivos = await self.list_files_of_user(user_id)
        for archivo in archivos:
            self.storage.delete(archivo.ruta)
        if archivos:
            await self.session.execute(delete(Archivo).where(Archivo.subido_por == user_id))
        return len(archivos)

    async def purge_orphaned(self) -> int:
        """Remove files whose uploader no longer exists. Returns how many rows were deleted."""
        res = await self.session.execute(
            select(Archivo)
            .outerjoin(User, Archivo.subido_por == User.id)
            .where(User.id.is_(None))
        )
        orphaned = list(res.scalars().all())
        logger.info("Orphaned files found: %s", len(orphaned))
        if not orphaned:
            return 0

        for archivo in orphaned:
            self.storage.delete(archivo.ruta)

        ids = [a.id for a in orphaned]
        async with self.transaction("Error eliminando archivos huérfanos"):
            await self.session.execute(delete(Archivo).where(Archivo.id.in_(ids)))
        logger.info("%s orphaned files deleted", len(ids))
        return len(ids)
