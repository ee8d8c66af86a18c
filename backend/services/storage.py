import logging
import os
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from core.config import settings
from core.errors import ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StoredBlob:
    nombre_original: str
    nombre_archivo: str
    ruta: str
    tipo_archivo: Optional[str]
    tamano: int


class LocalBlobStorage:
    """Stores uploaded files on local disk under a unique name."""

    def __init__(self, base_dir, max_bytes: Optional[int] = None):
        self.base_dir = Path(base_dir)
        self.max_bytes = max_bytes
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _unique_name(self, original: str) -> str:
        ext = os.path.splitext(original)[1].lower()
        return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"

    def _too_large(self) -> ValidationError:
        return ValidationError(f"El archivo supera el límite de {self.max_bytes // (1024 * 1024)}MB")

    def save_bytes(self, data: bytes, filename: str, content_type: Optional[str] = None) -> StoredBlob:
        if not data:
            raise ValidationError("El archivo está vacío")
        if self.max_bytes is not None and len(data) > self.max_bytes:
            raise self._too_large()

        stored_name = self._unique_name(filename)
        path = self.base_dir / stored_name
        with open(path, "wb") as fh:
            fh.write(data)

        return StoredBlob(
            nombre_original=filename,
            nombre_archivo=stored_name,
            ruta=str(path),
            tipo_archivo=content_type or "application/octet-stream",
            tamano=len(data),
        )

    async def save(self, upload: UploadFile) -> StoredBlob:
        """Read the upload in chunks, stopping as soon as it passes max_bytes."""
        chunks = []
        size = 0
        while True:
            chunk = await upload.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if self.max_bytes is not None and size > self.max_bytes:
                raise self._too_large()
            chunks.append(chunk)

        data = b"".join(chunks)
        filename = upload.filename or "archivo"
        return self.save_bytes(data, filename, (upload.content_type or "").strip().lower() or None)

    def delete(self, ruta: str) -> bool:
        """Best-effort removal. Failures are logged and reported as False."""
        try:
            os.unlink(ruta)
            return True
        except FileNotFoundError:
            logger.warning("Blob already missing on disk: %s", ruta)
        except OSError as exc:
            logger.warning("Failed to delete blob %s: %s", ruta, exc)
        return False


def get_blob_storage() -> LocalBlobStorage:
    return LocalBlobStorage(settings.upload_dir, settings.max_upload_mb * 1024 * 1024)
