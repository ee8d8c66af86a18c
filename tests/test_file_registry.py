import io
import os

import pytest
from fastapi import UploadFile

from conftest import add_user
from core.errors import NotFoundError, StoreFailure, ValidationError
from db.files import Archivo
from services.file_registry import FileRegistry
from services.storage import CHUNK_SIZE, LocalBlobStorage


async def test_save_bytes_writes_unique_blob(storage):
    first = storage.save_bytes(b"hola", "Reporte.PDF", "application/pdf")
    second = storage.save_bytes(b"hola", "Reporte.PDF", "application/pdf")

    assert first.nombre_archivo != second.nombre_archivo
    assert first.nombre_archivo.endswith(".pdf")
    assert first.tamano == 4
    assert os.path.isfile(first.ruta)


def test_save_bytes_rejects_empty_and_oversized(storage):
    with pytest.raises(ValidationError):
        storage.save_bytes(b"", "vacio.txt")
    with pytest.raises(ValidationError):
        storage.save_bytes(b"x" * (storage.max_bytes + 1), "grande.bin")


async def test_save_upload_stops_reading_past_limit(tmp_path):
    storage = LocalBlobStorage(tmp_path / "small", max_bytes=100)
    fh = io.BytesIO(b"x" * (CHUNK_SIZE * 8))

    with pytest.raises(ValidationError):
        await storage.save(UploadFile(file=fh, filename="grande.bin"))

    assert fh.tell() <= CHUNK_SIZE
    assert list((tmp_path / "small").iterdir()) == []


async def test_save_upload_within_limit(storage):
    blob = await storage.save(UploadFile(file=io.BytesIO(b"y" * (CHUNK_SIZE + 10)), filename="datos.csv"))

    assert blob.tamano == CHUNK_SIZE + 10
    assert blob.nombre_archivo.endswith(".csv")
    assert os.path.getsize(blob.ruta) == CHUNK_SIZE + 10


def test_delete_missing_blob_is_not_an_error(storage, tmp_path):
    assert storage.delete(str(tmp_path / "nope.txt")) is False


async def test_register_list_and_delete(session, storage):
    user = await add_user(session, "admin@example.com", tipo="admin", nombre="Ana")
    registry = FileRegistry(session, storage)
    blob = storage.save_bytes(b"contenido", "nota.txt", "text/plain")

    record = await registry.register_upload(blob, acting_user_id=user.id)

    files = await registry.list_files()
    assert len(files) == 1
    assert files[0]["id"] == record.id
    assert files[0]["subido_por_nombre"] == "Ana"

    await registry.delete_file(record.id)
    assert await registry.list_files() == []
    assert not os.path.exists(blob.ruta)


async def test_delete_file_with_missing_blob_still_removes_row(session, storage):
    registry = FileRegistry(session, storage)
    blob = storage.save_bytes(b"contenido", "nota.txt")
    record = await registry.register_upload(blob, acting_user_id=None)
    os.unlink(blob.ruta)

    await registry.delete_file(record.id)
    assert await registry.list_files() == []


async def test_delete_unknown_file(session, storage):
    with pytest.raises(NotFoundError):
        await FileRegistry(session, storage).delete_file(123)


async def test_failed_registration_removes_blob(session, storage):
    registry = FileRegistry(session, storage)
    blob = storage.save_bytes(b"contenido", "nota.txt")

    # Unknown uploader violates the foreign key.
    with pytest.raises(StoreFailure):
        await registry.register_upload(blob, acting_user_id=9999)
    assert not os.path.exists(blob.ruta)


async def test_remove_user_files_and_purge_orphans(session, storage):
    owner = await add_user(session, "owner@example.com", tipo="admin")
    registry = FileRegistry(session, storage)

    owned = storage.save_bytes(b"a", "a.txt")
    await registry.register_upload(owned, acting_user_id=owner.id)
    orphan = storage.save_bytes(b"b", "b.txt")
    session.add(
        Archivo(
            nombre_original=orphan.nombre_original,
            nombre_archivo=orphan.nombre_archivo,
            ruta=orphan.ruta,
            tipo_archivo=orphan.tipo_archivo,
            tamano=orphan.tamano,
            subido_por=None,
        )
    )
    await session.commit()

    assert await registry.purge_orphaned() == 1
    assert not os.path.exists(orphan.ruta)
    assert await registry.purge_orphaned() == 0

    assert await registry.remove_user_files(owner.id) == 1
    await session.commit()
    assert await registry.list_files() == []
    assert not os.path.exists(owned.ruta)
