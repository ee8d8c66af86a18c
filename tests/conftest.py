import os

# Settings are read at import time; point the module-level engine at SQLite
# before any application module is imported.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["PUBLIC_DIR"] = os.path.join(os.path.dirname(__file__), "no-public-dir")

import pytest
from httpx import ASGITransport, AsyncClient

from core.config import settings
from core.auth import Role, hash_password
from db.database import create_db_and_tables, get_async_session, make_engine, make_session_maker
from db.users import User
from services.bootstrap import initialize_database
from services.storage import LocalBlobStorage, get_blob_storage

ADMIN_CODE = settings.admin_code


@pytest.fixture
async def engine(tmp_path):
    eng = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_db_and_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_maker(engine):
    return make_session_maker(engine)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest.fixture
def storage(tmp_path):
    return LocalBlobStorage(tmp_path / "uploads", max_bytes=1024 * 1024)


@pytest.fixture
async def client(engine, session_maker, storage):
    from main import app

    await initialize_database(engine, session_maker, settings)

    async def _session():
        async with session_maker() as s:
            yield s

    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[get_blob_storage] = lambda: storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.clear()


async def add_user(session, email: str, tipo: str = Role.GUEST.value, nombre: str = "Prueba") -> User:
    user = User(nombre=nombre, email=email, hashed_password=hash_password("secreto"), tipo=tipo)
    session.add(user)
    await session.commit()
    return user


async def register(client, email: str, codigo=None, nombre: str = "Prueba", password: str = "secreto"):
    body = {"nombre": nombre, "email": email, "password": password}
    if codigo is not None:
        body["codigoAdmin"] = codigo
    return await client.post("/api/register", json=body)


async def login(client, email: str, password: str = "secreto"):
    res = await client.post("/api/login", json={"email": email, "password": password})
    assert res.status_code == 200, res.text
    return res.json()["user"]


async def login_master(client):
    return await login(client, settings.master_email, settings.master_password)
