from httpx import ASGITransport, AsyncClient

from conftest import ADMIN_CODE, login, login_master, register


async def _admin(client, email="admin@example.com"):
    res = await register(client, email, codigo=ADMIN_CODE)
    assert res.status_code == 200, res.text
    return await login(client, email)


async def test_register_assigns_role_by_code(client):
    res = await register(client, "admin@example.com", codigo=ADMIN_CODE)
    assert res.json()["tipo"] == "admin"

    res = await register(client, "guest@example.com", codigo="1111")
    assert res.json()["tipo"] == "guest"

    res = await register(client, "guest2@example.com")
    assert res.json()["tipo"] == "guest"


async def test_register_duplicate_email(client):
    await register(client, "dup@example.com")
    res = await register(client, "dup@example.com")
    assert res.status_code == 400
    assert res.json() == {"error": "El email ya está registrado"}


async def test_register_requires_fields(client):
    res = await client.post("/api/register", json={"nombre": "", "email": "x@example.com", "password": "a"})
    assert res.status_code == 400
    assert "error" in res.json()


async def test_login_logout_and_current_user(client):
    res = await client.get("/api/user")
    assert res.status_code == 401
    assert res.json() == {"error": "No autenticado"}

    res = await client.post("/api/login", json={"email": "nadie@example.com", "password": "x"})
    assert res.status_code == 401
    assert res.json() == {"error": "Credenciales incorrectas"}

    user = await login_master(client)
    assert user["tipo"] == "master"
    assert "hashed_password" not in user

    res = await client.get("/api/user")
    assert res.status_code == 200
    assert res.json()["id"] == user["id"]

    res = await client.post("/api/logout")
    assert res.json()["success"] is True
    assert (await client.get("/api/user")).status_code == 401


async def test_guest_can_read_but_not_write(client):
    await register(client, "guest@example.com")
    await login(client, "guest@example.com")

    assert (await client.get("/api/inventario/oficina")).status_code == 200
    res = await client.post("/api/inventario/oficina", json={"nombre": "Papel", "cantidad": 1})
    assert res.status_code == 403
    assert res.json() == {"error": "Acceso denegado: Se requiere rol admin o maestro"}

    res = await client.get("/api/users")
    assert res.status_code == 403
    assert res.json() == {"error": "Solo el usuario maestro puede acceder"}


async def test_unauthenticated_inventory_read(client):
    res = await client.get("/api/inventario/limpieza")
    assert res.status_code == 401


async def test_office_item_lifecycle(client):
    await _admin(client)

    res = await client.post(
        "/api/inventario/oficina", json={"nombre": "Papel", "cantidad": 10, "ubicacion": "Bodega"}
    )
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    item_id = body["item"]["id"]
    assert body["item"]["nombre"] == "Papel"

    res = await client.put(
        f"/api/inventario/oficina/{item_id}/movimiento", json={"movimiento": "salida", "cantidad": 4}
    )
    assert res.status_code == 200
    assert res.json()["nuevaCantidad"] == 6

    res = await client.put(
        f"/api/inventario/oficina/{item_id}/movimiento", json={"movimiento": "salida", "cantidad": 100}
    )
    assert res.status_code == 400
    assert res.json() == {"error": "No hay suficiente stock"}

    item = (await client.get(f"/api/inventario/oficina/{item_id}")).json()
    assert item["cantidad"] == 6

    movements = (await client.get("/api/inventario/movimientos", params={"tipo_inventario": "oficina"})).json()
    assert [(m["movimiento"], m["cantidad"]) for m in movements] == [("salida", 4), ("entrada", 10)]
    assert movements[1]["observaciones"] == "Ingreso inicial: Papel"

    res = await client.put(f"/api/inventario/oficina/{item_id}", json={"nombre": "Papel carta", "cantidad": 8})
    assert res.status_code == 200
    assert (await client.get(f"/api/inventario/oficina/{item_id}")).json()["cantidad"] == 8

    res = await client.delete(f"/api/inventario/oficina/{item_id}")
    assert res.status_code == 200
    res = await client.get(f"/api/inventario/oficina/{item_id}")
    assert res.status_code == 404
    assert res.json() == {"error": "Item no encontrado"}
    assert (await client.get("/api/inventario/movimientos")).json() == []


async def test_movement_payload_validation(client):
    await _admin(client)
    item_id = (
        await client.post("/api/inventario/limpieza", json={"producto": "Cloro", "cantidad": 2})
    ).json()["item"]["id"]

    for payload in (
        {"movimiento": "prestamo", "cantidad": 1},
        {"movimiento": "entrada", "cantidad": 0},
        {"movimiento": "entrada"},
    ):
        res = await client.put(f"/api/inventario/limpieza/{item_id}/movimiento", json=payload)
        assert res.status_code == 400
        assert "error" in res.json()

    res = await client.put("/api/inventario/limpieza/999/movimiento", json={"movimiento": "entrada", "cantidad": 1})
    assert res.status_code == 404
    assert res.json() == {"error": "Producto no encontrado"}


async def test_movements_limit(client):
    await _admin(client)
    for n in range(3):
        await client.post("/api/inventario/oficina", json={"nombre": f"Item {n}", "cantidad": n})

    res = await client.get("/api/inventario/movimientos", params={"limit": 2})
    assert len(res.json()) == 2
    assert (await client.get("/api/inventario/movimientos", params={"limit": 0})).status_code == 400


async def test_garrafones_stock_sources(client):
    await _admin(client)
    await client.post("/api/inventario/garrafones", json={"tipo": "tapon", "cantidad": 12})

    res = await client.get("/api/inventario/garrafones/stock")
    assert res.status_code == 200
    assert res.json() == {"garrafones": 125, "tapones": 350, "sellos": 210}

    res = await client.get("/api/inventario/garrafones/stock", params={"fuente": "inventario"})
    assert res.json() == {"garrafones": 0, "tapones": 12, "sellos": 0}


async def test_upload_list_and_delete_file(client):
    await _admin(client)

    res = await client.post("/api/upload", files={"file": ("nota.txt", b"hola", "text/plain")})
    assert res.status_code == 200, res.text
    file_id = res.json()["file"]["id"]

    files = (await client.get("/api/files")).json()
    assert [f["id"] for f in files] == [file_id]
    assert files[0]["nombre_original"] == "nota.txt"

    assert (await client.delete(f"/api/files/{file_id}")).status_code == 200
    assert (await client.get("/api/files")).json() == []
    assert (await client.delete(f"/api/files/{file_id}")).status_code == 404


async def test_upload_without_file(client):
    await _admin(client)
    res = await client.post("/api/upload", data={"descripcion": "sin archivo"})
    assert res.status_code == 400
    assert res.json() == {"error": "No se subió ningún archivo"}


async def test_master_deletes_user_with_files(client):
    from main import app

    await _admin(client)
    await client.post("/api/upload", files={"file": ("a.txt", b"a", "text/plain")})
    await client.post("/api/inventario/oficina", json={"nombre": "Papel", "cantidad": 1})
    admin_id = (await client.get("/api/user")).json()["id"]

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as master:
        me = await login_master(master)

        users = (await master.get("/api/users")).json()
        assert {u["email"] for u in users} >= {"admin@example.com"}

        res = await master.delete(f"/api/users/{admin_id}")
        assert res.status_code == 200
        assert (await master.get("/api/files")).json() == []
        items = (await master.get("/api/inventario/oficina")).json()
        assert items[0]["usuario_registro"] is None

        res = await master.delete(f"/api/users/{me['id']}")
        assert res.status_code == 403
        assert res.json() == {"error": "No puedes eliminarte a ti mismo"}

        res = await master.delete("/api/users/999")
        assert res.status_code == 404


async def test_cannot_delete_another_master(client, session):
    from conftest import add_user

    other = await add_user(session, "otro.maestro@example.com", tipo="master")
    await login_master(client)

    res = await client.delete(f"/api/users/{other.id}")
    assert res.status_code == 403
    assert res.json() == {"error": "No se puede eliminar otro usuario maestro"}


async def test_clean_orphaned_files(client):
    await login_master(client)
    res = await client.get("/api/maintenance/clean-orphaned-files")
    assert res.status_code == 200
    assert res.json()["eliminados"] == 0


async def test_unknown_route_and_bad_path_param(client):
    res = await client.get("/api/no-existe")
    assert res.status_code == 404
    assert res.json() == {"error": "Ruta no encontrada"}

    await login_master(client)
    res = await client.get("/api/inventario/oficina/abc")
    assert res.status_code == 400


async def test_protected_pages_redirect_to_login(client):
    res = await client.get("/dashboard.html")
    assert res.status_code == 302
    assert res.headers["location"] == "/login.html"


async def test_deleted_user_session_is_rejected(client):
    from main import app

    await _admin(client)
    admin_id = (await client.get("/api/user")).json()["id"]

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as master:
        await login_master(master)
        assert (await master.delete(f"/api/users/{admin_id}")).status_code == 200

    res = await client.get("/api/inventario/oficina")
    assert res.status_code == 401
    assert res.json() == {"error": "No autenticado"}

    res = await client.post("/api/inventario/oficina", json={"nombre": "Papel", "cantidad": 1})
    assert res.status_code == 401


async def test_role_is_read_from_the_stored_user(client, session):
    from sqlalchemy import update

    from db.users import User

    await _admin(client)
    admin_id = (await client.get("/api/user")).json()["id"]
    await session.execute(update(User).where(User.id == admin_id).values(tipo="guest"))
    await session.commit()

    res = await client.post("/api/inventario/oficina", json={"nombre": "Papel", "cantidad": 1})
    assert res.status_code == 403


async def test_upload_over_size_limit(client, storage):
    await _admin(client)
    data = b"x" * (storage.max_bytes + 1)

    res = await client.post("/api/upload", files={"file": ("grande.bin", data, "application/octet-stream")})
    assert res.status_code == 400
    assert "límite" in res.json()["error"]
    assert (await client.get("/api/files")).json() == []


async def test_unhandled_error_returns_500(client, monkeypatch):
    from core.config import settings
    from main import app
    from services.storage import get_blob_storage

    def _broken_storage():
        raise RuntimeError("disco no disponible")

    app.dependency_overrides[get_blob_storage] = _broken_storage
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        await login_master(c)

        monkeypatch.setattr(settings, "debug", False)
        res = await c.get("/api/files")
        assert res.status_code == 500
        assert res.json() == {"error": "Internal Server Error"}

        monkeypatch.setattr(settings, "debug", True)
        res = await c.get("/api/files")
        assert res.status_code == 500
        assert res.json() == {"error": "Internal Server Error", "details": "disco no disponible"}
