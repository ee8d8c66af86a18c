import os

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, RedirectResponse

from core.auth import session_user
from core.config import settings
from core.errors import NotFoundError

router = APIRouter(include_in_schema=False)


def _page(name: str) -> FileResponse:
    path = os.path.join(settings.public_dir, name)
    if not os.path.isfile(path):
        raise NotFoundError("Ruta no encontrada")
    return FileResponse(path, media_type="text/html")


@router.get("/")
async def home():
    return _page("home.html")


@router.get("/login.html")
async def login_page():
    return _page("login.html")


@router.get("/register.html")
async def register_page():
    return _page("register.html")


@router.get("/dashboard.html")
async def dashboard_page(request: Request):
    if session_user(request) is None:
        return RedirectResponse("/login.html", status_code=302)
    return _page("dashboard.html")


@router.get("/archivos.html")
async def files_page(request: Request):
    if session_user(request) is None:
        return RedirectResponse("/login.html", status_code=302)
    return _page("archivos.html")
