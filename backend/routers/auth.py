import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import SessionUser, current_user, end_session, start_session
from db.database import get_async_session
from schemas.users import LoginRequest, RegisterRequest, UserRead
from services.users import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register")
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_async_session)):
    user = await UserService(db).register(
        payload.nombre, payload.email, payload.password, payload.codigoAdmin
    )
    return {"success": True, "message": "Usuario registrado exitosamente", "tipo": user.tipo}


@router.post("/login")
async def login(
    payload: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
):
    logger.info("Login attempt for %s", payload.email)
    user = await UserService(db).authenticate(payload.email, payload.password)
    start_session(request, user.id, user.nombre, user.tipo)
    logger.info("Session created for user %s (%s)", user.id, user.tipo)
    return {"success": True, "message": "Login exitoso", "user": UserRead(**user.to_schema)}


@router.post("/logout")
async def logout(request: Request):
    user_id = end_session(request)
    logger.info("Logout user %s", user_id)
    return {"success": True, "message": "Sesión cerrada"}


@router.get("/user", response_model=UserRead)
async def get_current_user(
    user: SessionUser = Depends(current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Current session user, without the password hash."""
    row = await UserService(db).get(user.id)
    return UserRead(**row.to_schema)
