"""
Session-backed auth gate.

Identity lives in the signed session cookie (``user_id``, ``user_name``,
``user_type``). Every gated request re-reads the user row: a deleted account
loses access at once and permissions follow the stored role. Roles are
mapped to permissions through ``ROLE_PERMISSIONS``; routes declare the
permission they need with ``Depends(require(...))``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from fastapi import Depends, Request
from fastapi_users.password import PasswordHelper
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ForbiddenError, UnauthenticatedError
from db.database import get_async_session
from db.users import User


class Role(str, Enum):
    MASTER = "master"
    ADMIN = "admin"
    GUEST = "guest"


class Permission(str, Enum):
    VIEW = "view"
    MANAGE = "manage"
    ADMINISTER = "administer"


ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.MASTER: frozenset({Permission.VIEW, Permission.MANAGE, Permission.ADMINISTER}),
    Role.ADMIN: frozenset({Permission.VIEW, Permission.MANAGE}),
    Role.GUEST: frozenset({Permission.VIEW}),
}

DENIED_MESSAGES: Dict[Permission, str] = {
    Permission.VIEW: "Acceso denegado",
    Permission.MANAGE: "Acceso denegado: Se requiere rol admin o maestro",
    Permission.ADMINISTER: "Solo el usuario maestro puede acceder",
}

password_helper = PasswordHelper()


@dataclass(frozen=True)
class SessionUser:
    id: int
    nombre: Optional[str]
    tipo: str


def hash_password(password: str) -> str:
    return password_helper.hash(password)


def verify_password(password: str, hashed: str) -> Tuple[bool, Optional[str]]:
    """Return (is_valid, upgraded_hash). The second item is set when the stored hash is outdated."""
    return password_helper.verify_and_update(password, hashed)


def has_permission(role: str, permission: Permission) -> bool:
    try:
        return permission in ROLE_PERMISSIONS[Role(role)]
    except ValueError:
        return False


def start_session(request: Request, user_id: int, nombre: str, tipo: str) -> None:
    request.session["user_id"] = user_id
    request.session["user_name"] = nombre
    request.session["user_type"] = tipo


def end_session(request: Request) -> Optional[int]:
    user_id = request.session.get("user_id")
    request.session.clear()
    return user_id


def session_user(request: Request) -> Optional[SessionUser]:
    user_id = request.session.get("user_id")
    if user_id is None:
        return None
    return SessionUser(
        id=int(user_id),
        nombre=request.session.get("user_name"),
        tipo=request.session.get("user_type") or Role.GUEST.value,
    )


def require(permission: Permission):
    """Dependency factory: fail with 401/403 before the wrapped route runs."""

    async def _dependency(
        request: Request,
        db: AsyncSession = Depends(get_async_session),
    ) -> SessionUser:
        user = session_user(request)
        if user is None:
            raise UnauthenticatedError("No autenticado")

        stored = await db.get(User, user.id)
        if stored is None:
            request.session.clear()
            raise UnauthenticatedError("No autenticado")

        # Permissions follow the stored role, not the one cached in the cookie.
        if not has_permission(stored.tipo, permission):
            raise ForbiddenError(DENIED_MESSAGES[permission])
        return SessionUser(id=stored.id, nombre=stored.nombre, tipo=stored.tipo)

    return _dependency


current_user = require(Permission.VIEW)
current_admin_or_master = require(Permission.MANAGE)
current_master = require(Permission.ADMINISTER)
