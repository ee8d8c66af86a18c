import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import Role, hash_password, verify_password
from core.config import settings
from core.errors import ConflictError, ForbiddenError, NotFoundError, UnauthenticatedError
from db.users import User
from services.base import SessionService
from services.file_registry import FileRegistry

logger = logging.getLogger(__name__)


class UserService(SessionService):
    def __init__(self, session: AsyncSession, files: Optional[FileRegistry] = None):
        super().__init__(session)
        self.files = files

    async def get_by_email(self, email: str) -> Optional[User]:
        res = await self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return res.scalar_one_or_none()

    async def get(self, user_id: int) -> User:
        res = await self.session.execute(select(User).where(User.id == user_id))
        user = res.scalar_one_or_none()
        if user is None:
            raise NotFoundError("Usuario no encontrado")
        return user

    async def register(
        self,
        nombre: str,
        email: str,
        password: str,
        codigo_admin: Optional[str] = None,
    ) -> User:
        """Create a guest account, or an admin one when the registration code matches."""
        if await self.get_by_email(email):
            raise ConflictError("El email ya está registrado")

        tipo = Role.ADMIN.value if codigo_admin == settings.admin_code else Role.GUEST.value
        user = User(
            nombre=nombre.strip(),
            email=email.strip(),
            hashed_password=hash_password(password),
            tipo=tipo,
        )
        # The unique email index settles concurrent registrations that both passed the lookup.
        async with self.transaction("Error al registrar usuario", conflict_message="El email ya está registrado"):
            self.session.add(user)
        logger.info("User %s registered as %s", user.id, tipo)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.get_by_email(email)
        if user is None:
            raise UnauthenticatedError("Credenciales incorrectas")

        valid, updated_hash = verify_password(password, user.hashed_password)
        if not valid:
            logger.info("Failed login for %s", email)
            raise UnauthenticatedError("Credenciales incorrectas")

        if updated_hash is not None:
            async with self.transaction("Error al actualizar credenciales"):
                user.hashed_password = updated_hash
        return user

    async def list_users(self) -> List[Dict[str, Any]]:
        res = await self.session.execute(
            select(User).order_by(User.fecha_registro.desc(), User.id.desc())
        )
        return [{**u.to_schema, "fecha_registro": u.fecha_registro} for u in res.scalars().all()]

    async def delete_user(self, user_id: int, acting_user_id: int) -> int:
        """Delete a non-master user other than the caller, together with their files.

        Returns the number of files removed.
        """
        if user_id == acting_user_id:
            raise ForbiddenError("No puedes eliminarte a ti mismo")

        user = await self.get(user_id)
        if user.tipo == Role.MASTER.value:
            raise ForbiddenError("No se puede eliminar otro usuario maestro")

        async with self.transaction("Error eliminando usuario de la base de datos"):
            removed = await self.files.remove_user_files(user_id) if self.files else 0
            await self.session.execute(delete(User).where(User.id == user_id))
        logger.info("User %s deleted by %s (%s files removed)", user_id, acting_user_id, removed)
        return removed

    async def ensure_master(self, nombre: str, email: str, password: str) -> User:
        existing = await self.get_by_email(email)
        if existing:
            logger.info("Master user already exists")
            return existing

        user = User(
            nombre=nombre,
            email=email,
            hashed_password=hash_password(password),
            tipo=Role.MASTER.value,
        )
        async with self.transaction("Error insertando usuario maestro"):
            self.session.add(user)
        logger.info("Master user created: %s", email)
        return user
