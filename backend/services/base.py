import logging
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import AppError, ConflictError, StoreFailure

logger = logging.getLogger(__name__)


class SessionService:
    """Base for components that work against an injected AsyncSession."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def transaction(self, failure_message: str, conflict_message: Optional[str] = None):
        """Commit once on success; roll back and raise StoreFailure on database errors.

        With ``conflict_message`` set, a constraint violation becomes a ConflictError.
        """
        try:
            yield
            await self.session.commit()
        except AppError:
            await self.session.rollback()
            raise
        except IntegrityError as exc:
            await self.session.rollback()
            if conflict_message is None:
                logger.error("%s: %r", failure_message, exc)
                raise StoreFailure(failure_message) from exc
            logger.info("%s: %s", conflict_message, exc.orig)
            raise ConflictError(conflict_message) from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.error("%s: %r", failure_message, exc)
            raise StoreFailure(failure_message) from exc
