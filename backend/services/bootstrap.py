"""One-time startup initialization: schema, master account, alternate ledger seed.

Each step logs its own failure and the next one still runs; the app keeps
starting even when the database is unreachable.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from core.config import Settings
from db.database import create_db_and_tables
from services.garrafones_stock import AltStockLedger
from services.users import UserService

logger = logging.getLogger(__name__)


async def initialize_database(
    engine: AsyncEngine,
    session_maker: async_sessionmaker[AsyncSession],
    settings: Settings,
) -> None:
    logger.info("Initializing database...")
    try:
        await create_db_and_tables(engine)
    except Exception:
        logger.exception("Error creating tables")
        return

    master_id: Optional[int] = None
    try:
        async with session_maker() as session:
            master = await UserService(session).ensure_master(
                settings.master_name, settings.master_email, settings.master_password
            )
            master_id = master.id
    except Exception:
        logger.exception("Error provisioning master user")

    try:
        async with session_maker() as session:
            await AltStockLedger(session).seed_initial_stock(usuario_id=master_id)
    except Exception:
        logger.exception("Error seeding initial jug stock, continuing")

    logger.info("Database initialized")
