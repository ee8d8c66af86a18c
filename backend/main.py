import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from core.config import settings
from core.exception_handlers import setup_exception_handlers
from core.logging_config import setup_logging
from db.database import async_session_maker, engine
from routers.auth import router as auth_router
from routers.files import router as files_router
from routers.inventory import router as inventory_router
from routers.maintenance import router as maintenance_router
from routers.pages import router as pages_router
from routers.users import router as users_router
from services.bootstrap import initialize_database

setup_logging(settings.log_level, Path(settings.log_dir) if settings.log_dir else None)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    os.makedirs(settings.upload_dir, exist_ok=True)
    await initialize_database(engine, async_session_maker, settings)
    yield
    await engine.dispose()


app = FastAPI(
    title="Purificadora Inventory API",
    description="Inventory, stock movements and file management",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    max_age=settings.session_max_age,
    same_site="lax",
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


setup_exception_handlers(app)

# Session / account routes
app.include_router(auth_router, prefix="/api", tags=["auth"])
app.include_router(users_router, prefix="/api/users", tags=["users"])

# File registry routes
app.include_router(files_router, prefix="/api", tags=["files"])

# Inventory routes
app.include_router(inventory_router, prefix="/api/inventario", tags=["inventario"])

app.include_router(maintenance_router, prefix="/api/maintenance", tags=["maintenance"])

# HTML pages and static assets
app.include_router(pages_router)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")
if os.path.isdir(settings.public_dir):
    app.mount("/", StaticFiles(directory=settings.public_dir), name="public")

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
