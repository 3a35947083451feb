from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import app.models  # noqa: F401  (registers SQLModel tables)

from app.config import get_settings
from app.db import build_engine, create_db_and_tables
from app.errors import register_exception_handlers
from app.routers import health, photos, profile, writings
from app.services.content import ContentService


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.getLogger("app").setLevel(settings.log_level.upper())

    if settings.db_url.startswith("sqlite:///"):
        settings.data_dir.mkdir(parents=True, exist_ok=True)

    # One pooled engine for the whole process, shared by every request
    engine = build_engine(settings.db_url, echo=settings.sql_echo)
    create_db_and_tables(engine)
    app.state.engine = engine

    app.state.content_service = ContentService(
        timeout=settings.content_fetch_timeout_seconds,
        max_bytes=settings.content_max_bytes,
        allowed_hosts=settings.content_allowed_hosts,
    )
    logging.getLogger(__name__).info(
        "Folio started (environment=%s)", settings.environment
    )

    yield

    # Shutdown: close the content HTTP client
    await app.state.content_service.close()

    # Shutdown: release pooled connections
    engine.dispose()


app = FastAPI(
    title="Folio",
    description="Personal portfolio backend: writings, photos and profile",
    version="0.1.0",
    lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        f"https://{settings.domain}",
        "http://localhost:3000",
        "http://localhost:5173",
        *settings.cors_origins,
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(health.router)
app.include_router(profile.router)
app.include_router(photos.router)
app.include_router(writings.router)
