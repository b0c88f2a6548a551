"""FastAPI application factory and lifespan."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ironlog import __version__
from ironlog.api.v1 import api_router
from ironlog.core.config import get_settings
from ironlog.core.exceptions import register_exception_handlers
from ironlog.core.logging import configure_logging
from ironlog.db.base import Base
from ironlog.db.session import async_session_maker, engine
from ironlog.models import *  # noqa: F401, F403 - register all models
from ironlog.services.catalog import resync_builtin_exercises

settings = get_settings()
configure_logging(settings)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: optionally create tables and seed the catalog; shutdown: dispose engine."""
    if settings.auto_create_tables:
        # Local/dev only; use Alembic in production
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with async_session_maker() as session:
            await resync_builtin_exercises(session)
            await session.commit()
    logger.info("ironlog_started", environment=settings.environment, version=__version__)
    yield
    await engine.dispose()


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    # CORS: allow everything in debug; otherwise localhost in dev plus CORS_ORIGINS
    if settings.debug:
        cors_origins = ["*"]
    elif settings.environment == "development":
        cors_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    else:
        cors_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/")
    def root():
        return {"status": "ok", "message": "IronLog API"}

    app.include_router(api_router, prefix=settings.api_v1_prefix)
    return app


app = create_application()
