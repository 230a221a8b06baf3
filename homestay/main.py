from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from homestay.api.responses import register_exception_handlers
from homestay.api.v1.router import router as api_v1_router
from homestay.config.settings import Settings, get_settings
from homestay.core.logging import get_logger, setup_logging
from homestay.core.middleware import register_middlewares
from homestay.db.session import Database
from homestay.services.base import Clock

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Wires the database, clock and exception handlers onto the app.
    - Includes the versioned API router under /api/v1.
    """
    settings = settings or get_settings()
    database = database or Database(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Schema bootstrap for dev/demo; production runs migrations
        if settings.ENVIRONMENT != "production":
            database.create_all()
        logger.info(
            "Application started",
            extra={"environment": settings.ENVIRONMENT, "api_prefix": settings.API_V1_STR},
        )
        yield
        database.dispose()

    setup_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = database
    app.state.clock = clock

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    return app


app = create_app()
