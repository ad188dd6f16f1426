from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fieldreports.api.v1.router import api_router
from fieldreports.core.config import Settings, settings as default_settings
from fieldreports.core.errors import register_exception_handlers
from fieldreports.core.logging import setup_logging
from fieldreports.core.middleware import register_request_logging
from fieldreports.db.session import Database

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level)
        database = Database(settings.database_url)
        # Tables are created on boot; alembic owns schema changes after that
        database.create_all()
        app.state.database = database
        logger.info("%s v%s started (env=%s)", settings.app_name, settings.app_version, settings.env)
        try:
            yield
        finally:
            database.dispose()

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    register_request_logging(app)

    @app.get("/health")
    def health():
        # Liveness check + basic deploy info
        return {
            "status": "ok",
            "service": settings.app_name,
            "version": app.version,
            "env": settings.env,
        }

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
