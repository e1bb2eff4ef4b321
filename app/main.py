# app/main.py
from typing import Optional
from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

from app.config.settings import Settings, settings as default_settings
from app.core.middleware import setup_logging, setup_middleware, setup_exception_handlers
from app.api.v1.router import api_router
from app.modules.deliveries.policy import AcceptancePolicy
from app.shared.storage import build_storage
from app.shared.storage.seed import seed_demo_data

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"🚀 {settings.app_name} starting - version {settings.version}")
        logger.info(f"🌍 Environment: {'Development' if settings.debug else 'Production'}")

        app.state.acceptance_policy = AcceptancePolicy.from_roles(settings.accept_roles_list)
        logger.info(f"🔐 {app.state.acceptance_policy}")

        storage = build_storage(settings)
        storage.open()
        app.state.storage = storage

        try:
            if settings.seed_demo_data:
                await seed_demo_data(storage)
            yield
        finally:
            # Shutdown
            storage.close()
            logger.info(f"🛑 {settings.app_name} shutting down")

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Matches package senders with carriers already travelling the route",
        docs_url="/docs",
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan
    )
    app.state.settings = settings

    setup_middleware(app)
    setup_exception_handlers(app)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "message": f"🚀 {settings.app_name}",
            "version": settings.version,
            "status": "running",
            "environment": "production" if not settings.debug else "development",
            "docs": "/docs",
            "api": "/api/v1"
        }

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "version": settings.version,
            "app": settings.app_name,
            "storage": settings.storage_backend
        }

    return app


setup_logging(default_settings.log_level)
app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug
    )
