"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from camotrack.audit.router import router as audit_router
from camotrack.auth.router import router as auth_router
from camotrack.config import get_settings
from camotrack.database import close_db, init_db
from camotrack.health.router import router as health_router
from camotrack.middleware import setup_middleware
from camotrack.profiles.router import router as profiles_router
from camotrack.redis_client import close_redis, init_redis
from camotrack.unlocks.router import router as unlocks_router


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Camotrack API",
        description="Manual progress tracker for weapon camos, prestige camos and optic reticles",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(audit_router)
    app.include_router(profiles_router)
    app.include_router(unlocks_router)

    return app


app = create_app()
