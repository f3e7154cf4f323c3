"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from loomero.access.router import router as access_router
from loomero.analytics.router import router as analytics_router
from loomero.auth.router import router as auth_router
from loomero.badges.router import router as badges_router
from loomero.badges.seed import seed_badges
from loomero.certificates.router import router as certificates_router
from loomero.config import get_settings
from loomero.database import close_db, init_db, session_scope
from loomero.functions.router import router as functions_router
from loomero.health.router import router as health_router
from loomero.middleware import setup_middleware
from loomero.progress.router import router as progress_router
from loomero.projects.router import router as projects_router
from loomero.recommendations.router import router as recommendations_router
from loomero.redis_client import close_redis, connect_redis
from loomero.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database, try Redis, and seed the badge catalogue."""
    settings = get_settings()
    await init_db(settings.database_url)
    await connect_redis(settings.redis_url)

    if settings.seed_default_badges:
        try:
            async with session_scope() as db:
                await seed_badges(db)
        except SQLAlchemyError:
            logger.warning("badge_seeding_failed", exc_info=True)

    logger.info("app_started", environment=settings.environment, version=settings.app_version)
    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="LoomeroFlow API",
        description="Backend API for LoomeroFlow, a role-based internship management platform",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(access_router)
    app.include_router(projects_router)
    app.include_router(progress_router)
    app.include_router(badges_router)
    app.include_router(certificates_router)
    app.include_router(recommendations_router)
    app.include_router(analytics_router)
    app.include_router(functions_router)

    return app


app = create_app()
