import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from calendarium.core.clock import system_clock
from calendarium.core.config import settings
from calendarium.core.database import (
    close_database_connection,
    create_database_engine,
    create_sessionmaker,
)
from calendarium.models import Base
from calendarium.services.role_service import RoleService

logger = logging.getLogger(__name__)


# ============================================================================
# Lifespan Context Manager
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore
    """
    Lifespan context manager for startup and shutdown events.

    Handles:
    - Database engine creation and storage in app.state
    - Session factory creation
    - Default role seeding
    - Schema creation from the models when DB_CREATE_SCHEMA is set
      (development shortcut; deployments run `alembic upgrade head` first)
    - Resource cleanup on shutdown
    """
    logger.info(f"Starting {settings.app_name} v{settings.version}")
    logger.info(f"Environment: {settings.environment}")

    engine = create_database_engine()
    app.state.sessionmaker = create_sessionmaker(engine)
    logger.info("Sessionmaker created successfully")

    if settings.db_create_schema:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.warning("Database schema created from models, bypassing migrations")

    async with app.state.sessionmaker() as session:
        await RoleService(session, system_clock).ensure_default_roles()

    yield

    # Cleanup on shutdown
    logger.info("Shutting down application")
    await close_database_connection(engine)
    app.state.sessionmaker = None
