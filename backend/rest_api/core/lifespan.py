"""
Startup and shutdown of the REST API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.config.logging import rest_api_logger as logger, setup_logging
from shared.config.settings import Settings, settings
from shared.infrastructure.db import SessionLocal, engine
from rest_api.models import Base
from rest_api.repositories import clear_layout_cache
from rest_api.seed import seed


def check_settings(config: Settings) -> None:
    """Log configuration problems; in production they abort startup."""
    errors = config.validate_production_settings()
    for error in errors:
        logger.error("Configuration error", error=error)

    if errors and config.environment == "production":
        raise RuntimeError(f"Refusing to start with unsafe configuration: {'; '.join(errors)}")


def prepare_database(config: Settings) -> None:
    # create_all is checkfirst: legacy tables that already exist are left as they are
    Base.metadata.create_all(bind=engine)

    if config.environment == "development":
        with SessionLocal() as db:
            seed(db)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    check_settings(settings)

    logger.info("Starting REST API", port=settings.rest_api_port, env=settings.environment)
    prepare_database(settings)

    yield

    # Reflected layouts are bound to this engine
    clear_layout_cache()
    engine.dispose()
    logger.info("REST API stopped")
