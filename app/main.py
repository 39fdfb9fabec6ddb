from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

logger = logging.getLogger(__name__)

_POSITIVE_INT_SETTINGS = (
    "POINTS_IMPORT_BATCH_SIZE",
    "POINTS_IMPORT_MAX_RECORDS",
    "POINTS_IMPORT_MAX_FILE_SIZE_BYTES",
)


def _validate_env() -> None:
    """
    Fail fast on configuration problems, reporting all of them together.

    Nothing here touches the database.
    """

    from db.config import DATABASE_URL_VARIABLES, load_env_files

    load_env_files()
    errors: list[str] = []

    if not any(os.getenv(name, "").strip() for name in DATABASE_URL_VARIABLES):
        errors.append("No database URL configured. Set one of: " + ", ".join(DATABASE_URL_VARIABLES) + ".")

    for name in _POSITIVE_INT_SETTINGS:
        raw = os.getenv(name)
        if raw is not None and (not raw.strip().isdigit() or int(raw) == 0):
            errors.append(f"{name}='{raw}' must be a positive integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed:\n" + "\n".join(f"  - {error}" for error in errors)
        )


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _verify_database() -> None:
    """
    Ping the database and make sure every ORM table exists.

    Migrations are never applied from here; a missing table aborts startup.
    """

    from sqlalchemy import inspect, text

    import db.models  # noqa: F401  registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    engine = get_engine()
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc
    logger.info("Database connectivity confirmed")

    missing = sorted(set(Base.metadata.tables) - set(inspect(engine).get_table_names()))
    if missing:
        logger.critical(
            "Tables missing from the database: %s. Run 'alembic upgrade head' and restart.",
            ", ".join(missing),
        )
        raise RuntimeError(f"Schema mismatch: missing table(s) {', '.join(missing)}.")
    logger.info("Database schema validated")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    _verify_database()
    yield


def create_app() -> FastAPI:
    """
    Build the points import API.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Points Import API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import points_import_router

    application.include_router(points_import_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
