#!/usr/bin/env python3
"""
Container entrypoint: wait for Postgres, migrate, seed the club aircraft and
users, then exec uvicorn.
"""
import logging
import os
import sys

import wait_for_db  # noqa: F401  (blocks until the database accepts connections)

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from aeroledger.core.config import settings
from aeroledger.core.logging import configure_logging

logger = logging.getLogger("start_api")


def migrate() -> None:
    cfg = Config(os.path.join(os.path.dirname(os.path.abspath(__file__)), "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    command.upgrade(cfg, "head")


def seed() -> None:
    # Separate engine so the seed sees the freshly migrated schema
    from aeroledger.seed import run as run_seed

    engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)
    try:
        run_seed(sessionmaker(autocommit=False, autoflush=False, bind=engine)())
    finally:
        engine.dispose()


def main() -> None:
    configure_logging()
    logger.info("Running migrations")
    migrate()
    logger.info("Seeding")
    seed()
    port = os.getenv("PORT", "8000")
    logger.info("Starting uvicorn on port %s", port)
    os.execv(
        sys.executable,
        [sys.executable, "-m", "uvicorn", "aeroledger.main:app", "--host", "0.0.0.0", "--port", port],
    )


if __name__ == "__main__":
    main()
