import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool, create_engine

from aeroledger.core.config import settings
from aeroledger.db.session import Base

# Import all models so Alembic sees them in metadata
from aeroledger.models.user import User  # noqa: F401
from aeroledger.models.aircraft import Aircraft  # noqa: F401
from aeroledger.models.component import Component  # noqa: F401
from aeroledger.models.flight_submission import FlightSubmission  # noqa: F401
from aeroledger.models.flight import Flight  # noqa: F401
from aeroledger.models.transaction import Transaction  # noqa: F401
from aeroledger.models.deposit import Deposit  # noqa: F401
from aeroledger.models.fuel_log import FuelLog  # noqa: F401
from aeroledger.models.audit_log import AuditLog  # noqa: F401
from aeroledger.models.email_log import EmailLog  # noqa: F401

config = context.config

# Force sqlalchemy.url from the runtime DATABASE_URL
db_url = getattr(settings, "DATABASE_URL", None) or os.getenv("DATABASE_URL")
if not db_url:
    raise RuntimeError("DATABASE_URL is not set (check .env / aeroledger.core.config.settings)")

config.set_main_option("sqlalchemy.url", db_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    # engine_from_config would not expand DATABASE_URL from the environment
    connectable = create_engine(config.get_main_option("sqlalchemy.url"), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
