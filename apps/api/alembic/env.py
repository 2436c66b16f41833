"""Alembic environment for the plan engine schema."""

from logging.config import fileConfig
import logging

from alembic import context
from core.database import engine, Base
import models  # noqa: F401  registers tables on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def run_migrations_online() -> None:
    """Run migrations against the application's engine."""
    render_as_batch = engine.url.get_backend_name().startswith("sqlite")

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=render_as_batch,
        )

        with context.begin_transaction():
            context.run_migrations()


run_migrations_online()
