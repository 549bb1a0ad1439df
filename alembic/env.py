"""
Hippies Portal - Alembic Environment Configuration

This module configures Alembic to:
1. Use the database connection from portal config
2. Import all models for autogenerate support
3. Handle SQL Server specific migrations
"""

import logging
from logging.config import fileConfig

import sqlalchemy as sa
from sqlalchemy import engine_from_config
from sqlalchemy import pool
from sqlalchemy.exc import DBAPIError

from alembic import context

# Importing the package registers every model on Base.metadata
from portal.config import get_settings
from portal.models import Base

# This is the Alembic Config object
config = context.config

# Interpret the config file for Python logging
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

# Set target metadata for autogenerate support
target_metadata = Base.metadata

# Get database URL from portal config
settings = get_settings()

# ConfigParser treats '%' as interpolation, so escape it
config.set_main_option("sqlalchemy.url", settings.database_url.replace('%', '%%'))


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.

    This configures the context with just a URL and not an Engine,
    so no DBAPI needs to be available. Calls to context.execute()
    emit the given string to the script output.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
        include_schemas=True,
        version_table_schema=settings.db_schema,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Run migrations in 'online' mode.

    In this scenario we need to create an Engine and associate a
    connection with the context.
    """
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        # The version table lives in the configured schema when it can be
        # created there; otherwise it falls back to the default schema.
        version_table_schema = settings.db_schema
        if version_table_schema and connection.dialect.name == "mssql":
            try:
                connection.execute(
                    sa.text(
                        "IF NOT EXISTS (SELECT * FROM sys.schemas WHERE name = :s) "
                        "EXEC('CREATE SCHEMA %s')" % version_table_schema
                    ),
                    {"s": version_table_schema},
                )
            except DBAPIError:
                logger.warning(
                    "Unable to create/use schema '%s' for alembic_version; falling back to default schema",
                    version_table_schema,
                )
                version_table_schema = None

        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            compare_server_default=True,
            include_schemas=True,
            version_table_schema=version_table_schema,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
