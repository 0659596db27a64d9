"""
migrations/env.py -- Alembic environment for the Heron CMS database.

The database URL and target metadata come from core.migrate.migration_config()
so the CLI, the app lifespan, and autogenerate all agree on one schema and
one CMS_DB_PATH. An explicit sqlalchemy.url set on the Config (as
core.migrate.alembic_config() does) wins over the static declaration.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from core.migrate import migration_config

config = context.config

# Only configure logging when invoked from the `alembic` CLI. Inside the app,
# logging is already set up and fileConfig would reset it.
if config.cmd_opts is not None and config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

pointer = migration_config()
target_metadata = pointer.target_metadata()


def _url() -> str:
    return config.get_main_option("sqlalchemy.url") or pointer.url


def run_migrations_offline() -> None:
    context.configure(
        url=_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        # SQLite cannot ALTER most column properties; batch mode rebuilds tables.
        context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
