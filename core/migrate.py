"""
core/migrate.py -- Where the migration tool finds the schema and the database.

migration_config() builds the declaration Alembic consumes (migrations/env.py
and the helpers below resolve it at call time, so CMS_DB_PATH changes apply):

  schema   -- import path of the SQLAlchemy MetaData that defines the tables
  out      -- Alembic script directory, relative to the project root
  dialect  -- storage dialect the revisions are written for
  url      -- SQLAlchemy URL built from CMS_DB_PATH (default ./data/cms.db)

upgrade_head() is called from the app lifespan (when AUTO_MIGRATE is set) and
from `python main.py migrate`.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import MetaData

from core.config import Settings, get_settings

logger = logging.getLogger("heron.migrate")

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class MigrationConfig:
    schema: str
    out: str
    dialect: str
    db_path: str

    @property
    def url(self) -> str:
        return f"{self.dialect}:///{self.db_path}"

    @property
    def script_location(self) -> Path:
        return PROJECT_ROOT / self.out

    def target_metadata(self) -> MetaData:
        """Import and return the MetaData named by `schema` ("module:attribute")."""
        module_name, _, attr = self.schema.partition(":")
        return getattr(importlib.import_module(module_name), attr)


# Static half of the pointer. Only the database path depends on settings.
SCHEMA = "auth.store:metadata"
OUT_DIR = "migrations"
DIALECT = "sqlite"


def migration_config(settings: Settings | None = None) -> MigrationConfig:
    """Build the pointer from the current settings (CMS_DB_PATH, default ./data/cms.db)."""
    cfg = settings or get_settings()
    return MigrationConfig(schema=SCHEMA, out=OUT_DIR, dialect=DIALECT, db_path=cfg.cms_db_path)


def alembic_config(cfg: MigrationConfig | None = None) -> Config:
    """Build an in-memory Alembic Config equivalent to alembic.ini for `cfg`."""
    cfg = cfg or migration_config()
    config = Config(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(cfg.script_location))
    config.set_main_option("sqlalchemy.url", cfg.url)
    return config


def upgrade_head(cfg: MigrationConfig | None = None) -> None:
    """Create the database directory if needed and apply every pending revision."""
    cfg = cfg or migration_config()
    db_dir = Path(cfg.db_path).expanduser().parent
    db_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Applying migrations to %s", cfg.url)
    command.upgrade(alembic_config(cfg), "head")
