"""Unit tests for core/config.py and core/migrate.py -- settings and migration pointer.

Covers:
- SECRET_KEY policy: required outside DEBUG, minimum length, dev auto-generation
- Defaults for storage paths and site title
- PublicEnv exposes only client-safe fields
- MigrationConfig resolves schema, output dir, dialect and CMS_DB_PATH
"""

import pytest
from pydantic import ValidationError

from core.config import DEFAULT_DB_PATH, PublicEnv, Settings, public_env
from core.migrate import PROJECT_ROOT, alembic_config, migration_config

_KEY = "k" * 32


class TestSecretKeyPolicy:
    def test_missing_key_in_production_fails(self, monkeypatch) -> None:
        monkeypatch.delenv("SECRET_KEY", raising=False)
        with pytest.raises(ValidationError, match="SECRET_KEY is required"):
            Settings(debug=False, _env_file=None)

    def test_short_key_rejected(self) -> None:
        with pytest.raises(ValidationError, match="at least 32"):
            Settings(debug=True, secret_key="short", _env_file=None)

    def test_debug_generates_key(self, monkeypatch) -> None:
        monkeypatch.delenv("SECRET_KEY", raising=False)
        settings = Settings(debug=True, _env_file=None)
        assert len(settings.secret_key) >= 32


class TestDefaults:
    def test_storage_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("CMS_DB_PATH", raising=False)
        monkeypatch.delenv("IMAGE_BASE_URL", raising=False)
        settings = Settings(secret_key=_KEY, _env_file=None)
        assert settings.cms_db_path == DEFAULT_DB_PATH == "./data/cms.db"
        assert settings.database_url == "sqlite:///./data/cms.db"
        assert settings.image_base_url == ""

    def test_env_vars_are_read(self, monkeypatch) -> None:
        monkeypatch.setenv("CMS_DB_PATH", "/srv/heron/cms.db")
        monkeypatch.setenv("DEV_AUTH_BYPASS", "true")
        settings = Settings(secret_key=_KEY, _env_file=None)
        assert settings.cms_db_path == "/srv/heron/cms.db"
        assert settings.dev_auth_bypass is True


class TestPublicEnv:
    def test_only_client_safe_fields(self) -> None:
        assert set(PublicEnv.model_fields) == {"site_title", "image_base_url", "public_api_url"}

    def test_built_from_settings(self) -> None:
        settings = Settings(
            secret_key=_KEY,
            site_title="Heron Test",
            image_base_url="https://cdn.example.com",
            google_client_secret="do-not-leak",
            _env_file=None,
        )
        env = public_env(settings)
        assert env.site_title == "Heron Test"
        assert env.image_base_url == "https://cdn.example.com"
        assert "do-not-leak" not in env.model_dump_json()


class TestMigrationConfig:
    def test_points_at_schema_and_database(self) -> None:
        cfg = migration_config(Settings(secret_key=_KEY, cms_db_path="/tmp/heron.db", _env_file=None))
        assert cfg.schema == "auth.store:metadata"
        assert cfg.out == "migrations"
        assert cfg.dialect == "sqlite"
        assert cfg.url == "sqlite:////tmp/heron.db"
        assert cfg.script_location == PROJECT_ROOT / "migrations"

    def test_target_metadata_holds_cms_tables(self) -> None:
        cfg = migration_config(Settings(secret_key=_KEY, _env_file=None))
        assert {"users", "admin_users"} <= set(cfg.target_metadata().tables)

    def test_alembic_config_uses_declared_url(self) -> None:
        cfg = migration_config(Settings(secret_key=_KEY, cms_db_path="/tmp/heron.db", _env_file=None))
        config = alembic_config(cfg)
        assert config.get_main_option("sqlalchemy.url") == "sqlite:////tmp/heron.db"
        assert config.get_main_option("script_location") == str(PROJECT_ROOT / "migrations")

    def test_pointer_follows_cms_db_path_changes(self, settings_env) -> None:
        settings_env(CMS_DB_PATH="/tmp/first.db")
        assert alembic_config().get_main_option("sqlalchemy.url") == "sqlite:////tmp/first.db"

        settings_env(CMS_DB_PATH="/tmp/second.db")
        assert alembic_config().get_main_option("sqlalchemy.url") == "sqlite:////tmp/second.db"
        assert migration_config().db_path == "/tmp/second.db"
