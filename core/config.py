"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Heron happen here. No module should call
os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. cms_db_path -> CMS_DB_PATH).

  PublicEnv: the subset of settings that may be handed to browser code. It is
      built from Settings, never from os.environ, so a secret cannot leak into
      a template or the /api/v1/env payload by adding an env var.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected outright. In production mode
  (DEBUG not set or false), a missing SECRET_KEY is a hard startup failure.

Layer rule: core/ is the kernel. This module may not import from api/, web/,
or auth/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("heron.config")

DEFAULT_DB_PATH = "./data/cms.db"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    site_title: str = "Heron"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    secure_cookies: bool = False
    token_expire_seconds: int = 3600

    google_client_id: str = ""
    google_client_secret: str = ""

    # Always allowed to sign in; upserted into admin_users as the base admin.
    base_admin_email: str = ""
    # Enables POST /login/dev. Never set in production.
    dev_auth_bypass: bool = False

    dev_login_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    cms_db_path: str = DEFAULT_DB_PATH
    auto_migrate: bool = True

    # CDN prefix for S3 object keys. Empty means keys are served as-is.
    image_base_url: str = ""

    public_api_url: str = ""

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
        Production mode: refuse to start if SECRET_KEY is missing.
        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Sessions will not persist across restarts.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.cms_db_path}"


class PublicEnv(BaseModel):
    """Environment values exposed to client code (templates and /api/v1/env).

    Only add a field here if it is safe to publish to every visitor.
    """

    model_config = ConfigDict(frozen=True)

    site_title: str
    image_base_url: str = ""
    public_api_url: str = ""


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()


def public_env(settings: Settings | None = None) -> PublicEnv:
    """Build the client-exposed variable bag from the current settings."""
    cfg = settings or get_settings()
    return PublicEnv(
        site_title=cfg.site_title,
        image_base_url=cfg.image_base_url,
        public_api_url=cfg.public_api_url,
    )
