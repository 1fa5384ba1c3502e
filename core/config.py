"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Stockroom happen here. No module should
call os.getenv() or os.environ.get() directly.

Wiring:
  get_settings() is an lru_cache singleton, but only the process entry points
      (asgi.py and main.py) call it. Everything below them -- create_app(),
      the stores, the services -- receives a Settings instance (or the values
      it needs from one) as a constructor argument. Tests build their own
      Settings(...) and never touch the cache.

  @model_validator(mode="after"): dev mode (DEBUG=true) auto-generates a
      SECRET_KEY with a warning; production mode refuses to start without one.

Security notes:
  [M6] SECRET_KEY shorter than 32 chars is rejected outright. HS256 signing
       relies on key entropy -- a short key makes offline brute-force of
       captured tokens practical.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or inventory/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("stockroom.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'stockroom.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings(debug=True) can be instantiated in
    test environments without a real .env file.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `secret_key` reads from SECRET_KEY, `database_url` from DATABASE_URL.
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
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Database
    # ------------------------------------------------------------------

    # Any SQLAlchemy URL. SQLite by default; PostgreSQL is a URL change:
    # postgresql+psycopg://user:pw@host:5432/inventory_db
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    # 24 hours.
    token_expire_seconds: int = Field(default=86400, gt=0)
    # bcrypt work factor. 12 is the library default; tests drop to 4.
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    rate_limit_enabled: bool = True
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]
    allowed_hosts: list[str] = ["*"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy [M6].

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Tokens will not survive a restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Tokens will not survive a restart.")
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings instance.

    Call this from entry points only (asgi.py, main.py) and pass the result
    down. In tests, construct Settings(...) directly instead.
    """
    return Settings()
