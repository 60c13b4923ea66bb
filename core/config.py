"""
core/config.py -- Runtime settings for UserDirectory, read once from the environment.

Every tunable lives on Settings. Other modules take the cached instance from
get_settings() and never read os.environ themselves.

Environment variables (all optional, a .env file in the working directory is
also honoured):
  DEBUG                  -- development mode; allows an ephemeral SECRET_KEY
  SECRET_KEY             -- HS256 signing key for access tokens (>= 32 chars)
  TOKEN_EXPIRE_SECONDS   -- access token lifetime, default one hour
  SECURE_COOKIES         -- mark the web UI cookie Secure (HTTPS deployments)
  HOST / PORT            -- bind address used by main.py
  CORS_ORIGINS           -- JSON list of allowed browser origins
  LOG_LEVEL              -- root log level name

Without SECRET_KEY the process only starts under DEBUG, in which case a
random key is minted and every issued token dies with the process.

Layer rule: core/ is the kernel. It must not import from api/, web/, auth/,
or directory/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("userdir.config")

_MIN_KEY_LENGTH = 32


class Settings(BaseSettings):
    """Process-wide settings. Defaults describe a local demo server."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "127.0.0.1"
    port: int = 4000
    cors_origins: list[str] = ["*"]

    # Tokens and cookies. "" means SECRET_KEY was not provided.
    secret_key: str = ""
    token_expire_seconds: int = 3600
    secure_cookies: bool = False

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown LOG_LEVEL {value!r}")
        return level

    @field_validator("token_expire_seconds")
    @classmethod
    def positive_lifetime(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be positive.")
        return value

    @model_validator(mode="after")
    def ensure_signing_key(self) -> "Settings":
        """Mint a throwaway key under DEBUG; otherwise demand a real one."""
        if not self.secret_key and self.debug:
            self.secret_key = secrets.token_hex(_MIN_KEY_LENGTH)
            logger.warning("SECRET_KEY not set; generated an ephemeral key for this DEBUG session.")
        elif not self.secret_key:
            raise ValueError("SECRET_KEY is required unless DEBUG=true.")
        if len(self.secret_key) < _MIN_KEY_LENGTH:
            raise ValueError(f"SECRET_KEY must be at least {_MIN_KEY_LENGTH} characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Build Settings on first use and hand back the same instance afterwards."""
    return Settings()
