"""
core/config.py
----------------

Library configuration module.

Defines strongly‑typed settings loaded from the environment using
``pydantic-settings``. These settings control timeouts, HTTP/2 support
and connection pooling for the clients the dispatcher builds when the
caller does not supply one. The values provided here are sensible
defaults but can be overridden via environment variables at
deployment time.
"""

from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings loaded from environment variables.

    The settings structure is flat and uses environment variables
    prefixed with ``TYPED_DISPATCH_``.  For example, to override the
    default read timeout you can set ``TYPED_DISPATCH_HTTP_TIMEOUT=15``.
    """

    # HTTP client settings
    http_timeout: float = Field(30.0, gt=0, description="Read/write/pool timeout for HTTP requests in seconds.")
    http_connect_timeout: float = Field(10.0, gt=0, description="Connect timeout in seconds.")
    http2: bool = Field(True, description="Negotiate HTTP/2 when the server supports it.")
    follow_redirects: bool = Field(True, description="Follow 3xx redirects transparently.")
    verify_ssl: bool = Field(True, description="Verify TLS certificates.")

    # Connection pool
    max_connections: int = Field(100, ge=1)
    max_keepalive_connections: int = Field(20, ge=0)

    user_agent: str = Field("typed-dispatch/0.1", description="Default User-Agent header.")
    log_level: str = Field("INFO", description="Level applied to the root logger.")

    model_config = SettingsConfigDict(env_prefix="TYPED_DISPATCH_", env_file=None, case_sensitive=False)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached instance of the library settings."""
    return Settings()
