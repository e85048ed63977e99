"""Process configuration.

Read once at startup from the environment (and an optional ``.env`` file),
then handed to the server factory. Request handling never touches
``os.environ``.
"""

from __future__ import annotations

import logging
import os
from typing import Literal, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, SecretStr

from .core.errors import ConfigurationError

DEFAULT_TIMEOUT_SECONDS = 10.0
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

BASE_URL_ENV = "FUNCTIONPOINT_BASE_URL"
API_KEY_ENV = "FUNCTIONPOINT_API_KEY"


class Settings(BaseModel):
    """Connection and hosting settings for the estimates server."""

    base_url: Optional[str] = Field(None, description="Upstream API root, e.g. https://api.example.com/api")
    api_key: Optional[SecretStr] = Field(None, description="Bearer credential for the upstream API")
    timeout: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0, description="Upstream request bound in seconds")
    transport: Literal["stdio", "http"] = "stdio"
    host: str = "0.0.0.0"
    port: int = 8000
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    def missing(self) -> list[str]:
        """Names of required settings that are absent."""
        absent = []
        if not self.base_url:
            absent.append(BASE_URL_ENV)
        if self.api_key is None or not self.api_key.get_secret_value():
            absent.append(API_KEY_ENV)
        return absent

    @property
    def is_configured(self) -> bool:
        return not self.missing()

    def require(self) -> None:
        """Raise ConfigurationError unless both connection settings are present."""
        absent = self.missing()
        if absent:
            raise ConfigurationError(absent)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def load_settings() -> Settings:
    """Build Settings from the environment. Missing credentials are allowed here."""
    load_dotenv(find_dotenv(usecwd=True))

    api_key = os.environ.get(API_KEY_ENV, "")
    transport = os.environ.get("MCP_TRANSPORT", "stdio").strip().lower()
    if transport in {"streamable-http", "streamable_http"}:
        transport = "http"

    return Settings(
        base_url=os.environ.get(BASE_URL_ENV, "").strip() or None,
        api_key=SecretStr(api_key) if api_key else None,
        timeout=float(os.environ.get("FUNCTIONPOINT_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))),
        transport=transport,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
        cors_allow_origins=_split_csv(os.environ.get("CORS_ALLOW_ORIGINS", "*")) or ["*"],
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr; stdout carries the stdio MCP stream."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
