"""
Environment configuration.

Values come from the process environment; a .env file in the working directory
is loaded first (python-dotenv) without overriding variables already set.

Client settings (service URL + anon key) are loaded once and treated as an
immutable dependency. Server settings are read per request so the degraded
mode follows OPENAI_API_KEY as it is set or unset.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.7
DEV_JWT_SECRET = "doubt-solver-dev-secret-change-in-production"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ConfigError(RuntimeError):
    """Required configuration is missing or invalid."""


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


@dataclass(frozen=True)
class ClientSettings:
    """Where the browser-side pieces find the backend, and with which credential."""
    base_url: str
    anon_key: str

    @property
    def functions_url(self) -> str:
        return f"{self.base_url}/functions/v1"

    @property
    def rest_url(self) -> str:
        return f"{self.base_url}/rest/v1"

    @classmethod
    def from_env(cls) -> "ClientSettings":
        base_url = _env("DOUBT_SOLVER_URL").rstrip("/")
        anon_key = _env("DOUBT_SOLVER_ANON_KEY")
        if not base_url or not anon_key:
            raise ConfigError("Missing DOUBT_SOLVER_URL or DOUBT_SOLVER_ANON_KEY environment variables")
        return cls(base_url=base_url, anon_key=anon_key)


@lru_cache(maxsize=1)
def load_client_settings() -> ClientSettings:
    """Process-wide client settings, read once."""
    return ClientSettings.from_env()


@dataclass(frozen=True)
class ServerSettings:
    openai_api_key: str | None
    model: str
    temperature: float
    db_path: str | None
    jwt_secret: str

    @property
    def has_upstream(self) -> bool:
        return bool(self.openai_api_key)

    @classmethod
    def from_env(cls) -> "ServerSettings":
        raw_temperature = _env("OPENAI_TEMPERATURE")
        try:
            temperature = float(raw_temperature) if raw_temperature else DEFAULT_TEMPERATURE
        except ValueError as e:
            raise ConfigError(f"OPENAI_TEMPERATURE must be a number, got {raw_temperature!r}") from e
        return cls(
            openai_api_key=_env("OPENAI_API_KEY") or None,
            model=_env("OPENAI_MODEL") or DEFAULT_MODEL,
            temperature=temperature,
            db_path=_env("DOUBT_SOLVER_DB") or None,
            jwt_secret=_env("DOUBT_SOLVER_JWT_SECRET") or DEV_JWT_SECRET,
        )


def configure_logging(level: str | None = None) -> None:
    """Root logging setup for the CLI and the API server."""
    name = (level or _env("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, name, logging.INFO), format=LOG_FORMAT)
