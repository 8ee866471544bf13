"""
Process configuration, read once from environment variables at startup.

  export GITHUB_TOKEN="github_pat_..."   # required
  export STATS_YEAR=2024                 # optional, defaults to the current UTC year
"""

from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from errors import ConfigurationError

DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"
DEFAULT_API_VERSION = "2022-11-28"


def _current_year() -> int:
    return dt.datetime.now(dt.timezone.utc).year


def _str(env: Mapping[str, str], name: str, default: str) -> str:
    return (env.get(name) or "").strip() or default


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}.") from None


@dataclass(frozen=True)
class Settings:
    github_token: str
    graphql_url: str = DEFAULT_GRAPHQL_URL
    api_version: str = DEFAULT_API_VERSION
    timeout_seconds: int = 25
    stats_year: int = field(default_factory=_current_year)
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    port: int = 5000

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from the environment (or the given mapping).
        A missing GITHUB_TOKEN is fatal: there is no unauthenticated mode.
        """
        env = os.environ if environ is None else environ

        token = _str(env, "GITHUB_TOKEN", "")
        if not token:
            raise ConfigurationError("Missing GITHUB_TOKEN environment variable.")

        origins = [o.strip() for o in _str(env, "CORS_ORIGINS", "*").split(",") if o.strip()]

        return cls(
            github_token=token,
            graphql_url=_str(env, "GITHUB_GRAPHQL_URL", DEFAULT_GRAPHQL_URL),
            api_version=_str(env, "GITHUB_API_VERSION", DEFAULT_API_VERSION),
            timeout_seconds=_int(env, "GITHUB_TIMEOUT_SECONDS", 25),
            stats_year=_int(env, "STATS_YEAR", _current_year()),
            cors_origins=origins or ["*"],
            log_level=_str(env, "LOG_LEVEL", "INFO").upper(),
            port=_int(env, "PORT", 5000),
        )
