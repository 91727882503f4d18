"""Configuration for the PDA directory service."""

from __future__ import annotations

import os
from dataclasses import dataclass

from pdadirectory.errors import ConfigurationError

DEFAULT_LIMIT = 25
MAX_LIMIT = 50

ACTIVE_DB_TTL_SECONDS = 30.0
ACTIVE_DB_KEY = "active_db"
LAST_UPDATE_KEY = "last_update_time"

DATABASE_NAMES = ("blue", "green")

ENV_PREFIX = "PDA_DIRECTORY_"


@dataclass(frozen=True)
class Limits:
    default_limit: int = DEFAULT_LIMIT
    max_limit: int = MAX_LIMIT


@dataclass(frozen=True)
class Settings:
    blue_db_path: str
    green_db_path: str
    kv_url: str | None = None
    kv_token: str | None = None
    rate_limit_url: str | None = None
    active_db: str | None = None
    trust_cf_header: bool = False
    default_limit: int = DEFAULT_LIMIT
    max_limit: int = MAX_LIMIT
    active_db_ttl: float = ACTIVE_DB_TTL_SECONDS
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    @property
    def limits(self) -> Limits:
        return Limits(self.default_limit, self.max_limit)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Read settings from ``PDA_DIRECTORY_*`` environment variables."""
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value if value else None

        blue = get("BLUE_DB")
        green = get("GREEN_DB")
        if blue is None or green is None:
            raise ConfigurationError(
                f"{ENV_PREFIX}BLUE_DB and {ENV_PREFIX}GREEN_DB must both be set"
            )

        try:
            default_limit = int(get("DEFAULT_LIMIT") or DEFAULT_LIMIT)
            max_limit = int(get("MAX_LIMIT") or MAX_LIMIT)
            ttl = float(get("ACTIVE_DB_TTL") or ACTIVE_DB_TTL_SECONDS)
            port = int(get("PORT") or 8000)
        except ValueError as e:
            raise ConfigurationError(f"invalid numeric setting: {e}") from e
        if not 1 <= default_limit <= max_limit:
            raise ConfigurationError(
                f"default limit {default_limit} must be between 1 and max limit {max_limit}"
            )

        return cls(
            blue_db_path=blue,
            green_db_path=green,
            kv_url=get("KV_URL"),
            kv_token=get("KV_TOKEN"),
            rate_limit_url=get("RATE_LIMIT_URL"),
            active_db=get("ACTIVE_DB"),
            trust_cf_header=(get("TRUST_CF_HEADER") or "").lower() in ("1", "true", "yes"),
            default_limit=default_limit,
            max_limit=max_limit,
            active_db_ttl=ttl,
            host=get("HOST") or "127.0.0.1",
            port=port,
            log_level=(get("LOG_LEVEL") or "INFO").upper(),
        )
