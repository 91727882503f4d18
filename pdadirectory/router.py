"""Selection of the authoritative registry replica.

Bulk reloads rebuild the inactive replica offline and then flip the pointer
in the KV store. Readers cache the pointer for a bounded TTL, so for up to
that long after a flip they may still read the previous replica. That replica
is complete (just older) because reloads never touch the active one.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Generic, Mapping, TypeVar

from pdadirectory.config import ACTIVE_DB_KEY, ACTIVE_DB_TTL_SECONDS, DATABASE_NAMES
from pdadirectory.errors import ConfigurationError
from pdadirectory.kv import KVStore

LOG = logging.getLogger(__name__)

H = TypeVar("H")


class DatabaseRouter(Generic[H]):
    """Maps the active-database pointer to a store handle, with a TTL cache."""

    def __init__(
        self,
        kv: KVStore | None,
        handles: Mapping[str, H],
        ttl: float = ACTIVE_DB_TTL_SECONDS,
        key: str = ACTIVE_DB_KEY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        unknown = set(handles) - set(DATABASE_NAMES)
        if unknown:
            raise ValueError(f"unknown database names: {sorted(unknown)}")
        self._kv = kv
        self._handles = dict(handles)
        self._ttl = ttl
        self._key = key
        self._clock = clock
        self._cached: tuple[str, float] | None = None

    @property
    def cached_token(self) -> str | None:
        return self._cached[0] if self._cached else None

    def invalidate(self) -> None:
        self._cached = None

    async def resolve(self) -> H:
        now = self._clock()
        if self._cached is not None:
            token, cached_at = self._cached
            if now - cached_at < self._ttl:
                return self._handles[token]

        token = await self._read_token()
        self._cached = (token, now)
        return self._handles[token]

    async def _read_token(self) -> str:
        if self._kv is None:
            raise ConfigurationError("active database pointer store is not configured")
        try:
            token = await self._kv.get(self._key)
        except Exception as e:
            LOG.error("reading %s failed: %s", self._key, e)
            raise ConfigurationError(f"active database pointer unavailable: {e}") from e

        if token is None:
            raise ConfigurationError(f"active database pointer {self._key!r} is not set")
        token = token.strip()
        if token not in DATABASE_NAMES:
            raise ConfigurationError(f"invalid active database token: {token!r}")
        if token not in self._handles:
            raise ConfigurationError(f"no database configured for {token!r}")

        if token != self.cached_token:
            LOG.info("active database is now %s", token)
        return token
