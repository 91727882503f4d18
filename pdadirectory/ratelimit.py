"""Client side of the external rate limiter."""

from __future__ import annotations

from typing import Protocol

import httpx


class RateLimiter(Protocol):
    async def limit(self, key: str) -> bool:
        """Return True if the request identified by ``key`` may proceed."""
        ...


class AllowAll:
    async def limit(self, key: str) -> bool:
        return True


class HttpRateLimiter:
    """Asks a remote limiter whether ``key`` is within its budget.

    The remote answers ``{"success": true}`` to allow, anything else denies.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 5,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._http = client or httpx.AsyncClient(timeout=timeout)

    async def limit(self, key: str) -> bool:
        resp = await self._http.post(self._url, json={"key": key})
        resp.raise_for_status()
        return resp.json().get("success") is True

    async def aclose(self) -> None:
        await self._http.aclose()
