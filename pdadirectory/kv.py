"""Key-value stores holding the active-database pointer and update stamp."""

from __future__ import annotations

from typing import Protocol
from urllib.parse import quote

import httpx


class KVStore(Protocol):
    async def get(self, key: str) -> str | None: ...


class MemoryKV:
    """Dict-backed store for tests and local development."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values = dict(values or {})

    async def get(self, key: str) -> str | None:
        return self.values.get(key)


class HttpKV:
    """Reads values from a Cloudflare KV namespace over its REST API.

    ``base_url`` is the namespace URL, e.g.
    ``https://api.cloudflare.com/client/v4/accounts/<acct>/storage/kv/namespaces/<ns>``.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._http = client or httpx.AsyncClient(timeout=timeout)

    async def get(self, key: str) -> str | None:
        resp = await self._http.get(
            f"{self._base_url}/values/{quote(key, safe='')}", headers=self._headers
        )
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return resp.text

    async def aclose(self) -> None:
        await self._http.aclose()
