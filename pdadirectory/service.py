"""Request handling for PDA lookups and registry listing."""

from __future__ import annotations

import logging
from typing import Any

from pdadirectory.address import encode_address, to_hex
from pdadirectory.config import Limits
from pdadirectory.errors import RateLimitError
from pdadirectory.query import Intent, QueryResult, execute, plan_query
from pdadirectory.ratelimit import AllowAll, RateLimiter
from pdadirectory.router import DatabaseRouter
from pdadirectory.seeds import build_seeds
from pdadirectory.store import RegistryRow, RegistryStore
from pdadirectory.validate import PdaRequest, validate_request

LOG = logging.getLogger(__name__)


class PdaService:
    """Read-only front door to the registry.

    Each call runs validate, rate limit, replica selection, query and
    response shaping in sequence. Nothing is retried.
    """

    def __init__(
        self,
        router: DatabaseRouter[RegistryStore],
        limiter: RateLimiter | None = None,
        limits: Limits = Limits(),
    ) -> None:
        self.router = router
        self.limiter = limiter or AllowAll()
        self.limits = limits

    async def query(self, body: Any, client_key: str = "") -> dict[str, Any]:
        request = validate_request(body, self.limits)
        if not await self.limiter.limit(client_key):
            raise RateLimitError(f"rate limited: {client_key}")

        store = await self.router.resolve()
        plan = plan_query(request)
        result = await execute(plan, store)
        LOG.debug(
            "%s/%s on %s: %d rows",
            plan.intent.value,
            plan.mode.value,
            getattr(store, "name", store),
            len(result.rows),
        )
        return shape_response(request, result)

    async def total_entries(self) -> int:
        store = await self.router.resolve()
        return await store.count()


def shape_row(row: RegistryRow) -> dict[str, Any]:
    seeds = build_seeds(row.seed_bytes)
    return {
        "pda": encode_address(row.pda),
        "program_id": encode_address(row.program_id),
        "seed_count": len(seeds),
        "seeds": [
            {
                "index": s.index,
                "raw_hex": to_hex(s.raw),
                "length": s.length,
                "is_bump": s.is_bump,
            }
            for s in seeds
        ],
    }


def _echo_query(request: PdaRequest) -> dict[str, str] | None:
    if request.pda is not None:
        return {"pda": encode_address(request.pda)}
    if request.program_id is not None:
        return {"program_id": encode_address(request.program_id)}
    return None


def shape_response(request: PdaRequest, result: QueryResult) -> dict[str, Any]:
    # A single corrupt row fails the whole response with FormatError.
    results = [shape_row(r) for r in result.rows]
    echo = _echo_query(request)

    if result.plan.intent is Intent.EXACT:
        return {"query": echo, "count": len(results), "results": results}

    out: dict[str, Any] = {}
    if echo is not None:
        out["query"] = echo
    out["limit"] = result.plan.limit

    page = result.pagination
    assert page is not None
    if page.offset is not None:
        out["offset"] = page.offset
    out["count"] = len(results)
    out["results"] = results
    out["has_next"] = page.has_next
    out["has_previous"] = page.has_previous
    if page.offset is not None:
        out["next_offset"] = page.next_offset
        out["previous_offset"] = page.previous_offset
    if page.next_cursor is not None:
        out["next_cursor"] = page.next_cursor
    return out
