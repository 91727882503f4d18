"""Query planning and execution over the registry.

A validated request is classified by intent:

* ``EXACT``   - a pda was given; primary-key lookup, zero or one row.
* ``PROGRAM`` - a program id was given; that program's rows by pda.
* ``FULL``    - neither; the whole registry by pda.

List intents page either by offset or, when a cursor is given, by keyset
(``pda > cursor``). Both fetch one row beyond the page size so the presence
of a next page is known without a second query.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pdadirectory.address import encode_address
from pdadirectory.store import RegistryRow, RegistryStore
from pdadirectory.validate import PdaRequest


class Intent(enum.Enum):
    EXACT = "exact"
    PROGRAM = "program"
    FULL = "full"


class PageMode(enum.Enum):
    NONE = "none"
    OFFSET = "offset"
    KEYSET = "keyset"


@dataclass(frozen=True)
class QueryPlan:
    intent: Intent
    mode: PageMode
    pda: bytes | None
    program_id: bytes | None
    cursor: bytes | None
    limit: int
    offset: int

    @property
    def fetch_size(self) -> int:
        if self.intent is Intent.EXACT:
            return 1
        return self.limit + 1


@dataclass(frozen=True)
class Pagination:
    has_next: bool
    has_previous: bool
    offset: int | None = None
    next_offset: int | None = None
    previous_offset: int | None = None
    next_cursor: str | None = None


@dataclass(frozen=True)
class QueryResult:
    plan: QueryPlan
    rows: list[RegistryRow]
    pagination: Pagination | None


def plan_query(request: PdaRequest) -> QueryPlan:
    if request.pda is not None:
        return QueryPlan(Intent.EXACT, PageMode.NONE, request.pda, None, None, 1, 0)

    intent = Intent.PROGRAM if request.program_id is not None else Intent.FULL
    if request.cursor is not None:
        mode = PageMode.KEYSET
    else:
        mode = PageMode.OFFSET
    return QueryPlan(
        intent,
        mode,
        None,
        request.program_id,
        request.cursor,
        request.limit,
        request.offset,
    )


async def execute(plan: QueryPlan, store: RegistryStore) -> QueryResult:
    if plan.intent is Intent.EXACT:
        row = await store.get(plan.pda)
        return QueryResult(plan, [row] if row is not None else [], None)

    if plan.mode is PageMode.KEYSET:
        rows = await store.scan(plan.program_id, plan.cursor, plan.fetch_size, 0)
    else:
        rows = await store.scan(plan.program_id, None, plan.fetch_size, plan.offset)

    has_next = len(rows) > plan.limit
    if has_next:
        rows = rows[: plan.limit]
    return QueryResult(plan, rows, paginate(plan, rows, has_next))


def paginate(plan: QueryPlan, rows: list[RegistryRow], has_next: bool) -> Pagination:
    # has_previous always follows the offset field, even in keyset mode where
    # it is usually 0. Keyset pages have no backward cursor.
    has_previous = plan.offset > 0
    if plan.mode is PageMode.KEYSET:
        next_cursor = encode_address(rows[-1].pda) if has_next else None
        return Pagination(has_next, has_previous, next_cursor=next_cursor)

    return Pagination(
        has_next,
        has_previous,
        offset=plan.offset,
        next_offset=plan.offset + plan.limit if has_next else None,
        previous_offset=max(0, plan.offset - plan.limit),
    )
