"""Read-only access to the PDA registry table.

The registry is written by the external ingest pipeline into one of two
SQLite replicas (blue/green). This module only reads it.
"""

from __future__ import annotations

import asyncio
import bisect
import logging
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

LOG = logging.getLogger(__name__)

TABLE = "pda_registry"

SCHEMA = """
CREATE TABLE IF NOT EXISTS pda_registry (
    pda BLOB PRIMARY KEY,
    program_id BLOB NOT NULL,
    seed_count INTEGER NOT NULL,
    seed_bytes BLOB NOT NULL
) WITHOUT ROWID;

CREATE INDEX IF NOT EXISTS idx_pda_registry_program_pda
ON pda_registry(program_id, pda);

CREATE TABLE IF NOT EXISTS _table_counts (
    name TEXT PRIMARY KEY,
    n INTEGER NOT NULL,
    last_insert_ts INTEGER NOT NULL
) WITHOUT ROWID;

INSERT OR IGNORE INTO _table_counts (name, n, last_insert_ts)
VALUES ('pda_registry', 0, 0);

CREATE TRIGGER IF NOT EXISTS pda_registry_ai AFTER INSERT ON pda_registry
BEGIN
  UPDATE _table_counts
  SET n = n + 1,
      last_insert_ts = CAST(strftime('%s','now') AS INTEGER)
  WHERE name = 'pda_registry';
END;

CREATE TRIGGER IF NOT EXISTS pda_registry_ad AFTER DELETE ON pda_registry
BEGIN
  UPDATE _table_counts
  SET n = n - 1
  WHERE name = 'pda_registry';
END;
"""


@dataclass(frozen=True)
class RegistryRow:
    pda: bytes
    program_id: bytes
    seed_bytes: bytes


class RegistryStore(Protocol):
    async def get(self, pda: bytes) -> RegistryRow | None: ...

    async def scan(
        self,
        program_id: bytes | None,
        after: bytes | None,
        limit: int,
        offset: int,
    ) -> list[RegistryRow]: ...

    async def count(self) -> int: ...


def init_schema(path: str | Path) -> None:
    """Create the registry tables at ``path`` if they do not exist."""
    with closing(sqlite3.connect(str(path))) as conn:
        conn.executescript(SCHEMA)
        conn.commit()


class SqliteRegistryStore:
    """Registry replica backed by a SQLite file, opened read-only."""

    def __init__(self, path: str | Path, name: str = "") -> None:
        self._path = Path(path)
        self.name = name or self._path.stem

    def __repr__(self) -> str:
        return f"SqliteRegistryStore({self.name!r}, {str(self._path)!r})"

    def _connect(self) -> sqlite3.Connection:
        uri = self._path.resolve().as_uri() + "?mode=ro"
        return sqlite3.connect(uri, uri=True)

    def _fetch(self, sql: str, params: tuple) -> list[tuple]:
        with closing(self._connect()) as conn:
            return conn.execute(sql, params).fetchall()

    async def _query(self, sql: str, params: tuple) -> list[tuple]:
        # sqlite3 blocks; keep it off the event loop.
        return await asyncio.to_thread(self._fetch, sql, params)

    async def get(self, pda: bytes) -> RegistryRow | None:
        rows = await self._query(
            f"SELECT pda, program_id, seed_bytes FROM {TABLE} WHERE pda = ? LIMIT 1",
            (pda,),
        )
        return _to_row(rows[0]) if rows else None

    async def scan(
        self,
        program_id: bytes | None,
        after: bytes | None,
        limit: int,
        offset: int,
    ) -> list[RegistryRow]:
        where = []
        params: list = []
        if program_id is not None:
            where.append("program_id = ?")
            params.append(program_id)
        if after is not None:
            where.append("pda > ?")
            params.append(after)

        sql = f"SELECT pda, program_id, seed_bytes FROM {TABLE}"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY pda ASC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        LOG.debug("scan %s: %s %r", self.name, sql, params[-2:])
        return [_to_row(r) for r in await self._query(sql, tuple(params))]

    async def count(self) -> int:
        rows = await self._query(
            "SELECT n FROM _table_counts WHERE name = ?", (TABLE,)
        )
        if rows:
            return int(rows[0][0])
        rows = await self._query(f"SELECT COUNT(*) FROM {TABLE}", ())
        return int(rows[0][0])


def _to_row(r: tuple) -> RegistryRow:
    pda, program_id, seed_bytes = r
    return RegistryRow(bytes(pda), bytes(program_id), bytes(seed_bytes))


class MemoryRegistryStore:
    """In-process registry kept sorted by pda."""

    def __init__(self, rows: Iterable[RegistryRow] = (), name: str = "memory") -> None:
        self.name = name
        by_pda: dict[bytes, RegistryRow] = {}
        for row in rows:
            # First write wins, like the ingest pipeline's INSERT OR IGNORE.
            by_pda.setdefault(row.pda, row)
        self._rows = sorted(by_pda.values(), key=lambda r: r.pda)
        self._keys = [r.pda for r in self._rows]

    async def get(self, pda: bytes) -> RegistryRow | None:
        i = bisect.bisect_left(self._keys, pda)
        if i < len(self._keys) and self._keys[i] == pda:
            return self._rows[i]
        return None

    async def scan(
        self,
        program_id: bytes | None,
        after: bytes | None,
        limit: int,
        offset: int,
    ) -> list[RegistryRow]:
        start = 0 if after is None else bisect.bisect_right(self._keys, after)
        rows = self._rows[start:]
        if program_id is not None:
            rows = [r for r in rows if r.program_id == program_id]
        return rows[offset : offset + limit]

    async def count(self) -> int:
        return len(self._rows)
