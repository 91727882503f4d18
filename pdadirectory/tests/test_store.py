import asyncio
import sqlite3
from contextlib import closing

import pytest

from pdadirectory.store import MemoryRegistryStore, RegistryRow, SqliteRegistryStore

from registry_fixtures import PROGRAM_A, PROGRAM_B, derive_row, sorted_pdas, write_sqlite


def test_get(rows, sqlite_path):
    store = SqliteRegistryStore(sqlite_path)
    target = rows[5]
    assert asyncio.run(store.get(target.pda)) == target
    assert asyncio.run(store.get(b"\x00" * 32)) is None


def test_scan_orders_by_pda(rows, sqlite_path):
    store = SqliteRegistryStore(sqlite_path)
    got = asyncio.run(store.scan(None, None, 100, 0))
    assert [r.pda for r in got] == sorted_pdas(rows)


@pytest.mark.parametrize(
    "program_id,after_index,limit,offset",
    [
        (None, None, 5, 0),
        (None, None, 5, 5),
        (None, 3, 4, 0),
        (bytes(PROGRAM_A), None, 3, 2),
        (bytes(PROGRAM_B), None, 10, 0),
        (bytes(PROGRAM_A), 6, 10, 0),
        (None, None, 10, 100),
    ],
)
def test_sqlite_matches_memory(rows, sqlite_path, program_id, after_index, limit, offset):
    after = sorted_pdas(rows)[after_index] if after_index is not None else None
    sql = SqliteRegistryStore(sqlite_path)
    mem = MemoryRegistryStore(rows)
    assert asyncio.run(sql.scan(program_id, after, limit, offset)) == asyncio.run(
        mem.scan(program_id, after, limit, offset)
    )


def test_count_from_table_counts(rows, sqlite_path):
    assert asyncio.run(SqliteRegistryStore(sqlite_path).count()) == len(rows)


def test_duplicates_ignored(tmp_path, rows):
    path = tmp_path / "green.sqlite"
    write_sqlite(path, rows + rows[:3])
    assert asyncio.run(SqliteRegistryStore(path).count()) == len(rows)
    assert asyncio.run(MemoryRegistryStore(rows + rows[:3]).count()) == len(rows)


def test_count_falls_back_to_table_scan(rows, sqlite_path):
    with closing(sqlite3.connect(str(sqlite_path))) as conn:
        conn.execute("DELETE FROM _table_counts")
        conn.commit()
    assert asyncio.run(SqliteRegistryStore(sqlite_path).count()) == len(rows)


def test_opened_read_only(sqlite_path):
    store = SqliteRegistryStore(sqlite_path)
    with closing(store._connect()) as conn:
        with pytest.raises(sqlite3.OperationalError):
            conn.execute("DELETE FROM pda_registry")


def test_missing_file_raises(tmp_path):
    store = SqliteRegistryStore(tmp_path / "absent.sqlite")
    with pytest.raises(sqlite3.OperationalError):
        asyncio.run(store.count())


def test_memory_get_first_write_wins():
    row = derive_row(PROGRAM_A, [b"journal"])
    shadow = RegistryRow(row.pda, bytes(PROGRAM_B), row.seed_bytes)
    store = MemoryRegistryStore([row, shadow])
    assert asyncio.run(store.get(row.pda)) == row
