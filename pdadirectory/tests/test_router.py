import asyncio

import pytest

from pdadirectory.config import ACTIVE_DB_KEY
from pdadirectory.errors import ConfigurationError
from pdadirectory.kv import MemoryKV
from pdadirectory.router import DatabaseRouter


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class CountingKV(MemoryKV):
    def __init__(self, values=None) -> None:
        super().__init__(values)
        self.reads = 0

    async def get(self, key):
        self.reads += 1
        return await super().get(key)


class BrokenKV:
    async def get(self, key):
        raise ConnectionError("kv unreachable")


HANDLES = {"blue": "blue-db", "green": "green-db"}


def _router(kv, clock=None, ttl=30.0):
    return DatabaseRouter(kv, HANDLES, ttl=ttl, clock=clock or FakeClock())


def test_reads_pointer_on_first_resolve():
    kv = CountingKV({ACTIVE_DB_KEY: "green"})
    router = _router(kv)
    assert asyncio.run(router.resolve()) == "green-db"
    assert kv.reads == 1
    assert router.cached_token == "green"


def test_cache_hit_within_ttl():
    kv = CountingKV({ACTIVE_DB_KEY: "blue"})
    clock = FakeClock()
    router = _router(kv, clock)

    async def run():
        await router.resolve()
        clock.now += 29.9
        kv.values[ACTIVE_DB_KEY] = "green"
        return await router.resolve()

    assert asyncio.run(run()) == "blue-db"
    assert kv.reads == 1


def test_rereads_after_ttl():
    kv = CountingKV({ACTIVE_DB_KEY: "blue"})
    clock = FakeClock()
    router = _router(kv, clock)

    async def run():
        first = await router.resolve()
        kv.values[ACTIVE_DB_KEY] = "green"
        clock.now += 30.0
        return first, await router.resolve()

    assert asyncio.run(run()) == ("blue-db", "green-db")
    assert kv.reads == 2


def test_invalidate_forces_read():
    kv = CountingKV({ACTIVE_DB_KEY: "blue"})
    router = _router(kv)

    async def run():
        await router.resolve()
        router.invalidate()
        await router.resolve()

    asyncio.run(run())
    assert kv.reads == 2


def test_token_whitespace_stripped():
    router = _router(MemoryKV({ACTIVE_DB_KEY: "blue\n"}))
    assert asyncio.run(router.resolve()) == "blue-db"


def test_missing_kv_binding():
    with pytest.raises(ConfigurationError, match="not configured"):
        asyncio.run(_router(None).resolve())


def test_missing_token():
    with pytest.raises(ConfigurationError, match="not set"):
        asyncio.run(_router(MemoryKV()).resolve())


def test_unknown_token():
    with pytest.raises(ConfigurationError, match="invalid active database token"):
        asyncio.run(_router(MemoryKV({ACTIVE_DB_KEY: "purple"})).resolve())


def test_unreachable_kv():
    with pytest.raises(ConfigurationError, match="kv unreachable"):
        asyncio.run(_router(BrokenKV()).resolve())


def test_failed_read_keeps_no_cache():
    kv = MemoryKV({ACTIVE_DB_KEY: "purple"})
    router = _router(kv)
    with pytest.raises(ConfigurationError):
        asyncio.run(router.resolve())
    kv.values[ACTIVE_DB_KEY] = "green"
    assert asyncio.run(router.resolve()) == "green-db"


def test_token_without_handle():
    router = DatabaseRouter(MemoryKV({ACTIVE_DB_KEY: "green"}), {"blue": "blue-db"})
    with pytest.raises(ConfigurationError, match="no database configured"):
        asyncio.run(router.resolve())


def test_rejects_unknown_handle_names():
    with pytest.raises(ValueError, match="unknown database names"):
        DatabaseRouter(MemoryKV(), {"red": "x"})
