import pytest

from pdadirectory.store import MemoryRegistryStore, RegistryRow

from registry_fixtures import sample_rows, write_sqlite


@pytest.fixture
def rows() -> list[RegistryRow]:
    return sample_rows()


@pytest.fixture
def memory_store(rows) -> MemoryRegistryStore:
    return MemoryRegistryStore(rows)


@pytest.fixture
def sqlite_path(tmp_path, rows):
    path = tmp_path / "blue.sqlite"
    write_sqlite(path, rows)
    return path
