"""Service test fixtures — both StateStore backends on temporary storage.

Invariants:
    - Every test gets a fresh store (new temp file / new SQLite database file)
    - `store` is parametrized: each store test runs once per backend

Design Decisions:
    - SQLite file via aiosqlite for the SQL backend: exercises the real
      transaction path without a PostgreSQL server; the advisory lock is
      replaced by the process-local lock on this engine
"""

import pytest

from techtutor.infrastructure.file_state_store import FileStateStore
from techtutor.infrastructure.sql_state_store import SqlStateStore


@pytest.fixture
async def file_store(tmp_path):
    store = FileStateStore(tmp_path / "data" / "store.json")
    await store.open()
    yield store
    await store.close()


@pytest.fixture
async def sql_store(tmp_path):
    store = SqlStateStore(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await store.open()
    yield store
    await store.close()


@pytest.fixture(params=["file", "sql"])
async def store(request, tmp_path):
    if request.param == "file":
        backend = FileStateStore(tmp_path / "store.json")
    else:
        backend = SqlStateStore(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await backend.open()
    yield backend
    await backend.close()
