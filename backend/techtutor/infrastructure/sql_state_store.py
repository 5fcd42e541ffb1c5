"""SQL State Store — the Snapshot as four relational tables behind one transaction.

Invariants:
    - Every update is ONE transaction: lock → read all → mutate → clear all → re-insert all → commit
    - Any failure rolls the whole transaction back (zero observable effect)
    - PostgreSQL: pg_advisory_xact_lock(lock_key) serializes writers across processes;
      readers take the shared variant so they never see a half-written state
    - Engines without advisory locks (SQLite): one process-local asyncio.Lock
      serializes readers and writers
    - All SQLAlchemy exceptions mapped to StorageError (core/errors.py)

Design Decisions:
    - Transaction-scoped advisory lock over SELECT ... FOR UPDATE: the unit is the
      whole store, not a row, and the lock is released by commit/rollback for free
    - DELETE over TRUNCATE: portable to SQLite for tests, same effect inside a transaction
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Connection pool uses pool_pre_ping for stale connection detection
"""

import asyncio
import logging
from contextlib import asynccontextmanager, nullcontext
from typing import AsyncGenerator

from pydantic import ValidationError
from sqlalchemy import delete, insert, select, text
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)

from techtutor.core.errors import ErrorContext, StorageError
from techtutor.db.base import Base
from techtutor.infrastructure.snapshot_rows import (
    TABLE_ORDER, rows_from_snapshot, snapshot_from_rows,
)
from techtutor.infrastructure.state_store import (
    Mutator, StateStore, T, run_to_completion,
)
from techtutor.schemas.state import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_LOCK_KEY = 1947001


class SqlStateStore(StateStore):
    """Transactional backend over any SQLAlchemy async engine."""

    backend = "sql"

    def __init__(
        self,
        database_url: str,
        lock_key: int = DEFAULT_LOCK_KEY,
        pool_size: int = 20,
        max_overflow: int = 10,
        create_schema: bool = True,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )
        self.lock_key = lock_key
        self.create_schema = create_schema
        self._advisory = self.engine.dialect.name == "postgresql"
        self._local_lock = asyncio.Lock()

    async def open(self) -> None:
        if not self.create_schema:
            return
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            raise self._storage_error(e, "schema creation") from e

    async def close(self) -> None:
        await self.engine.dispose()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def read(self) -> Snapshot:
        async with self._transaction("read", shared=True) as session:
            return await self._load(session)

    async def write(self, snapshot: Snapshot) -> None:
        self.ensure_integrity(snapshot)
        await run_to_completion(self._locked_write(snapshot))

    async def update_with_mutator(self, mutator: Mutator[T]) -> T:
        return await run_to_completion(self._locked_update(mutator))

    # ─── Units of work ───────────────────────────────────────────

    async def _locked_write(self, snapshot: Snapshot) -> None:
        async with self._transaction("write") as session:
            await self._replace(session, snapshot)

    async def _locked_update(self, mutator: Mutator[T]) -> T:
        async with self._transaction("update") as session:
            snapshot = await self._load(session)
            result = mutator(snapshot)
            self.ensure_integrity(snapshot)
            await self._replace(session, snapshot)
            return result

    @asynccontextmanager
    async def _transaction(
        self, operation: str, shared: bool = False,
    ) -> AsyncGenerator[AsyncSession, None]:
        """Session inside BEGIN..COMMIT holding the store-wide lock; rollback on any error."""
        guard = nullcontext() if self._advisory else self._local_lock
        async with guard:
            try:
                async with self._session_factory() as session, session.begin():
                    if self._advisory:
                        lock_fn = (
                            "pg_advisory_xact_lock_shared" if shared
                            else "pg_advisory_xact_lock"
                        )
                        await session.execute(
                            text(f"SELECT {lock_fn}(:key)"), {"key": self.lock_key},
                        )
                    yield session
            except (SQLAlchemyError, OSError) as e:
                raise self._storage_error(e, operation) from e

    async def _load(self, session: AsyncSession) -> Snapshot:
        rows = {}
        for table in TABLE_ORDER:
            result = await session.execute(select(table).order_by(table.c.seq))
            rows[table.name] = result.mappings().all()
        try:
            return snapshot_from_rows(rows)
        except ValidationError as e:
            logger.error(
                f"Stored rows do not form a valid snapshot: {e}",
                extra={"backend": self.backend, "error_code": "STORAGE_ERROR"},
            )
            raise StorageError(
                "Stored rows failed validation", "read",
                ErrorContext(backend=self.backend),
            ) from e

    async def _replace(self, session: AsyncSession, snapshot: Snapshot) -> None:
        """Clear all four tables (children first) and re-insert from `snapshot`."""
        for table in reversed(TABLE_ORDER):
            await session.execute(delete(table))
        rows = rows_from_snapshot(snapshot)
        for table in TABLE_ORDER:
            if rows[table.name]:
                await session.execute(insert(table), rows[table.name])

    def _storage_error(self, e: Exception, operation: str) -> StorageError:
        if isinstance(e, IntegrityError):
            message = "Integrity constraint violated"
        elif isinstance(e, OperationalError):
            message = "Connection or operational error"
        elif isinstance(e, DBAPIError):
            message = "Database driver error"
        elif isinstance(e, SQLAlchemyError):
            message = "Database operation failed"
        else:
            message = "Database unreachable"
        logger.error(
            f"DB {operation} failed: {e}",
            extra={"backend": self.backend, "error_code": "STORAGE_ERROR"},
        )
        return StorageError(message, operation, ErrorContext(backend=self.backend))
