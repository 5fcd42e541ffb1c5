"""State Store — backend-agnostic contract for atomic whole-snapshot persistence.

Invariants:
    - read() returns a complete, detached Snapshot (callers may mutate it freely)
    - write(snapshot) replaces ALL persisted state or none of it
    - update_with_mutator(fn) is read → fn(snapshot) → persist under one store-wide
      lock; concurrent calls never interleave
    - A mutator that raises, or leaves duplicate keys behind, persists nothing
    - Once started, a unit of work runs to completion even if the caller is cancelled;
      a failure it then hits is logged at ERROR (no caller is left to receive it)

Design Decisions:
    - ABC over Protocol: both backends share integrity checking and shielding
    - Mutators are synchronous: all IO happens before and after, never inside
      (ADR: multi-entity invariants expressed in one mutator, no awaits mid-transaction)
    - No module-level singleton: main.py lifespan builds the store and puts it on app.state
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, TypeVar

from techtutor.core.errors import ErrorContext, StorageError
from techtutor.schemas.state import Snapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")

Mutator = Callable[[Snapshot], T]


class StateStore(ABC):
    """Atomic read / write / mutate over the four persisted collections."""

    backend: str = "abstract"

    @abstractmethod
    async def open(self) -> None:
        """Create the backing document or schema if missing."""

    @abstractmethod
    async def close(self) -> None:
        """Release connections and handles."""

    @abstractmethod
    async def health_check(self) -> bool:
        """Readiness probe: True when the backing store is reachable."""

    @abstractmethod
    async def read(self) -> Snapshot:
        ...

    @abstractmethod
    async def write(self, snapshot: Snapshot) -> None:
        ...

    @abstractmethod
    async def update_with_mutator(self, mutator: Mutator[T]) -> T:
        ...

    def ensure_integrity(self, snapshot: Snapshot) -> None:
        """Raise StorageError if the snapshot would break a unique key."""
        violations = snapshot.integrity_violations()
        if violations:
            logger.error(
                f"Rejected snapshot with {len(violations)} integrity violation(s)",
                extra={"backend": self.backend, "error_code": "STORAGE_ERROR"},
            )
            raise StorageError(
                "; ".join(violations), "integrity check",
                ErrorContext(backend=self.backend),
            )


async def run_to_completion(unit: Awaitable[T]) -> T:
    """Run `unit` as its own task; cancelling the caller does not cancel it.

    After the caller is cancelled nobody awaits the task, so its failure is
    logged by _log_detached_failure instead of being dropped.
    """
    task = asyncio.ensure_future(unit)
    try:
        return await asyncio.shield(task)
    except asyncio.CancelledError:
        task.add_done_callback(_log_detached_failure)
        raise


def _log_detached_failure(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        return
    logger.error(
        f"Storage unit failed after its caller was cancelled: {exc}",
        exc_info=exc,
        extra={"error_code": getattr(exc, "code", "STORAGE_ERROR")},
    )
