"""File State Store — the whole Snapshot as one JSON document on local disk.

Invariants:
    - Document shape: {"accounts": [...], "preferences": [...], "progress": [...], "history": [...]}
    - Missing document is created empty on first access
    - Every operation reads or rewrites the WHOLE document
    - Writes go to a sibling temp file and are swapped in with os.replace:
      a crash leaves either the old or the new document, never a torn one
    - Calls are serialized by one asyncio.Lock per store instance

Design Decisions:
    - Single-process only: no file locking across processes (documented limitation)
    - Blocking file IO runs in asyncio.to_thread so the event loop keeps serving
    - Corrupt JSON surfaces as StorageError instead of being silently reset
"""

import asyncio
import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from techtutor.core.errors import ErrorContext, StorageError
from techtutor.infrastructure.state_store import (
    Mutator, StateStore, T, run_to_completion,
)
from techtutor.schemas.state import Snapshot

logger = logging.getLogger(__name__)


class FileStateStore(StateStore):
    """JSON-document backend for local development and single-process deployments."""

    backend = "file"

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def open(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._ensure_document)

    async def close(self) -> None:
        return None

    async def health_check(self) -> bool:
        try:
            await self.read()
            return True
        except StorageError as e:
            logger.error(f"File store health check failed: {e}")
            return False

    async def read(self) -> Snapshot:
        async with self._lock:
            return await asyncio.to_thread(self._load)

    async def write(self, snapshot: Snapshot) -> None:
        self.ensure_integrity(snapshot)
        await run_to_completion(self._locked_save(snapshot))

    async def update_with_mutator(self, mutator: Mutator[T]) -> T:
        return await run_to_completion(self._locked_update(mutator))

    # ─── Units of work ───────────────────────────────────────────

    async def _locked_save(self, snapshot: Snapshot) -> None:
        async with self._lock:
            await asyncio.to_thread(self._save, snapshot)

    async def _locked_update(self, mutator: Mutator[T]) -> T:
        async with self._lock:
            snapshot = await asyncio.to_thread(self._load)
            result = mutator(snapshot)
            self.ensure_integrity(snapshot)
            await asyncio.to_thread(self._save, snapshot)
            return result

    # ─── Blocking IO (worker thread) ─────────────────────────────

    def _ensure_document(self) -> None:
        if not self.path.exists():
            self._save(Snapshot())

    def _load(self) -> Snapshot:
        try:
            self._ensure_document()
            raw = self.path.read_text(encoding="utf-8")
            return Snapshot.model_validate(json.loads(raw))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.error(
                f"Failed to read store document {self.path}: {e}",
                extra={"backend": self.backend, "error_code": "STORAGE_ERROR"},
            )
            raise StorageError(
                str(e), "read", ErrorContext(backend=self.backend),
            ) from e

    def _save(self, snapshot: Snapshot) -> None:
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(snapshot.model_dump(mode="json"), indent=2)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(
                f"Failed to write store document {self.path}: {e}",
                extra={"backend": self.backend, "error_code": "STORAGE_ERROR"},
            )
            raise StorageError(
                str(e), "write", ErrorContext(backend=self.backend),
            ) from e
