"""Store Factory — picks the StateStore backend from Settings.

Invariants:
    - Non-empty database_url → SqlStateStore; empty → FileStateStore
    - The returned store is NOT opened yet: the lifespan calls open()/close()
"""

import logging

from techtutor.config import Settings
from techtutor.infrastructure.file_state_store import FileStateStore
from techtutor.infrastructure.sql_state_store import SqlStateStore
from techtutor.infrastructure.state_store import StateStore

logger = logging.getLogger(__name__)


def build_state_store(settings: Settings) -> StateStore:
    if settings.database_url:
        logger.info("Using SQL state store", extra={"backend": SqlStateStore.backend})
        return SqlStateStore(
            settings.database_url,
            lock_key=settings.store_lock_key,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            create_schema=settings.store_create_schema,
        )
    logger.info(
        f"Using file state store at {settings.store_file_path}",
        extra={"backend": FileStateStore.backend},
    )
    return FileStateStore(settings.store_file_path)
