"""Persistence backends, selected by STORAGE_BACKEND"""

import logging
from typing import Iterator

from .. import config
from .base import (
    AppointmentInterval,
    AppointmentRecord,
    CustomerRecord,
    RecordStore,
)
from .local import LocalFileStore
from .remote import RemoteTableStore

logger = logging.getLogger(__name__)

_local_store = None
_remote_store = None


def get_store() -> Iterator[RecordStore]:
    """FastAPI dependency yielding the configured store"""
    global _local_store, _remote_store

    if config.STORAGE_BACKEND == "sql":
        from ..database import SessionLocal
        from .sql import SqlStore

        store = SqlStore(SessionLocal())
        try:
            yield store
        finally:
            store.close()
        return

    if config.STORAGE_BACKEND == "remote":
        if _remote_store is None:
            logger.info(f"🔄 Connecting remote table store at {config.REMOTE_URL}")
            _remote_store = RemoteTableStore(
                config.REMOTE_URL,
                api_key=config.REMOTE_API_KEY,
                timeout=config.REMOTE_TIMEOUT_SECONDS,
            )
        yield _remote_store
        return

    if _local_store is None:
        logger.info(f"📁 Using local file store at {config.LOCAL_STORAGE_PATH}")
        _local_store = LocalFileStore(config.LOCAL_STORAGE_PATH)
    yield _local_store


__all__ = [
    "AppointmentInterval",
    "AppointmentRecord",
    "CustomerRecord",
    "LocalFileStore",
    "RecordStore",
    "RemoteTableStore",
    "get_store",
]
