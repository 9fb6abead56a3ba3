"""Storage writers for uploaded files."""

from filedepot.infrastructure.storage.base import StoredLocation, StorageWriter
from filedepot.infrastructure.storage.local_storage_writer import LocalStorageWriter

__all__ = [
    "LocalStorageWriter",
    "StorageWriter",
    "StoredLocation",
]
