"""Services package."""

from moneymind.services.storage import (
    AuditStorageInterface,
    CorruptDataError,
    DatabaseStorageInterface,
    InMemoryAuditStorage,
    InMemoryStorage,
    JsonFileStorage,
    StorageError,
    StorageWriteError,
)

__all__ = [
    "AuditStorageInterface",
    "CorruptDataError",
    "DatabaseStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "JsonFileStorage",
    "StorageError",
    "StorageWriteError",
]
