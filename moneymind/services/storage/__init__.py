"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The JSON file backend is the default; the in-memory one backs tests.
"""

from moneymind.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    DatabaseStorageInterface,
    StorageError,
    StorageWriteError,
)
from moneymind.services.storage.json_file import JsonFileStorage
from moneymind.services.storage.memory import InMemoryAuditStorage, InMemoryStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "DatabaseStorageInterface",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    "StorageWriteError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "JsonFileStorage",
]
