"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the JSON file backend swappable
2. Use in-memory storage for testing
3. Keep the ledger decoupled from where bytes end up

The whole user database is one versioned record. Storage only knows how
to load and save that record; it never interprets ledger rules.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from moneymind.models.audit import AuditEvent
from moneymind.models.finance import UserDatabase


class DatabaseStorageInterface(ABC):
    """
    Abstract interface for the user database record.

    Any storage implementation (JSON file, in-memory, ...) must implement
    these methods.
    """

    @abstractmethod
    def load(self) -> UserDatabase:
        """
        Load the last saved database.

        Returns:
            The stored database, or an empty default when nothing has been
            saved yet or the stored record cannot be read.

        Never raises for missing or malformed data.
        """
        pass

    @abstractmethod
    def save(self, database: UserDatabase) -> None:
        """
        Replace the stored record with `database`.

        Raises:
            StorageWriteError: If the record could not be written
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID, in chronological order.
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored record exists but cannot be parsed."""
    pass


class StorageWriteError(StorageError):
    """Could not write the record to the backend."""
    pass
