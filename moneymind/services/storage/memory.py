"""
In-Memory Storage

Keeps the database as a serialized JSON string so that loaded objects
never share identity with the saved snapshot. Used by tests and by the
frontend when no data path is configured.
"""

from typing import Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from moneymind.models.audit import AuditEvent
from moneymind.models.finance import UserDatabase
from moneymind.services.storage.interface import (
    AuditStorageInterface,
    DatabaseStorageInterface,
)


class InMemoryStorage(DatabaseStorageInterface):
    """Database storage backed by a string in memory."""

    def __init__(self, initial: Optional[str] = None):
        self._snapshot = initial
        self.save_count = 0
        self._logger = structlog.get_logger(__name__)

    @property
    def snapshot(self) -> Optional[str]:
        """The raw serialized record, as last saved."""
        return self._snapshot

    def load(self) -> UserDatabase:
        if not self._snapshot:
            return UserDatabase()
        try:
            return UserDatabase.model_validate_json(self._snapshot)
        except ValidationError as e:
            self._logger.warning("database_replaced_with_default", error=str(e))
            return UserDatabase()

    def save(self, database: UserDatabase) -> None:
        self._snapshot = database.model_dump_json()
        self.save_count += 1


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
