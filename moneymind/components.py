"""
Application wiring.

Builds the storage backends, audit logger and auth service the frontend
needs, falling back to in-memory storage when the file backend can't be
configured.
"""

from typing import Optional

import structlog

from moneymind.audit import AuditLogger
from moneymind.auth import AuthService
from moneymind.services.storage import (
    DatabaseStorageInterface,
    InMemoryAuditStorage,
    InMemoryStorage,
    JsonFileStorage,
)


logger = structlog.get_logger(__name__)


def create_app_components(
    use_file_storage: bool = True,
    data_path: Optional[str] = None,
) -> tuple[AuthService, DatabaseStorageInterface, InMemoryAuditStorage]:
    """
    Factory function to create all application components.

    Args:
        use_file_storage: Whether to persist to the JSON file.
                          Set to False for throwaway sessions and tests.
        data_path: Override for the configured data file.

    Returns:
        (auth_service, database_storage, audit_storage)
    """
    storage: DatabaseStorageInterface
    if use_file_storage:
        try:
            storage = JsonFileStorage(data_path)
        except Exception as e:
            logger.warning("file_storage_unavailable", error=str(e))
            storage = InMemoryStorage()
    else:
        storage = InMemoryStorage()

    audit_storage = InMemoryAuditStorage()
    audit_logger = AuditLogger(audit_storage)
    auth = AuthService(storage, audit_logger=audit_logger)
    return auth, storage, audit_storage
