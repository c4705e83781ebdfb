"""
Audit Logger

DESIGN DECISION: Every change to a user's money is logged.
This provides:
1. Traceability of every balance change
2. Debugging capability when a balance looks wrong
3. A history of rejected operations

The audit logger:
- Is synchronous, like the ledger it records
- Gracefully handles failures (a broken audit backend never blocks a mutation)
- Supports correlation IDs to trace related events
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from moneymind.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from moneymind.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("moneymind.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_transaction_saved(
        self,
        transaction_id: str,
        account_id: str,
        amount: Decimal,
        transaction_type: str,
        created: bool,
        previous_account_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a transaction create or update."""
        event = AuditEventBuilder.transaction_saved(
            transaction_id=transaction_id,
            account_id=account_id,
            amount=amount,
            transaction_type=transaction_type,
            created=created,
            previous_account_id=previous_account_id,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_transaction_deleted(
        self,
        transaction_id: str,
        account_id: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            account_id=account_id,
            amount=amount,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_account_changed(
        self,
        event_type: AuditEventType,
        account_id: str,
        name: str,
        balance: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.account_changed(
            event_type=event_type,
            account_id=account_id,
            name=name,
            balance=balance,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_entity_changed(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: Optional[str],
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a category or goal save/delete."""
        event = AuditEventBuilder.entity_changed(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            name=name,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_rejected(
        self,
        operation: str,
        error: Exception,
        entity_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an operation the ledger or auth layer refused."""
        event = AuditEventBuilder.operation_rejected(
            operation=operation,
            error_code=type(error).__name__,
            error_message=str(error),
            entity_id=entity_id,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_user_event(
        self,
        event_type: AuditEventType,
        user_id: Optional[str],
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.user_event(
            event_type=event_type,
            user_id=user_id,
            email=email,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_save_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.save_failed(
            error_message=error_message,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a form submit).
    Pass it through all subsequent operations.
    """
    return uuid4()
