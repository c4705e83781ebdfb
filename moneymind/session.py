"""
User Session

The explicit context every ledger and rendering call runs against:
the storage backend, the signed-in user, and a ledger bound to that
user's data.

DESIGN DECISION: There is no process-wide "current user". Whoever holds a
UserSession holds the only handle to that user's data, and every ledger
mutation made through it is written back and saved immediately. Saves
re-read the stored database and replace only this user's record, so
other users and other sessions sharing the storage are never overwritten.
"""

from typing import Optional
from uuid import UUID

from moneymind.audit import AuditLogger
from moneymind.defaults import default_user_data
from moneymind.ledger import Ledger
from moneymind.models.audit import AuditEventType
from moneymind.models.finance import UserData, UserRecord
from moneymind.services.storage import DatabaseStorageInterface


class UserSession:
    """
    Signed-in user plus a ledger that saves after every mutation.

    Usage:
        session = auth.login(email, password)
        session.ledger.upsert_transaction(candidate)
        summary = dashboard_summary(session.data)
    """

    def __init__(
        self,
        storage: DatabaseStorageInterface,
        user: UserRecord,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._user = user
        self._audit_logger = audit_logger or AuditLogger()
        self._ledger = self._build_ledger()

    def _build_ledger(self) -> Ledger:
        return Ledger(
            self._user.data,
            persist=self.save,
            audit_logger=self._audit_logger,
        )

    @property
    def user(self) -> UserRecord:
        return self._user

    @property
    def data(self) -> UserData:
        return self._user.data

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def save(self) -> None:
        """Write this user into the latest stored database and persist it."""
        database = self._storage.load()
        for index, stored in enumerate(database.users):
            if stored.id == self._user.id:
                database.users[index] = self._user
                break
        else:
            database.users.append(self._user)
        self._storage.save(database)

    def set_currency(self, currency: str, correlation_id: Optional[UUID] = None) -> None:
        self._ledger.set_currency(currency, correlation_id=correlation_id)

    def set_default_account(self, account_id: str, correlation_id: Optional[UUID] = None) -> None:
        """Raises InvalidAccountError for an unknown account."""
        self._ledger.set_default_account(account_id, correlation_id=correlation_id)

    def reset_data(
        self,
        is_student: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Throw away every account, transaction, category and goal.

        The caller is responsible for confirming with the user first.
        """
        previous = self._user.data
        self._user.data = default_user_data(
            is_student=is_student,
            currency=previous.settings.currency,
        )
        try:
            self.save()
        except Exception:
            self._user.data = previous
            raise
        self._ledger = self._build_ledger()

        self._audit_logger.log_user_event(
            AuditEventType.DATA_RESET,
            user_id=self._user.id,
            email=self._user.email,
            correlation_id=correlation_id,
        )
