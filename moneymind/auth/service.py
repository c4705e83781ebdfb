"""
Authentication

Local, single-device authentication: users are stored in the same database
record as their data, passwords are kept as SHA-256 hex digests.

DESIGN DECISION: Authentication only decides WHO is signed in. It hands
back a UserSession and never touches ledger rules.
"""

import hashlib
import re
from typing import Optional
from uuid import UUID

from moneymind.audit import AuditLogger
from moneymind.config import AppSettings, get_settings
from moneymind.defaults import default_account, default_categories, default_user_data
from moneymind.models.audit import AuditEventType
from moneymind.models.finance import UserRecord
from moneymind.services.storage import DatabaseStorageInterface
from moneymind.session import UserSession


# Stored instead of a digest for users who signed in through an external
# identity provider; no password hashes to it, so password login always fails.
EXTERNAL_PASSWORD_SENTINEL = "external-user"


class AuthError(Exception):
    """Base exception for authentication."""
    pass


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password."""

    def __init__(self):
        super().__init__("Invalid credentials.")


class EmailAlreadyRegisteredError(AuthError):
    """Registration with an email that already has an account."""

    def __init__(self, email: str):
        super().__init__(f"Email already registered: {email}")
        self.email = email


class WeakPasswordError(AuthError):
    """Password doesn't satisfy the configured policy."""

    def __init__(self):
        super().__init__("Password must be 8+ chars with 1 uppercase & 1 number.")


def hash_password(password: str) -> str:
    """Lowercase hex SHA-256 digest of the UTF-8 password."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class AuthService:
    """
    Registers users and opens sessions for them.

    The database is re-read from storage on every call, so a service
    instance never works from a stale copy.
    """

    def __init__(
        self,
        storage: DatabaseStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().app
        self._password_re = re.compile(self._settings.password_pattern)

    def register(
        self,
        name: str,
        email: str,
        password: str,
        is_student: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> UserRecord:
        """
        Create a user with starter data.

        Raises:
            WeakPasswordError: If the password fails the policy
            EmailAlreadyRegisteredError: If the email is taken
        """
        email = email.strip()
        if not self._password_re.match(password):
            error = WeakPasswordError()
            self._audit_logger.log_rejected("register", error, correlation_id=correlation_id)
            raise error

        database = self._storage.load()
        if database.find_by_email(email) is not None:
            error = EmailAlreadyRegisteredError(email)
            self._audit_logger.log_rejected("register", error, correlation_id=correlation_id)
            raise error

        user = UserRecord(
            name=name,
            email=email,
            password_hash=hash_password(password),
            data=default_user_data(
                is_student=is_student,
                currency=self._settings.default_currency,
            ),
        )
        database.users.append(user)
        self._storage.save(database)

        self._audit_logger.log_user_event(
            AuditEventType.USER_REGISTERED,
            user_id=user.id,
            email=email,
            correlation_id=correlation_id,
        )
        return user

    def login(
        self,
        email: str,
        password: str,
        correlation_id: Optional[UUID] = None,
    ) -> UserSession:
        """
        Open a session for a registered user.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password wrong
        """
        email = email.strip()
        database = self._storage.load()
        user = database.find_by_email(email)
        if user is None or user.password_hash != hash_password(password):
            self._audit_logger.log_user_event(
                AuditEventType.LOGIN_FAILED,
                user_id=user.id if user else None,
                email=email,
                correlation_id=correlation_id,
            )
            raise InvalidCredentialsError()

        return self._open_session(user, correlation_id)

    def sign_in_external(
        self,
        email: str,
        name: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> UserSession:
        """
        Open a session for an identity already verified elsewhere.

        Unknown emails are registered on the spot.
        """
        email = email.strip()
        if not email:
            raise InvalidCredentialsError()

        database = self._storage.load()
        user = database.find_by_email(email)
        if user is None:
            user = UserRecord(
                name=name or email.split("@")[0],
                email=email,
                password_hash=EXTERNAL_PASSWORD_SENTINEL,
                data=default_user_data(currency=self._settings.default_currency),
            )
            database.users.append(user)
            self._storage.save(database)
            self._audit_logger.log_user_event(
                AuditEventType.USER_REGISTERED,
                user_id=user.id,
                email=email,
                correlation_id=correlation_id,
            )

        return self._open_session(user, correlation_id)

    def _open_session(
        self,
        user: UserRecord,
        correlation_id: Optional[UUID],
    ) -> UserSession:
        """Fill in starter data a stored user is missing, then hand out a session."""
        data = user.data
        repaired = False
        if not data.accounts:
            account = default_account()
            data.accounts[account.id] = account
            data.settings.default_account = account.id
            repaired = True
        if not data.categories:
            data.categories = {c.id: c for c in default_categories()}
            repaired = True

        session = UserSession(self._storage, user, self._audit_logger)
        if repaired:
            session.save()

        self._audit_logger.log_user_event(
            AuditEventType.USER_LOGGED_IN,
            user_id=user.id,
            email=user.email,
            correlation_id=correlation_id,
        )
        return session
