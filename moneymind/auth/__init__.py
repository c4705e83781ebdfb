"""Authentication package."""

from moneymind.auth.service import (
    EXTERNAL_PASSWORD_SENTINEL,
    AuthError,
    AuthService,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    WeakPasswordError,
    hash_password,
)

__all__ = [
    "EXTERNAL_PASSWORD_SENTINEL",
    "AuthError",
    "AuthService",
    "EmailAlreadyRegisteredError",
    "InvalidCredentialsError",
    "WeakPasswordError",
    "hash_password",
]
