"""
Ledger Exceptions

All of these are recoverable: the operation is refused and nothing has
been mutated or saved when they are raised.
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for ledger operations."""

    def __init__(self, message: str, account_id: Optional[str] = None):
        super().__init__(message)
        self.account_id = account_id


class InvalidAccountError(LedgerError):
    """A transaction or setting references an account that doesn't exist."""

    def __init__(self, account_id: Optional[str]):
        super().__init__(
            f"Account not found: {account_id}" if account_id else "No account selected",
            account_id,
        )


class AccountInUseError(LedgerError):
    """Deletion blocked because transactions still reference the account."""

    def __init__(self, account_id: str, transaction_count: int):
        super().__init__(
            f"Cannot delete account with existing transactions ({transaction_count})",
            account_id,
        )
        self.transaction_count = transaction_count


class LastAccountError(LedgerError):
    """Deletion blocked because it is the only account left."""

    def __init__(self, account_id: str):
        super().__init__("Cannot delete your only account", account_id)
