"""Balance ledger package."""

from moneymind.ledger.errors import (
    AccountInUseError,
    InvalidAccountError,
    LastAccountError,
    LedgerError,
)
from moneymind.ledger.ledger import Ledger

__all__ = [
    "AccountInUseError",
    "InvalidAccountError",
    "LastAccountError",
    "Ledger",
    "LedgerError",
]
