"""
Data Models Package

This package contains all Pydantic models used in MoneyMind.
All data flowing through the system must conform to these schemas.
"""

from moneymind.models.finance import (
    DATABASE_VERSION,
    Account,
    Category,
    Goal,
    PaymentMethod,
    Transaction,
    TransactionInput,
    TransactionType,
    UserData,
    UserDatabase,
    UserRecord,
    UserSettings,
    new_id,
)
from moneymind.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from moneymind.models.reports import (
    CalendarEvent,
    CategoryBudgetStatus,
    DashboardSummary,
    GoalProgress,
    TransactionRow,
)
from moneymind.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Ledger models
    "DATABASE_VERSION",
    "Account",
    "Category",
    "Goal",
    "PaymentMethod",
    "Transaction",
    "TransactionInput",
    "TransactionType",
    "UserData",
    "UserDatabase",
    "UserRecord",
    "UserSettings",
    "new_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Report models
    "CalendarEvent",
    "CategoryBudgetStatus",
    "DashboardSummary",
    "GoalProgress",
    "TransactionRow",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
]
