"""Read-only reporting package."""

from moneymind.reports.dashboard import (
    CURRENCY_SYMBOLS,
    EXPENSE_COLOR,
    INCOME_COLOR,
    MISSING_NAME,
    calendar_events,
    category_budgets,
    dashboard_summary,
    format_currency,
    goal_progress,
    recent_transactions,
    transaction_rows,
)

__all__ = [
    "CURRENCY_SYMBOLS",
    "EXPENSE_COLOR",
    "INCOME_COLOR",
    "MISSING_NAME",
    "calendar_events",
    "category_budgets",
    "dashboard_summary",
    "format_currency",
    "goal_progress",
    "recent_transactions",
    "transaction_rows",
]
