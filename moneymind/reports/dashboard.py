"""
Dashboard Aggregates

DESIGN DECISION: Reports are computed from the aggregate on demand,
never stored. The presentation layer calls these after every ledger
mutation and renders whatever comes back.

Everything here is read-only over UserData.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from moneymind.config import get_settings
from moneymind.models.finance import (
    PaymentMethod,
    Transaction,
    TransactionType,
    UserData,
)
from moneymind.models.reports import (
    CalendarEvent,
    CategoryBudgetStatus,
    DashboardSummary,
    GoalProgress,
    TransactionRow,
)


CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}

INCOME_COLOR = "#2ecc71"
EXPENSE_COLOR = "#e74c3c"
MISSING_NAME = "N/A"

ZERO = Decimal("0")


def _group_digits(whole: str) -> str:
    """Indian grouping: last three digits, then pairs (12,34,567)."""
    if len(whole) <= 3:
        return whole
    head, tail = whole[:-3], whole[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    return ",".join([head] + pairs + [tail])


def format_currency(amount: Decimal, currency: str = "INR") -> str:
    """
    Symbol (or ISO code) plus the two-decimal amount.

    Digits are grouped in lakhs and crores (₹1,50,000.00) for every
    currency, the way the en-IN locale renders them.
    """
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    sign = "-" if amount < 0 else ""
    whole, fraction = f"{abs(amount):.2f}".split(".")
    return f"{sign}{symbol}{_group_digits(whole)}.{fraction}"


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def dashboard_summary(data: UserData, today: Optional[date] = None) -> DashboardSummary:
    """Total balance plus this month's income, spending and savings."""
    today = today or date.today()
    month_start = today.replace(day=1)

    monthly = [t for t in data.transactions.values() if t.date >= month_start]
    income = [t for t in monthly if t.type == TransactionType.INCOME]
    expenses = [t for t in monthly if t.type == TransactionType.EXPENSE]
    cash = [t for t in expenses if t.method == PaymentMethod.CASH]
    online = [t for t in expenses if t.method != PaymentMethod.CASH]

    return DashboardSummary(
        currency=data.settings.currency,
        total_balance=sum((a.balance for a in data.accounts.values()), ZERO),
        month_start=month_start,
        monthly_income=_total(income),
        monthly_expenses=_total(expenses),
        monthly_online_expenses=_total(online),
        monthly_cash_expenses=_total(cash),
    )


def category_budgets(data: UserData) -> list[CategoryBudgetStatus]:
    """Spending against budget for every category except Income."""
    statuses = []
    for category in data.categories.values():
        if category.is_income:
            continue
        spent = _total(
            t for t in data.transactions.values()
            if t.category_id == category.id and t.type == TransactionType.EXPENSE
        )
        statuses.append(CategoryBudgetStatus(
            category_id=category.id,
            name=category.name,
            color=category.color,
            icon=category.icon,
            spent=spent,
            budget=category.budget,
        ))
    return statuses


def goal_progress(data: UserData) -> list[GoalProgress]:
    return [
        GoalProgress(
            goal_id=goal.id,
            name=goal.name,
            color=goal.color,
            current_amount=goal.current_amount,
            target_amount=goal.target_amount,
        )
        for goal in data.goals.values()
    ]


def transaction_rows(
    data: UserData,
    transactions: Optional[Iterable[Transaction]] = None,
) -> list[TransactionRow]:
    """Resolve category and account names; missing ones read "N/A"."""
    currency = data.settings.currency
    rows = []
    for t in data.transactions.values() if transactions is None else transactions:
        category = data.categories.get(t.category_id) if t.category_id else None
        account = data.accounts.get(t.account_id)
        sign = "+" if t.type == TransactionType.INCOME else "-"
        rows.append(TransactionRow(
            transaction_id=t.id,
            date=t.date,
            description=t.description,
            category_name=category.name if category else MISSING_NAME,
            account_name=account.name if account else MISSING_NAME,
            method=t.method.value,
            type=t.type.value,
            amount=t.amount,
            signed_amount=f"{sign}{format_currency(t.amount, currency)}",
        ))
    return rows


def recent_transactions(data: UserData, limit: Optional[int] = None) -> list[TransactionRow]:
    """Newest first, by transaction date."""
    if limit is None:
        limit = get_settings().app.recent_transactions_limit
    newest = sorted(data.transactions.values(), key=lambda t: t.date, reverse=True)
    return transaction_rows(data, newest[:limit])


def calendar_events(data: UserData) -> list[CalendarEvent]:
    """One event per transaction, coloured by direction."""
    currency = data.settings.currency
    return [
        CalendarEvent(
            id=t.id,
            title=f"{t.description} ({format_currency(t.amount, currency)})",
            start=t.date,
            color=INCOME_COLOR if t.type == TransactionType.INCOME else EXPENSE_COLOR,
        )
        for t in data.transactions.values()
    ]
