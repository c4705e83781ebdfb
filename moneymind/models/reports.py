"""
Report Models

Read-only views the presentation layer renders after every ledger call.
None of these are persisted.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field


class DashboardSummary(BaseModel):
    """Headline numbers for the dashboard."""

    currency: str
    total_balance: Decimal
    month_start: dt.date
    monthly_income: Decimal = Decimal("0")
    monthly_expenses: Decimal = Decimal("0")
    monthly_online_expenses: Decimal = Decimal("0")
    monthly_cash_expenses: Decimal = Decimal("0")

    @property
    def net_savings(self) -> Decimal:
        return self.monthly_income - self.monthly_expenses

    @property
    def savings_rate(self) -> Decimal:
        """Percentage of this month's income kept; 0 without income."""
        if self.monthly_income <= 0:
            return Decimal("0")
        return (self.net_savings / self.monthly_income * 100).quantize(Decimal("0.1"))


class CategoryBudgetStatus(BaseModel):
    """How much of a category's budget has been spent."""

    category_id: str
    name: str
    color: str
    icon: str
    spent: Decimal
    budget: Decimal

    @property
    def progress(self) -> Decimal:
        """Raw percentage spent; may exceed 100."""
        if self.budget <= 0:
            return Decimal("0")
        return self.spent / self.budget * 100

    @property
    def display_progress(self) -> Decimal:
        """Percentage for a progress bar, capped at 100."""
        return min(Decimal("100"), self.progress)

    @property
    def is_over_budget(self) -> bool:
        return self.budget > 0 and self.spent > self.budget


class GoalProgress(BaseModel):
    """Progress towards a savings goal."""

    goal_id: str
    name: str
    color: str
    current_amount: Decimal
    target_amount: Decimal

    @property
    def progress(self) -> Decimal:
        if self.target_amount <= 0:
            return Decimal("0")
        return self.current_amount / self.target_amount * 100

    @property
    def display_progress(self) -> Decimal:
        return min(Decimal("100"), self.progress)

    @property
    def is_reached(self) -> bool:
        return self.target_amount > 0 and self.current_amount >= self.target_amount


class TransactionRow(BaseModel):
    """A transaction with its category and account resolved to names."""

    transaction_id: str
    date: dt.date
    description: str
    category_name: str
    account_name: str
    method: str
    type: str
    amount: Decimal
    signed_amount: str = Field(..., description="Formatted, with a +/- prefix")


class CalendarEvent(BaseModel):
    """One calendar entry per transaction."""

    id: str
    title: str
    start: dt.date
    color: str
