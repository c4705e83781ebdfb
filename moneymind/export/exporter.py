"""
Export

Turns a user's transactions into CSV text or a plain-text report.
Export is strictly read-only over the data it is given.
"""

from datetime import date
from typing import Optional

import pandas as pd

from moneymind.models.finance import UserData, UserRecord
from moneymind.reports.dashboard import transaction_rows


CSV_COLUMNS = ["Date", "Description", "Amount", "Type", "Method", "Category", "Account"]
REPORT_COLUMNS = ["Date", "Description", "Method", "Category", "Account", "Amount"]


class ExportError(Exception):
    """Base exception for export."""
    pass


class NothingToExportError(ExportError):
    """The user has no transactions."""

    def __init__(self):
        super().__init__("No transactions to export.")


def _frame(data: UserData) -> pd.DataFrame:
    if not data.transactions:
        raise NothingToExportError()

    rows = transaction_rows(data)
    return pd.DataFrame({
        "Date": [r.date.isoformat() for r in rows],
        "Description": [r.description for r in rows],
        "Amount": [str(r.amount) for r in rows],
        "Type": [r.type for r in rows],
        "Method": [r.method for r in rows],
        "Category": [r.category_name for r in rows],
        "Account": [r.account_name for r in rows],
        "Signed": [r.signed_amount for r in rows],
    })


def export_csv(data: UserData) -> str:
    """
    CSV with one row per transaction, in stored order.

    Raises:
        NothingToExportError: If there are no transactions
    """
    frame = _frame(data)
    return frame[CSV_COLUMNS].to_csv(index=False, lineterminator="\n")


def export_filename(extension: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"MoneyMind_Report_{today.isoformat()}.{extension}"


def build_report(user: UserRecord, today: Optional[date] = None) -> str:
    """
    Formatted plain-text financial report.

    Raises:
        NothingToExportError: If there are no transactions
    """
    today = today or date.today()
    frame = _frame(user.data)
    table = frame[["Date", "Description", "Method", "Category", "Account", "Signed"]]
    table = table.rename(columns={"Signed": "Amount"})

    lines = [
        "Financial Report",
        f"User: {user.name}",
        f"Date: {today.isoformat()}",
        "",
        table[REPORT_COLUMNS].to_string(index=False),
    ]
    return "\n".join(lines) + "\n"
