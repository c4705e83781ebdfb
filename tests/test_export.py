"""
Tests for CSV and report export.
"""

import pytest
from datetime import date

from factories import expense, income
from moneymind.export import NothingToExportError, build_report, export_csv, export_filename
from moneymind.models import PaymentMethod, UserRecord


@pytest.fixture
def filled(ledger, data, food_id):
    ledger.upsert_transaction(income("2500", description="Salary, May", date=date(2024, 5, 1)))
    ledger.upsert_transaction(expense(
        "120.50", food_id,
        description="Groceries",
        date=date(2024, 5, 10),
        method=PaymentMethod.CASH,
    ))
    return data


class TestExportCsv:
    """Tests for CSV export."""

    def test_csv_content(self, filled):
        """Test header, row order and quoting."""
        assert export_csv(filled) == (
            "Date,Description,Amount,Type,Method,Category,Account\n"
            '2024-05-01,"Salary, May",2500,income,online,Income,Cash\n'
            "2024-05-10,Groceries,120.50,expense,cash,Food & Dining,Cash\n"
        )

    def test_csv_missing_names(self, ledger, filled, food_id):
        """Test deleted categories export as N/A."""
        ledger.delete_category(food_id)
        assert export_csv(filled).splitlines()[2].endswith(",N/A,Cash")

    def test_nothing_to_export(self, data):
        """Test an empty ledger can't be exported."""
        with pytest.raises(NothingToExportError, match="No transactions to export"):
            export_csv(data)

    def test_export_is_read_only(self, filled):
        """Test exporting leaves the data untouched."""
        before = filled.model_copy(deep=True)
        export_csv(filled)
        assert filled == before


class TestReport:
    """Tests for the plain-text report."""

    def test_report_layout(self, filled):
        """Test the heading block and signed amounts."""
        user = UserRecord(name="Meera", email="meera@example.com", password_hash="h", data=filled)
        report = build_report(user, today=date(2024, 5, 20))
        lines = report.splitlines()

        assert lines[:4] == ["Financial Report", "User: Meera", "Date: 2024-05-20", ""]
        for column in ("Date", "Description", "Method", "Category", "Account", "Amount"):
            assert column in lines[4]
        assert "+₹2,500.00" in report
        assert "-₹120.50" in report
        assert len(lines) == 7

    def test_report_needs_transactions(self):
        """Test an empty ledger has no report."""
        user = UserRecord(name="Meera", email="meera@example.com", password_hash="h")
        with pytest.raises(NothingToExportError):
            build_report(user)


class TestFilename:
    """Tests for export file naming."""

    def test_filename(self):
        """Test the dated file name."""
        assert export_filename("csv", date(2024, 5, 20)) == "MoneyMind_Report_2024-05-20.csv"
        assert export_filename("txt", date(2024, 1, 2)).endswith("2024-01-02.txt")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
