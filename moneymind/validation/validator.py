"""
Two-Stage Data Validation

DESIGN DECISION: Checking a user's data happens in two distinct stages:

STAGE 1 - STRUCTURAL VALIDATION:
- Every stored balance equals opening balance + transaction effects
- Every transaction points at an existing account
- The default account exists
- Problems here mean the ledger invariant is broken

STAGE 2 - SEMANTIC VALIDATION:
- Transactions filed under categories that no longer exist
- Income not filed under the Income category
- Categories over budget
- Goals already reached
- These are worth showing, never blocking

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for human review.
"""

from moneymind.ledger import Ledger
from moneymind.models.finance import TransactionType, UserData
from moneymind.models.validation import ValidationIssue, ValidationResult
from moneymind.reports.dashboard import category_budgets, format_currency, goal_progress


class DataValidator:
    """Validates a UserData aggregate through a two-stage pipeline."""

    def _validate_structure(
        self,
        data: UserData,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Structural validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        currency = data.settings.currency

        for account_id, expected in Ledger(data).check_balances().items():
            account = data.accounts[account_id]
            issues.append(ValidationIssue(
                field="accounts",
                issue_type="balance_mismatch",
                message=(
                    f"Balance of {account.name} is {format_currency(account.balance, currency)} "
                    f"but its transactions add up to {format_currency(expected, currency)}"
                ),
                severity="error",
                entity_id=account_id,
            ))

        for transaction in data.transactions.values():
            if transaction.account_id not in data.accounts:
                issues.append(ValidationIssue(
                    field="transactions",
                    issue_type="dangling_reference",
                    message=f"Transaction '{transaction.description}' belongs to a missing account",
                    severity="error",
                    entity_id=transaction.id,
                    suggested_fix="Move the transaction to an existing account",
                ))

        default_account = data.settings.default_account
        if default_account is not None and default_account not in data.accounts:
            issues.append(ValidationIssue(
                field="settings.default_account",
                issue_type="dangling_reference",
                message="Default account no longer exists",
                severity="error",
                entity_id=default_account,
                suggested_fix="Pick a new default account in settings",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        data: UserData,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        currency = data.settings.currency
        income_category = data.income_category

        for transaction in data.transactions.values():
            if transaction.category_id and transaction.category_id not in data.categories:
                issues.append(ValidationIssue(
                    field="transactions",
                    issue_type="dangling_reference",
                    message=f"Transaction '{transaction.description}' uses a deleted category",
                    severity="warning",
                    entity_id=transaction.id,
                ))
            if (
                transaction.type == TransactionType.INCOME
                and income_category is not None
                and transaction.category_id != income_category.id
            ):
                issues.append(ValidationIssue(
                    field="transactions",
                    issue_type="miscategorized_income",
                    message=f"Income '{transaction.description}' is not filed under Income",
                    severity="warning",
                    entity_id=transaction.id,
                    suggested_fix="Edit and save the transaction to re-file it",
                ))

        for status in category_budgets(data):
            if status.is_over_budget:
                issues.append(ValidationIssue(
                    field="categories",
                    issue_type="over_budget",
                    message=(
                        f"{status.name}: {format_currency(status.spent, currency)} spent "
                        f"of {format_currency(status.budget, currency)} budget"
                    ),
                    severity="warning",
                    entity_id=status.category_id,
                ))

        for goal in goal_progress(data):
            if goal.is_reached:
                issues.append(ValidationIssue(
                    field="goals",
                    issue_type="goal_reached",
                    message=f"Goal '{goal.name}' has been reached",
                    severity="info",
                    entity_id=goal.goal_id,
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(self, data: UserData) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Both stages always run; semantic findings are still useful when
        the structure is broken.
        """
        structural_valid, issues = self._validate_structure(data)
        semantic_valid, semantic_issues = self._validate_semantic(data)
        issues.extend(semantic_issues)

        warnings = [issue.message for issue in issues if issue.severity == "warning"]

        return ValidationResult(
            structural_valid=structural_valid,
            semantic_valid=semantic_valid,
            is_valid=structural_valid and semantic_valid,
            issues=issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Short text summary for the settings page."""
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []
        if result.has_errors:
            lines.append("❌ Your data has problems that need fixing:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Worth a look:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
