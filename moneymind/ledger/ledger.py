"""
Balance Ledger

Keeps every account balance equal to its opening balance plus the signed
effects of the transactions currently pointing at it:

    balance == initial_balance + sum(effect(t) for t in account's transactions)

where effect is +amount for income and -amount for expense.

GUARANTEES:
- Every public mutation either completes and is persisted, or leaves the
  aggregate exactly as it found it (rejections happen before any change,
  and a failing save rolls the in-memory state back)
- Updating a transaction ALWAYS reverses the stored effect on the account
  that owned it and then applies the new effect, even when nothing that
  affects the balance changed
- Accounts referenced by transactions, and the last remaining account,
  cannot be deleted
"""

from contextlib import contextmanager
from decimal import Decimal
from typing import Callable, Iterator, Optional
from uuid import UUID

from moneymind.audit import AuditLogger
from moneymind.ledger.errors import (
    AccountInUseError,
    InvalidAccountError,
    LastAccountError,
)
from moneymind.models.audit import AuditEventType
from moneymind.models.finance import (
    Account,
    Category,
    Goal,
    Transaction,
    TransactionInput,
    TransactionType,
    UserData,
    UserSettings,
    new_id,
)


class Ledger:
    """
    Applies account, transaction, category and goal mutations to one
    user's data.

    The ledger holds a reference to the caller's UserData and mutates it in
    place. After each successful mutation it calls `persist` exactly once;
    the caller decides what saving means.
    """

    def __init__(
        self,
        data: UserData,
        persist: Optional[Callable[[], None]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._data = data
        self._persist = persist
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def data(self) -> UserData:
        return self._data

    @contextmanager
    def _mutation(self, correlation_id: Optional[UUID] = None) -> Iterator[None]:
        """Run a block of changes, persist them, and undo them all on failure."""
        snapshot = self._data.model_copy(deep=True)
        try:
            yield
            if self._persist is not None:
                self._persist()
        except Exception as e:
            for name in type(self._data).model_fields:
                setattr(self._data, name, getattr(snapshot, name))
            self._audit_logger.log_save_failed(str(e), correlation_id=correlation_id)
            raise

    def _reject(
        self,
        operation: str,
        error: Exception,
        entity_id: Optional[str],
        correlation_id: Optional[UUID],
    ) -> Exception:
        self._audit_logger.log_rejected(
            operation,
            error,
            entity_id=entity_id,
            correlation_id=correlation_id,
        )
        return error

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def upsert_transaction(
        self,
        candidate: TransactionInput,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Create (empty id) or update (known id) a transaction.

        An id that matches no stored transaction is treated as a creation
        and gets a fresh id. Without an account_id, a creation goes to the
        default account and an update stays on its current account.

        Raises:
            InvalidAccountError: If the target account doesn't exist
        """
        original = self._data.transactions.get(candidate.id) if candidate.id else None

        # Edits stay on their own account unless moved explicitly
        account_id = candidate.account_id
        if not account_id:
            account_id = original.account_id if original else self._data.settings.default_account
        account = self._data.accounts.get(account_id) if account_id else None
        if account is None:
            raise self._reject(
                "upsert_transaction",
                InvalidAccountError(account_id),
                candidate.id,
                correlation_id,
            )

        category_id = candidate.category_id
        if candidate.type == TransactionType.INCOME:
            income_category = self._data.income_category
            if income_category is not None:
                category_id = income_category.id

        transaction = Transaction(
            id=original.id if original else new_id(),
            account_id=account.id,
            category_id=category_id,
            type=candidate.type,
            amount=candidate.amount,
            date=candidate.date,
            description=candidate.description,
            method=candidate.method,
        )

        with self._mutation(correlation_id):
            if original is not None:
                previous_account = self._data.accounts.get(original.account_id)
                if previous_account is not None:
                    previous_account.balance -= original.effect

            account.balance += transaction.effect
            self._data.transactions[transaction.id] = transaction

        self._audit_logger.log_transaction_saved(
            transaction_id=transaction.id,
            account_id=account.id,
            amount=transaction.amount,
            transaction_type=transaction.type.value,
            created=original is None,
            previous_account_id=original.account_id if original else None,
            correlation_id=correlation_id,
        )
        return transaction

    def delete_transaction(
        self,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Transaction]:
        """
        Remove a transaction and reverse its effect on its account.

        Unknown ids are ignored. Returns the removed transaction, if any.
        """
        transaction = self._data.transactions.get(transaction_id)
        if transaction is None:
            return None

        with self._mutation(correlation_id):
            account = self._data.accounts.get(transaction.account_id)
            if account is not None:
                account.balance -= transaction.effect
            del self._data.transactions[transaction_id]

        self._audit_logger.log_transaction_deleted(
            transaction_id=transaction.id,
            account_id=transaction.account_id,
            amount=transaction.amount,
            correlation_id=correlation_id,
        )
        return transaction

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def create_account(
        self,
        name: str,
        type: str = "General",
        initial_balance: Decimal = Decimal("0"),
        correlation_id: Optional[UUID] = None,
    ) -> Account:
        """Open an account. The first usable account becomes the default."""
        account = Account(
            name=name,
            type=type,
            balance=initial_balance,
            initial_balance=initial_balance,
        )

        with self._mutation(correlation_id):
            self._data.accounts[account.id] = account
            if self._data.settings.default_account not in self._data.accounts:
                self._data.settings.default_account = account.id

        self._audit_logger.log_account_changed(
            AuditEventType.ACCOUNT_CREATED,
            account_id=account.id,
            name=account.name,
            balance=account.balance,
            correlation_id=correlation_id,
        )
        return account

    def update_account(
        self,
        account_id: str,
        name: str,
        type: str,
        correlation_id: Optional[UUID] = None,
    ) -> Account:
        """
        Rename or relabel an account. The balance is never touched here.

        Raises:
            InvalidAccountError: If the account doesn't exist
        """
        current = self._data.accounts.get(account_id)
        if current is None:
            raise self._reject(
                "update_account",
                InvalidAccountError(account_id),
                account_id,
                correlation_id,
            )

        updated = Account(
            id=current.id,
            name=name,
            type=type,
            balance=current.balance,
            initial_balance=current.initial_balance,
        )

        with self._mutation(correlation_id):
            self._data.accounts[account_id] = updated

        self._audit_logger.log_account_changed(
            AuditEventType.ACCOUNT_UPDATED,
            account_id=updated.id,
            name=updated.name,
            balance=updated.balance,
            correlation_id=correlation_id,
        )
        return updated

    def delete_account(
        self,
        account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Account:
        """
        Delete an account that no transaction references.

        Raises:
            InvalidAccountError: If the account doesn't exist
            AccountInUseError: If any transaction references it
            LastAccountError: If it is the only account
        """
        account = self._data.accounts.get(account_id)
        if account is None:
            raise self._reject(
                "delete_account",
                InvalidAccountError(account_id),
                account_id,
                correlation_id,
            )

        in_use = len(self._data.transactions_for_account(account_id))
        if in_use:
            raise self._reject(
                "delete_account",
                AccountInUseError(account_id, in_use),
                account_id,
                correlation_id,
            )

        if len(self._data.accounts) == 1:
            raise self._reject(
                "delete_account",
                LastAccountError(account_id),
                account_id,
                correlation_id,
            )

        with self._mutation(correlation_id):
            del self._data.accounts[account_id]
            if self._data.settings.default_account == account_id:
                self._data.settings.default_account = next(iter(self._data.accounts), None)

        self._audit_logger.log_account_changed(
            AuditEventType.ACCOUNT_DELETED,
            account_id=account.id,
            name=account.name,
            balance=account.balance,
            correlation_id=correlation_id,
        )
        return account

    def set_default_account(
        self,
        account_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Choose the account new transactions go to when none is given.

        Raises:
            InvalidAccountError: If the account doesn't exist
        """
        if account_id not in self._data.accounts:
            raise self._reject(
                "set_default_account",
                InvalidAccountError(account_id),
                account_id,
                correlation_id,
            )

        with self._mutation(correlation_id):
            self._data.settings.default_account = account_id

        self._audit_logger.log_entity_changed(
            AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            entity_id=account_id,
            name="default_account",
            correlation_id=correlation_id,
        )

    def set_currency(
        self,
        currency: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Change the display currency. Amounts are not converted."""
        settings = UserSettings(
            currency=currency,
            default_account=self._data.settings.default_account,
        )

        with self._mutation(correlation_id):
            self._data.settings = settings

        self._audit_logger.log_entity_changed(
            AuditEventType.SETTINGS_UPDATED,
            entity_type="settings",
            entity_id=None,
            name=f"currency={settings.currency}",
            correlation_id=correlation_id,
        )

    # -------------------------------------------------------------------------
    # Categories and goals (no balance effect)
    # -------------------------------------------------------------------------

    def upsert_category(
        self,
        category: Category,
        correlation_id: Optional[UUID] = None,
    ) -> Category:
        """Replace a known category in place, or add it under a fresh id."""
        if category.id not in self._data.categories:
            category = category.model_copy(update={"id": new_id()})

        with self._mutation(correlation_id):
            self._data.categories[category.id] = category

        self._audit_logger.log_entity_changed(
            AuditEventType.CATEGORY_SAVED,
            entity_type="category",
            entity_id=category.id,
            name=category.name,
            correlation_id=correlation_id,
        )
        return category

    def delete_category(
        self,
        category_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Category]:
        """Remove a category. Transactions filed under it are left alone."""
        category = self._data.categories.get(category_id)
        if category is None:
            return None

        with self._mutation(correlation_id):
            del self._data.categories[category_id]

        self._audit_logger.log_entity_changed(
            AuditEventType.CATEGORY_DELETED,
            entity_type="category",
            entity_id=category.id,
            name=category.name,
            correlation_id=correlation_id,
        )
        return category

    def upsert_goal(
        self,
        goal: Goal,
        correlation_id: Optional[UUID] = None,
    ) -> Goal:
        """Replace a known goal in place, or add it under a fresh id."""
        if goal.id not in self._data.goals:
            goal = goal.model_copy(update={"id": new_id()})

        with self._mutation(correlation_id):
            self._data.goals[goal.id] = goal

        self._audit_logger.log_entity_changed(
            AuditEventType.GOAL_SAVED,
            entity_type="goal",
            entity_id=goal.id,
            name=goal.name,
            correlation_id=correlation_id,
        )
        return goal

    def delete_goal(
        self,
        goal_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Goal]:
        goal = self._data.goals.get(goal_id)
        if goal is None:
            return None

        with self._mutation(correlation_id):
            del self._data.goals[goal_id]

        self._audit_logger.log_entity_changed(
            AuditEventType.GOAL_DELETED,
            entity_type="goal",
            entity_id=goal.id,
            name=goal.name,
            correlation_id=correlation_id,
        )
        return goal

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def expected_balance(self, account_id: str) -> Optional[Decimal]:
        """Recompute a balance from scratch; None if it can't be known."""
        account = self._data.accounts.get(account_id)
        if account is None or account.initial_balance is None:
            return None
        return account.initial_balance + sum(
            (t.effect for t in self._data.transactions_for_account(account_id)),
            Decimal("0"),
        )

    def check_balances(self) -> dict[str, Decimal]:
        """Map of account id -> expected balance for every account that disagrees."""
        mismatches = {}
        for account in self._data.accounts.values():
            expected = self.expected_balance(account.id)
            if expected is not None and expected != account.balance:
                mismatches[account.id] = expected
        return mismatches
