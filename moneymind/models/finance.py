"""
Core Data Models for MoneyMind

These models define the strict schemas for everything the ledger owns.
They are designed to:
1. Enforce required fields and value ranges at construction
2. Serialize to and from the single JSON record the store keeps
3. Read records written by the older camelCase, list-based format

DESIGN DECISION: A user's data lives in one owned aggregate (UserData)
holding id-indexed maps. Ledger operations receive that aggregate
explicitly; nothing is shared through object identity with the stored
snapshot.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


DATABASE_VERSION = 7
INCOME_CATEGORY_NAME = "income"


def new_id() -> str:
    """Generate a fresh entity identifier."""
    return uuid4().hex


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction relative to its account."""
    INCOME = "income"
    EXPENSE = "expense"


class PaymentMethod(str, Enum):
    """How a transaction was paid."""
    ONLINE = "online"
    CASH = "cash"


# =============================================================================
# LEDGER ENTITIES
# =============================================================================

class Account(BaseModel):
    """
    A place money is kept (cash, savings, card...).

    CRITICAL: `balance` is derived-but-stored. Only the ledger changes it,
    and it must always equal `initial_balance` plus the effects of every
    transaction pointing at this account.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique account ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    type: str = Field(
        default="General",
        max_length=50,
        description="Free-form label, e.g. Savings or Checking"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Current balance (signed)"
    )
    # None only for records read from the legacy format; UserData backfills it.
    initial_balance: Optional[Decimal] = Field(
        default=None,
        validation_alias=AliasChoices("initial_balance", "initialBalance"),
        description="Balance the account was opened with"
    )


class Transaction(BaseModel):
    """A stored income or expense entry attributed to one account."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id, min_length=1)
    account_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("account_id", "accountId"),
    )
    category_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("category_id", "categoryId"),
    )
    type: TransactionType
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Always positive; direction comes from `type`"
    )
    date: dt.date
    description: str = Field(default="", max_length=200)
    method: PaymentMethod = PaymentMethod.ONLINE

    @field_validator('method', mode='before')
    @classmethod
    def default_missing_method(cls, v: Any) -> Any:
        """Older records stored no method; those were online payments."""
        return v or PaymentMethod.ONLINE

    @property
    def effect(self) -> Decimal:
        """Signed contribution of this transaction to its account balance."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


class TransactionInput(BaseModel):
    """
    A candidate transaction coming from a form.

    An empty `id` means "create"; a non-empty one means "update".
    `account_id` may be left out to use the user's default account.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    account_id: Optional[str] = None
    category_id: Optional[str] = None
    type: TransactionType
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    date: dt.date
    description: str = Field(..., min_length=1, max_length=200)
    method: PaymentMethod = PaymentMethod.ONLINE

    @model_validator(mode='after')
    def expense_needs_category(self) -> 'TransactionInput':
        if self.type == TransactionType.EXPENSE and not self.category_id:
            raise ValueError("Expense transactions need a category")
        return self


class Category(BaseModel):
    """
    Spending category with a budget ceiling.

    The category named "Income" is privileged: income transactions are
    filed under it automatically and it never shows up in budget reports.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    budget: Decimal = Field(default=Decimal("0"), ge=0)
    color: str = Field(default="#3498db", pattern=r"^#[0-9a-fA-F]{6}$")
    icon: str = Field(default="fas fa-tag", max_length=50)

    @property
    def is_income(self) -> bool:
        return self.name.lower() == INCOME_CATEGORY_NAME


class Goal(BaseModel):
    """Savings goal. Tracked by hand, never linked to transactions."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    target_amount: Decimal = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("target_amount", "targetAmount"),
    )
    current_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        validation_alias=AliasChoices("current_amount", "currentAmount"),
    )
    color: str = Field(default="#00b894", pattern=r"^#[0-9a-fA-F]{6}$")


# =============================================================================
# USER AGGREGATE
# =============================================================================

class UserSettings(BaseModel):
    """Per-user preferences."""

    currency: str = Field(default="INR", pattern=r"^[A-Z]{3}$")
    default_account: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("default_account", "defaultAccount"),
    )


class UserData(BaseModel):
    """
    Everything the ledger owns for one user.

    Collections are insertion-ordered maps keyed by entity id.
    """

    accounts: dict[str, Account] = Field(default_factory=dict)
    transactions: dict[str, Transaction] = Field(default_factory=dict)
    categories: dict[str, Category] = Field(default_factory=dict)
    goals: dict[str, Goal] = Field(default_factory=dict)
    settings: UserSettings = Field(default_factory=UserSettings)

    @field_validator('accounts', 'transactions', 'categories', 'goals', mode='before')
    @classmethod
    def index_lists_by_id(cls, v: Any) -> Any:
        """Accept the legacy list shape and index it by id."""
        if isinstance(v, list):
            indexed = {}
            for item in v:
                item_id = item.get("id") if isinstance(item, dict) else getattr(item, "id", None)
                if not item_id:
                    raise ValueError("Every stored entity needs an id")
                indexed[item_id] = item
            return indexed
        return v

    @model_validator(mode='after')
    def check_keys_and_backfill(self) -> 'UserData':
        """Keys must match ids; legacy accounts get their opening balance back."""
        for name in ("accounts", "transactions", "categories", "goals"):
            for key, item in getattr(self, name).items():
                if key != item.id:
                    raise ValueError(f"{name} entry {key!r} holds id {item.id!r}")

        for account in self.accounts.values():
            if account.initial_balance is None:
                applied = sum(
                    (t.effect for t in self.transactions.values() if t.account_id == account.id),
                    Decimal("0"),
                )
                account.initial_balance = account.balance - applied
        return self

    @property
    def income_category(self) -> Optional[Category]:
        """The privileged Income category, if this user has one."""
        for category in self.categories.values():
            if category.is_income:
                return category
        return None

    def transactions_for_account(self, account_id: str) -> list[Transaction]:
        return [t for t in self.transactions.values() if t.account_id == account_id]


class UserRecord(BaseModel):
    """A registered user and the data they own."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=new_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    password_hash: str = Field(
        ...,
        validation_alias=AliasChoices("password_hash", "password"),
    )
    data: UserData = Field(default_factory=UserData)

    @model_validator(mode='before')
    @classmethod
    def nest_legacy_data(cls, values: Any) -> Any:
        """The legacy format spread the user's data over the user record."""
        if isinstance(values, dict) and "data" not in values:
            keys = ("accounts", "transactions", "categories", "goals", "settings")
            if any(key in values for key in keys):
                values = dict(values)
                values["data"] = {key: values.pop(key) for key in keys if key in values}
        return values


class UserDatabase(BaseModel):
    """The single versioned record the store keeps."""

    version: int = Field(default=DATABASE_VERSION, ge=1)
    users: list[UserRecord] = Field(default_factory=list)

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self.users:
            if user.email == email:
                return user
        return None

    def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        for user in self.users:
            if user.id == user_id:
                return user
        return None
