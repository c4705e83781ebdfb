"""
Starter data for newly registered users.
"""

from decimal import Decimal

from moneymind.models.finance import Account, Category, UserData, UserSettings


def default_categories(is_student: bool = False) -> list[Category]:
    if is_student:
        return [
            Category(name="Pocket Money", budget=Decimal("0"), color="#2ecc71", icon="fas fa-wallet"),
            Category(name="Food & Canteen", budget=Decimal("2000"), color="#3498db", icon="fas fa-utensils"),
            Category(name="Stationery & Books", budget=Decimal("1000"), color="#9b59b6", icon="fas fa-book"),
            Category(name="Transport", budget=Decimal("500"), color="#e67e22", icon="fas fa-bus"),
            Category(name="Entertainment", budget=Decimal("1000"), color="#e74c3c", icon="fas fa-film"),
        ]
    return [
        Category(name="Income", budget=Decimal("0"), color="#2ecc71", icon="fas fa-briefcase"),
        Category(name="Food & Dining", budget=Decimal("15000"), color="#3498db", icon="fas fa-utensils"),
        Category(name="Transportation", budget=Decimal("5000"), color="#e74c3c", icon="fas fa-car"),
        Category(name="Housing", budget=Decimal("25000"), color="#9b59b6", icon="fas fa-home"),
    ]


def default_account() -> Account:
    return Account(
        name="Cash",
        type="General",
        balance=Decimal("0"),
        initial_balance=Decimal("0"),
    )


def default_user_data(is_student: bool = False, currency: str = "INR") -> UserData:
    """A single Cash account (also the default) and a starter set of categories."""
    account = default_account()
    return UserData(
        accounts={account.id: account},
        categories={c.id: c for c in default_categories(is_student)},
        settings=UserSettings(currency=currency, default_account=account.id),
    )
