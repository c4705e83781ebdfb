"""
Tests for authentication and user sessions.
"""

import pytest
from decimal import Decimal

from factories import income
from moneymind.auth import (
    EXTERNAL_PASSWORD_SENTINEL,
    AuthService,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    WeakPasswordError,
    hash_password,
)
from moneymind.ledger import InvalidAccountError
from moneymind.models import AuditEventType
from moneymind.services.storage import InMemoryStorage, JsonFileStorage, StorageError
from moneymind.services.storage import json_file


PASSWORD = "Secret123"


@pytest.fixture
def auth(storage, audit_logger, app_settings):
    return AuthService(storage, audit_logger=audit_logger, settings=app_settings)


@pytest.fixture
def registered(auth):
    return auth.register("Meera", "meera@example.com", PASSWORD)


class TestPasswords:
    """Tests for password hashing and policy."""

    def test_hash_password_is_sha256_hex(self):
        """Test the digest format."""
        digest = hash_password("abc")
        assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    @pytest.mark.parametrize("password", ["short1A", "alllowercase1", "NoDigitsHere"])
    def test_weak_passwords_rejected(self, auth, storage, password):
        """Test the default policy: 8+ chars, an uppercase letter, a digit."""
        with pytest.raises(WeakPasswordError):
            auth.register("Meera", "meera@example.com", password)
        assert storage.save_count == 0


class TestRegister:
    """Tests for registration."""

    def test_register_creates_default_data(self, auth, storage, registered):
        """Test a new user gets a Cash account and the standard categories."""
        assert registered.password_hash == hash_password(PASSWORD)
        data = registered.data
        assert [a.name for a in data.accounts.values()] == ["Cash"]
        assert data.settings.default_account in data.accounts
        assert data.settings.currency == "INR"
        assert [c.name for c in data.categories.values()] == [
            "Income", "Food & Dining", "Transportation", "Housing",
        ]
        assert storage.load().find_by_email("meera@example.com") is not None

    def test_register_student(self, auth):
        """Test the student category set."""
        user = auth.register("Kiran", "kiran@example.com", PASSWORD, is_student=True)
        budgets = {c.name: c.budget for c in user.data.categories.values()}
        assert budgets == {
            "Pocket Money": Decimal("0"),
            "Food & Canteen": Decimal("2000"),
            "Stationery & Books": Decimal("1000"),
            "Transport": Decimal("500"),
            "Entertainment": Decimal("1000"),
        }

    def test_duplicate_email(self, auth, registered):
        """Test an email can only be registered once."""
        with pytest.raises(EmailAlreadyRegisteredError):
            auth.register("Other", "meera@example.com", PASSWORD)

    def test_register_audited(self, auth, audit_storage, registered):
        """Test registration is logged."""
        event = audit_storage.get_recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.USER_REGISTERED
        assert event.entity_id == registered.id


class TestLogin:
    """Tests for password and external sign-in."""

    def test_login_opens_session(self, auth, registered):
        """Test a correct password yields a session for that user."""
        session = auth.login("meera@example.com", PASSWORD)
        assert session.user.id == registered.id
        assert session.data.accounts

    def test_login_trims_email(self, auth, registered):
        """Test surrounding whitespace in the email is ignored."""
        assert auth.login("  meera@example.com ", PASSWORD).user.id == registered.id

    @pytest.mark.parametrize("email,password", [
        ("meera@example.com", "Wrong1234"),
        ("nobody@example.com", PASSWORD),
    ])
    def test_invalid_credentials(self, auth, audit_storage, registered, email, password):
        """Test a wrong email or password is refused and logged."""
        with pytest.raises(InvalidCredentialsError, match="Invalid credentials"):
            auth.login(email, password)
        assert audit_storage.get_recent_events(limit=1)[0].event_type == AuditEventType.LOGIN_FAILED

    def test_external_sign_in_registers(self, auth, storage):
        """Test an unknown external identity is registered on the spot."""
        session = auth.sign_in_external("sam.lee@example.com")
        assert session.user.name == "sam.lee"
        assert session.user.password_hash == EXTERNAL_PASSWORD_SENTINEL
        assert len(storage.load().users) == 1

    def test_external_sign_in_reuses_user(self, auth, registered):
        """Test a known email signs in without a password."""
        session = auth.sign_in_external("meera@example.com", name="Ignored")
        assert session.user.id == registered.id
        assert session.user.name == "Meera"

    def test_external_user_cannot_use_password_login(self, auth):
        """Test the sentinel never matches a password."""
        auth.sign_in_external("sam@example.com")
        with pytest.raises(InvalidCredentialsError):
            auth.login("sam@example.com", EXTERNAL_PASSWORD_SENTINEL)

    def test_external_sign_in_needs_email(self, auth):
        """Test an empty identity is refused."""
        with pytest.raises(InvalidCredentialsError):
            auth.sign_in_external("   ")

    def test_login_repairs_empty_user(self, audit_logger, app_settings):
        """Test a stored user with no accounts or categories gets starter data."""
        storage = InMemoryStorage(initial=(
            '{"version": 7, "users": [{"id": "u1", "name": "Bare", '
            '"email": "bare@example.com", "password_hash": "' + hash_password(PASSWORD) + '"}]}'
        ))
        auth = AuthService(storage, audit_logger=audit_logger, settings=app_settings)

        session = auth.login("bare@example.com", PASSWORD)

        assert len(session.data.accounts) == 1
        assert session.data.settings.default_account in session.data.accounts
        assert session.data.income_category is not None
        assert storage.save_count == 1


class TestUserSession:
    """Tests for the session every ledger call runs against."""

    def test_ledger_mutation_is_saved(self, auth, storage, registered):
        """Test a transaction made through the session is persisted."""
        session = auth.login("meera@example.com", PASSWORD)
        session.ledger.upsert_transaction(income("5000"))

        stored = storage.load().find_by_id(registered.id)
        assert len(stored.data.transactions) == 1
        assert sum(a.balance for a in stored.data.accounts.values()) == Decimal("5000")

    def test_sessions_are_isolated(self, auth, storage):
        """Test two users' data never mix."""
        auth.register("A", "a@example.com", PASSWORD)
        auth.register("B", "b@example.com", PASSWORD)

        auth.login("a@example.com", PASSWORD).ledger.upsert_transaction(income("10"))

        database = storage.load()
        assert len(database.find_by_email("a@example.com").data.transactions) == 1
        assert database.find_by_email("b@example.com").data.transactions == {}

    def test_user_registered_after_login_survives_save(self, auth, storage):
        """Test a save from an older session keeps users registered since it opened."""
        auth.register("A", "a@example.com", PASSWORD)
        session = auth.login("a@example.com", PASSWORD)
        auth.register("C", "c@example.com", PASSWORD)

        session.ledger.upsert_transaction(income("10"))

        database = storage.load()
        assert database.find_by_email("c@example.com") is not None
        assert len(database.find_by_email("a@example.com").data.transactions) == 1
        assert len(database.users) == 2

    def test_concurrent_sessions_both_persist(self, auth, storage):
        """Test two open sessions saving in turn keep each other's changes."""
        auth.register("A", "a@example.com", PASSWORD)
        auth.register("B", "b@example.com", PASSWORD)
        first = auth.login("a@example.com", PASSWORD)
        second = auth.login("b@example.com", PASSWORD)

        first.ledger.upsert_transaction(income("10"))
        second.ledger.upsert_transaction(income("20"))

        database = storage.load()
        assert len(database.find_by_email("a@example.com").data.transactions) == 1
        assert len(database.find_by_email("b@example.com").data.transactions) == 1

    def test_set_currency_and_default_account(self, auth, storage, registered):
        """Test settings changes made through the session are saved."""
        session = auth.login("meera@example.com", PASSWORD)
        bank = session.ledger.create_account("Bank")

        session.set_currency("EUR")
        session.set_default_account(bank.id)

        settings = storage.load().find_by_id(registered.id).data.settings
        assert settings.currency == "EUR"
        assert settings.default_account == bank.id

    def test_set_default_account_unknown(self, auth, registered):
        """Test an unknown default account is refused."""
        session = auth.login("meera@example.com", PASSWORD)
        with pytest.raises(InvalidAccountError):
            session.set_default_account("missing")

    def test_reset_data(self, auth, storage, audit_storage, registered):
        """Test reset replaces everything with defaults but keeps the currency."""
        session = auth.login("meera@example.com", PASSWORD)
        session.set_currency("GBP")
        session.ledger.upsert_transaction(income("10"))

        session.reset_data()

        assert session.data.transactions == {}
        assert session.data.settings.currency == "GBP"
        stored = storage.load().find_by_id(registered.id)
        assert stored.data.transactions == {}
        assert audit_storage.get_recent_events(limit=1)[0].event_type == AuditEventType.DATA_RESET

        # The rebuilt ledger works on the new data
        session.ledger.upsert_transaction(income("7"))
        assert storage.load().find_by_id(registered.id).data.transactions

    def test_reset_data_rolls_back_on_save_failure(self, auth, storage, registered, monkeypatch):
        """Test a failed reset keeps the old data."""
        session = auth.login("meera@example.com", PASSWORD)
        session.ledger.upsert_transaction(income("10"))

        def broken_save(database):
            raise OSError("read-only")

        monkeypatch.setattr(storage, "save", broken_save)
        with pytest.raises(OSError):
            session.reset_data()
        assert len(session.data.transactions) == 1

    def test_file_write_failure_surfaces_as_storage_error(
        self, tmp_path, audit_logger, app_settings, monkeypatch
    ):
        """Test a failed file save raises StorageError and leaves data unchanged."""
        storage = JsonFileStorage(tmp_path / "db.json", database_key="TestDB_v1")
        auth = AuthService(storage, audit_logger=audit_logger, settings=app_settings)
        auth.register("Meera", "meera@example.com", PASSWORD)
        session = auth.login("meera@example.com", PASSWORD)

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(json_file.os, "replace", broken_replace)
        with pytest.raises(StorageError):
            session.ledger.create_account("Bank")

        assert [a.name for a in session.data.accounts.values()] == ["Cash"]
        monkeypatch.undo()
        assert len(storage.load().find_by_email("meera@example.com").data.accounts) == 1

    def test_failed_save_rolls_back_session_data(self, auth, storage, registered, monkeypatch):
        """Test a ledger mutation whose save fails leaves the session unchanged."""
        session = auth.login("meera@example.com", PASSWORD)

        def broken_save(database):
            raise OSError("read-only")

        monkeypatch.setattr(storage, "save", broken_save)
        with pytest.raises(OSError):
            session.ledger.upsert_transaction(income("10"))
        assert session.data.transactions == {}
        assert all(a.balance == 0 for a in session.data.accounts.values())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
