"""
Tests for the storage backends.

JSON file tests only touch pytest's tmp_path.
"""

import json

import pytest
from decimal import Decimal

from moneymind.components import create_app_components
from moneymind.defaults import default_user_data
from moneymind.models import AuditEvent, AuditEventType, UserDatabase, UserRecord
from moneymind.services.storage import (
    InMemoryAuditStorage,
    InMemoryStorage,
    JsonFileStorage,
    StorageWriteError,
)


def sample_database() -> UserDatabase:
    return UserDatabase(users=[
        UserRecord(
            name="Ravi",
            email="ravi@example.com",
            password_hash="x" * 64,
            data=default_user_data(),
        ),
    ])


class TestJsonFileStorage:
    """Tests for the JSON file backend."""

    def test_round_trip(self, tmp_path):
        """Test a saved database loads back equal."""
        storage = JsonFileStorage(tmp_path / "db.json", database_key="TestDB_v1")
        database = sample_database()
        storage.save(database)
        assert storage.load() == database

    def test_loaded_copy_is_independent(self, tmp_path):
        """Test mutating a loaded database doesn't change the stored one."""
        storage = JsonFileStorage(tmp_path / "db.json", database_key="TestDB_v1")
        storage.save(sample_database())

        loaded = storage.load()
        account = next(iter(loaded.users[0].data.accounts.values()))
        account.balance = Decimal("999")

        reloaded = next(iter(storage.load().users[0].data.accounts.values()))
        assert reloaded.balance == Decimal("0")

    def test_missing_file_gives_default(self, tmp_path):
        """Test nothing stored yields an empty database."""
        storage = JsonFileStorage(tmp_path / "absent.json", database_key="TestDB_v1")
        assert storage.load() == UserDatabase()

    @pytest.mark.parametrize("content", [
        "{not json",
        "[1, 2, 3]",
        '{"TestDB_v1": {"users": "nope"}}',
        '{"TestDB_v1": {"users": [{"name": "No email"}]}}',
        "   ",
    ])
    def test_malformed_content_gives_default(self, tmp_path, content):
        """Test unreadable records are replaced with the empty default."""
        path = tmp_path / "db.json"
        path.write_text(content, encoding="utf-8")
        storage = JsonFileStorage(path, database_key="TestDB_v1")
        assert storage.load() == UserDatabase()

    def test_save_overwrites_malformed_file(self, tmp_path):
        """Test saving over garbage produces a readable file."""
        path = tmp_path / "db.json"
        path.write_text("{garbage", encoding="utf-8")
        storage = JsonFileStorage(path, database_key="TestDB_v1")
        storage.save(sample_database())
        assert len(storage.load().users) == 1

    def test_other_keys_preserved(self, tmp_path):
        """Test older versioned records in the same file survive a save."""
        path = tmp_path / "db.json"
        path.write_text(json.dumps({"TestDB_v0": {"users": []}, "theme": "dark"}), encoding="utf-8")

        JsonFileStorage(path, database_key="TestDB_v1").save(sample_database())

        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["TestDB_v0"] == {"users": []}
        assert document["theme"] == "dark"
        assert "TestDB_v1" in document

    def test_versioned_key_isolation(self, tmp_path):
        """Test a different key starts from an empty database."""
        path = tmp_path / "db.json"
        JsonFileStorage(path, database_key="TestDB_v1").save(sample_database())
        assert JsonFileStorage(path, database_key="TestDB_v2").load().users == []

    def test_creates_parent_directories(self, tmp_path):
        """Test the data directory is created on first save."""
        path = tmp_path / "nested" / "dir" / "db.json"
        JsonFileStorage(path, database_key="TestDB_v1").save(sample_database())
        assert path.exists()
        assert list(path.parent.glob("*.tmp")) == []

    def test_write_failure_raises(self, tmp_path):
        """Test an unwritable location surfaces as StorageWriteError."""
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        storage = JsonFileStorage(blocker / "db.json", database_key="TestDB_v1")
        with pytest.raises(StorageWriteError):
            storage.save(sample_database())

    def test_reads_legacy_record(self, tmp_path):
        """Test the list-based camelCase record is loaded."""
        path = tmp_path / "db.json"
        path.write_text(json.dumps({
            "TestDB_v1": {
                "version": 7,
                "users": [{
                    "id": "u1",
                    "name": "Old",
                    "email": "old@example.com",
                    "password": "h",
                    "accounts": [{"id": "a1", "name": "Cash", "balance": 10}],
                    "transactions": [],
                    "categories": [],
                    "goals": [],
                    "settings": {"currency": "USD", "defaultAccount": "a1"},
                }],
            },
        }), encoding="utf-8")

        user = JsonFileStorage(path, database_key="TestDB_v1").load().users[0]
        assert user.data.settings.currency == "USD"
        assert user.data.accounts["a1"].initial_balance == Decimal("10")


class TestInMemoryStorage:
    """Tests for the in-memory backend."""

    def test_empty_load(self):
        """Test a fresh store loads the default."""
        assert InMemoryStorage().load() == UserDatabase()

    def test_round_trip_and_save_count(self):
        """Test saves are counted and load returns equal data."""
        storage = InMemoryStorage()
        database = sample_database()
        storage.save(database)
        assert storage.save_count == 1
        assert storage.load() == database
        assert storage.load() is not storage.load()

    def test_malformed_snapshot(self):
        """Test an unreadable snapshot loads the default."""
        assert InMemoryStorage(initial='{"users": 5}').load() == UserDatabase()


class TestInMemoryAuditStorage:
    """Tests for the in-memory audit log."""

    def test_recent_events_newest_first(self):
        """Test get_recent_events ordering and limit."""
        storage = InMemoryAuditStorage()
        for name in ("first", "second", "third"):
            storage.append_event(AuditEvent(event_type=AuditEventType.GOAL_SAVED, description=name))

        recent = storage.get_recent_events(limit=2)
        assert [e.description for e in recent] == ["third", "second"]
        assert len(storage.events) == 3


class TestAppComponents:
    """Tests for the application wiring factory."""

    def test_file_storage(self, tmp_path):
        """Test the file backend is used with an explicit data path."""
        auth, storage, audit_storage = create_app_components(data_path=str(tmp_path / "db.json"))
        assert isinstance(storage, JsonFileStorage)

        auth.register("Ravi", "ravi@example.com", "Secret123")
        assert (tmp_path / "db.json").exists()
        assert audit_storage.events[-1].event_type == AuditEventType.USER_REGISTERED

    def test_in_memory_storage(self):
        """Test throwaway components never touch the disk."""
        _, storage, _ = create_app_components(use_file_storage=False)
        assert isinstance(storage, InMemoryStorage)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
