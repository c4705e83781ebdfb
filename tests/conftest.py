"""Shared fixtures: starter data and in-memory backends."""

import pytest

from moneymind.audit import AuditLogger
from moneymind.config import AppSettings
from moneymind.defaults import default_user_data
from moneymind.ledger import Ledger
from moneymind.services.storage import InMemoryAuditStorage, InMemoryStorage


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def app_settings():
    return AppSettings(_env_file=None)


@pytest.fixture
def data():
    """Default (non-student) data: one Cash account, four categories."""
    return default_user_data()


@pytest.fixture
def ledger(data, audit_logger):
    return Ledger(data, audit_logger=audit_logger)


@pytest.fixture
def cash_id(data):
    return data.settings.default_account


@pytest.fixture
def food_id(data):
    return next(c.id for c in data.categories.values() if c.name == "Food & Dining")
