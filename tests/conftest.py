"""
Shared fixtures.

Storage tests run against SQLite through the same SQLAlchemy code path
used for PostgreSQL, so no database server is needed.
"""

import pytest

from expense_ledger.config import get_settings
from expense_ledger.services.storage import DatabaseClient, SQLExpenseStorage


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; reset them around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client():
    client = DatabaseClient(url="sqlite://")
    yield client
    client.close()


@pytest.fixture
def storage(client):
    storage = SQLExpenseStorage(client)
    yield storage
    storage.close()


@pytest.fixture
def database_url(tmp_path):
    """A file-backed database that survives across storage instances."""
    return f"sqlite:///{tmp_path / 'ledger.db'}"
