"""Shared pytest fixtures for cartsync tests."""

import os
import tempfile

import pytest

from cartsync.database.factories import create_sqlite_store
from cartsync.domain.activities import ActivityService
from cartsync.domain.categories import CategoryService
from cartsync.domain.inventory import InventoryService
from cartsync.domain.ledger import LedgerService
from cartsync.domain.users import UserService
from cartsync.sync.connectivity import ManualConnectivityMonitor
from cartsync.sync.engine import SyncEngine

from helpers import FakeRemoteStore


@pytest.fixture
def temp_store():
    """Create a temporary local store for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    store = create_sqlite_store(database_path=db_path)
    # Store the path for tests that need it
    store.database_path = db_path
    store.connect()
    store.initialize_schema()

    yield store

    store.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def remote():
    """Create a configured in-memory remote."""
    return FakeRemoteStore()


@pytest.fixture
def monitor():
    """Create an online manual connectivity monitor."""
    return ManualConnectivityMonitor(connected=True)


@pytest.fixture
def engine(temp_store, remote, monitor):
    """Create a SyncEngine over the temporary store and fake remote."""
    return SyncEngine(temp_store, remote, monitor)


@pytest.fixture
def user_service(temp_store):
    """Create a UserService with a temporary store."""
    return UserService(temp_store)


@pytest.fixture
def category_service(temp_store):
    """Create a CategoryService with a temporary store."""
    return CategoryService(temp_store)


@pytest.fixture
def inventory_service(temp_store):
    """Create an InventoryService with a temporary store."""
    return InventoryService(temp_store)


@pytest.fixture
def ledger_service(temp_store):
    """Create a LedgerService with a temporary store."""
    return LedgerService(temp_store)


@pytest.fixture
def activity_service(temp_store):
    """Create an ActivityService with a temporary store."""
    return ActivityService(temp_store)


@pytest.fixture
def sample_user(user_service):
    """Create a sample user for testing."""
    return user_service.create_user(name="Maria", pin="1234", role="general_manager")


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
