import pytest

from yield_data_agg.db import Database
from yield_data_agg.repositories import (AlertRepository,
                                         NotificationRepository, SnapshotStore)


@pytest.fixture
def database():
    """Fresh in-memory SQLite database with all tables created."""
    db = Database("sqlite://")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def store(database: Database) -> SnapshotStore:
    return SnapshotStore(database)


@pytest.fixture
def alert_repo(database: Database) -> AlertRepository:
    return AlertRepository(database)


@pytest.fixture
def notification_repo(database: Database) -> NotificationRepository:
    return NotificationRepository(database)


@pytest.fixture
def offline_database() -> Database:
    """Database with no URL configured; every session raises PersistenceUnavailable."""
    return Database(None)
