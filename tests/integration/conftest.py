"""Pytest configuration and fixtures for integration tests.

These tests need a MongoDB server at MONGODB_URI (default:
mongodb://localhost:27017) and are skipped when none is reachable.
"""

import os
import uuid

import pytest

from mongorepo.core.config import Config, MongoConfig
from mongorepo.core.exceptions import DatabaseError
from mongorepo.store.database import Database


def get_mongodb_uri() -> str:
    return os.environ.get("MONGODB_URI", "mongodb://localhost:27017")


@pytest.fixture
def database() -> Database:
    """Provide a connected database, dropped after the test."""
    config = Config(
        mongo=MongoConfig(
            uri=get_mongodb_uri(),
            database=f"mongorepo_test_{uuid.uuid4().hex[:12]}",
            server_selection_timeout_ms=1500,
        )
    )
    db = Database(config)
    try:
        db.connect()
    except DatabaseError as e:
        pytest.skip(f"MongoDB not available: {e}")

    yield db

    db.drop()
    db.close()
