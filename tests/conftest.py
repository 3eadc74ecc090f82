"""Pytest configuration and fixtures."""

import pytest
from bson import ObjectId

from mongorepo.core.config import RepositoryConfig
from mongorepo.store.repository import MongoRepository

from tests.fakes import FakeCollection, FakeDatabase, Profile, User


@pytest.fixture
def fake_db() -> FakeDatabase:
    """Provide a fake database."""
    return FakeDatabase()


@pytest.fixture
def user_repo(fake_db: FakeDatabase) -> MongoRepository[User]:
    """Provide a User repository over a fake collection."""
    return MongoRepository(fake_db, "users", User)


@pytest.fixture
def users_collection(fake_db: FakeDatabase, user_repo: MongoRepository[User]) -> FakeCollection:
    """Provide the fake collection behind user_repo."""
    return fake_db.get_collection("users")


@pytest.fixture
def profile_repo(fake_db: FakeDatabase) -> MongoRepository[Profile]:
    """Provide a Profile repository over a fake collection."""
    return MongoRepository(fake_db, "profiles", Profile, config=RepositoryConfig())


@pytest.fixture
def profiles_collection(fake_db: FakeDatabase, profile_repo: MongoRepository[Profile]) -> FakeCollection:
    """Provide the fake collection behind profile_repo."""
    return fake_db.get_collection("profiles")


@pytest.fixture
def user_document() -> dict:
    """Provide a stored user document."""
    return {"_id": ObjectId(), "name": "John Doe", "email": "john@example.com", "age": 42, "status": "active"}
