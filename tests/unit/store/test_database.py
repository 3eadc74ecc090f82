"""Tests for the MongoDB connection manager."""

from unittest.mock import patch

import pytest
from pymongo.errors import InvalidURI, ServerSelectionTimeoutError

from mongorepo.core.config import Config, MongoConfig, RepositoryConfig
from mongorepo.core.exceptions import DatabaseError
from mongorepo.store.database import Database
from mongorepo.store.repository import MongoRepository

from tests.fakes import User


@pytest.fixture
def config() -> Config:
    return Config(
        mongo=MongoConfig(uri="mongodb://db:27017", database="app", server_selection_timeout_ms=100),
        repository=RepositoryConfig(default_limit=5),
    )


@pytest.fixture
def mongo_client():
    """Patch MongoClient with a mock."""
    with patch("mongorepo.store.database.MongoClient") as client_class:
        yield client_class


class TestConnect:
    """Tests for connecting and closing."""

    def test_connect_pings_server(self, config: Config, mongo_client):
        db = Database(config)
        db.connect()

        mongo_client.assert_called_once_with(
            "mongodb://db:27017",
            appname="mongorepo",
            serverSelectionTimeoutMS=100,
        )
        mongo_client.return_value.admin.command.assert_called_once_with("ping")
        assert db.client is mongo_client.return_value

    def test_connect_passes_operation_timeout(self, config: Config, mongo_client):
        config.mongo.timeout_ms = 2000
        Database(config).connect()

        _, kwargs = mongo_client.call_args
        assert kwargs["timeoutMS"] == 2000

    def test_connect_failure(self, config: Config, mongo_client):
        mongo_client.return_value.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        db = Database(config)

        with pytest.raises(DatabaseError, match="Failed to connect"):
            db.connect()

        with pytest.raises(DatabaseError, match="not connected"):
            db.client

    def test_connect_failure_closes_client(self, config: Config, mongo_client):
        """A failed ping should not leave the new client open."""
        mongo_client.return_value.admin.command.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(DatabaseError):
            Database(config).connect()

        mongo_client.return_value.close.assert_called_once()

    def test_invalid_uri(self, config: Config, mongo_client):
        mongo_client.side_effect = InvalidURI("Invalid URI scheme")

        with pytest.raises(DatabaseError, match="Failed to connect"):
            Database(config).connect()

    def test_close(self, config: Config, mongo_client):
        db = Database(config)
        db.connect()
        db.close()

        mongo_client.return_value.close.assert_called_once()
        with pytest.raises(DatabaseError):
            db.client

    def test_close_without_connect(self, config: Config):
        Database(config).close()

    def test_context_manager(self, config: Config, mongo_client):
        with Database(config) as db:
            assert db.client is mongo_client.return_value

        mongo_client.return_value.close.assert_called_once()

    def test_default_config_from_env(self, monkeypatch):
        monkeypatch.setenv("MONGODB_DATABASE", "from_env")
        assert Database().config.mongo.database == "from_env"


class TestHandles:
    """Tests for collections and repositories."""

    def test_get_collection(self, config: Config, mongo_client):
        db = Database(config)
        db.connect()

        collection = db.get_collection("users")

        client = mongo_client.return_value
        client.__getitem__.assert_called_with("app")
        client.__getitem__.return_value.get_collection.assert_called_once_with("users")
        assert collection is client.__getitem__.return_value.get_collection.return_value

    def test_drop(self, config: Config, mongo_client):
        db = Database(config)
        db.connect()
        db.drop()

        mongo_client.return_value.drop_database.assert_called_once_with("app")

    def test_repository_uses_repository_config(self, config: Config, mongo_client):
        db = Database(config)
        db.connect()

        repo = db.repository("users", User)

        assert isinstance(repo, MongoRepository)
        assert repo.config.default_limit == 5
        assert repo.collection is db.get_collection("users")

    def test_repository_requires_connection(self, config: Config):
        with pytest.raises(DatabaseError):
            Database(config).repository("users")
