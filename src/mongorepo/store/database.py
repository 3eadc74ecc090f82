"""MongoDB connection manager for mongorepo."""

from __future__ import annotations

from typing import Any

from loguru import logger
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database as PyMongoDatabase
from pymongo.errors import PyMongoError

from ..core.config import Config
from ..core.exceptions import DatabaseError
from .codec import EntityCodec
from .repository import MongoRepository


class Database:
    """MongoDB connection manager.

    Owns one ``MongoClient`` and hands out collections and repositories for
    the configured database:

        with Database(Config.from_env()) as db:
            users = db.repository("users", User)
    """

    def __init__(self, config: Config | None = None):
        """Initialize database with configuration.

        Args:
            config: Library configuration (default: Config.from_env()).
        """
        self.config = config or Config.from_env()
        self._client: MongoClient | None = None

    def connect(self) -> None:
        """Create the client and verify the server is reachable."""
        mongo = self.config.mongo
        client_kwargs: dict[str, Any] = {
            "appname": mongo.app_name,
            "serverSelectionTimeoutMS": mongo.server_selection_timeout_ms,
        }
        if mongo.timeout_ms is not None:
            client_kwargs["timeoutMS"] = mongo.timeout_ms

        try:
            client: MongoClient = MongoClient(mongo.uri, **client_kwargs)
        except PyMongoError as e:
            raise DatabaseError(f"Failed to connect to database: {e}") from e

        try:
            client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            raise DatabaseError(f"Failed to connect to database: {e}") from e

        self._client = client
        logger.info(f"Connected to MongoDB: database={mongo.database}")

    def close(self) -> None:
        """Close the client connection."""
        if self._client:
            try:
                self._client.close()
            except PyMongoError as e:
                raise DatabaseError(f"Failed to close database: {e}") from e
            finally:
                self._client = None
            logger.info("MongoDB connection closed")

    def __enter__(self) -> "Database":
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def client(self) -> MongoClient:
        """The connected client.

        Raises:
            DatabaseError: If not connected.
        """
        if not self._client:
            raise DatabaseError("Database not connected")
        return self._client

    @property
    def db(self) -> PyMongoDatabase:
        """The configured database handle."""
        return self.client[self.config.mongo.database]

    def get_collection(self, name: str) -> Collection:
        """Get a collection handle by name."""
        return self.db.get_collection(name)

    def drop(self) -> None:
        """Drop the configured database and everything in it."""
        try:
            self.client.drop_database(self.config.mongo.database)
        except PyMongoError as e:
            raise DatabaseError(f"Failed to drop database: {e}") from e
        logger.info(f"Dropped database: {self.config.mongo.database}")

    def repository(
        self,
        collection_name: str,
        entity_type: type | None = None,
        codec: EntityCodec | None = None,
    ) -> MongoRepository:
        """Create a repository for a collection using this configuration.

        Args:
            collection_name: Collection to operate on.
            entity_type: Dataclass for entities (default: plain dicts).
            codec: Custom codec, overriding entity_type.
        """
        return MongoRepository(
            self,
            collection_name,
            entity_type,
            codec=codec,
            config=self.config.repository,
        )
