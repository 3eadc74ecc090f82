"""Storage layer for mongorepo.

- Database: MongoDB connection manager
- MongoRepository: generic CRUD and full-text search over one collection
- DataclassCodec / DocumentCodec: entity encoding and decoding

Example:
    from mongorepo.store import Database, MongoRepository

    db = Database()
    db.connect()
    users = MongoRepository(db, "users", User)
"""

from .codec import (
    DataclassCodec,
    DocumentCodec,
    EntityCodec,
    bson_field,
    codec_for,
)
from .database import Database
from .repository import MongoRepository, parse_object_id
from .search import FullTextSearchMixin, text_index_name

__all__ = [
    "Database",
    "MongoRepository",
    "parse_object_id",
    "FullTextSearchMixin",
    "text_index_name",
    "EntityCodec",
    "DataclassCodec",
    "DocumentCodec",
    "bson_field",
    "codec_for",
]
