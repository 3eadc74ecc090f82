"""mongorepo - generic typed repository over MongoDB."""

from .core.config import Config, MongoConfig, RepositoryConfig
from .core.exceptions import (
    DatabaseError,
    DecodeError,
    ErrorKind,
    MongoRepoError,
    RepositoryError,
    has_kind,
)
from .store import (
    DataclassCodec,
    Database,
    DocumentCodec,
    EntityCodec,
    MongoRepository,
    bson_field,
)

__version__ = "0.1.0"

__all__ = [
    "Config",
    "MongoConfig",
    "RepositoryConfig",
    "Database",
    "MongoRepository",
    "EntityCodec",
    "DataclassCodec",
    "DocumentCodec",
    "bson_field",
    "MongoRepoError",
    "DatabaseError",
    "DecodeError",
    "RepositoryError",
    "ErrorKind",
    "has_kind",
]
