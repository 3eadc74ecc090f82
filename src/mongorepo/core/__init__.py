"""Core types, configuration and exceptions for mongorepo."""

from .config import Config, MongoConfig, RepositoryConfig
from .exceptions import (
    DatabaseError,
    DecodeError,
    ErrorKind,
    MongoRepoError,
    RepositoryError,
    has_kind,
)

__all__ = [
    "Config",
    "MongoConfig",
    "RepositoryConfig",
    "MongoRepoError",
    "DatabaseError",
    "DecodeError",
    "RepositoryError",
    "ErrorKind",
    "has_kind",
]
