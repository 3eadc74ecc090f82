"""Configuration management for mongorepo."""

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any


@dataclass
class MongoConfig:
    """MongoDB connection configuration."""

    uri: str = "mongodb://localhost:27017"
    database: str = "mongorepo"
    app_name: str = "mongorepo"
    server_selection_timeout_ms: int = 5000
    # Client-side operation timeout applied to every call (None = driver default)
    timeout_ms: int | None = None


@dataclass
class RepositoryConfig:
    """Repository behaviour configuration."""

    # Page size used when a caller passes limit=0
    default_limit: int = 10
    # Field that receives the text relevance score in search results
    text_score_field: str = "score"
    default_language: str = "english"


def _apply_table(target: Any, table: dict[str, Any]) -> None:
    """Copy values from a TOML table onto a config dataclass."""
    known = {f.name for f in fields(target)}
    for key, value in table.items():
        if key not in known:
            continue
        current = getattr(target, key)
        if is_dataclass(current) and isinstance(value, dict):
            _apply_table(current, value)
        else:
            setattr(target, key, value)


@dataclass
class Config:
    """Main library configuration."""

    mongo: MongoConfig = field(default_factory=MongoConfig)
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        config = cls()
        config._apply_env()
        return config

    @classmethod
    def from_file(cls, path: Path) -> "Config":
        """Load configuration from a TOML file, then apply env overrides.

        Args:
            path: Path to the TOML file.

        Returns:
            Config with file values and environment overrides applied.
        """
        with open(path, "rb") as f:
            data = tomllib.load(f)

        config = cls()
        _apply_table(config, data)
        config._apply_env()
        return config

    @classmethod
    def from_env_or_file(cls, path: Path | None = None) -> "Config":
        """Load from an explicit path, MONGOREPO_CONFIG, or the environment."""
        if path is None and (env_path := os.environ.get("MONGOREPO_CONFIG")):
            path = Path(env_path)
        if path is not None:
            return cls.from_file(path)
        return cls.from_env()

    def _apply_env(self) -> None:
        if uri := os.environ.get("MONGODB_URI"):
            self.mongo.uri = uri

        if database := os.environ.get("MONGODB_DATABASE"):
            self.mongo.database = database

        if timeout_ms := os.environ.get("MONGODB_TIMEOUT_MS"):
            self.mongo.timeout_ms = int(timeout_ms)

        if default_limit := os.environ.get("MONGOREPO_DEFAULT_LIMIT"):
            self.repository.default_limit = int(default_limit)
