"""Index creation options.

Options are built from small fragments, each setting one field of a shared
`IndexOptions` record:

    repo.create_index("email", unique(), sparse())
    repo.create_index("expires_at", ttl(timedelta(hours=1)), name("expiry"))
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import timedelta
from typing import Any, Mapping

from pymongo.collation import Collation

from .filters import Filter, build_filter

# Driver keyword for each IndexOptions field
_DRIVER_NAMES = {
    "unique": "unique",
    "sparse": "sparse",
    "expire_after_seconds": "expireAfterSeconds",
    "name": "name",
    "partial_filter_expression": "partialFilterExpression",
    "collation": "collation",
    "wildcard_projection": "wildcardProjection",
    "hidden": "hidden",
    "weights": "weights",
    "default_language": "default_language",
}


@dataclass
class IndexOptions:
    """Options for a single index; unset options are left to the server."""

    unique: bool | None = None
    sparse: bool | None = None
    expire_after_seconds: int | None = None
    name: str | None = None
    partial_filter_expression: dict[str, Any] | None = None
    collation: Collation | Mapping[str, Any] | None = None
    wildcard_projection: dict[str, Any] | None = None
    hidden: bool | None = None
    weights: dict[str, int] | None = None
    default_language: str | None = None

    def to_kwargs(self) -> dict[str, Any]:
        """Convert to keyword arguments for ``Collection.create_index``."""
        return {
            _DRIVER_NAMES[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class IndexOption:
    """Sets one or more IndexOptions fields."""

    values: tuple[tuple[str, Any], ...]

    def apply(self, options: IndexOptions) -> IndexOptions:
        """Set this fragment's fields on ``options`` and return it."""
        for key, value in self.values:
            setattr(options, key, value)
        return options


def build_index_options(*opts: IndexOption, base: IndexOptions | None = None) -> IndexOptions:
    """Apply option fragments in order to a fresh (or copied) IndexOptions."""
    options = replace(base) if base is not None else IndexOptions()
    for opt in opts:
        opt.apply(options)
    return options


def _option(**values: Any) -> IndexOption:
    return IndexOption(tuple(values.items()))


def unique(flag: bool = True) -> IndexOption:
    """Reject documents that duplicate an indexed value."""
    return _option(unique=flag)


def sparse(flag: bool = True) -> IndexOption:
    """Only index documents that contain the indexed field."""
    return _option(sparse=flag)


def expire_after_seconds(seconds: int) -> IndexOption:
    """Expire documents ``seconds`` after the indexed date value."""
    return _option(expire_after_seconds=int(seconds))


def ttl(duration: timedelta) -> IndexOption:
    """Expire documents after ``duration``, truncated to whole seconds."""
    return expire_after_seconds(int(duration.total_seconds()))


def name(index_name: str) -> IndexOption:
    """Set an explicit index name."""
    return _option(name=index_name)


def partial_filter_expression(expression: Mapping[str, Any] | Filter, *filters: Filter) -> IndexOption:
    """Only index documents matching a filter.

    Args:
        expression: Raw filter document, or the first filter fragment.
        filters: Further filter fragments, AND-ed with the first.
    """
    if isinstance(expression, Filter):
        document = build_filter(expression, *filters)
    else:
        document = dict(expression)
    return _option(partial_filter_expression=document)


def collation(value: Collation | Mapping[str, Any]) -> IndexOption:
    """Set the index collation."""
    return _option(collation=value)


def wildcard_projection(projection: Mapping[str, Any]) -> IndexOption:
    """Include or exclude fields from a wildcard index."""
    return _option(wildcard_projection=dict(projection))


def hidden(flag: bool = True) -> IndexOption:
    """Hide the index from the query planner."""
    return _option(hidden=flag)


def text_weights(weights: Mapping[str, int], default_language: str | None = None) -> IndexOption:
    """Set text index field weights and language together."""
    return _option(weights=dict(weights), default_language=default_language)
