"""Composable query filters.

Filters are small immutable values built by constructor functions and
lowered into a MongoDB query document by `build_filter`:

    from mongorepo.query import and_, build_filter, eq, gt, or_

    query = build_filter(
        and_(gt("age", 30), eq("status", "active")),
        or_(eq("role", "admin"), eq("role", "owner")),
    )
    # {"$and": [{"age": {"$gt": 30}}, {"status": "active"}],
    #  "$or": [{"role": "admin"}, {"role": "owner"}]}

Each filter lowers to exactly one ``(key, condition)`` pair. Filters never
touch the store and can be reused across any number of queries.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable

AND = "$and"
OR = "$or"
TEXT = "$text"


class Filter(ABC):
    """Base class for query filter clauses."""

    @abstractmethod
    def clause(self) -> tuple[str, Any]:
        """Return the ``(key, condition)`` pair this filter contributes."""

    def apply(self, query: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of ``query`` extended by this filter's clause."""
        extended = dict(query)
        key, condition = self.clause()
        _add_clause(extended, key, condition)
        return extended

    def to_query(self) -> dict[str, Any]:
        """Lower this filter alone into a query document."""
        return self.apply({})


@dataclass(frozen=True)
class Eq(Filter):
    """Field equals value."""

    field: str
    value: Any

    def clause(self) -> tuple[str, Any]:
        return self.field, self.value


@dataclass(frozen=True)
class Comparison(Filter):
    """Field compared against a value with a MongoDB query operator."""

    field: str
    operator: str
    value: Any

    def clause(self) -> tuple[str, Any]:
        return self.field, {self.operator: self.value}


@dataclass(frozen=True)
class In(Filter):
    """Field value is one of ``values``."""

    field: str
    values: tuple[Any, ...]

    def clause(self) -> tuple[str, Any]:
        return self.field, {"$in": list(self.values)}


@dataclass(frozen=True)
class Exists(Filter):
    """Field is present (or absent)."""

    field: str
    exists: bool = True

    def clause(self) -> tuple[str, Any]:
        return self.field, {"$exists": self.exists}


@dataclass(frozen=True)
class Regex(Filter):
    """Field matches a regular expression."""

    field: str
    pattern: str
    options: str = ""

    def clause(self) -> tuple[str, Any]:
        return self.field, {"$regex": self.pattern, "$options": self.options}


@dataclass(frozen=True)
class TextSearch(Filter):
    """Full-text search against the collection's text index.

    The search string is passed to the server unchanged: space separated
    terms are OR-ed, ``"quoted phrases"`` match exactly and a ``-term``
    excludes documents containing it.
    """

    term: str
    language: str | None = None
    case_sensitive: bool | None = None
    diacritic_sensitive: bool | None = None

    def clause(self) -> tuple[str, Any]:
        condition: dict[str, Any] = {"$search": self.term}
        if self.language is not None:
            condition["$language"] = self.language
        if self.case_sensitive is not None:
            condition["$caseSensitive"] = self.case_sensitive
        if self.diacritic_sensitive is not None:
            condition["$diacriticSensitive"] = self.diacritic_sensitive
        return TEXT, condition


@dataclass(frozen=True)
class Logical(Filter):
    """``$and`` / ``$or`` over child filters.

    Every child is lowered on its own into a single-clause document and the
    documents are collected, in order, into the operator's array.
    """

    operator: str
    filters: tuple[Filter, ...]

    def clause(self) -> tuple[str, Any]:
        return self.operator, [child.to_query() for child in self.filters]


def _is_operator_document(value: Any) -> bool:
    return isinstance(value, dict) and bool(value) and all(
        isinstance(key, str) and key.startswith("$") for key in value
    )


def _add_clause(query: dict[str, Any], key: str, condition: Any) -> None:
    """Add a clause to ``query`` in place, keeping earlier clauses in force."""
    if key not in query:
        query[key] = condition
        return

    existing = query[key]
    if key == AND:
        query[AND] = list(existing) + list(condition)
    elif (
        _is_operator_document(existing)
        and _is_operator_document(condition)
        and not set(existing) & set(condition)
    ):
        query[key] = {**existing, **condition}
    else:
        # Same key twice with conflicting conditions: both must hold
        query[AND] = list(query.get(AND, [])) + [{key: condition}]


def build_filter(*filters: Filter) -> dict[str, Any]:
    """Fold filters left to right into one query document.

    Args:
        filters: Filter clauses; none yields the match-all document ``{}``.

    Returns:
        MongoDB query document.
    """
    query: dict[str, Any] = {}
    for f in filters:
        key, condition = f.clause()
        _add_clause(query, key, condition)
    return query


def eq(field: str, value: Any) -> Eq:
    """Create an equality filter."""
    return Eq(field, value)


def ne(field: str, value: Any) -> Comparison:
    """Create a not-equal filter."""
    return Comparison(field, "$ne", value)


def gt(field: str, value: Any) -> Comparison:
    """Create a greater-than filter."""
    return Comparison(field, "$gt", value)


def gte(field: str, value: Any) -> Comparison:
    """Create a greater-than-or-equal filter."""
    return Comparison(field, "$gte", value)


def lt(field: str, value: Any) -> Comparison:
    """Create a less-than filter."""
    return Comparison(field, "$lt", value)


def lte(field: str, value: Any) -> Comparison:
    """Create a less-than-or-equal filter."""
    return Comparison(field, "$lte", value)


def in_(field: str, values: Iterable[Any]) -> In:
    """Create a set-membership filter."""
    return In(field, tuple(values))


def exists(field: str, exists: bool = True) -> Exists:
    """Create a field-existence filter."""
    return Exists(field, exists)


def regex(field: str, pattern: str, options: str = "") -> Regex:
    """Create a regular expression filter.

    Args:
        field: Field to match.
        pattern: Regular expression pattern.
        options: MongoDB regex options, e.g. ``"i"`` for case-insensitive.
    """
    return Regex(field, pattern, options)


def text_search(
    term: str,
    language: str | None = None,
    case_sensitive: bool | None = None,
    diacritic_sensitive: bool | None = None,
) -> TextSearch:
    """Create a full-text search filter."""
    return TextSearch(term, language, case_sensitive, diacritic_sensitive)


def and_(*filters: Filter) -> Logical:
    """Combine filters with a logical AND."""
    return Logical(AND, tuple(filters))


def or_(*filters: Filter) -> Logical:
    """Combine filters with a logical OR."""
    return Logical(OR, tuple(filters))
