"""Query filters and index options for mongorepo."""

from .filters import (
    Comparison,
    Eq,
    Exists,
    Filter,
    In,
    Logical,
    Regex,
    TextSearch,
    and_,
    build_filter,
    eq,
    exists,
    gt,
    gte,
    in_,
    lt,
    lte,
    ne,
    or_,
    regex,
    text_search,
)
from .indexes import (
    IndexOption,
    IndexOptions,
    build_index_options,
    collation,
    expire_after_seconds,
    hidden,
    name,
    partial_filter_expression,
    sparse,
    text_weights,
    ttl,
    unique,
    wildcard_projection,
)

__all__ = [
    # Filters
    "Filter",
    "Eq",
    "Comparison",
    "In",
    "Exists",
    "Regex",
    "TextSearch",
    "Logical",
    "build_filter",
    "eq",
    "ne",
    "gt",
    "gte",
    "lt",
    "lte",
    "in_",
    "exists",
    "regex",
    "text_search",
    "and_",
    "or_",
    # Index options
    "IndexOptions",
    "IndexOption",
    "build_index_options",
    "unique",
    "sparse",
    "expire_after_seconds",
    "ttl",
    "name",
    "partial_filter_expression",
    "collation",
    "wildcard_projection",
    "hidden",
    "text_weights",
]
