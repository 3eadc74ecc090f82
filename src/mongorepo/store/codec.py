"""Entity encoding and decoding.

Repositories never look inside entities; they hand them to a codec. The
default `DataclassCodec` maps dataclass fields to document keys, using the
field name unless a `bson_field` tag says otherwise:

    @dataclass
    class User:
        name: str
        email: str
        id: ObjectId | None = bson_field("_id", omitempty=True, default=None)

Any object with ``encode``/``decode`` methods can be used instead.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from typing import Any, Generic, Mapping, Protocol, TypeVar, runtime_checkable

from ..core.exceptions import DecodeError

T = TypeVar("T")

# Field metadata keys
BSON_KEY = "bson"
OMITEMPTY_KEY = "omitempty"

ID_FIELD = "_id"


@runtime_checkable
class EntityCodec(Protocol[T]):
    """Converts between entities and MongoDB documents."""

    def encode(self, entity: T) -> dict[str, Any]:
        """Convert an entity into a document."""
        ...

    def decode(self, document: Mapping[str, Any]) -> T:
        """Convert a document into an entity."""
        ...


def bson_field(key: str | None = None, *, omitempty: bool = False, **kwargs: Any) -> Any:
    """Declare a dataclass field with a document key and encoding flags.

    Args:
        key: Document key for the field (default: the attribute name).
        omitempty: Leave the key out when the value is None, zero or empty.
        **kwargs: Passed through to ``dataclasses.field``.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[BSON_KEY] = key
    metadata[OMITEMPTY_KEY] = omitempty
    return dataclasses.field(metadata=metadata, **kwargs)


def _document_key(f: dataclasses.Field) -> str:
    return f.metadata.get(BSON_KEY) or f.name


def _is_empty(value: Any) -> bool:
    """Zero value check for omitempty: None, False, 0 and empty sequences or maps."""
    if value is None:
        return True
    if isinstance(value, (bool, int, float)):
        return not value
    return isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)) and len(value) == 0


def _unwrap_optional(hint: Any) -> Any:
    origin = typing.get_origin(hint)
    if origin is typing.Union or origin is types.UnionType:
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


class DataclassCodec(Generic[T]):
    """Codec for dataclass entities, recursing into nested dataclasses."""

    def __init__(self, entity_type: type[T]):
        """Initialize with the dataclass to encode and decode.

        Args:
            entity_type: A dataclass type.

        Raises:
            TypeError: If entity_type is not a dataclass.
        """
        if not (isinstance(entity_type, type) and dataclasses.is_dataclass(entity_type)):
            raise TypeError(f"{entity_type!r} is not a dataclass type")
        self.entity_type = entity_type
        self._hints = typing.get_type_hints(entity_type)

    def encode(self, entity: T) -> dict[str, Any]:
        document: dict[str, Any] = {}
        for f in dataclasses.fields(entity):  # type: ignore[arg-type]
            value = getattr(entity, f.name)
            if f.metadata.get(OMITEMPTY_KEY) and _is_empty(value):
                continue
            document[_document_key(f)] = _encode_value(value)
        return document

    def decode(self, document: Mapping[str, Any]) -> T:
        kwargs: dict[str, Any] = {}
        for f in dataclasses.fields(self.entity_type):  # type: ignore[arg-type]
            if not f.init:
                continue
            key = _document_key(f)
            if key not in document:
                continue
            kwargs[f.name] = _decode_value(document[key], self._hints.get(f.name, Any))

        try:
            return self.entity_type(**kwargs)
        except TypeError as e:
            raise DecodeError(f"Cannot decode {self.entity_type.__name__}: {e}") from e


class DocumentCodec:
    """Pass-through codec for plain dict documents."""

    def encode(self, entity: Mapping[str, Any]) -> dict[str, Any]:
        return dict(entity)

    def decode(self, document: Mapping[str, Any]) -> dict[str, Any]:
        return dict(document)


def _encode_value(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return DataclassCodec(type(value)).encode(value)
    if isinstance(value, (list, tuple)):
        return [_encode_value(v) for v in value]
    if isinstance(value, dict):
        return {k: _encode_value(v) for k, v in value.items()}
    return value


def _decode_value(value: Any, hint: Any) -> Any:
    hint = _unwrap_optional(hint)
    if value is None:
        return None

    if isinstance(hint, type) and dataclasses.is_dataclass(hint):
        if not isinstance(value, Mapping):
            raise DecodeError(f"Expected a document for {hint.__name__}, got {type(value).__name__}")
        return DataclassCodec(hint).decode(value)

    origin = typing.get_origin(hint)
    if origin in (list, tuple, set, frozenset) and isinstance(value, list):
        args = typing.get_args(hint)
        item_hint = args[0] if args else Any
        return origin(_decode_value(v, item_hint) for v in value)
    if origin is dict and isinstance(value, Mapping):
        args = typing.get_args(hint)
        value_hint = args[1] if len(args) == 2 else Any
        return {k: _decode_value(v, value_hint) for k, v in value.items()}

    return value


def codec_for(entity_type: type[T] | None) -> EntityCodec:
    """Pick the default codec for an entity type.

    Args:
        entity_type: Dataclass type, or None for plain documents.
    """
    if entity_type is None or entity_type is dict:
        return DocumentCodec()
    return DataclassCodec(entity_type)
