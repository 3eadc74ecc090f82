"""Generic MongoDB repository.

`MongoRepository` wraps one collection and exposes typed CRUD operations
built from composable filters:

    from mongorepo import MongoRepository
    from mongorepo.query import and_, eq, gt

    users = MongoRepository(db, "users", User)
    user_id = users.create(User(name="John", email="john@example.com"))
    user = users.find_by_id(user_id)
    active = users.find_many_by_filter(and_(gt("age", 30), eq("status", "active")))

Retrieval operations raise NOT_FOUND when nothing matches; bulk mutations
(`update_many`, `delete_many`) return 0 instead.
"""

from __future__ import annotations

from contextlib import nullcontext
from typing import Any, ContextManager, Generic, Iterable, Iterator, Mapping, Sequence, TypeVar

import pymongo
from bson import ObjectId
from bson.errors import BSONError
from loguru import logger
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..core.config import RepositoryConfig
from ..core.exceptions import ErrorKind, RepositoryError
from ..query.filters import Filter, build_filter, in_
from ..query.indexes import IndexOption, IndexOptions, build_index_options
from .codec import ID_FIELD, EntityCodec, codec_for
from .search import FullTextSearchMixin

T = TypeVar("T")

# Exceptions raised by the driver and the BSON encoder
STORE_ERRORS = (PyMongoError, BSONError)

IndexKeys = str | Sequence[tuple[str, Any]]


def _deadline(timeout: float | None) -> ContextManager[Any]:
    """Bound every driver call in the block by ``timeout`` seconds."""
    if timeout is None:
        return nullcontext()
    return pymongo.timeout(timeout)


def parse_object_id(value: str | ObjectId, kind: ErrorKind) -> ObjectId:
    """Convert a hex identifier string to an ObjectId.

    Args:
        value: 24-character hex string (an ObjectId is returned as-is).
        kind: Operation kind to report on failure.

    Raises:
        RepositoryError: ``kind`` + INVALID_IDENTIFIER for malformed input.
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        raise RepositoryError(kind, ErrorKind.INVALID_IDENTIFIER)
    try:
        return ObjectId(value)
    except (BSONError, TypeError) as e:
        raise RepositoryError(kind, ErrorKind.INVALID_IDENTIFIER) from e


class MongoRepository(FullTextSearchMixin[T], Generic[T]):
    """Repository for one MongoDB collection of entities of type T.

    The repository holds no state beyond its collection handle, codec and
    config, so one instance can be shared between threads.
    """

    def __init__(
        self,
        db: Any,
        collection_name: str,
        entity_type: type[T] | None = None,
        *,
        codec: EntityCodec | None = None,
        config: RepositoryConfig | None = None,
    ):
        """Initialize with a database handle and collection name.

        Args:
            db: Object exposing ``get_collection(name)``, such as a pymongo
                Database or `mongorepo.Database`.
            collection_name: Name of the collection to operate on.
            entity_type: Dataclass for entities (default: plain dicts).
            codec: Custom codec, overriding ``entity_type``.
            config: Repository configuration (default: RepositoryConfig()).
        """
        self.collection = db.get_collection(collection_name)
        self.codec: EntityCodec = codec if codec is not None else codec_for(entity_type)
        self.config = config or RepositoryConfig()

    @property
    def name(self) -> str:
        """Collection name."""
        return self.collection.name

    def create_index(self, keys: IndexKeys, *opts: IndexOption, timeout: float | None = None) -> str:
        """Create an index on the collection.

        Args:
            keys: Field name for an ascending index, or a list of
                ``(field, direction)`` pairs for a compound index.
            opts: Index option fragments.
            timeout: Optional deadline in seconds for the store call.

        Returns:
            Name of the created index.

        Raises:
            RepositoryError: INDEX_CREATION_FAILED if the server rejects it.
        """
        if isinstance(keys, str):
            keys = [(keys, pymongo.ASCENDING)]
        return self._create_index(list(keys), build_index_options(*opts), timeout=timeout)

    def create(self, entity: T, *, timeout: float | None = None) -> str:
        """Insert a new entity.

        Args:
            entity: Entity to insert; an empty id lets the server assign one.
            timeout: Optional deadline in seconds for the store call.

        Returns:
            Hex string of the inserted document's id.

        Raises:
            RepositoryError: CREATE_FAILED, with DUPLICATE on a unique index
                violation. Encoding failures raise CREATE_FAILED alone.
        """
        document = self._encode(ErrorKind.CREATE_FAILED, entity)
        try:
            with _deadline(timeout):
                result = self.collection.insert_one(document)
        except DuplicateKeyError as e:
            logger.debug(f"Duplicate key in {self.name}: {e}")
            raise RepositoryError(ErrorKind.CREATE_FAILED, ErrorKind.DUPLICATE) from e
        except STORE_ERRORS as e:
            raise RepositoryError(ErrorKind.CREATE_FAILED) from e

        if not isinstance(result.inserted_id, ObjectId):
            raise RepositoryError(ErrorKind.CREATE_FAILED, ErrorKind.INVALID_IDENTIFIER)

        logger.debug(f"Document created: collection={self.name}, id={result.inserted_id}")
        return str(result.inserted_id)

    def find_by_id(self, document_id: str, *, timeout: float | None = None) -> T:
        """Retrieve an entity by id.

        Raises:
            RepositoryError: FIND_BY_ID_FAILED, with INVALID_IDENTIFIER or
                NOT_FOUND.
        """
        kind = ErrorKind.FIND_BY_ID_FAILED
        object_id = parse_object_id(document_id, kind)
        return self._find_one(kind, {ID_FIELD: object_id}, timeout)

    def find_by_ids(self, *document_ids: str, timeout: float | None = None) -> list[T]:
        """Retrieve entities by id, in the store's natural order.

        All ids are validated before the query is sent.

        Raises:
            RepositoryError: FIND_BY_IDS_FAILED, with INVALID_IDENTIFIER or
                NOT_FOUND when none of the ids exist.
        """
        kind = ErrorKind.FIND_BY_IDS_FAILED
        object_ids = [parse_object_id(document_id, kind) for document_id in document_ids]
        query = build_filter(in_(ID_FIELD, object_ids))
        return self._find_all(kind, query, limit=None, timeout=timeout)

    def update(self, document_id: str, entity: T, *, timeout: float | None = None) -> int:
        """Overwrite the fields of an existing entity.

        Args:
            document_id: Hex id of the document to update.
            entity: Replacement values; its id field is ignored.
            timeout: Optional deadline in seconds for the store call.

        Returns:
            Number of modified documents (0 when the values were unchanged).

        Raises:
            RepositoryError: UPDATE_FAILED, with INVALID_IDENTIFIER or NOT_FOUND.
        """
        kind = ErrorKind.UPDATE_FAILED
        object_id = parse_object_id(document_id, kind)
        document = self._encode(kind, entity)
        document.pop(ID_FIELD, None)

        try:
            with _deadline(timeout):
                result = self.collection.update_one({ID_FIELD: object_id}, {"$set": document})
        except STORE_ERRORS as e:
            raise RepositoryError(kind) from e

        if result.matched_count == 0:
            logger.warning(f"Update matched nothing: collection={self.name}, id={object_id}")
            raise RepositoryError(kind, ErrorKind.NOT_FOUND)

        logger.debug(f"Document updated: collection={self.name}, id={object_id}, modified={result.modified_count}")
        return result.modified_count

    def update_many(
        self,
        update: Mapping[str, Any],
        *filters: Filter,
        timeout: float | None = None,
    ) -> int:
        """Set fields on every document matching the filters.

        Args:
            update: Field name to new value.
            filters: Filters selecting the documents (none selects all).
            timeout: Optional deadline in seconds for the store call.

        Returns:
            Number of modified documents; 0 when nothing matched.

        Raises:
            RepositoryError: UPDATE_MANY_FAILED on store errors.
        """
        query = build_filter(*filters)
        try:
            with _deadline(timeout):
                result = self.collection.update_many(query, {"$set": dict(update)})
        except STORE_ERRORS as e:
            raise RepositoryError(ErrorKind.UPDATE_MANY_FAILED) from e

        logger.debug(f"Documents updated: collection={self.name}, filter={query}, modified={result.modified_count}")
        return result.modified_count

    def delete(self, document_id: str, *, timeout: float | None = None) -> int:
        """Delete an entity by id.

        Returns:
            Number of deleted documents (1).

        Raises:
            RepositoryError: DELETE_FAILED, with INVALID_IDENTIFIER or NOT_FOUND.
        """
        kind = ErrorKind.DELETE_FAILED
        object_id = parse_object_id(document_id, kind)
        try:
            with _deadline(timeout):
                result = self.collection.delete_one({ID_FIELD: object_id})
        except STORE_ERRORS as e:
            raise RepositoryError(kind) from e

        if result.deleted_count == 0:
            logger.warning(f"Delete matched nothing: collection={self.name}, id={object_id}")
            raise RepositoryError(kind, ErrorKind.NOT_FOUND)

        logger.debug(f"Document deleted: collection={self.name}, id={object_id}")
        return result.deleted_count

    def delete_many(self, *filters: Filter, timeout: float | None = None) -> int:
        """Delete every document matching the filters.

        Returns:
            Number of deleted documents; 0 when nothing matched.

        Raises:
            RepositoryError: DELETE_MANY_FAILED on store errors.
        """
        query = build_filter(*filters)
        try:
            with _deadline(timeout):
                result = self.collection.delete_many(query)
        except STORE_ERRORS as e:
            raise RepositoryError(ErrorKind.DELETE_MANY_FAILED) from e

        logger.debug(f"Documents deleted: collection={self.name}, filter={query}, deleted={result.deleted_count}")
        return result.deleted_count

    def find_many_by_filter(
        self,
        *filters: Filter,
        skip: int = 0,
        limit: int = 0,
        timeout: float | None = None,
    ) -> list[T]:
        """Retrieve one page of entities matching the filters.

        Args:
            filters: Filters applied in order (none matches all).
            skip: Number of matches to skip.
            limit: Page size (0 means ``RepositoryConfig.default_limit``).
            timeout: Optional deadline in seconds for the store call.

        Returns:
            Decoded entities in the store's natural order.

        Raises:
            RepositoryError: FIND_MANY_FAILED, with NOT_FOUND when the page
                is empty.
        """
        return self._find_all(
            ErrorKind.FIND_MANY_FAILED,
            build_filter(*filters),
            skip=skip,
            limit=limit,
            timeout=timeout,
        )

    def find_one_by_filter(self, *filters: Filter, timeout: float | None = None) -> T:
        """Retrieve the first entity matching the filters.

        Raises:
            RepositoryError: FIND_ONE_FAILED, with NOT_FOUND when nothing matches.
        """
        return self._find_one(ErrorKind.FIND_ONE_FAILED, build_filter(*filters), timeout)

    def exists(self, *filters: Filter, timeout: float | None = None) -> bool:
        """Check whether any document matches the filters."""
        return self._count(build_filter(*filters), timeout, limit=1) > 0

    def count(self, *filters: Filter, timeout: float | None = None) -> int:
        """Count documents matching the filters."""
        return self._count(build_filter(*filters), timeout)

    def _count(self, query: dict[str, Any], timeout: float | None, **kwargs: Any) -> int:
        try:
            with _deadline(timeout):
                count = self.collection.count_documents(query, **kwargs)
        except STORE_ERRORS as e:
            raise RepositoryError(ErrorKind.FIND_ONE_FAILED) from e

        logger.debug(f"Counted documents: collection={self.name}, filter={query}, count={count}")
        return count

    def _create_index(self, keys: Any, options: IndexOptions, *, timeout: float | None = None) -> str:
        kwargs = options.to_kwargs()
        try:
            with _deadline(timeout):
                index_name = self.collection.create_index(keys, **kwargs)
        except STORE_ERRORS as e:
            raise RepositoryError(ErrorKind.INDEX_CREATION_FAILED) from e

        logger.info(f"Index created: collection={self.name}, index={index_name}")
        return index_name

    def _find_one(self, kind: ErrorKind, query: dict[str, Any], timeout: float | None) -> T:
        try:
            with _deadline(timeout):
                document = self.collection.find_one(query)
        except STORE_ERRORS as e:
            raise RepositoryError(kind) from e

        if document is None:
            logger.warning(f"No document found: collection={self.name}, filter={query}")
            raise RepositoryError(kind, ErrorKind.NOT_FOUND)
        return self._decode(kind, document)

    def _find_all(
        self,
        kind: ErrorKind,
        query: dict[str, Any],
        *,
        skip: int = 0,
        limit: int | None = 0,
        timeout: float | None = None,
        **find_kwargs: Any,
    ) -> list[T]:
        """Run a find and decode every document while the cursor is open.

        A limit of 0 means the default page size and None means unbounded.
        The cursor is closed on every exit path, including decode errors.
        """
        if limit is None:
            limit = 0
        elif limit == 0:
            limit = self.config.default_limit
        if skip < 0 or limit < 0:
            raise RepositoryError(kind) from ValueError(
                f"skip and limit must be non-negative, got skip={skip}, limit={limit}"
            )

        logger.debug(f"Finding documents: collection={self.name}, filter={query}, skip={skip}, limit={limit}")
        try:
            with _deadline(timeout):
                with self.collection.find(query, skip=skip, limit=limit, **find_kwargs) as cursor:
                    results = list(self._iter_decoded(kind, cursor))
        except STORE_ERRORS as e:
            raise RepositoryError(kind) from e

        if not results:
            logger.warning(f"No documents found: collection={self.name}, filter={query}")
            raise RepositoryError(kind, ErrorKind.NOT_FOUND)
        return results

    def _iter_decoded(self, kind: ErrorKind, cursor: Iterable[Mapping[str, Any]]) -> Iterator[T]:
        for document in cursor:
            yield self._decode(kind, document)

    def _encode(self, kind: ErrorKind, entity: T) -> dict[str, Any]:
        try:
            return self.codec.encode(entity)
        except Exception as e:
            logger.debug(f"Failed to encode entity for {self.name}: {e}")
            raise RepositoryError(kind) from e

    def _decode(self, kind: ErrorKind, document: Mapping[str, Any]) -> T:
        try:
            return self.codec.decode(document)
        except Exception as e:
            logger.debug(f"Failed to decode document from {self.name}: {e}")
            raise RepositoryError(kind) from e
