"""Custom exceptions for mongorepo.

Repository operations raise a single `RepositoryError` whose ``kinds`` tuple
lists every category the failure belongs to, most general first:

    try:
        repo.delete(user_id)
    except RepositoryError as e:
        if e.not_found:
            ...
        elif e.has(ErrorKind.DELETE_FAILED):
            ...

The store's own exception, when there is one, is kept as ``__cause__``.
"""

from enum import Enum


class MongoRepoError(Exception):
    """Base exception for all mongorepo errors."""

    pass


class DatabaseError(MongoRepoError):
    """Database connection operation failed."""

    pass


class DecodeError(MongoRepoError):
    """Document could not be decoded into the entity type."""

    pass


class ErrorKind(Enum):
    """Failure categories; each value is the human-readable message."""

    NOT_FOUND = "document not found"
    DUPLICATE = "document already exists"
    INVALID_IDENTIFIER = "invalid document id"
    INDEX_CREATION_FAILED = "failed to create collection index"
    CREATE_FAILED = "failed to create document"
    UPDATE_FAILED = "failed to update document"
    UPDATE_MANY_FAILED = "failed to update documents"
    DELETE_FAILED = "failed to delete document"
    DELETE_MANY_FAILED = "failed to delete documents"
    FIND_BY_ID_FAILED = "failed to find document by id"
    FIND_BY_IDS_FAILED = "failed to find documents by ids"
    FIND_MANY_FAILED = "failed to find any documents by the given filter"
    FIND_ONE_FAILED = "failed to find a document by the given filter"


class RepositoryError(MongoRepoError):
    """Repository operation failed.

    Attributes:
        kinds: Ordered error kinds, operation kind first, then any sub-kind
            such as NOT_FOUND or DUPLICATE.
    """

    def __init__(self, *kinds: ErrorKind):
        """Initialize exception with its kinds.

        Args:
            kinds: One or more ErrorKind tags.
        """
        if not kinds:
            raise ValueError("RepositoryError requires at least one kind")
        self.kinds = tuple(kinds)
        super().__init__(": ".join(kind.value for kind in self.kinds))

    def __str__(self) -> str:
        message = super().__str__()
        if self.__cause__ is not None:
            return f"{message}: {self.__cause__}"
        return message

    def __reduce__(self):
        return self.__class__, self.kinds

    def has(self, kind: ErrorKind) -> bool:
        """Check whether this error belongs to the given kind."""
        return kind in self.kinds

    @property
    def cause(self) -> BaseException | None:
        """The underlying store or codec exception, if any."""
        return self.__cause__

    @property
    def not_found(self) -> bool:
        return self.has(ErrorKind.NOT_FOUND)

    @property
    def duplicate(self) -> bool:
        return self.has(ErrorKind.DUPLICATE)

    @property
    def invalid_identifier(self) -> bool:
        return self.has(ErrorKind.INVALID_IDENTIFIER)

    @property
    def timed_out(self) -> bool:
        """True when the underlying driver error was a timeout."""
        return bool(getattr(self.__cause__, "timeout", False))


def has_kind(exc: BaseException, kind: ErrorKind) -> bool:
    """Check whether any exception is a RepositoryError of the given kind.

    Args:
        exc: Exception to test.
        kind: ErrorKind to look for.

    Returns:
        False for exceptions that are not RepositoryError.
    """
    return isinstance(exc, RepositoryError) and exc.has(kind)
