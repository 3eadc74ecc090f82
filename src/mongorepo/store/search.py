"""Full-text search for mongorepo repositories.

`FullTextSearchMixin` adds text index management and relevance-ranked
search to `MongoRepository`:

    repo.create_full_text_index({"name": 10, "bio": 5, "tags": 1})

    # Matches "web" but not documents mentioning "test"
    users = repo.search("web -test", limit=20)

Results come back ordered by the server's text score, highest first. When
the entity type declares a field named like ``RepositoryConfig.text_score_field``
(``score`` by default) it receives that score.

See Also:
    - `mongorepo.query.filters.TextSearch`: the underlying ``$text`` filter
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, Mapping, TypeVar

from loguru import logger

from ..core.exceptions import ErrorKind
from ..query.filters import Filter, build_filter, text_search
from ..query.indexes import IndexOptions, build_index_options, name, sparse, text_weights

if TYPE_CHECKING:
    from ..core.config import RepositoryConfig

T = TypeVar("T")

TEXT_INDEX = "text"


def text_index_name(language: str) -> str:
    """Deterministic name of the full-text index for a language."""
    return f"{language}_fts_index"


class FullTextSearchMixin(ABC, Generic[T]):
    """Text index creation and ranked search over the repository collection.

    Host classes provide ``config`` and implement ``_create_index`` and
    ``_find_all``.
    """

    config: "RepositoryConfig"

    def create_full_text_index(
        self,
        field_weights: Mapping[str, int],
        language: str = "",
        *,
        timeout: float | None = None,
    ) -> str:
        """Create one compound text index over the given fields.

        Args:
            field_weights: Field name to relative weight in the text score.
            language: Default language for stemming and stop words
                (default: ``RepositoryConfig.default_language``).
            timeout: Optional deadline in seconds for the store call.

        Returns:
            Name of the created index, ``"<language>_fts_index"``.

        Raises:
            RepositoryError: INDEX_CREATION_FAILED if the server rejects it.
        """
        language = language or self.config.default_language
        keys = [(field, TEXT_INDEX) for field in field_weights]
        options = build_index_options(
            text_weights(field_weights, language),
            name(text_index_name(language)),
            sparse(True),
        )

        logger.debug(f"Creating text index: fields={list(field_weights)}, language={language!r}")
        return self._create_index(keys, options, timeout=timeout)

    def search(
        self,
        term: str,
        *filters: Filter,
        skip: int = 0,
        limit: int = 0,
        timeout: float | None = None,
    ) -> list[T]:
        """Search the text index, most relevant first.

        Args:
            term: Search string in the server's text query syntax.
            filters: Extra filters the matches must also satisfy.
            skip: Number of matches to skip.
            limit: Maximum number of matches (0 means the default page size).
            timeout: Optional deadline in seconds for the store call.

        Returns:
            Decoded entities ordered by descending text score.

        Raises:
            RepositoryError: FIND_MANY_FAILED, with NOT_FOUND when nothing
                matches.
        """
        query = build_filter(text_search(term), *filters)
        score = {"$meta": "textScore"}
        score_field = self.config.text_score_field

        logger.debug(f"Text search: term={term!r}, skip={skip}, limit={limit}")
        return self._find_all(
            ErrorKind.FIND_MANY_FAILED,
            query,
            skip=skip,
            limit=limit,
            projection={score_field: score},
            sort=[(score_field, score)],
            timeout=timeout,
        )

    @abstractmethod
    def _create_index(self, keys: Any, options: IndexOptions, *, timeout: float | None = None) -> str:
        """Create an index and return its name."""

    @abstractmethod
    def _find_all(self, kind: ErrorKind, query: dict[str, Any], **kwargs: Any) -> list[T]:
        """Run a find and return the decoded entities."""
