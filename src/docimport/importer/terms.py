"""Memoized create-or-find of taxonomy terms.

One TermResolver lives for one import run. Within a run each
(taxonomy, value, parent) key reaches the store at most once when it
succeeds; failures are not cached, so a later call retries.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

import structlog

from docimport.store.protocol import ROOT_TERM, TermRef

if TYPE_CHECKING:
    from docimport.store.protocol import ContentStore

logger = structlog.get_logger()


class RelationshipPolicy(str, Enum):
    """How a taxonomy's term assignments are written for a record."""

    ADDITIVE = "additive"  # keep assignments from earlier runs
    REPLACE = "replace"  # the current run's set is the whole set

    @property
    def additive(self) -> bool:
        return self is RelationshipPolicy.ADDITIVE


class TermKey(NamedTuple):
    """Cache key for a resolved term."""

    taxonomy: str
    value: str
    parent: int


class TermResolver:
    """Create-or-find taxonomy terms through a ContentStore, with a run cache."""

    def __init__(self, store: ContentStore) -> None:
        self._store = store
        self._cache: dict[TermKey, TermRef] = {}

    @property
    def cached_count(self) -> int:
        return len(self._cache)

    def cached(self, value: str, taxonomy: str, parent: int | None = None) -> TermRef | None:
        return self._cache.get(TermKey(taxonomy, value, parent or ROOT_TERM))

    def resolve(
        self,
        value: str,
        taxonomy: str,
        parent: int | None = None,
        slug: str | None = None,
    ) -> TermRef:
        """Return the term for value under parent, creating it if needed.

        Raises:
            StoreError: The store refused to create the term.
        """
        key = TermKey(taxonomy, value, parent or ROOT_TERM)
        if key in self._cache:
            return self._cache[key]

        term = self._store.find_term(value, taxonomy, key.parent)
        if term is None:
            term = self._store.create_term(value, taxonomy, parent=key.parent, slug=slug)
            logger.debug("term_inserted", taxonomy=taxonomy, value=value, parent=key.parent)

        self._cache[key] = term
        return term
