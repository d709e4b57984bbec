"""Content store contract consumed by the importer.

The importer never talks to a database directly; everything goes through
this protocol so another backend can be swapped in. Writes that the store
refuses raise StoreError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

ROOT_TERM = 0
"""Parent id of a top-level term."""

RECORD_FIELDS = ("slug", "parent", "title", "excerpt", "body", "type", "status")
"""Fields of a content record that take part in diffing."""


@dataclass(frozen=True, slots=True)
class TermRef:
    """Handle to a taxonomy term returned by the store."""

    id: int
    value: str
    taxonomy: str
    parent: int = ROOT_TERM
    slug: str = ""


@runtime_checkable
class ContentStore(Protocol):
    """Create/read content records and taxonomy terms."""

    def find_content_type(self, name: str) -> bool: ...

    def find_taxonomy(self, name: str) -> bool: ...

    def find_term(self, value: str, taxonomy: str, parent: int = ROOT_TERM) -> TermRef | None: ...

    def create_term(
        self,
        value: str,
        taxonomy: str,
        *,
        parent: int = ROOT_TERM,
        slug: str | None = None,
    ) -> TermRef: ...

    def find_record(self, slug: str, record_type: str, parent: int | None) -> int | None: ...

    def create_record(self, fields: dict[str, Any]) -> int: ...

    def update_record(self, record_id: int, fields: dict[str, Any]) -> int: ...

    def get_record(self, record_id: int) -> dict[str, Any]: ...

    def set_term_relationships(
        self,
        record_id: int,
        taxonomy: str,
        term_ids: list[int],
        additive: bool = False,
    ) -> bool: ...

    def get_term_ids(self, record_id: int, taxonomy: str) -> list[int]: ...

    def set_metadata(self, record_id: int, key: str, value: Any) -> bool: ...

    def get_metadata(self, record_id: int, key: str) -> Any: ...

    def persist_option(self, key: str, value: Any) -> None: ...

    def read_option(self, key: str) -> Any: ...

    def delete_option(self, key: str) -> None: ...
