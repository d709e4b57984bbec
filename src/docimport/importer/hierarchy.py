"""Hierarchical taxonomy assignment: namespace chains and package pairs."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from docimport.core.errors import StoreError
from docimport.core.text import namespace_slug
from docimport.importer.terms import RelationshipPolicy
from docimport.store.protocol import ROOT_TERM

if TYPE_CHECKING:
    from docimport.importer.models import Tag
    from docimport.importer.terms import TermResolver
    from docimport.store.protocol import ContentStore

logger = structlog.get_logger()

NAMESPACE_POLICY = RelationshipPolicy.REPLACE
PACKAGE_POLICY = RelationshipPolicy.REPLACE


def assign_namespaces(
    resolver: TermResolver,
    store: ContentStore,
    record_id: int,
    segments: list[str],
    taxonomy: str,
) -> bool:
    """Resolve ``["A", "B", "C"]`` as root -> A -> B -> C and assign all of them.

    A segment that cannot be created ends the chain: its children are not
    attempted. Returns True if the record's namespace terms changed.
    """
    term_ids: list[int] = []
    parent = ROOT_TERM
    for segment in segments:
        try:
            term = resolver.resolve(segment, taxonomy, parent=parent, slug=namespace_slug(segment))
        except StoreError as e:
            logger.warning(
                "Cannot set namespace term",
                namespace=segment,
                reason=e.message,
                record_id=record_id,
            )
            break
        term_ids.append(term.id)
        parent = term.id

    if not term_ids:
        return False
    return store.set_term_relationships(
        record_id, taxonomy, term_ids, additive=NAMESPACE_POLICY.additive
    )


def _first_content(tags: list[Tag]) -> str | None:
    if not tags:
        return None
    return tags[0].content or None


def assign_packages(
    resolver: TermResolver,
    store: ContentStore,
    record_id: int,
    item_tags: list[Tag],
    file_tags: list[Tag],
    taxonomy: str,
) -> bool:
    """Assign @package / @subpackage terms, falling back to file-level tags.

    The subpackage is parented under the package when the package resolved,
    otherwise under the root. Returns True if the record's package terms
    changed.
    """
    main = _first_content([t for t in item_tags if t.name == "package"]) or _first_content(
        [t for t in file_tags if t.name == "package"]
    )
    sub = _first_content([t for t in item_tags if t.name == "subpackage"]) or _first_content(
        [t for t in file_tags if t.name == "subpackage"]
    )

    main_id: int | None = None
    term_ids: list[int] = []

    for level, value in (("main", main), ("sub", sub)):
        if not value:
            continue
        parent = main_id if level == "sub" and main_id is not None else ROOT_TERM
        try:
            term = resolver.resolve(value, taxonomy, parent=parent)
        except StoreError as e:
            kind = "package" if level == "main" else "subpackage"
            logger.warning(f"Cannot create @{kind} term", value=value, reason=e.message)
            continue
        term_ids.append(term.id)
        if level == "main":
            main_id = term.id

    return store.set_term_relationships(
        record_id, taxonomy, term_ids, additive=PACKAGE_POLICY.additive
    )
