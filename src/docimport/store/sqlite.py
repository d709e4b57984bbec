"""SQLite implementation of the ContentStore protocol.

Every mutating call runs in its own immediate transaction, so a rejected
write never leaves half of an item behind. Metadata and option values are
stored as JSON text; "changed" answers compare the decoded values.
"""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Any

import structlog
from sqlmodel import col, delete, select

from docimport.core.errors import StoreError
from docimport.core.text import sanitize_title
from docimport.store.models import (
    ContentType,
    Option,
    Record,
    RecordMeta,
    Taxonomy,
    Term,
    TermRelationship,
)
from docimport.store.protocol import ROOT_TERM, TermRef

if TYPE_CHECKING:
    from docimport.config.models import NamesConfig
    from docimport.store.database import Database

logger = structlog.get_logger()

MAX_TERM_LENGTH = 200
MAX_SLUG_LENGTH = 200


def _encode(value: Any) -> str:
    return json.dumps(value, sort_keys=True, default=str)


def _term_ref(term: Term) -> TermRef:
    assert term.id is not None
    return TermRef(
        id=term.id,
        value=term.name,
        taxonomy=term.taxonomy,
        parent=term.parent_id,
        slug=term.slug,
    )


class SqlContentStore:
    """Content store backed by the SQLModel tables in store.models."""

    def __init__(self, db: Database) -> None:
        self.db = db

    @property
    def operation_count(self) -> int:
        """SQL statements executed so far."""
        return self.db.statement_count

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_content_type(self, name: str, label: str | None = None) -> None:
        with self.db.immediate_transaction() as session:
            if session.get(ContentType, name) is None:
                session.add(ContentType(name=name, label=label))

    def register_taxonomy(self, name: str, hierarchical: bool = True) -> None:
        with self.db.immediate_transaction() as session:
            if session.get(Taxonomy, name) is None:
                session.add(Taxonomy(name=name, hierarchical=hierarchical))

    def register_defaults(self, names: NamesConfig) -> None:
        """Register every content type and taxonomy the importer writes to."""
        for content_type in names.content_types:
            self.register_content_type(content_type)
        for taxonomy in names.taxonomies:
            self.register_taxonomy(taxonomy, hierarchical=taxonomy != names.source_file_taxonomy)
        logger.info(
            "store_registered",
            content_types=names.content_types,
            taxonomies=names.taxonomies,
        )

    def find_content_type(self, name: str) -> bool:
        with self.db.session() as session:
            return session.get(ContentType, name) is not None

    def find_taxonomy(self, name: str) -> bool:
        with self.db.session() as session:
            return session.get(Taxonomy, name) is not None

    # -------------------------------------------------------------------------
    # Terms
    # -------------------------------------------------------------------------

    def find_term(self, value: str, taxonomy: str, parent: int = ROOT_TERM) -> TermRef | None:
        with self.db.session() as session:
            stmt = select(Term).where(
                Term.taxonomy == taxonomy,
                Term.name == value,
                Term.parent_id == parent,
            )
            term = session.exec(stmt).first()
            return _term_ref(term) if term is not None else None

    def create_term(
        self,
        value: str,
        taxonomy: str,
        *,
        parent: int = ROOT_TERM,
        slug: str | None = None,
    ) -> TermRef:
        name = value
        if not name.strip():
            raise StoreError.term_rejected(value, taxonomy, "a name is required for this term")
        if len(name) > MAX_TERM_LENGTH:
            raise StoreError.term_rejected(
                value, taxonomy, f"term names are limited to {MAX_TERM_LENGTH} characters"
            )
        term_slug = slug if slug else sanitize_title(name)
        if not term_slug:
            raise StoreError.term_rejected(value, taxonomy, "term name has no usable characters")

        with self.db.immediate_transaction() as session:
            if session.get(Taxonomy, taxonomy) is None:
                raise StoreError.term_rejected(value, taxonomy, "invalid taxonomy")
            if parent != ROOT_TERM:
                parent_term = session.get(Term, parent)
                if parent_term is None or parent_term.taxonomy != taxonomy:
                    raise StoreError.term_rejected(value, taxonomy, "parent term does not exist")
            term = Term(taxonomy=taxonomy, name=name, slug=term_slug, parent_id=parent)
            session.add(term)
            session.flush()
            ref = _term_ref(term)

        logger.debug("term_created", taxonomy=taxonomy, value=name, parent=parent, term_id=ref.id)
        return ref

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def find_record(self, slug: str, record_type: str, parent: int | None) -> int | None:
        with self.db.session() as session:
            stmt = select(Record.id).where(Record.slug == slug, Record.type == record_type)
            if parent:
                stmt = stmt.where(Record.parent_id == parent)
            else:
                stmt = stmt.where(col(Record.parent_id).is_(None))
            return session.exec(stmt.limit(1)).first()

    def _validate_record(self, fields: dict[str, Any]) -> None:
        slug = fields.get("slug") or ""
        record_type = fields.get("type") or ""
        if not slug:
            raise StoreError.record_rejected(slug, record_type, "slug is empty")
        if len(slug) > MAX_SLUG_LENGTH:
            raise StoreError.record_rejected(
                slug, record_type, f"slug exceeds {MAX_SLUG_LENGTH} characters"
            )
        if not (fields.get("title") or "").strip():
            raise StoreError.record_rejected(slug, record_type, "title is empty")
        if not self.find_content_type(record_type):
            raise StoreError.record_rejected(slug, record_type, "invalid content type")

    def create_record(self, fields: dict[str, Any]) -> int:
        self._validate_record(fields)
        now = time.time()
        with self.db.immediate_transaction() as session:
            record = Record(
                slug=fields["slug"],
                type=fields["type"],
                parent_id=fields.get("parent") or None,
                title=fields["title"],
                excerpt=fields.get("excerpt") or "",
                body=fields.get("body") or "",
                status=fields.get("status") or "publish",
                created_at=now,
                modified_at=now,
            )
            session.add(record)
            session.flush()
            assert record.id is not None
            return record.id

    def update_record(self, record_id: int, fields: dict[str, Any]) -> int:
        """Write the given fields and bump modified_at.

        Calling with fields equal to the stored ones only touches the
        timestamp.
        """
        self._validate_record(fields)
        with self.db.immediate_transaction() as session:
            record = session.get(Record, record_id)
            if record is None:
                raise StoreError.record_not_found(record_id)
            record.slug = fields["slug"]
            record.type = fields["type"]
            record.parent_id = fields.get("parent") or None
            record.title = fields["title"]
            record.excerpt = fields.get("excerpt") or ""
            record.body = fields.get("body") or ""
            record.status = fields.get("status") or "publish"
            record.modified_at = time.time()
            session.add(record)
            return record_id

    def get_record(self, record_id: int) -> dict[str, Any]:
        with self.db.session() as session:
            record = session.get(Record, record_id)
            if record is None:
                raise StoreError.record_not_found(record_id)
            fields: dict[str, Any] = {
                "slug": record.slug,
                "parent": record.parent_id,
                "title": record.title,
                "excerpt": record.excerpt,
                "body": record.body,
                "type": record.type,
                "status": record.status,
            }
            fields["id"] = record.id
            fields["created_at"] = record.created_at
            fields["modified_at"] = record.modified_at
            return fields

    def count_records(self) -> dict[str, int]:
        """Record counts per content type."""
        with self.db.session() as session:
            counts: dict[str, int] = {}
            for record_type in session.exec(select(Record.type)):
                counts[record_type] = counts.get(record_type, 0) + 1
            return counts

    # -------------------------------------------------------------------------
    # Relationships and metadata
    # -------------------------------------------------------------------------

    def set_term_relationships(
        self,
        record_id: int,
        taxonomy: str,
        term_ids: list[int],
        additive: bool = False,
    ) -> bool:
        """Assign terms to a record; returns True if any assignment changed.

        With additive=False, existing assignments in this taxonomy that are
        not in term_ids are removed.
        """
        wanted = set(term_ids)
        with self.db.immediate_transaction() as session:
            stmt = select(TermRelationship.term_id).where(
                TermRelationship.record_id == record_id,
                TermRelationship.taxonomy == taxonomy,
            )
            current = set(session.exec(stmt).all())

            to_add = wanted - current
            to_remove = set() if additive else current - wanted

            for term_id in sorted(to_add):
                session.add(
                    TermRelationship(record_id=record_id, term_id=term_id, taxonomy=taxonomy)
                )
            if to_remove:
                session.execute(
                    delete(TermRelationship).where(
                        col(TermRelationship.record_id) == record_id,
                        col(TermRelationship.term_id).in_(to_remove),
                    )
                )

        return bool(to_add or to_remove)

    def get_term_ids(self, record_id: int, taxonomy: str) -> list[int]:
        with self.db.session() as session:
            stmt = (
                select(TermRelationship.term_id)
                .where(
                    TermRelationship.record_id == record_id,
                    TermRelationship.taxonomy == taxonomy,
                )
                .order_by(col(TermRelationship.term_id))
            )
            return list(session.exec(stmt).all())

    def set_metadata(self, record_id: int, key: str, value: Any) -> bool:
        """Store a metadata value; returns True if it differs from the stored one."""
        encoded = _encode(value)
        with self.db.immediate_transaction() as session:
            stmt = select(RecordMeta).where(
                RecordMeta.record_id == record_id, RecordMeta.key == key
            )
            meta = session.exec(stmt).first()
            if meta is None:
                session.add(RecordMeta(record_id=record_id, key=key, value=encoded))
                return True
            if meta.value == encoded:
                return False
            meta.value = encoded
            session.add(meta)
            return True

    def get_metadata(self, record_id: int, key: str) -> Any:
        with self.db.session() as session:
            stmt = select(RecordMeta.value).where(
                RecordMeta.record_id == record_id, RecordMeta.key == key
            )
            encoded = session.exec(stmt).first()
            return json.loads(encoded) if encoded is not None else None

    # -------------------------------------------------------------------------
    # Options
    # -------------------------------------------------------------------------

    def persist_option(self, key: str, value: Any) -> None:
        encoded = _encode(value)
        with self.db.immediate_transaction() as session:
            option = session.get(Option, key)
            if option is None:
                session.add(Option(key=key, value=encoded))
            else:
                option.value = encoded
                session.add(option)

    def read_option(self, key: str) -> Any:
        with self.db.session() as session:
            option = session.get(Option, key)
            return json.loads(option.value) if option is not None else None

    def delete_option(self, key: str) -> None:
        with self.db.immediate_transaction() as session:
            option = session.get(Option, key)
            if option is not None:
                session.delete(option)

    # -------------------------------------------------------------------------
    # Batch hints
    # -------------------------------------------------------------------------

    def end_batch(self) -> None:
        """Flush the WAL once a whole import has been written."""
        self.db.checkpoint()
