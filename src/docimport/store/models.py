"""SQLModel definitions for the content store.

Single source of truth for all table schemas.

Layout:
- content_types / taxonomies: registered names; the importer refuses to run
  unless every name it writes to is registered
- terms: taxonomy terms, parent-linked within one taxonomy (0 = root)
- records: one row per imported item, identified by (slug, type, parent_id)
- record_meta: JSON-encoded metadata values per record
- term_relationships: record <-> term assignments
- options: JSON-encoded run bookkeeping (last import, root dir, version)
"""

from sqlalchemy import Column, ForeignKey, Integer, UniqueConstraint
from sqlmodel import Field, SQLModel


class ContentType(SQLModel, table=True):
    """Registered content type name."""

    __tablename__ = "content_types"

    name: str = Field(primary_key=True)
    label: str | None = None


class Taxonomy(SQLModel, table=True):
    """Registered taxonomy name."""

    __tablename__ = "taxonomies"

    name: str = Field(primary_key=True)
    hierarchical: bool = Field(default=True)


class Term(SQLModel, table=True):
    """Taxonomy term. Unique per (taxonomy, name, parent_id)."""

    __tablename__ = "terms"
    __table_args__ = (UniqueConstraint("taxonomy", "name", "parent_id"),)

    id: int | None = Field(default=None, primary_key=True)
    taxonomy: str = Field(foreign_key="taxonomies.name", index=True)
    name: str = Field(index=True)
    slug: str = Field(index=True)
    parent_id: int = Field(default=0, index=True)


class Record(SQLModel, table=True):
    """Persisted form of one documented item."""

    __tablename__ = "records"

    id: int | None = Field(default=None, primary_key=True)
    slug: str = Field(index=True)
    type: str = Field(foreign_key="content_types.name", index=True)
    parent_id: int | None = Field(default=None, index=True)
    title: str
    excerpt: str = ""
    body: str = ""
    status: str = "publish"
    created_at: float | None = None
    modified_at: float | None = None


class RecordMeta(SQLModel, table=True):
    """One metadata value (JSON text) for a record."""

    __tablename__ = "record_meta"
    __table_args__ = (UniqueConstraint("record_id", "key"),)

    id: int | None = Field(default=None, primary_key=True)
    record_id: int = Field(
        sa_column=Column(Integer, ForeignKey("records.id", ondelete="CASCADE"), index=True)
    )
    key: str = Field(index=True)
    value: str


class TermRelationship(SQLModel, table=True):
    """Assignment of a term to a record."""

    __tablename__ = "term_relationships"

    record_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("records.id", ondelete="CASCADE"), primary_key=True
        )
    )
    term_id: int = Field(
        sa_column=Column(Integer, ForeignKey("terms.id", ondelete="CASCADE"), primary_key=True)
    )
    taxonomy: str = Field(index=True)


class Option(SQLModel, table=True):
    """Key/value bookkeeping (JSON text)."""

    __tablename__ = "options"

    key: str = Field(primary_key=True)
    value: str
