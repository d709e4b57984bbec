"""Fixtures for content store tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from docimport.config.models import NamesConfig
from docimport.store import Database, SqlContentStore


@pytest.fixture
def db(tmp_path: Path) -> Generator[Database, None, None]:
    database = Database(tmp_path / "content.db")
    database.create_all()
    yield database
    database.engine.dispose()


@pytest.fixture
def store(db: Database) -> SqlContentStore:
    """Store with the default content types and taxonomies registered."""
    content_store = SqlContentStore(db)
    content_store.register_defaults(NamesConfig())
    return content_store
