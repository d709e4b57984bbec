"""Fixtures for import engine tests."""

from collections.abc import Generator
from pathlib import Path

import pytest

from docimport.config.models import DocImportConfig, NamesConfig
from docimport.importer.extensions import ImportExtensions
from docimport.importer.items import ItemImporter
from docimport.importer.models import Docblock
from docimport.importer.run import FileContext, ImportRun
from docimport.importer.terms import TermResolver
from docimport.store import Database, SqlContentStore


@pytest.fixture
def names() -> NamesConfig:
    return NamesConfig()


@pytest.fixture
def config() -> DocImportConfig:
    """Defaults with pausing off so tests never sleep."""
    return DocImportConfig.model_validate({"importer": {"skip_sleep": True}})


@pytest.fixture
def store(tmp_path: Path, names: NamesConfig) -> Generator[SqlContentStore, None, None]:
    db = Database(tmp_path / "content.db")
    db.create_all()
    content_store = SqlContentStore(db)
    content_store.register_defaults(names)
    yield content_store
    db.engine.dispose()


@pytest.fixture
def run(store: SqlContentStore) -> ImportRun:
    return ImportRun(resolver=TermResolver(store))


@pytest.fixture
def items(store: SqlContentStore, names: NamesConfig) -> ItemImporter:
    return ItemImporter(store, names, ImportExtensions())


@pytest.fixture
def make_context(run: ImportRun, names: NamesConfig):
    """Build a FileContext for a path, creating its source-file term."""

    def _make(path: str = "foo.php", docblock: Docblock | None = None, deprecated: str | None = None) -> FileContext:
        term = run.resolver.resolve(path, names.source_file_taxonomy)
        return FileContext(
            path=path,
            docblock=docblock or Docblock(),
            file_term=term,
            deprecated=deprecated,
        )

    return _make

