"""Run-scoped state threaded through file and item imports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docimport.importer.models import Docblock
    from docimport.importer.terms import TermResolver
    from docimport.store.protocol import TermRef


@dataclass
class ImportRun:
    """Mutable state of one in-flight import. Owned by exactly one run."""

    resolver: TermResolver
    errors: list[str] = field(default_factory=list)
    files: int = 0
    files_skipped: int = 0
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    def record_error(self, message: str) -> None:
        self.errors.append(message)


@dataclass(frozen=True)
class FileContext:
    """What an item import needs to know about the file it came from."""

    path: str
    docblock: Docblock
    file_term: TermRef
    deprecated: str | None = None
