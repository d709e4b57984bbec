"""Import engine: turns parsed source files into content records and terms."""

from docimport.importer.extensions import ImportExtensions
from docimport.importer.files import FileImporter, FileResult
from docimport.importer.hooks import is_duplicate_hook, should_import_hook
from docimport.importer.items import ItemImporter, ItemKind
from docimport.importer.models import (
    ClassItem,
    Docblock,
    DocItem,
    Function,
    Hook,
    InvalidEntry,
    Method,
    SourceFile,
    Tag,
    load_source_files,
    parse_source_files,
)
from docimport.importer.orchestrator import Importer, ImportResult
from docimport.importer.run import FileContext, ImportRun
from docimport.importer.terms import RelationshipPolicy, TermKey, TermResolver

__all__ = [
    # Engine
    "Importer",
    "ImportResult",
    "ImportExtensions",
    "FileImporter",
    "FileResult",
    "ItemImporter",
    "ItemKind",
    "ImportRun",
    "FileContext",
    "TermResolver",
    "TermKey",
    "RelationshipPolicy",
    "is_duplicate_hook",
    "should_import_hook",
    # Input
    "SourceFile",
    "DocItem",
    "Docblock",
    "Tag",
    "InvalidEntry",
    "Function",
    "ClassItem",
    "Method",
    "Hook",
    "load_source_files",
    "parse_source_files",
]
