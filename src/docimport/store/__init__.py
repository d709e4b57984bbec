"""Content store layer."""

from docimport.store.database import Database
from docimport.store.protocol import ROOT_TERM, ContentStore, TermRef
from docimport.store.sqlite import SqlContentStore

__all__ = [
    "ContentStore",
    "Database",
    "ROOT_TERM",
    "SqlContentStore",
    "TermRef",
]
