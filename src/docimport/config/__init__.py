"""Config module exports."""

from docimport.config.loader import DocImportSettings, load_config, resolve_db_path
from docimport.config.models import (
    DatabaseConfig,
    DocImportConfig,
    ImporterConfig,
    LoggingConfig,
    NamesConfig,
)

__all__ = [
    "load_config",
    "resolve_db_path",
    "DocImportConfig",
    "DocImportSettings",
    "DatabaseConfig",
    "ImporterConfig",
    "LoggingConfig",
    "NamesConfig",
]
