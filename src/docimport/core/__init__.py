"""Core module exports."""

from docimport.core.errors import (
    ConfigError,
    DocImportError,
    ErrorCode,
    ImportRunError,
    InternalError,
    StoreError,
)
from docimport.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from docimport.core.progress import pluralize, progress, status

__all__ = [
    # Errors
    "DocImportError",
    "ConfigError",
    "ErrorCode",
    "ImportRunError",
    "InternalError",
    "StoreError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "pluralize",
    "progress",
    "status",
]
