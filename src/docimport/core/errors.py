"""docimport error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Store
- 4xxx: Import
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Store (3xxx)
    STORE_TERM_REJECTED = 3001
    STORE_RECORD_REJECTED = 3002
    STORE_RECORD_NOT_FOUND = 3003

    # Import (4xxx)
    IMPORT_MISSING_CONTENT_TYPE = 4001
    IMPORT_MISSING_TAXONOMY = 4002
    IMPORT_INVALID_INPUT = 4003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class DocImportError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'STORE_TERM_REJECTED')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(DocImportError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class StoreError(DocImportError):
    """Content store rejected a write or could not find a row.

    Raised by store implementations; the importer converts these into run
    errors (records) or warnings (terms) at the item boundary.
    """

    @classmethod
    def term_rejected(cls, value: str, taxonomy: str, reason: str) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_TERM_REJECTED,
            message=f"Could not create term '{value}' in {taxonomy}: {reason}",
            details={"value": value, "taxonomy": taxonomy, "reason": reason},
        )

    @classmethod
    def record_rejected(cls, slug: str, record_type: str, reason: str) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_RECORD_REJECTED,
            message=reason,
            details={"slug": slug, "type": record_type},
        )

    @classmethod
    def record_not_found(cls, record_id: int) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_RECORD_NOT_FOUND,
            message=f"No record with id {record_id}",
            details={"record_id": record_id},
        )


class ImportRunError(DocImportError):
    """Errors that abort an entire import run."""

    @classmethod
    def missing_content_type(cls, names: list[str]) -> "ImportRunError":
        quoted = ", ".join(f'"{n}"' for n in names)
        return cls(
            code=ErrorCode.IMPORT_MISSING_CONTENT_TYPE,
            message=f"Missing content type; check that {quoted} are registered.",
            details={"missing": names},
        )

    @classmethod
    def missing_taxonomy(cls, names: list[str]) -> "ImportRunError":
        quoted = ", ".join(f'"{n}"' for n in names)
        return cls(
            code=ErrorCode.IMPORT_MISSING_TAXONOMY,
            message=f"Missing taxonomy; check that {quoted} are registered.",
            details={"missing": names},
        )

    @classmethod
    def invalid_input(cls, source: str, reason: str) -> "ImportRunError":
        return cls(
            code=ErrorCode.IMPORT_INVALID_INPUT,
            message=f"Cannot read parser output from {source}: {reason}",
            details={"source": source, "reason": reason},
        )


class InternalError(DocImportError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
