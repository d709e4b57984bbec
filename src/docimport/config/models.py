"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (DOCIMPORT__SECTION__KEY)
3. Repo YAML (.docimport/config.yaml)
4. Global YAML (~/.config/docimport/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    DOCIMPORT__<SECTION>__<KEY>=<VALUE>

Examples:
    DOCIMPORT__LOGGING__LEVEL=DEBUG
    DOCIMPORT__DATABASE__PATH=/var/lib/docimport/content.db
    DOCIMPORT__IMPORTER__SKIP_DUPLICATE_HOOKS=true
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        DOCIMPORT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every term lookup.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class DatabaseConfig(BaseModel):
    """Content store database configuration.

    Env vars:
        DOCIMPORT__DATABASE__PATH: SQLite database file
        DOCIMPORT__DATABASE__BUSY_TIMEOUT_MS: SQLite busy timeout
        DOCIMPORT__DATABASE__MAX_RETRIES: Max retry attempts for locked DB
    """

    path: str = Field(
        default=".docimport/content.db",
        description="SQLite database file. Relative paths resolve against the working directory.",
    )
    busy_timeout_ms: int = Field(
        default=30000,
        description="SQLite busy timeout (ms). How long to wait for locks.",
    )
    max_retries: int = Field(
        default=3,
        description="Max retry attempts for locked database errors.",
    )
    retry_base_delay_sec: float = Field(
        default=0.1,
        description="Base delay between retries (exponential backoff).",
    )

    @field_validator("busy_timeout_ms", "max_retries")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Must be >= 0, got {v}")
        return v


class NamesConfig(BaseModel):
    """Content type and taxonomy names the importer writes to.

    Env vars:
        DOCIMPORT__NAMES__FUNCTION_TYPE, DOCIMPORT__NAMES__SOURCE_FILE_TAXONOMY, ...
    """

    function_type: str = "doc-function"
    class_type: str = "doc-class"
    method_type: str = "doc-method"
    hook_type: str = "doc-hook"
    source_file_taxonomy: str = "doc-source-file"
    namespace_taxonomy: str = "doc-namespace"
    package_taxonomy: str = "doc-package"
    since_taxonomy: str = "doc-since"

    @property
    def content_types(self) -> list[str]:
        return [self.class_type, self.method_type, self.function_type, self.hook_type]

    @property
    def taxonomies(self) -> list[str]:
        return [
            self.source_file_taxonomy,
            self.namespace_taxonomy,
            self.package_taxonomy,
            self.since_taxonomy,
        ]


class ImporterConfig(BaseModel):
    """Import engine behaviour.

    Env vars:
        DOCIMPORT__IMPORTER__IMPORT_IGNORED: Import items tagged @ignore
        DOCIMPORT__IMPORTER__SKIP_SLEEP: Disable the cooperative pause
        DOCIMPORT__IMPORTER__SKIP_DUPLICATE_HOOKS: Drop "documented in" hooks
    """

    import_ignored: bool = Field(
        default=False,
        description="Import items carrying an @ignore tag.",
    )
    skip_sleep: bool = Field(
        default=False,
        description="Skip the pause between batches of items.",
    )
    pause_every: int = Field(
        default=10,
        description="Pause after this many top-level items in a file. 0 disables pausing.",
    )
    pause_seconds: float = Field(
        default=3.0,
        description="Length of each pause. Only useful against a rate-limited store.",
    )
    skip_duplicate_hooks: bool = Field(
        default=False,
        description="Skip hooks whose docblock only points at another hook's documentation.",
    )
    version_file: str = Field(
        default="wp-includes/version.php",
        description="Source file (relative to its root) that declares the source version.",
    )
    version_variable: str = Field(
        default="wp_version",
        description="Variable assigned the version string inside version_file.",
    )
    deprecated_file_marker: str = Field(
        default="_deprecated_file",
        description="Function whose call at the top of a file marks the file deprecated.",
    )

    @field_validator("pause_every")
    @classmethod
    def validate_pause_every(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"pause_every must be >= 0, got {v}")
        return v

    @field_validator("pause_seconds")
    @classmethod
    def validate_pause_seconds(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"pause_seconds must be >= 0, got {v}")
        return v


class DocImportConfig(BaseModel):
    """Root configuration for docimport.

    All settings can be configured via:
    1. Environment variables: DOCIMPORT__SECTION__KEY
    2. YAML config files (repo or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    names: NamesConfig = Field(default_factory=NamesConfig)
    importer: ImporterConfig = Field(default_factory=ImporterConfig)
