"""CLI utilities."""

from pathlib import Path
from typing import Any

import click

from docimport.config import DocImportConfig, load_config, resolve_db_path
from docimport.core.errors import ConfigError
from docimport.store import Database, SqlContentStore


def load_cli_config(db: Path | None = None, **overrides: Any) -> DocImportConfig:
    """Load config for a command, applying --db and other flag overrides.

    Raises:
        click.ClickException: If the config files are invalid
    """
    if db is not None:
        overrides.setdefault("database", {})["path"] = str(db.expanduser().resolve())
    try:
        return load_config(Path.cwd(), **overrides)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


def open_store(config: DocImportConfig) -> SqlContentStore:
    """Open the SQLite content store named by config, creating its tables if needed."""
    db_config = config.database
    db = Database(
        resolve_db_path(config),
        max_retries=db_config.max_retries,
        retry_base_delay=db_config.retry_base_delay_sec,
        busy_timeout_ms=db_config.busy_timeout_ms,
    )
    db.create_all()
    return SqlContentStore(db)
