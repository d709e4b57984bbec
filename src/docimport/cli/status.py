"""docimport status command - summarize the content store."""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import click

from docimport.cli.utils import load_cli_config, open_store
from docimport.config import resolve_db_path
from docimport.importer.orchestrator import (
    OPTION_IMPORTED_VERSION,
    OPTION_LAST_IMPORT,
    OPTION_ROOT_IMPORT_DIR,
)


@click.command()
@click.option(
    "--db",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite database file (default: database.path from config)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def status_command(db: Path | None, as_json: bool) -> None:
    """Show record counts and the last import."""
    config = load_cli_config(db)
    db_path = resolve_db_path(config)

    if not db_path.exists():
        if as_json:
            click.echo(json.dumps({"initialized": False}))
        else:
            click.echo("Content store not initialized. Run 'docimport init' first.")
        return

    store = open_store(config)
    last_import = store.read_option(OPTION_LAST_IMPORT)
    data: dict[str, Any] = {
        "initialized": True,
        "database": str(db_path),
        "records": store.count_records(),
        "last_import": last_import,
        "imported_version": store.read_option(OPTION_IMPORTED_VERSION),
        "root_import_dir": store.read_option(OPTION_ROOT_IMPORT_DIR),
    }

    if as_json:
        click.echo(json.dumps(data))
        return

    click.echo(f"Database: {db_path}")
    records = data["records"]
    if records:
        for record_type, count in sorted(records.items()):
            click.echo(f"  {record_type}: {count}")
    else:
        click.echo("  (no records)")
    if last_import:
        when = datetime.fromtimestamp(last_import, tz=UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
        click.echo(f"Last import: {when}")
    else:
        click.echo("Last import: never")
    if data["imported_version"]:
        click.echo(f"Source version: {data['imported_version']}")
    if data["root_import_dir"]:
        click.echo(f"Source root: {data['root_import_dir']}")
