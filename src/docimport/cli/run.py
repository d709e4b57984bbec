"""docimport run command - import a parser JSON export."""

import json
from pathlib import Path
from typing import Any

import click

from docimport.cli.utils import load_cli_config, open_store
from docimport.core.errors import DocImportError
from docimport.core.logging import configure_logging
from docimport.core.progress import pluralize, status
from docimport.importer import Importer, ImportExtensions, load_source_files


@click.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--db",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite database file (default: database.path from config)",
)
@click.option("--import-ignored", is_flag=True, help="Import items tagged @ignore")
@click.option("--skip-sleep", is_flag=True, help="Never pause between items")
@click.option(
    "--skip-duplicate-hooks",
    is_flag=True,
    help="Skip hooks documented elsewhere or without docs",
)
@click.option("--json", "as_json", is_flag=True, help="Print the run summary as JSON")
@click.pass_context
def run_command(
    ctx: click.Context,
    input_file: Path,
    db: Path | None,
    import_ignored: bool,
    skip_sleep: bool,
    skip_duplicate_hooks: bool,
    as_json: bool,
) -> None:
    """Import INPUT_FILE, a JSON export of parsed source files.

    Records are matched on slug, type and parent, so running the same
    export twice changes nothing.
    """
    importer_overrides: dict[str, Any] = {}
    if import_ignored:
        importer_overrides["import_ignored"] = True
    if skip_sleep:
        importer_overrides["skip_sleep"] = True
    if skip_duplicate_hooks:
        importer_overrides["skip_duplicate_hooks"] = True

    overrides: dict[str, Any] = {"importer": importer_overrides} if importer_overrides else {}
    config = load_cli_config(db, **overrides)

    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    if not verbose:
        configure_logging(config=config.logging)

    store = open_store(config)
    extensions = ImportExtensions(end_batch=store.end_batch)

    try:
        files = load_source_files(input_file)
        result = Importer(store, config, extensions).run(files)
    except DocImportError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        status(
            f"{pluralize(result.files, 'file')}: "
            f"{result.imported} imported, {result.updated} updated, "
            f"{result.skipped} skipped, {result.failed} failed "
            f"({result.elapsed_sec:.1f}s)",
            style="error" if result.errors else "success",
        )
        for error in result.errors:
            status(error, style="error", indent=2)
