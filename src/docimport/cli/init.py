"""docimport init command - create the content store and register its schema."""

from pathlib import Path

import click

from docimport.cli.utils import load_cli_config, open_store
from docimport.core.progress import status


def initialize_store(db: Path | None = None, *, force: bool = False) -> Path:
    """Create tables and register content types and taxonomies, returning the db path.

    Args:
        db: Database file; defaults to ``database.path`` from config
        force: Drop and recreate every table first
    """
    config = load_cli_config(db)
    store = open_store(config)
    database = store.db

    if force:
        database.drop_all()
    database.create_all()
    store.register_defaults(config.names)
    return database.db_path


@click.command()
@click.option(
    "--db",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SQLite database file (default: database.path from config)",
)
@click.option("--force", is_flag=True, help="Drop all existing content before initializing")
def init_command(db: Path | None, force: bool) -> None:
    """Create the content store and register content types and taxonomies.

    Safe to run repeatedly: existing registrations and content are kept
    unless --force is given.
    """
    db_path = initialize_store(db, force=force)
    status(f"Content store ready: {db_path}", style="success")
