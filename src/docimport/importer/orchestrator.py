"""Full import run over a parsed documentation tree."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from docimport.core.errors import DocImportError, ImportRunError, InternalError
from docimport.core.logging import clear_run_id, set_run_id
from docimport.core.progress import progress
from docimport.importer.extensions import ImportExtensions
from docimport.importer.files import FileImporter
from docimport.importer.items import ItemImporter
from docimport.importer.run import ImportRun
from docimport.importer.terms import TermResolver

if TYPE_CHECKING:
    from docimport.config.models import DocImportConfig
    from docimport.importer.models import SourceFile
    from docimport.store.protocol import ContentStore

logger = structlog.get_logger()

OPTION_IMPORTED_VERSION = "imported_version"
OPTION_ROOT_IMPORT_DIR = "root_import_dir"
OPTION_LAST_IMPORT = "last_import"


@dataclass
class ImportResult:
    """Summary of a finished import run."""

    files: int = 0
    files_skipped: int = 0
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    elapsed_sec: float = 0.0
    operation_count: int | None = None
    terms_cached: int = 0
    version: str | None = None
    root: str | None = None
    run_id: str | None = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": self.files,
            "files_skipped": self.files_skipped,
            "imported": self.imported,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
            "errors": list(self.errors),
            "elapsed_sec": round(self.elapsed_sec, 3),
            "operation_count": self.operation_count,
            "terms_cached": self.terms_cached,
            "version": self.version,
            "root": self.root,
            "run_id": self.run_id,
        }


class Importer:
    """Imports a list of SourceFiles into a ContentStore.

    Usage::

        importer = Importer(store, config)
        result = importer.run(load_source_files(path))
        if not result.ok:
            for error in result.errors:
                print(error)
    """

    def __init__(
        self,
        store: ContentStore,
        config: DocImportConfig,
        extensions: ImportExtensions | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.store = store
        self.config = config
        self.extensions = extensions or ImportExtensions()
        self._sleep = sleep

    def check_preconditions(self) -> None:
        """Raise ImportRunError unless every content type and taxonomy is registered."""
        names = self.config.names
        missing_types = [n for n in names.content_types if not self.store.find_content_type(n)]
        if missing_types:
            logger.error("Missing content type; run `docimport init` to register it.", missing=missing_types)
            raise ImportRunError.missing_content_type(missing_types)

        missing_taxonomies = [n for n in names.taxonomies if not self.store.find_taxonomy(n)]
        if missing_taxonomies:
            logger.error("Missing taxonomy; run `docimport init` to register it.", missing=missing_taxonomies)
            raise ImportRunError.missing_taxonomy(missing_taxonomies)

    def run(
        self,
        files: Sequence[SourceFile],
        *,
        import_ignored: bool | None = None,
        skip_sleep: bool | None = None,
        run_id: str | None = None,
    ) -> ImportResult:
        """Import every file in order.

        Args:
            files: Parsed source files.
            import_ignored: Override ``importer.import_ignored``.
            skip_sleep: Override ``importer.skip_sleep``.
            run_id: Correlation id for log lines; generated if omitted.

        Raises:
            ImportRunError: A content type or taxonomy is not registered.
        """
        self.check_preconditions()

        started = time.monotonic()
        rid = set_run_id(run_id)
        try:
            return self._run(files, started, rid, import_ignored, skip_sleep)
        finally:
            clear_run_id()

    def _run(
        self,
        files: Sequence[SourceFile],
        started: float,
        run_id: str,
        import_ignored: bool | None,
        skip_sleep: bool | None,
    ) -> ImportResult:
        self.store.delete_option(OPTION_IMPORTED_VERSION)
        self.store.delete_option(OPTION_ROOT_IMPORT_DIR)

        resolver = TermResolver(self.store)
        run = ImportRun(resolver=resolver)
        items = ItemImporter(self.store, self.config.names, self.extensions)
        file_importer = FileImporter(
            self.store,
            items,
            self.config.names,
            self.config.importer,
            self.extensions,
            sleep=self._sleep,
        )

        root: str | None = None
        version: str | None = None
        total = len(files)
        self.extensions.batch_started()
        try:
            for i, file in enumerate(progress(files, desc="Importing", total=total), start=1):
                logger.info(f'Processing file {i} of {total} "{file.path}".')
                if root is None and file.root:
                    root = file.root
                try:
                    outcome = file_importer.import_file(
                        file, run, import_ignored=import_ignored, skip_sleep=skip_sleep
                    )
                except Exception as e:
                    logger.exception("file_import_failed", path=file.path)
                    if isinstance(e, DocImportError):
                        reason = e.message
                    else:
                        reason = InternalError.unexpected(
                            f"{type(e).__name__}: {e}", path=file.path
                        ).message
                    run.record_error(f"Problem importing file {file.path}: {reason}")
                    run.files_skipped += 1
                    continue
                if outcome.version:
                    version = outcome.version

            if root:
                self.store.persist_option(OPTION_ROOT_IMPORT_DIR, root)
            self.store.persist_option(OPTION_LAST_IMPORT, int(time.time()))
            if version:
                self.store.persist_option(OPTION_IMPORTED_VERSION, version)
        finally:
            self.extensions.batch_finished()

        elapsed = time.monotonic() - started
        operation_count = getattr(self.store, "operation_count", None)

        logger.info(f"Time: {elapsed:.2f}s")
        if operation_count is not None:
            logger.info(f"Queries: {operation_count}")
        logger.info(
            "import_counts",
            files=run.files,
            imported=run.imported,
            updated=run.updated,
            skipped=run.skipped,
            failed=run.failed,
            terms_cached=resolver.cached_count,
        )
        if run.errors:
            logger.error("Import complete, but some errors were found:")
            for error in run.errors:
                logger.error(error)
        else:
            logger.info("Import complete!")

        return ImportResult(
            files=run.files,
            files_skipped=run.files_skipped,
            imported=run.imported,
            updated=run.updated,
            skipped=run.skipped,
            failed=run.failed,
            errors=list(run.errors),
            elapsed_sec=elapsed,
            operation_count=operation_count,
            terms_cached=resolver.cached_count,
            version=version,
            root=root,
            run_id=run_id,
        )
