"""Import of one parsed source file.

Order within a file is fixed: functions (each followed by the hooks it
fires), classes (each followed by its methods and their hooks), then
file-level hooks.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from docimport.core.errors import DocImportError, InternalError, StoreError
from docimport.core.text import file_slug
from docimport.importer.hooks import should_import_hook
from docimport.importer.run import FileContext

if TYPE_CHECKING:
    from docimport.config.models import ImporterConfig, NamesConfig
    from docimport.importer.extensions import ImportExtensions
    from docimport.importer.items import ItemImporter
    from docimport.importer.models import (
        ClassItem,
        DocItem,
        Function,
        Hook,
        Method,
        ParserModel,
        SourceFile,
    )
    from docimport.importer.run import ImportRun
    from docimport.store.protocol import ContentStore

logger = structlog.get_logger()


@dataclass
class FileResult:
    """Outcome of one file import."""

    path: str
    imported: bool
    version: str | None = None


def read_declared_version(path: Path, variable: str) -> str | None:
    """Extract ``$variable = '...';`` from a version declaration file."""
    try:
        source = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("version_file_unreadable", path=str(path), error=str(e))
        return None
    pattern = re.compile(
        r"\$" + re.escape(variable) + r"\s*=\s*(['\"])(?P<value>[^'\"]+)\1\s*;"
    )
    match = pattern.search(source)
    return match.group("value") if match else None


class FileImporter:
    """Drives ItemImporter over the items of one SourceFile."""

    def __init__(
        self,
        store: ContentStore,
        items: ItemImporter,
        names: NamesConfig,
        settings: ImporterConfig,
        extensions: ImportExtensions,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.store = store
        self.items = items
        self.names = names
        self.settings = settings
        self.extensions = extensions
        self._sleep = sleep

    @property
    def skip_duplicate_hooks(self) -> bool:
        return self.settings.skip_duplicate_hooks or self.extensions.skip_duplicate_hooks

    def import_file(
        self,
        file: SourceFile,
        run: ImportRun,
        *,
        import_ignored: bool | None = None,
        skip_sleep: bool | None = None,
    ) -> FileResult:
        if import_ignored is None:
            import_ignored = self.settings.import_ignored
        if skip_sleep is None:
            skip_sleep = self.settings.skip_sleep

        if not self.extensions.allow_file(file):
            logger.info("file_skipped_by_extension", path=file.path)
            run.files_skipped += 1
            return FileResult(path=file.path, imported=False)

        slug = file_slug(file.path)
        try:
            file_term = run.resolver.resolve(
                file.path, self.names.source_file_taxonomy, slug=slug
            )
        except StoreError as e:
            run.record_error(
                f'Problem creating file term "{slug}" for {file.path}: {e.message}'
            )
            run.files_skipped += 1
            return FileResult(path=file.path, imported=False)

        context = FileContext(
            path=file.path,
            docblock=self.extensions.file_docblock(file.docblock),
            file_term=file_term,
            deprecated=self._deprecation_version(file),
        )
        if context.deprecated:
            logger.debug("file_deprecated", path=file.path, version=context.deprecated)

        count = 0

        def _after_item() -> None:
            nonlocal count
            count += 1
            every = self.settings.pause_every
            if not skip_sleep and every and count % every == 0:
                self._sleep(self.settings.pause_seconds)

        self._report_invalid(file, file.path, run)

        for function in file.functions:
            self._isolated(
                "function", self.import_function, function, run, context, import_ignored=import_ignored
            )
            _after_item()

        for class_item in file.classes:
            self._isolated(
                "class", self.import_class, class_item, run, context, import_ignored=import_ignored
            )
            _after_item()

        for hook in file.hooks:
            self._isolated("hook", self.import_hook, hook, run, context, import_ignored=import_ignored)
            _after_item()

        run.files += 1
        version = None
        if file.path == self.settings.version_file:
            version = read_declared_version(
                Path(file.root or "") / file.path, self.settings.version_variable
            )
            if version:
                logger.info("source_version_found", version=version, path=file.path)

        return FileResult(path=file.path, imported=True, version=version)

    def _deprecation_version(self, file: SourceFile) -> str | None:
        if not file.uses.functions:
            return None
        first = file.uses.functions[0]
        if first.name != self.settings.deprecated_file_marker:
            return None
        return first.deprecation_version or None

    def _isolated(
        self,
        kind: str,
        import_item: Callable[..., int | None],
        data: DocItem,
        run: ImportRun,
        context: FileContext,
        **kwargs: Any,
    ) -> int | None:
        """Import one item; any failure becomes a run error instead of ending the file."""
        try:
            return import_item(data, run, context, **kwargs)
        except Exception as e:
            logger.exception("item_import_failed", kind=kind, name=data.name, path=context.path)
            if isinstance(e, DocImportError):
                reason = e.message
            else:
                reason = InternalError.unexpected(
                    f"{type(e).__name__}: {e}", kind=kind, name=data.name, path=context.path
                ).message
            run.record_error(f'Problem importing {kind} "{data.name}" from {context.path}: {reason}')
            run.failed += 1
            return None

    def _report_invalid(self, owner: ParserModel, where: str, run: ImportRun) -> None:
        for entry in owner.invalid_entries:
            label = f'"{entry.name}"' if entry.name else f"#{entry.index}"
            logger.warning("invalid_entry_skipped", kind=entry.kind, entry=label, where=where)
            run.record_error(f"Invalid {entry.kind} {label} in {where}: {entry.reason}")
            run.failed += 1

    def import_function(
        self,
        data: Function,
        run: ImportRun,
        context: FileContext,
        parent_id: int | None = None,
        import_ignored: bool = False,
    ) -> int | None:
        function_id = self.items.upsert(
            data, run, context, parent_id=parent_id, import_ignored=import_ignored
        )
        # Hooks are imported even if the function itself was skipped; they
        # then hang off the root like file-level hooks.
        self._report_invalid(data, f'function "{data.name}" in {context.path}', run)
        for hook in data.hooks:
            self._isolated(
                "hook",
                self.import_hook,
                hook,
                run,
                context,
                parent_id=function_id,
                import_ignored=import_ignored,
            )
        return function_id

    def import_hook(
        self,
        data: Hook,
        run: ImportRun,
        context: FileContext,
        parent_id: int | None = None,
        import_ignored: bool = False,
    ) -> int | None:
        if not should_import_hook(data, self.skip_duplicate_hooks):
            logger.debug("duplicate_hook_skipped", name=data.name)
            run.skipped += 1
            return None

        hook_id = self.items.upsert(
            data,
            run,
            context,
            parent_id=parent_id,
            import_ignored=import_ignored,
            overrides={"type": self.names.hook_type},
        )
        if hook_id is None:
            return None

        self.store.set_metadata(hook_id, "hook_type", data.type)
        return hook_id

    def import_class(
        self,
        data: ClassItem,
        run: ImportRun,
        context: FileContext,
        import_ignored: bool = False,
    ) -> int | None:
        class_id = self.items.upsert(
            data,
            run,
            context,
            import_ignored=import_ignored,
            overrides={"type": self.names.class_type},
        )
        if class_id is None:
            return None

        self.store.set_metadata(class_id, "final", data.final)
        self.store.set_metadata(class_id, "abstract", data.abstract)
        self.store.set_metadata(class_id, "extends", data.extends)
        self.store.set_metadata(class_id, "implements", data.implements)
        self.store.set_metadata(class_id, "properties", data.properties)

        self._report_invalid(data, f'class "{data.name}" in {context.path}', run)
        for method in data.methods:
            qualified = method.model_copy(update={"name": f"{data.name}::{method.name}"})
            self._isolated(
                "method",
                self.import_method,
                qualified,
                run,
                context,
                parent_id=class_id,
                import_ignored=import_ignored,
            )

        return class_id

    def import_method(
        self,
        data: Method,
        run: ImportRun,
        context: FileContext,
        parent_id: int | None = None,
        import_ignored: bool = False,
    ) -> int | None:
        method_id = self.items.upsert(
            data,
            run,
            context,
            parent_id=parent_id,
            import_ignored=import_ignored,
            overrides={"type": self.names.method_type},
        )
        if method_id is None:
            return None

        self.store.set_metadata(method_id, "final", data.final)
        self.store.set_metadata(method_id, "abstract", data.abstract)
        self.store.set_metadata(method_id, "static", data.static)
        self.store.set_metadata(method_id, "visibility", data.visibility)

        self._report_invalid(data, f'method "{data.name}" in {context.path}', run)
        for hook in data.hooks:
            self._isolated(
                "hook",
                self.import_hook,
                hook,
                run,
                context,
                parent_id=method_id,
                import_ignored=import_ignored,
            )

        return method_id
