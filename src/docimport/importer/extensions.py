"""Optional callbacks that let callers veto, transform or observe an import.

Every hook defaults to "allow" / no-op, so ``ImportExtensions()`` gives the
plain import behaviour.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from docimport.importer.models import DocItem

if TYPE_CHECKING:
    from docimport.importer.models import Docblock, SourceFile

PreImportFile = Callable[["SourceFile"], bool]
PreImportItem = Callable[["DocItem", "int | None", bool, "dict[str, Any]"], "DocItem | None | bool"]
FilterRecordFields = Callable[["dict[str, Any]", "int | None"], "dict[str, Any]"]
PostImportItem = Callable[[int, "DocItem", "dict[str, Any]"], None]
FilterFileDocblock = Callable[["Docblock"], "Docblock"]
BatchHint = Callable[[], None]


@dataclass
class ImportExtensions:
    """Injectable extension points.

    Attributes:
        pre_import_file: Return False to skip a whole file before its
            source-file term is created.
        pre_import_item: Return a falsy value to skip an item, or a
            replacement DocItem to import instead. Any other truthy value
            imports the item unchanged.
        filter_record_fields: Transform record fields right before they are
            written; receives the existing record id or None.
        post_import_item: Called with (record_id, item, fields) after an
            item has been written.
        filter_file_docblock: Transform a file's docblock before items read
            package fallbacks from it.
        begin_batch / end_batch: Hints emitted around a whole run so a store
            can defer expensive bookkeeping.
        skip_duplicate_hooks: Force hook deduplication on regardless of config.
    """

    pre_import_file: PreImportFile | None = None
    pre_import_item: PreImportItem | None = None
    filter_record_fields: FilterRecordFields | None = None
    post_import_item: PostImportItem | None = None
    filter_file_docblock: FilterFileDocblock | None = None
    begin_batch: BatchHint | None = None
    end_batch: BatchHint | None = None
    skip_duplicate_hooks: bool = False

    def allow_file(self, file: SourceFile) -> bool:
        if self.pre_import_file is None:
            return True
        return bool(self.pre_import_file(file))

    def prepare_item(
        self,
        item: DocItem,
        parent_id: int | None,
        import_ignored: bool,
        overrides: dict[str, Any],
    ) -> DocItem | None:
        """Run pre_import_item; None means vetoed."""
        if self.pre_import_item is None:
            return item
        result = self.pre_import_item(item, parent_id, import_ignored, overrides)
        if not result:
            return None
        if isinstance(result, DocItem):
            return result
        return item

    def record_fields(self, fields: dict[str, Any], existing_id: int | None) -> dict[str, Any]:
        if self.filter_record_fields is None:
            return fields
        return self.filter_record_fields(dict(fields), existing_id)

    def item_imported(self, record_id: int, item: DocItem, fields: dict[str, Any]) -> None:
        if self.post_import_item is not None:
            self.post_import_item(record_id, item, fields)

    def file_docblock(self, docblock: Docblock) -> Docblock:
        if self.filter_file_docblock is None:
            return docblock
        return self.filter_file_docblock(docblock)

    def batch_started(self) -> None:
        if self.begin_batch is not None:
            self.begin_batch()

    def batch_finished(self) -> None:
        if self.end_batch is not None:
            self.end_batch()
