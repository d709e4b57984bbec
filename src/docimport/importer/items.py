"""Create-or-update of a single documented item.

Identity is (slug, type, parent record). An existing record is only written
when one of its fields differs from the incoming data; term and metadata
writes report whether they changed anything, and if only those changed the
record gets a timestamp-only update.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog

from docimport.core.errors import StoreError
from docimport.core.text import item_slug, qualified_name, split_namespace
from docimport.importer.hierarchy import assign_namespaces, assign_packages
from docimport.importer.models import Tag
from docimport.importer.terms import RelationshipPolicy
from docimport.store.protocol import RECORD_FIELDS

if TYPE_CHECKING:
    from docimport.config.models import NamesConfig
    from docimport.importer.extensions import ImportExtensions
    from docimport.importer.models import DocItem
    from docimport.importer.run import FileContext, ImportRun
    from docimport.store.protocol import ContentStore

logger = structlog.get_logger()

SINCE_POLICY = RelationshipPolicy.ADDITIVE
SOURCE_FILE_POLICY = RelationshipPolicy.REPLACE

PUBLISHED = "publish"


class ItemKind(str, Enum):
    FUNCTION = "function"
    CLASS = "class"
    METHOD = "method"
    HOOK = "hook"


def normalize_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Comparable view of record fields: text as str, no parent as None."""
    normalized: dict[str, Any] = {}
    for key in RECORD_FIELDS:
        value = fields.get(key)
        if key == "parent":
            normalized[key] = int(value) if value else None
        else:
            normalized[key] = "" if value is None else str(value)
    return normalized


def diff_fields(candidate: dict[str, Any], existing: dict[str, Any]) -> dict[str, Any]:
    """Fields of candidate whose normalized value differs from existing."""
    new = normalize_fields(candidate)
    old = normalize_fields(existing)
    return {key: value for key, value in new.items() if old[key] != value}


class ItemImporter:
    """Upserts DocItems into a ContentStore."""

    def __init__(
        self,
        store: ContentStore,
        names: NamesConfig,
        extensions: ImportExtensions,
    ) -> None:
        self.store = store
        self.names = names
        self.extensions = extensions

    def kind_of(self, record_type: str) -> ItemKind:
        if record_type == self.names.class_type:
            return ItemKind.CLASS
        if record_type == self.names.method_type:
            return ItemKind.METHOD
        if record_type == self.names.hook_type:
            return ItemKind.HOOK
        return ItemKind.FUNCTION

    @staticmethod
    def _depth(kind: ItemKind, parent_id: int | None) -> int:
        if kind is ItemKind.METHOD:
            return 2
        if kind is ItemKind.HOOK and parent_id:
            return 2
        return 1

    def upsert(
        self,
        data: DocItem,
        run: ImportRun,
        context: FileContext,
        parent_id: int | None = None,
        import_ignored: bool = False,
        overrides: dict[str, Any] | None = None,
    ) -> int | None:
        """Create or update the record for one item.

        Args:
            data: The parsed item.
            run: Current run; receives errors and counters.
            context: The file the item belongs to.
            parent_id: Record id of the owning class or function, if any.
            import_ignored: Import the item even if it carries @ignore.
            overrides: Record fields that replace the defaults (e.g. type).

        Returns:
            The record id, or None if the item was skipped or rejected.
        """
        overrides = overrides or {}
        ns_name = qualified_name(data.name, data.namespace)
        slug = item_slug(ns_name)

        fields: dict[str, Any] = {
            "body": data.docblock.long_description,
            "excerpt": data.docblock.description,
            "slug": slug,
            "parent": parent_id or None,
            "status": PUBLISHED,
            "title": data.name,
            "type": self.names.function_type,
        }
        fields.update(overrides)

        kind = self.kind_of(fields["type"])
        depth = self._depth(kind, parent_id)

        if not import_ignored and data.docblock.has_tag("ignore"):
            logger.info(f'Skipped importing @ignore-d {kind.value} "{ns_name}"', depth=depth)
            run.skipped += 1
            return None

        prepared = self.extensions.prepare_item(data, parent_id, import_ignored, overrides)
        if prepared is None:
            logger.debug("item_vetoed", kind=kind.value, name=ns_name)
            run.skipped += 1
            return None
        data = prepared

        existing_id = self.store.find_record(slug, fields["type"], parent_id or None)
        fields = self.extensions.record_fields(fields, existing_id)

        is_new = existing_id is None
        needed_update = False
        try:
            if existing_id is not None:
                record_id = existing_id
                changed = diff_fields(fields, self.store.get_record(existing_id))
                if changed:
                    logger.debug("record_fields_changed", name=ns_name, fields=sorted(changed))
                    self.store.update_record(existing_id, fields)
                    needed_update = True
            else:
                record_id = self.store.create_record(fields)
        except StoreError as e:
            run.record_error(
                f'Problem inserting/updating record for {kind.value} "{ns_name}": {e.message}'
            )
            run.failed += 1
            return None

        changes = [
            assign_namespaces(
                run.resolver,
                self.store,
                record_id,
                split_namespace(data.namespace),
                self.names.namespace_taxonomy,
            ),
            self._assign_since(run, record_id, data.docblock.find_tags("since")),
            assign_packages(
                run.resolver,
                self.store,
                record_id,
                data.docblock.tags,
                context.docblock.tags,
                self.names.package_taxonomy,
            ),
            self.store.set_term_relationships(
                record_id,
                self.names.source_file_taxonomy,
                [context.file_term.id],
                additive=SOURCE_FILE_POLICY.additive,
            ),
        ]
        changes.extend(self._persist_metadata(record_id, data, kind, context))

        if not is_new and not needed_update and any(changes):
            self.store.update_record(record_id, fields)

        action = "Imported" if is_new else "Updated"
        if is_new:
            run.imported += 1
        else:
            run.updated += 1
        logger.info(f'{action} {kind.value} "{ns_name}"', depth=depth, record_id=record_id)

        self.extensions.item_imported(record_id, data, fields)
        return record_id

    def _assign_since(self, run: ImportRun, record_id: int, tags: list[Tag]) -> bool:
        changed = False
        for tag in tags:
            if not tag.content:
                continue
            try:
                term = run.resolver.resolve(tag.content, self.names.since_taxonomy)
            except StoreError as e:
                logger.warning("Cannot set @since term", value=tag.content, reason=e.message)
                continue
            if self.store.set_term_relationships(
                record_id,
                self.names.since_taxonomy,
                [term.id],
                additive=SINCE_POLICY.additive,
            ):
                changed = True
        return changed

    def _persist_metadata(
        self,
        record_id: int,
        data: DocItem,
        kind: ItemKind,
        context: FileContext,
    ) -> list[bool]:
        tags = list(data.docblock.tags)
        if context.deprecated:
            tags.append(Tag(name="deprecated", content=context.deprecated))

        changes: list[bool] = []
        if kind is not ItemKind.CLASS:
            arguments = getattr(data, "arguments", [])
            changes.append(self.store.set_metadata(record_id, "arguments", arguments))
        if data.aliases:
            changes.append(self.store.set_metadata(record_id, "aliases", list(data.aliases)))
        if data.namespace:
            changes.append(self.store.set_metadata(record_id, "namespace", data.namespace))
        changes.append(self.store.set_metadata(record_id, "line", data.line))
        changes.append(self.store.set_metadata(record_id, "end_line", data.end_line))
        changes.append(
            self.store.set_metadata(record_id, "tags", [tag.model_dump() for tag in tags])
        )
        return changes
