"""Detection of hook docblocks that only point at another hook's docs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docimport.importer.models import Hook

DUPLICATE_PREFIXES = (
    "This action is documented in",
    "This filter is documented in",
)


def is_duplicate_hook(hook: Hook) -> bool:
    """True for a hook whose docs live elsewhere, or that has no docs at all."""
    description = hook.docblock.description
    if description.startswith(DUPLICATE_PREFIXES):
        return True
    return description == "" and hook.docblock.long_description == ""


def should_import_hook(hook: Hook, skip_duplicates: bool) -> bool:
    if not skip_duplicates:
        return True
    return not is_duplicate_hook(hook)
