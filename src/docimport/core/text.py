"""Slug and name helpers shared by the importer and the store.

Slugs are the identity token of a record, so every transform here must stay
deterministic: the same qualified name always yields the same slug.
"""

from __future__ import annotations

import re
import unicodedata

NAMESPACE_SEPARATOR = "\\"
METHOD_SEPARATOR = "::"
GLOBAL_NAMESPACE = "global"

_TAG_RE = re.compile(r"<[^>]*>")
_ENTITY_RE = re.compile(r"&[a-z0-9#]+;")
_DISALLOWED_RE = re.compile(r"[^a-z0-9 _\-]")
_WHITESPACE_RE = re.compile(r"\s+")
_DASHES_RE = re.compile(r"-+")


def _strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def sanitize_title(title: str) -> str:
    """Normalize a title into a URL-safe token.

    Examples:
        "WP_Query" -> "wp_query"
        "My Func" -> "my-func"
        "wp-includes_version.php" -> "wp-includes_version-php"
        "???" -> ""
    """
    slug = _TAG_RE.sub("", title)
    slug = _strip_accents(slug).lower()
    slug = _ENTITY_RE.sub("", slug)
    slug = slug.replace(".", "-").replace("/", "-")
    slug = _DISALLOWED_RE.sub("", slug)
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _DASHES_RE.sub("-", slug)
    return slug.strip("-")


def qualified_name(name: str, namespace: str | None) -> str:
    """Namespace-qualified name; empty and "global" namespaces are dropped."""
    if not namespace or namespace == GLOBAL_NAMESPACE:
        return name
    return f"{namespace}{NAMESPACE_SEPARATOR}{name}"


def item_slug(ns_name: str) -> str:
    """Slug for a qualified item name such as ``Ns\\Class::method``."""
    joined = ns_name.replace(METHOD_SEPARATOR, "-").replace(NAMESPACE_SEPARATOR, "-")
    return sanitize_title(joined)


def file_slug(path: str) -> str:
    """Slug for a source-file term; directory separators become underscores."""
    return sanitize_title(path.replace("/", "_"))


def namespace_slug(segment: str) -> str:
    return segment.lower().replace("_", "-")


def split_namespace(namespace: str | None) -> list[str]:
    """Split ``A\\B\\C`` into its segments, ignoring empty pieces."""
    if not namespace or namespace == GLOBAL_NAMESPACE:
        return []
    return [part for part in namespace.split(NAMESPACE_SEPARATOR) if part]
