"""Tests for namespace and package term assignment."""

from unittest.mock import MagicMock

from docimport.importer.hierarchy import assign_namespaces, assign_packages
from docimport.importer.models import Tag
from docimport.importer.terms import TermResolver
from docimport.store import ROOT_TERM, SqlContentStore


def _record(store: SqlContentStore, slug: str = "bar") -> int:
    return store.create_record(
        {"slug": slug, "title": slug, "type": "doc-function", "status": "publish"}
    )


def _tags(**tags: str) -> list[Tag]:
    return [Tag(name=name, content=content) for name, content in tags.items()]


class TestAssignNamespaces:
    def test_chain_root_to_leaf(self, store: SqlContentStore) -> None:
        # Given
        resolver = TermResolver(store)
        record_id = _record(store)

        # When
        changed = assign_namespaces(resolver, store, record_id, ["A", "B", "C"], "doc-namespace")

        # Then
        a = store.find_term("A", "doc-namespace", ROOT_TERM)
        assert a is not None
        b = store.find_term("B", "doc-namespace", a.id)
        assert b is not None
        c = store.find_term("C", "doc-namespace", b.id)
        assert c is not None
        assert changed is True
        assert store.get_term_ids(record_id, "doc-namespace") == sorted([a.id, b.id, c.id])

    def test_repeat_is_unchanged_and_creates_nothing(self, store: SqlContentStore) -> None:
        record_id = _record(store)
        assign_namespaces(TermResolver(store), store, record_id, ["A", "B", "C"], "doc-namespace")

        spy = MagicMock(wraps=store)
        changed = assign_namespaces(TermResolver(spy), spy, record_id, ["A", "B", "C"], "doc-namespace")

        assert changed is False
        spy.create_term.assert_not_called()

    def test_slug_from_segment(self, store: SqlContentStore) -> None:
        record_id = _record(store)
        assign_namespaces(TermResolver(store), store, record_id, ["WP_Parser"], "doc-namespace")

        term = store.find_term("WP_Parser", "doc-namespace", ROOT_TERM)
        assert term is not None
        assert term.slug == "wp-parser"

    def test_failed_segment_stops_chain(self, store: SqlContentStore) -> None:
        # Given
        resolver = TermResolver(store)
        record_id = _record(store)
        too_long = "x" * 300

        # When
        changed = assign_namespaces(resolver, store, record_id, ["A", too_long, "C"], "doc-namespace")

        # Then
        a = store.find_term("A", "doc-namespace", ROOT_TERM)
        assert a is not None
        assert changed is True
        assert store.get_term_ids(record_id, "doc-namespace") == [a.id]
        assert resolver.cached("C", "doc-namespace", a.id) is None
        assert resolver.cached_count == 1

    def test_no_segments_leaves_relationships_alone(self) -> None:
        store = MagicMock()
        changed = assign_namespaces(TermResolver(store), store, 1, [], "doc-namespace")
        assert changed is False
        store.set_term_relationships.assert_not_called()


class TestAssignPackages:
    def test_item_tags(self, store: SqlContentStore) -> None:
        record_id = _record(store)

        changed = assign_packages(
            TermResolver(store),
            store,
            record_id,
            _tags(package="WordPress", subpackage="Query"),
            [],
            "doc-package",
        )

        main = store.find_term("WordPress", "doc-package", ROOT_TERM)
        assert main is not None
        sub = store.find_term("Query", "doc-package", main.id)
        assert sub is not None
        assert changed is True
        assert store.get_term_ids(record_id, "doc-package") == sorted([main.id, sub.id])

    def test_file_fallback(self, store: SqlContentStore) -> None:
        record_id = _record(store)

        assign_packages(
            TermResolver(store),
            store,
            record_id,
            [],
            _tags(package="WordPress", subpackage="Template"),
            "doc-package",
        )

        main = store.find_term("WordPress", "doc-package", ROOT_TERM)
        assert main is not None
        sub = store.find_term("Template", "doc-package", main.id)
        assert sub is not None
        assert store.get_term_ids(record_id, "doc-package") == sorted([main.id, sub.id])

    def test_item_tag_overrides_file(self, store: SqlContentStore) -> None:
        record_id = _record(store)

        assign_packages(
            TermResolver(store),
            store,
            record_id,
            _tags(package="Plugin"),
            _tags(package="WordPress"),
            "doc-package",
        )

        plugin = store.find_term("Plugin", "doc-package", ROOT_TERM)
        assert plugin is not None
        assert store.get_term_ids(record_id, "doc-package") == [plugin.id]
        assert store.find_term("WordPress", "doc-package", ROOT_TERM) is None

    def test_sub_under_root_when_main_fails(self, store: SqlContentStore) -> None:
        record_id = _record(store)

        assign_packages(
            TermResolver(store),
            store,
            record_id,
            _tags(package="???", subpackage="Query"),
            [],
            "doc-package",
        )

        sub = store.find_term("Query", "doc-package", ROOT_TERM)
        assert sub is not None
        assert store.get_term_ids(record_id, "doc-package") == [sub.id]

    def test_no_tags_clears_previous_packages(self, store: SqlContentStore) -> None:
        record_id = _record(store)
        resolver = TermResolver(store)
        assign_packages(resolver, store, record_id, _tags(package="Old"), [], "doc-package")

        changed = assign_packages(resolver, store, record_id, [], [], "doc-package")

        assert changed is True
        assert store.get_term_ids(record_id, "doc-package") == []
