"""Tests for the parser input models."""

import json
from pathlib import Path

import pytest

from docimport.core.errors import ErrorCode, ImportRunError
from docimport.importer.models import (
    Docblock,
    Function,
    SourceFile,
    load_source_files,
    parse_source_files,
)


class TestDocblock:
    def test_none_descriptions_become_empty(self) -> None:
        docblock = Docblock.model_validate({"description": None, "long_description": None})
        assert docblock.description == ""
        assert docblock.long_description == ""

    def test_find_tags_keeps_order(self) -> None:
        docblock = Docblock.model_validate(
            {"tags": [{"name": "since", "content": "1.0"}, {"name": "param"}, {"name": "since", "content": "2.0"}]}
        )
        assert [t.content for t in docblock.find_tags("since")] == ["1.0", "2.0"]
        assert docblock.has_tag("param")
        assert not docblock.has_tag("ignore")

    def test_extra_tag_keys_kept(self) -> None:
        docblock = Docblock.model_validate(
            {"tags": [{"name": "param", "content": "$id", "types": ["int"], "variable": "$id"}]}
        )
        dumped = docblock.tags[0].model_dump()
        assert dumped["types"] == ["int"]
        assert dumped["variable"] == "$id"


class TestItems:
    def test_doc_alias(self) -> None:
        function = Function.model_validate({"name": "bar", "doc": {"description": "Bar."}})
        assert function.docblock.description == "Bar."

    def test_unknown_keys_ignored(self) -> None:
        function = Function.model_validate({"name": "bar", "returns_by_reference": True})
        assert function.name == "bar"

    def test_source_file_file_alias_and_defaults(self) -> None:
        file = SourceFile.model_validate({"path": "foo.php", "file": {"tags": [{"name": "package", "content": "Core"}]}})
        assert file.docblock.find_tags("package")[0].content == "Core"
        assert file.functions == []
        assert file.classes == []
        assert file.hooks == []
        assert file.uses.functions == []


class TestParse:
    def test_invalid_structure_raises(self) -> None:
        with pytest.raises(ImportRunError) as exc_info:
            parse_source_files([{"functions": []}], source="out.json")
        assert exc_info.value.code == ErrorCode.IMPORT_INVALID_INPUT
        assert "path" in exc_info.value.message

    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "out.json"
        path.write_text(json.dumps([{"path": "foo.php", "functions": [{"name": "bar"}]}]))

        files = load_source_files(path)

        assert files[0].functions[0].name == "bar"

    def test_load_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "out.json"
        path.write_text("{not json")
        with pytest.raises(ImportRunError):
            load_source_files(path)


class TestLenientInput:
    def test_nulls_fall_back_to_defaults(self) -> None:
        class_item = SourceFile.model_validate(
            {
                "path": "foo.php",
                "root": None,
                "classes": [
                    {
                        "name": "Foo",
                        "line": None,
                        "aliases": None,
                        "implements": None,
                        "methods": None,
                        "doc": None,
                    }
                ],
            }
        ).classes[0]

        assert class_item.line == 0
        assert class_item.aliases == []
        assert class_item.implements == []
        assert class_item.methods == []
        assert class_item.docblock.description == ""

    def test_null_tag_content_is_empty(self) -> None:
        docblock = Docblock.model_validate({"tags": [{"name": "since", "content": None, "types": None}]})
        assert docblock.tags[0].content == ""
        assert docblock.tags[0].model_dump()["types"] is None

    def test_invalid_function_set_aside(self) -> None:
        file = SourceFile.model_validate(
            {"path": "a.php", "functions": [{"line": 3}, {"name": "good"}, {"name": "bad", "line": "x"}]}
        )

        assert [f.name for f in file.functions] == ["good"]
        assert [(e.kind, e.index, e.name) for e in file.invalid_entries] == [
            ("function", 0, None),
            ("function", 2, "bad"),
        ]
        assert file.invalid_entries[0].reason == "name: Field required"

    def test_invalid_method_set_aside_on_class(self) -> None:
        file = SourceFile.model_validate(
            {"path": "a.php", "classes": [{"name": "Foo", "methods": [{"name": 5}, {"name": "ok"}]}]}
        )

        class_item = file.classes[0]
        assert file.invalid_entries == []
        assert [m.name for m in class_item.methods] == ["ok"]
        assert class_item.invalid_entries[0].kind == "method"

    def test_invalid_hook_set_aside_on_function(self) -> None:
        function = Function.model_validate({"name": "bar", "hooks": ["not a hook", {"name": "h"}]})

        assert [h.name for h in function.hooks] == ["h"]
        assert function.invalid_entries[0].kind == "hook"
        assert function.invalid_entries[0].index == 0

    def test_parse_keeps_valid_items(self) -> None:
        files = parse_source_files(
            [{"path": "a.php", "functions": [{"name": "bad", "line": None, "aliases": 3}, {"name": "good"}]}]
        )

        assert [f.name for f in files[0].functions] == ["good"]
        assert len(files[0].invalid_entries) == 1
