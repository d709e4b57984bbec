"""Tests for hook deduplication."""

import pytest

from docimport.importer.hooks import is_duplicate_hook, should_import_hook
from docimport.importer.models import Hook


def _hook(description: str = "", long_description: str = "") -> Hook:
    return Hook.model_validate(
        {
            "name": "save_post",
            "doc": {"description": description, "long_description": long_description},
        }
    )


class TestIsDuplicateHook:
    @pytest.mark.parametrize(
        "description",
        [
            "This action is documented in foo",
            "This filter is documented in wp-includes/post.php",
        ],
    )
    def test_documented_elsewhere(self, description: str) -> None:
        assert is_duplicate_hook(_hook(description))

    def test_undocumented(self) -> None:
        assert is_duplicate_hook(_hook())

    def test_long_description_only_is_not_duplicate(self) -> None:
        assert not is_duplicate_hook(_hook(long_description="Fires once a post is saved."))

    def test_documented(self) -> None:
        assert not is_duplicate_hook(_hook("Fires once a post has been saved."))

    def test_prefix_must_lead(self) -> None:
        assert not is_duplicate_hook(_hook("Note: This action is documented in foo"))


class TestShouldImportHook:
    def test_dedup_enabled_skips(self) -> None:
        assert should_import_hook(_hook("This action is documented in foo"), True) is False

    def test_dedup_disabled_imports(self) -> None:
        assert should_import_hook(_hook("This action is documented in foo"), False) is True
        assert should_import_hook(_hook(), False) is True
