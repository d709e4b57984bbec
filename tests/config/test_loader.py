"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence
- resolve_db_path() function
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from docimport.config.loader import (
    GLOBAL_CONFIG_PATH,
    _deep_merge,
    _load_yaml,
    load_config,
    resolve_db_path,
)
from docimport.core.errors import ConfigError


@pytest.fixture
def no_global_config(tmp_path: Path):
    with patch("docimport.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml"):
        yield


def _write_repo_config(root: Path, content: str) -> None:
    config_dir = root / ".docimport"
    config_dir.mkdir(exist_ok=True)
    (config_dir / "config.yaml").write_text(content)


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("importer:\n  skip_sleep: true\n")
        assert _load_yaml(yaml_file) == {"importer": {"skip_sleep": True}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")
        assert _load_yaml(yaml_file) == {}

    def test_raises_config_error_for_invalid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("logging:\n  level:\n    - invalid: [unclosed")
        with pytest.raises(ConfigError):
            _load_yaml(yaml_file)

    def test_raises_config_error_for_non_mapping(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_override_wins(self) -> None:
        assert _deep_merge({"a": 1, "b": 2}, {"b": 3}) == {"a": 1, "b": 3}

    def test_nested_merge(self) -> None:
        base = {"importer": {"skip_sleep": False, "pause_every": 5}}
        override = {"importer": {"skip_sleep": True}}
        assert _deep_merge(base, override) == {"importer": {"skip_sleep": True, "pause_every": 5}}

    def test_override_replaces_non_dict(self) -> None:
        base: dict[str, Any] = {"a": {"nested": 1}}
        override: dict[str, Any] = {"a": "simple"}
        assert _deep_merge(base, override) == {"a": "simple"}

    def test_does_not_mutate_base(self) -> None:
        base = {"a": 1}
        _deep_merge(base, {"b": 2})
        assert base == {"a": 1}


@pytest.mark.usefixtures("no_global_config")
class TestLoadConfig:
    """Tests for load_config function."""

    def test_returns_default_config_when_no_files(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert config.logging.level == "INFO"
        assert config.names.function_type == "doc-function"
        assert config.importer.skip_duplicate_hooks is False

    def test_loads_repo_config(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "names:\n  hook_type: wp-parser-hook\n")
        config = load_config(tmp_path)
        assert config.names.hook_type == "wp-parser-hook"

    def test_global_config_under_repo_config(self, tmp_path: Path) -> None:
        global_file = tmp_path / "global.yaml"
        global_file.write_text("importer:\n  pause_every: 50\n  skip_sleep: true\n")
        _write_repo_config(tmp_path, "importer:\n  pause_every: 7\n")

        with patch("docimport.config.loader.GLOBAL_CONFIG_PATH", global_file):
            config = load_config(tmp_path)

        assert config.importer.pause_every == 7
        assert config.importer.skip_sleep is True

    def test_env_vars_override_yaml(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "importer:\n  skip_duplicate_hooks: false\n")
        with patch.dict(os.environ, {"DOCIMPORT__IMPORTER__SKIP_DUPLICATE_HOOKS": "true"}):
            config = load_config(tmp_path)
        assert config.importer.skip_duplicate_hooks is True

    def test_kwargs_override_all(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "database:\n  path: from-yaml.db\n")
        config = load_config(tmp_path, database={"path": "/tmp/kw.db"})
        assert config.database.path == "/tmp/kw.db"

    def test_raises_config_error_for_invalid_value(self, tmp_path: Path) -> None:
        _write_repo_config(tmp_path, "importer:\n  pause_every: -1\n")
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path)
        assert "pause_every" in exc_info.value.message


@pytest.mark.usefixtures("no_global_config")
class TestResolveDbPath:
    """Tests for resolve_db_path function."""

    def test_relative_path_resolves_against_root(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert resolve_db_path(config, tmp_path) == tmp_path / ".docimport" / "content.db"

    def test_absolute_path_kept(self, tmp_path: Path) -> None:
        db = tmp_path / "elsewhere" / "x.db"
        config = load_config(tmp_path, database={"path": str(db)})
        assert resolve_db_path(config, Path("/unused")) == db


class TestGlobalConfigPath:
    def test_is_in_user_config(self) -> None:
        assert isinstance(GLOBAL_CONFIG_PATH, Path)
        assert "docimport" in str(GLOBAL_CONFIG_PATH)
