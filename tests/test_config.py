"""Tests for swagnote.config -- project file, environment and precedence."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import pytest

from swagnote.config import (
    _parse_content,
    find_project_config,
    load_project_config,
    resolve_config,
)
from swagnote.exceptions import ConfigError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseContent:
    def test_json(self) -> None:
        assert _parse_content('{"output_path": "api.json"}') == {"output_path": "api.json"}

    def test_yaml_fallback(self) -> None:
        assert _parse_content("output_path: api.yaml\nstrict: true\n") == {
            "output_path": "api.yaml",
            "strict": True,
        }

    def test_json_hint_rejects_yaml(self) -> None:
        with pytest.raises(ConfigError, match="Invalid JSON"):
            _parse_content("output_path: x", hint="json")

    def test_non_mapping(self) -> None:
        with pytest.raises(ConfigError, match="must be"):
            _parse_content("[1, 2]")

    def test_empty_yaml(self) -> None:
        assert _parse_content("", hint="yaml") == {}


class TestProjectConfig:
    def test_find_prefers_json(self, tmp_path: Path) -> None:
        (tmp_path / "swagnote.yaml").write_text("strict: true\n", encoding="utf-8")
        _write_json(tmp_path / "swagnote.json", {})
        assert find_project_config(tmp_path) == tmp_path / "swagnote.json"

    def test_none_found(self, tmp_path: Path) -> None:
        assert find_project_config(tmp_path) is None
        assert load_project_config(cwd=tmp_path) is None

    def test_explicit_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_project_config(str(tmp_path / "nope.yaml"))

    def test_invalid_file_names_path(self, tmp_path: Path) -> None:
        path = tmp_path / "swagnote.json"
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(ConfigError, match="swagnote.json"):
            load_project_config(cwd=tmp_path)


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        config = resolve_config(environ={}, cwd=tmp_path)
        assert config.api_packages == []
        assert config.output_path == "swagger.json"
        assert config.output_format == "json"
        assert config.marshal_types["NullString"] == "string"
        assert not config.strict

    def test_project_file(self, tmp_path: Path) -> None:
        (tmp_path / "swagnote.yaml").write_text(
            "api_packages: example.com/api/controllers, example.com/api/admin\n"
            "output_path: docs/api.yaml\n"
            "exclude:\n  - internal/\n",
            encoding="utf-8",
        )
        config = resolve_config(environ={}, cwd=tmp_path)
        assert config.api_packages == ["example.com/api/controllers", "example.com/api/admin"]
        assert config.output_format == "yaml"
        assert config.exclude == ["internal/"]

    def test_environment_over_project(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "swagnote.json", {"output_path": "from-file.json", "ignore": "file"})
        config = resolve_config(
            environ={
                "SWAGNOTE_OUTPUT": "from-env.json",
                "SWAGNOTE_API_PACKAGE": "a, b",
                "GOPATH": f"/go/one{os.pathsep}/go/two",
                "GOROOT": "/usr/local/go",
            },
            cwd=tmp_path,
        )
        assert config.output_path == "from-env.json"
        assert config.ignore == "file"
        assert config.api_packages == ["a", "b"]
        assert config.search_roots == ["/go/one", "/go/two"]
        assert config.goroot == "/usr/local/go"

    def test_cli_over_environment(self, tmp_path: Path) -> None:
        config = resolve_config(
            cli_api_packages=["x,y", "z"],
            cli_output="cli.yaml",
            cli_controller_class="Controller$",
            cli_strict=True,
            environ={"SWAGNOTE_OUTPUT": "env.json", "SWAGNOTE_CONTROLLER_CLASS": "Env"},
            cwd=tmp_path,
        )
        assert config.api_packages == ["x", "y", "z"]
        assert config.output_path == "cli.yaml"
        assert config.output_format == "yaml"
        assert config.controller_class == "Controller$"
        assert config.strict

    def test_explicit_format_beats_extension(self, tmp_path: Path) -> None:
        config = resolve_config(cli_output="api.json", cli_format="YAML", environ={}, cwd=tmp_path)
        assert config.output_format == "yaml"

    def test_explicit_config_file(self, tmp_path: Path) -> None:
        path = tmp_path / "conf" / "custom.json"
        _write_json(path, {"main_api_file": "cmd/main.go"})
        config = resolve_config(config_file=str(path), environ={}, cwd=tmp_path)
        assert config.main_api_file == "cmd/main.go"

    def test_unsupported_format(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Unsupported output format"):
            resolve_config(cli_format="xml", environ={}, cwd=tmp_path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "swagnote.json", {"strict": "sometimes"})
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config(environ={}, cwd=tmp_path)
