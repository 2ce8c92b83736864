"""Configuration loading and precedence resolution.

A run is configured by a single :class:`~swagnote.models.GeneratorConfig`
assembled from four layers, highest precedence first:

1. CLI flags passed to :func:`resolve_config`.
2. Environment variables: ``SWAGNOTE_API_PACKAGE`` (comma separated),
   ``SWAGNOTE_OUTPUT``, ``SWAGNOTE_CONTROLLER_CLASS``, ``SWAGNOTE_IGNORE``,
   plus the Go toolchain's own ``GOPATH`` (search roots, ``os.pathsep``
   separated) and ``GOROOT``.
3. The project config file: ``swagnote.json``, ``swagnote.yaml`` or
   ``swagnote.yml`` in the working directory (or an explicit ``--config``
   path), in JSON or YAML.
4. Defaults.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import ValidationError

from swagnote.exceptions import ConfigError
from swagnote.models import GeneratorConfig
from swagnote.writer import FORMATS, format_for_path

PROJECT_CONFIG_FILENAMES = ("swagnote.json", "swagnote.yaml", "swagnote.yml")

ENV_API_PACKAGE = "SWAGNOTE_API_PACKAGE"
ENV_OUTPUT = "SWAGNOTE_OUTPUT"
ENV_CONTROLLER_CLASS = "SWAGNOTE_CONTROLLER_CLASS"
ENV_IGNORE = "SWAGNOTE_IGNORE"


def _split_list(value: str, sep: str = ",") -> list[str]:
    return [item.strip() for item in value.split(sep) if item.strip()]


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse config content as JSON or YAML.

    Tries JSON first (unless hint is ``yaml``), then falls back to YAML.

    Raises:
        ConfigError: If the content is neither, or is not a mapping.
    """
    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise ConfigError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise ConfigError(f"Config must be an object (got {type(result).__name__})")
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML: {exc}") from exc
    if result is None:
        return {}
    if not isinstance(result, dict):
        raise ConfigError(f"Config must be a mapping (got {type(result).__name__})")
    return result


def find_project_config(cwd: Optional[Path] = None) -> Optional[Path]:
    """Return the first project config file present in *cwd*, if any."""
    base = cwd or Path.cwd()
    for name in PROJECT_CONFIG_FILENAMES:
        path = base / name
        if path.is_file():
            return path
    return None


def load_project_config(
    path: Optional[str] = None, cwd: Optional[Path] = None
) -> Optional[dict[str, Any]]:
    """Load the project config file.

    Args:
        path: Explicit config file. When given it must exist.
        cwd: Directory searched for the default file names.

    Returns:
        The parsed mapping, or ``None`` if no file was given or found.

    Raises:
        ConfigError: If the file is missing (explicit *path*), unreadable
            or unparsable.
    """
    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
    else:
        config_path = find_project_config(cwd)
        if config_path is None:
            return None
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc

    suffix = config_path.suffix.lower()
    hint = "json" if suffix == ".json" else "yaml" if suffix in (".yaml", ".yml") else ""
    try:
        return _parse_content(text, hint=hint)
    except ConfigError as exc:
        raise ConfigError(f"Invalid project config at {config_path}: {exc}") from exc


def _env_layer(environ: Mapping[str, str]) -> dict[str, Any]:
    layer: dict[str, Any] = {}
    if environ.get(ENV_API_PACKAGE):
        layer["api_packages"] = _split_list(environ[ENV_API_PACKAGE])
    if environ.get(ENV_OUTPUT):
        layer["output_path"] = environ[ENV_OUTPUT]
    if environ.get(ENV_CONTROLLER_CLASS):
        layer["controller_class"] = environ[ENV_CONTROLLER_CLASS]
    if environ.get(ENV_IGNORE):
        layer["ignore"] = environ[ENV_IGNORE]
    if environ.get("GOPATH"):
        layer["search_roots"] = _split_list(environ["GOPATH"], os.pathsep)
    if environ.get("GOROOT"):
        layer["goroot"] = environ["GOROOT"]
    return layer


def resolve_config(
    cli_api_packages: Optional[list[str]] = None,
    cli_main_file: Optional[str] = None,
    cli_output: Optional[str] = None,
    cli_format: Optional[str] = None,
    cli_controller_class: Optional[str] = None,
    cli_ignore: Optional[str] = None,
    cli_strict: Optional[bool] = None,
    config_file: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
) -> GeneratorConfig:
    """Resolve the run configuration with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_*`` arguments)
        2. Environment variables
        3. Project config file
        4. Defaults

    When no layer sets ``output_format`` it follows the output path's
    extension (``.yaml``/``.yml`` -> yaml, anything else -> json).

    Raises:
        ConfigError: If a layer holds invalid values.
    """
    data: dict[str, Any] = {}

    # 3. Project config file
    project = load_project_config(config_file, cwd)
    if project:
        data.update(project)

    # 2. Environment variables
    data.update(_env_layer(os.environ if environ is None else environ))

    # 1. CLI flags
    if cli_api_packages:
        data["api_packages"] = [p for value in cli_api_packages for p in _split_list(value)]
    if cli_main_file is not None:
        data["main_api_file"] = cli_main_file
    if cli_output is not None:
        data["output_path"] = cli_output
    if cli_format is not None:
        data["output_format"] = cli_format
    if cli_controller_class is not None:
        data["controller_class"] = cli_controller_class
    if cli_ignore is not None:
        data["ignore"] = cli_ignore
    if cli_strict:
        data["strict"] = True

    if isinstance(data.get("api_packages"), str):
        data["api_packages"] = _split_list(data["api_packages"])

    try:
        config = GeneratorConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc

    if "output_format" not in data:
        config.output_format = format_for_path(config.output_path)
    config.output_format = config.output_format.lower()
    if config.output_format not in FORMATS:
        raise ConfigError(
            f"Unsupported output format: {config.output_format}. Use one of: {', '.join(FORMATS)}"
        )
    return config
