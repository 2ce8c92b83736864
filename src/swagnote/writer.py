"""Serialise the generated document to JSON or YAML on disk.

Writes go through a temp-file-then-rename (:func:`_atomic_write`) so that an
interrupted run never leaves a half-written document behind.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

import yaml

from swagnote.exceptions import EnvironmentError_, InvalidUsageError
from swagnote.models import SwaggerDocument

FORMATS = ("json", "yaml")


def render(document: SwaggerDocument, fmt: str = "json") -> str:
    """Render *document* as text in *fmt* (``json`` or ``yaml``).

    Raises:
        InvalidUsageError: If *fmt* is not a supported format.
    """
    data = document.to_dict()
    if fmt == "json":
        return json.dumps(data, indent=4, ensure_ascii=False) + "\n"
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    raise InvalidUsageError(f"Unsupported output format: {fmt}. Use one of: {', '.join(FORMATS)}")


def format_for_path(path: str, default: str = "json") -> str:
    """Pick the output format from a file extension, falling back to *default*."""
    suffix = Path(path).suffix.lower()
    if suffix in (".yaml", ".yml"):
        return "yaml"
    if suffix == ".json":
        return "json"
    return default


def write_document(document: SwaggerDocument, path: str, fmt: Optional[str] = None) -> Path:
    """Write *document* to *path* atomically and return the resolved path.

    Raises:
        InvalidUsageError: If *fmt* is not a supported format.
        EnvironmentError_: If the file cannot be written.
    """
    target = Path(path).expanduser()
    text = render(document, fmt or format_for_path(path))
    try:
        _atomic_write(target, text)
    except OSError as exc:
        raise EnvironmentError_(f"Can not write {target}: {exc}") from exc
    return target


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* in one rename.

    The text goes to a hidden temp file in the target directory, which is
    synced and then moved over *path* with ``os.replace``. On failure the
    temp file is removed and *path* keeps its previous content.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as stream:
            stream.write(data)
            stream.flush()
            os.fsync(stream.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise
