"""Shared test fixtures for swagnote.

Provides the annotated petstore code base under ``fixtures/gopath`` (both
as a GOPATH tree on disk and loaded into an in-memory provider), a
generator factory, and output/logging resets. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from swagnote.generator import Generator
from swagnote.models import GeneratorConfig
from swagnote.output import reset_output
from swagnote.source import InMemoryProvider


FIXTURES_DIR = Path(__file__).parent / "fixtures"
GOPATH_DIR = FIXTURES_DIR / "gopath"
PETSTORE_DIR = GOPATH_DIR / "src" / "example.com" / "petstore"


# ---------------------------------------------------------------------------
# Auto-reset global output and logging state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the swagnote logger after every test.

    The CLI callback installs a Rich handler on the ``swagnote`` logger
    bound to the streams CliRunner redirects, and turns propagation off.
    Both are undone so that later tests (and ``caplog``) see a clean logger.
    """
    yield
    reset_output()
    logger = logging.getLogger("swagnote")
    logger.handlers = []
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Petstore code base
# ---------------------------------------------------------------------------


@pytest.fixture
def gopath() -> Path:
    """GOPATH root holding ``src/example.com/petstore``."""
    return GOPATH_DIR


@pytest.fixture
def main_file() -> Path:
    return PETSTORE_DIR / "main.go"


@pytest.fixture
def petstore_sources() -> dict[str, dict[str, str]]:
    """The petstore packages as ``{package id: {file name: source}}``."""
    packages: dict[str, dict[str, str]] = {}
    src = GOPATH_DIR / "src"
    for path in sorted(src.rglob("*.go")):
        package_id = path.parent.relative_to(src).as_posix()
        packages.setdefault(package_id, {})[path.name] = path.read_text(encoding="utf-8")
    return packages


@pytest.fixture
def petstore_provider(petstore_sources: dict[str, dict[str, str]]) -> InMemoryProvider:
    main = petstore_sources["example.com/petstore"]["main.go"]
    return InMemoryProvider.from_sources(petstore_sources, files={"main.go": main})


@pytest.fixture
def make_generator(petstore_provider: InMemoryProvider) -> Callable[..., Generator]:
    """Return a factory building a :class:`Generator` over the in-memory petstore."""

    def _factory(provider: Optional[InMemoryProvider] = None, **overrides: Any) -> Generator:
        settings: dict[str, Any] = {
            "api_packages": ["example.com/petstore/controllers"],
            "main_api_file": "main.go",
            "controller_class": "Controller$",
        }
        settings.update(overrides)
        return Generator(GeneratorConfig(**settings), provider=provider or petstore_provider)

    return _factory
