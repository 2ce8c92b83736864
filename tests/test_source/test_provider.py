"""Tests for the source model providers."""

from __future__ import annotations

from pathlib import Path

import pytest

from swagnote.exceptions import EnvironmentError_
from swagnote.source import FileSystemProvider, InMemoryProvider


def _package(root: Path, rel: str, source: str = "package p\n") -> Path:
    directory = root / rel
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "p.go").write_text(source, encoding="utf-8")
    return directory


# ---------------------------------------------------------------------------
# FileSystemProvider
# ---------------------------------------------------------------------------


class TestFileSystemProviderSetup:
    def test_requires_a_root(self) -> None:
        with pytest.raises(EnvironmentError_, match="No Go search root"):
            FileSystemProvider([])

    def test_missing_search_root(self, tmp_path: Path) -> None:
        with pytest.raises(EnvironmentError_, match="does not exist"):
            FileSystemProvider([str(tmp_path / "nope")])

    def test_missing_module_root(self, tmp_path: Path) -> None:
        with pytest.raises(EnvironmentError_, match="Module root"):
            FileSystemProvider([], module_root=str(tmp_path / "nope"))


class TestResolvePackage:
    def test_gopath_lookup(self, gopath: Path) -> None:
        provider = FileSystemProvider([str(gopath)])
        location = provider.resolve_package("example.com/petstore/models")
        assert location == str((gopath / "src/example.com/petstore/models").resolve())

    def test_missing_package(self, gopath: Path) -> None:
        assert FileSystemProvider([str(gopath)]).resolve_package("example.com/nope") is None

    def test_search_roots_in_order(self, tmp_path: Path) -> None:
        first = _package(tmp_path / "one", "src/lib")
        _package(tmp_path / "two", "src/lib")
        provider = FileSystemProvider([str(tmp_path / "one"), str(tmp_path / "two")])
        assert provider.resolve_package("lib") == str(first.resolve())

    def test_vendor_wins(self, gopath: Path, tmp_path: Path) -> None:
        vendored = _package(tmp_path / "vendor", "example.com/petstore/models")
        provider = FileSystemProvider([str(gopath)], vendor_dir=str(tmp_path / "vendor"))
        assert provider.resolve_package("example.com/petstore/models") == str(vendored.resolve())

    def test_goroot_lookup(self, tmp_path: Path) -> None:
        root = tmp_path / "gopath"
        root.mkdir()
        fmt = _package(tmp_path / "goroot", "src/fmt")
        provider = FileSystemProvider([str(root)], goroot=str(tmp_path / "goroot"))
        assert provider.resolve_package("fmt") == str(fmt.resolve())

    def test_module_root_lookup(self, tmp_path: Path) -> None:
        module = tmp_path / "mod"
        module.mkdir()
        (module / "go.mod").write_text("module example.com/mod\n\ngo 1.21\n", encoding="utf-8")
        api = _package(module, "api")

        provider = FileSystemProvider([], module_root=str(module))

        assert provider.module_path == "example.com/mod"
        assert provider.resolve_package("example.com/mod/api") == str(api.resolve())
        assert provider.resolve_package("example.com/mod") == str(module.resolve())
        assert provider.resolve_package("example.com/other") is None

    def test_candidates_order(self, tmp_path: Path) -> None:
        provider = FileSystemProvider(
            [str(tmp_path)], goroot=str(tmp_path / "go"), vendor_dir="vendor"
        )
        assert provider.candidates("lib") == [
            Path("vendor/lib"),
            tmp_path / "src" / "lib",
            tmp_path / "go" / "src" / "lib",
            tmp_path / "go" / "src" / "vendor" / "lib",
            tmp_path / "go" / "src" / "pkg" / "lib",
        ]


class TestSubpackages:
    def test_fixture_tree(self, gopath: Path) -> None:
        provider = FileSystemProvider([str(gopath)])
        location = provider.resolve_package("example.com/petstore/controllers")
        assert provider.subpackages("example.com/petstore/controllers", location) == [
            "example.com/petstore/controllers/admin"
        ]

    def test_pruned_directories(self, tmp_path: Path) -> None:
        api = tmp_path / "api"
        _package(api, "v1")
        _package(api, "v1/users")
        _package(api, "testdata/fake")
        _package(api, "vendor/dep")
        _package(api, ".git/hooks")
        _package(api, "_old")
        (api / "docs").mkdir()
        (api / "docs" / "README.md").write_text("docs\n", encoding="utf-8")

        provider = FileSystemProvider([str(tmp_path)])

        assert provider.subpackages("x/api", str(api)) == ["x/api/v1", "x/api/v1/users"]

    def test_exclude_patterns(self, tmp_path: Path) -> None:
        api = tmp_path / "api"
        _package(api, "v1")
        _package(api, "internal/mocks")
        provider = FileSystemProvider([str(tmp_path)], exclude=["internal/"])
        assert provider.subpackages("x/api", str(api)) == ["x/api/v1"]

    def test_directories_without_go_files_are_walked_through(self, tmp_path: Path) -> None:
        api = tmp_path / "api"
        _package(api, "group/leaf")
        provider = FileSystemProvider([str(tmp_path)])
        assert provider.subpackages("x/api", str(api)) == ["x/api/group/leaf"]


class TestFileSystemDeclarations:
    def test_declarations_and_comments(self, gopath: Path, main_file: Path) -> None:
        provider = FileSystemProvider([str(gopath)])
        location = provider.resolve_package("example.com/petstore/models")

        decls = provider.declarations_of(location)

        assert decls.name == "models"
        assert {"Pet", "Tag", "Owner", "Error", "Status"} <= set(decls.types)
        assert "@Title Petstore API" in provider.file_comments(str(main_file))

    def test_missing_file_raises(self, gopath: Path) -> None:
        with pytest.raises(OSError):
            FileSystemProvider([str(gopath)]).file_comments(str(gopath / "missing.go"))


# ---------------------------------------------------------------------------
# InMemoryProvider
# ---------------------------------------------------------------------------


class TestInMemoryProvider:
    @pytest.fixture
    def provider(self) -> InMemoryProvider:
        return InMemoryProvider.from_sources(
            {
                "example.com/api": {
                    "a.go": "package api\n\ntype A struct{}\n",
                    "a_test.go": "package api\n\ntype T struct{}\n",
                },
                "example.com/api/v1": {"v.go": "package v1\n"},
                "example.com/other": {"o.go": "package other\n"},
            },
            files={"main.go": "// @Title Demo\npackage main\n"},
        )

    def test_resolve(self, provider: InMemoryProvider) -> None:
        assert provider.resolve_package("example.com/api") == "example.com/api"
        assert provider.resolve_package("example.com/missing") is None

    def test_declarations_skip_test_files(self, provider: InMemoryProvider) -> None:
        decls = provider.declarations_of("example.com/api")
        assert decls.name == "api"
        assert list(decls.types) == ["A"]

    def test_subpackages(self, provider: InMemoryProvider) -> None:
        assert provider.subpackages("example.com/api", "example.com/api") == ["example.com/api/v1"]

    def test_file_comments(self, provider: InMemoryProvider) -> None:
        assert provider.file_comments("main.go") == ["@Title Demo"]

    def test_file_comments_from_package_file(self, provider: InMemoryProvider) -> None:
        assert provider.file_comments("example.com/api/a.go") == []

    def test_file_comments_missing(self, provider: InMemoryProvider) -> None:
        with pytest.raises(FileNotFoundError):
            provider.file_comments("nope.go")
