"""Source model providers: where package declarations come from.

A provider answers four questions for the rest of swagnote:

* :meth:`~SourceModelProvider.resolve_package` -- where does package
  ``id`` live (``None`` when it cannot be found)?
* :meth:`~SourceModelProvider.declarations_of` -- what does the package at
  a location declare?
* :meth:`~SourceModelProvider.subpackages` -- which packages live beneath
  a package?
* :meth:`~SourceModelProvider.file_comments` -- what comment lines does a
  single file hold?

:class:`FileSystemProvider` implements these against a GOPATH-style tree,
GOROOT, a ``vendor/`` directory and a Go module root.
:class:`InMemoryProvider` serves sources held in a dict and is what the
test-suite and embedders use.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Protocol

import pathspec

from swagnote.exceptions import EnvironmentError_
from swagnote.source.model import PackageDecls
from swagnote.source.scanner import GoSourceScanner, is_package_file

logger = logging.getLogger(__name__)

# Directories the Go tool never treats as part of a package tree.
_ALWAYS_SKIP = {"testdata", "vendor", "node_modules"}


class SourceModelProvider(Protocol):
    def resolve_package(self, package_id: str) -> Optional[str]: ...

    def declarations_of(self, location: str) -> PackageDecls: ...

    def subpackages(self, package_id: str, location: str) -> list[str]: ...

    def file_comments(self, path: str) -> list[str]: ...


def _read_module_path(module_root: Path) -> Optional[str]:
    """Return the ``module`` path declared in ``<module_root>/go.mod``."""
    go_mod = module_root / "go.mod"
    if not go_mod.is_file():
        return None
    for line in go_mod.read_text(encoding="utf-8", errors="replace").splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == "module":
            return parts[1].strip('"')
    return None


class FileSystemProvider:
    """Locate and scan Go packages on disk.

    Lookup order for package ``p`` (first existing directory wins):

    1. ``<vendor_dir>/p``
    2. ``<module_root>/<rest>`` when ``p`` is, or lies under, the module
       path declared in ``<module_root>/go.mod``
    3. ``<root>/src/p`` for each search root, in order
    4. ``<goroot>/src/p``, then ``<goroot>/src/vendor/p``, then
       ``<goroot>/src/pkg/p``

    Locations are returned fully resolved so that a package reached through
    a symlink and through its real path is scanned only once.

    Args:
        search_roots: GOPATH entries, each holding a ``src/`` tree.
        goroot: The Go installation root, if any.
        module_root: Directory holding ``go.mod``, for module-mode trees.
        vendor_dir: Vendor directory, relative to the working directory
            unless absolute.
        exclude: Gitignore-style patterns of package directories (relative
            to the API package) that :meth:`subpackages` skips.

    Raises:
        EnvironmentError_: If no search root or module root is configured,
            or a configured root does not exist.
    """

    def __init__(
        self,
        search_roots: list[str],
        goroot: Optional[str] = None,
        module_root: Optional[str] = None,
        vendor_dir: str = "vendor",
        exclude: Optional[list[str]] = None,
        scanner: Optional[GoSourceScanner] = None,
    ) -> None:
        if not search_roots and not module_root:
            raise EnvironmentError_(
                "No Go search root configured. Set GOPATH or pass a module root."
            )
        self.search_roots = [Path(root).expanduser() for root in search_roots]
        for root in self.search_roots:
            if not root.is_dir():
                raise EnvironmentError_(f"Search root does not exist: {root}")
        self.goroot = Path(goroot).expanduser() if goroot else None
        self.module_root = Path(module_root).expanduser() if module_root else None
        if self.module_root is not None and not self.module_root.is_dir():
            raise EnvironmentError_(f"Module root does not exist: {self.module_root}")
        self.vendor_dir = Path(vendor_dir)
        self.module_path = _read_module_path(self.module_root) if self.module_root else None
        self._exclude_spec = (
            pathspec.PathSpec.from_lines("gitwildmatch", exclude) if exclude else None
        )
        self.scanner = scanner or GoSourceScanner()

    def candidates(self, package_id: str) -> list[Path]:
        """Return every directory *package_id* may live in, in lookup order."""
        found = [self.vendor_dir / package_id]
        if self.module_root is not None and self.module_path:
            if package_id == self.module_path:
                found.append(self.module_root)
            elif package_id.startswith(self.module_path + "/"):
                found.append(self.module_root / package_id[len(self.module_path) + 1 :])
        found.extend(root / "src" / package_id for root in self.search_roots)
        if self.goroot is not None:
            found.append(self.goroot / "src" / package_id)
            found.append(self.goroot / "src" / "vendor" / package_id)
            found.append(self.goroot / "src" / "pkg" / package_id)
        return found

    def resolve_package(self, package_id: str) -> Optional[str]:
        for candidate in self.candidates(package_id):
            if candidate.is_dir():
                return str(candidate.resolve())
        return None

    def declarations_of(self, location: str) -> PackageDecls:
        return self.scanner.scan_package(Path(location))

    def subpackages(self, package_id: str, location: str) -> list[str]:
        """Return the ids of every package directory strictly below *location*.

        Hidden, ``_``-prefixed, ``testdata`` and ``vendor`` directories are
        pruned, as are directories matching the ``exclude`` patterns.
        Directories with no package files are walked through but not
        returned.
        """
        root = Path(location)
        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(str(root)):
            rel_dir = os.path.relpath(dirpath, str(root))

            # Prune in place so os.walk does not descend.
            dirnames[:] = sorted(
                d for d in dirnames
                if d not in _ALWAYS_SKIP
                and not d.startswith((".", "_"))
                and not (self._exclude_spec and self._exclude_spec.match_file(
                    (os.path.join(rel_dir, d) if rel_dir != "." else d) + "/",
                ))
            )

            if rel_dir == ".":
                continue
            if any(is_package_file(Path(dirpath) / name) for name in filenames):
                found.append(package_id + "/" + Path(rel_dir).as_posix())
        return found

    def file_comments(self, path: str) -> list[str]:
        """Return the comment lines of a single file.

        Raises:
            OSError: If the file cannot be read.
        """
        return self.scanner.scan_file(Path(path)).comments


class InMemoryProvider:
    """Serve package sources held in memory.

    Package locations are the package ids themselves.

    Example::

        provider = InMemoryProvider.from_sources({
            "example.com/api/models": {"pet.go": "package models\\n\\ntype Pet struct{}"},
        })
    """

    def __init__(
        self,
        packages: dict[str, dict[str, str]],
        files: Optional[dict[str, str]] = None,
        scanner: Optional[GoSourceScanner] = None,
    ) -> None:
        self.packages = packages
        self.files = dict(files or {})
        self.scanner = scanner or GoSourceScanner()

    @classmethod
    def from_sources(
        cls, packages: dict[str, dict[str, str]], files: Optional[dict[str, str]] = None
    ) -> InMemoryProvider:
        return cls(packages, files)

    def resolve_package(self, package_id: str) -> Optional[str]:
        return package_id if package_id in self.packages else None

    def declarations_of(self, location: str) -> PackageDecls:
        decls = PackageDecls()
        for name, source in sorted(self.packages.get(location, {}).items()):
            if name.endswith("_test.go") or not name.endswith(".go"):
                continue
            source_file = self.scanner.scan_source(source, f"{location}/{name}")
            decls.files.append(source_file)
            if not decls.name:
                decls.name = source_file.package
        return decls

    def subpackages(self, package_id: str, location: str) -> list[str]:
        prefix = location + "/"
        return [pkg for pkg in self.packages if pkg.startswith(prefix)]

    def file_comments(self, path: str) -> list[str]:
        if path in self.files:
            return self.scanner.scan_source(self.files[path], path).comments
        package, _, name = path.rpartition("/")
        if name in self.packages.get(package, {}):
            return self.scanner.scan_source(self.packages[package][name], path).comments
        raise FileNotFoundError(path)
