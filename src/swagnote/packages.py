"""Package location cache and import graph for one generation run.

:class:`PackageCache` memoises package lookups and parsed declarations so
that every package is located and scanned at most once per run, however
many types and annotations refer to it. :class:`ImportGraph` builds, per
package, the map from the name a file uses for an import to the candidate
package ids behind that name.

Both objects are created by :class:`~swagnote.generator.Generator` and die
with it; nothing here is process-global.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from swagnote.exceptions import ConfigError, PackageNotFoundError
from swagnote.source.model import PackageDecls
from swagnote.source.provider import SourceModelProvider

logger = logging.getLogger(__name__)

# cgo pseudo-package and App Engine SDK imports never resolve on disk.
_ALWAYS_IGNORED = re.compile(r"^C$|appengine")


class PackageCache:
    """Memoised package resolution and declaration scanning.

    Args:
        provider: Where locations and declarations come from.
    """

    def __init__(self, provider: SourceModelProvider) -> None:
        self.provider = provider
        self._locations: dict[str, Optional[str]] = {}
        self._declarations: dict[str, PackageDecls] = {}

    def resolve(self, package_id: str, report: bool = True) -> Optional[str]:
        """Return the location of *package_id*, or ``None`` when it cannot be found.

        Both hits and misses are cached. A miss is logged the first time it
        is seen unless *report* is false, as when probing whether a type
        qualifier is a package path.
        """
        if package_id in self._locations:
            return self._locations[package_id]
        location = self.provider.resolve_package(package_id.strip('"'))
        if location is None and report:
            logger.info("Can not find package %s", package_id)
        self._locations[package_id] = location
        return location

    def require(self, package_id: str) -> str:
        """Like :meth:`resolve` but raise when the package is missing.

        Raises:
            PackageNotFoundError: If *package_id* has no location.
        """
        location = self.resolve(package_id)
        if location is None:
            raise PackageNotFoundError(package_id)
        return location

    def declarations_of(self, location: str) -> PackageDecls:
        """Return the declarations at *location*, scanning it on first use."""
        decls = self._declarations.get(location)
        if decls is None:
            logger.debug("Scanning package at %s", location)
            decls = self.provider.declarations_of(location)
            self._declarations[location] = decls
        return decls

    def declarations(self, package_id: str) -> PackageDecls:
        """Return the declarations of *package_id*.

        Raises:
            PackageNotFoundError: If *package_id* has no location.
        """
        return self.declarations_of(self.require(package_id))

    def scan_packages(self, package_ids: list[str]) -> list[str]:
        """Expand package ids into themselves plus every package beneath them.

        Unknown packages are skipped (and logged by :meth:`resolve`). The
        result keeps discovery order and holds no duplicates.
        """
        found: list[str] = []
        for package_id in package_ids:
            location = self.resolve(package_id)
            if location is None:
                continue
            for candidate in [package_id, *self.provider.subpackages(package_id, location)]:
                if candidate not in found:
                    found.append(candidate)
        return found


class ImportGraph:
    """Per-package map of import names to candidate package ids.

    Args:
        cache: The run's package cache.
        ignore: Regular expression of import paths to leave out, in
            addition to ``C`` and App Engine packages.

    Raises:
        ConfigError: If *ignore* is not a valid regular expression.
    """

    def __init__(self, cache: PackageCache, ignore: str = "") -> None:
        self.cache = cache
        try:
            self._ignore = re.compile(ignore) if ignore else None
        except re.error as exc:
            raise ConfigError(f"The ignore option is not a valid regular expression: {exc}") from exc
        self._maps: dict[str, dict[str, list[str]]] = {}

    def is_ignored(self, import_path: str) -> bool:
        if _ALWAYS_IGNORED.search(import_path):
            return True
        return bool(self._ignore and self._ignore.search(import_path))

    def imports_of(self, package_id: str) -> dict[str, list[str]]:
        """Return the import map of *package_id*, building it on first use.

        Two files of one package may import different packages under the
        same name; both are kept, in the order met.

        Raises:
            PackageNotFoundError: If *package_id* has no location.
        """
        if package_id in self._maps:
            return self._maps[package_id]
        imports: dict[str, list[str]] = {}
        for decl in self.cache.declarations(package_id).imports:
            if self.is_ignored(decl.path):
                continue
            candidates = imports.setdefault(decl.local_name, [])
            if decl.path not in candidates:
                candidates.append(decl.path)
        self._maps[package_id] = imports
        return imports

    def candidates(self, package_id: str, name: str) -> list[str]:
        """Return the package ids *package_id* may mean by the import name *name*."""
        return list(self.imports_of(package_id).get(name, []))
