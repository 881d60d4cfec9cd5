"""Upward directory walk that finds which installation of a package a file uses.

A package declared in a manifest (`dependencies` or `devDependencies`) wins
over an installed copy sitting in a `node_modules` folder, even when the
installed copy is closer to the starting path.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from .cache import ResolverCaches
from .node_resolve import MODULES_DIR
from .node_resolve import read_manifest
from .node_resolve import resolve_package

logger = logging.getLogger(__name__)

StopPredicate = Callable[[Path], bool]


def marker_file_predicate(marker_name: str) -> StopPredicate:
    """Build a stop predicate that halts the walk at directories containing `marker_name`."""

    def stop_at(directory: Path) -> bool:
        return (directory / marker_name).exists()

    return stop_at


def outside_node_modules(path: Path) -> Path:
    """Truncate `path` at its first node_modules segment, if one sits beyond the root."""
    parts = path.parts
    if MODULES_DIR in parts:
        index = parts.index(MODULES_DIR)
        if index > 1:
            return Path(*parts[:index])
    return path


class ManifestWalker:
    """Finds package entry points by walking ancestor directories.

    Results are cached in `caches.paths` per (starting path, package name) and
    never re-walked.
    """

    def __init__(self, caches: ResolverCaches | None = None, stop_at: StopPredicate | None = None):
        """Initialize the walker.

        Args:
            caches: Cache container shared with the owning resolver
            stop_at: Optional predicate that ends a walk after the given directory
                     has been inspected. Test harnesses use it to fence fixtures.
        """
        self.caches = caches or ResolverCaches()
        self.stop_at = stop_at

    def find_package(self, starting_path: str | Path, package_name: str) -> Path | None:
        """Find the entry file of `package_name` for a file at `starting_path`.

        Returns:
            Resolved entry file, or None when the package is neither declared nor installed

        Raises:
            DependencyResolutionError: Package is declared or installed but cannot be loaded
        """
        if cached := self.caches.get_path(starting_path, package_name):
            return cached

        search_from = outside_node_modules(Path(starting_path).absolute())

        # Explicit manifest dependency first
        root = self._walk_up(search_from, lambda d: self._declares_dependency(d, package_name))
        if root is None:
            # Fall back to an installed copy nobody declared
            root = self._walk_up(search_from, lambda d: (d / MODULES_DIR / package_name).exists())
            if root is None:
                logger.debug(f"[resolve:walk] {package_name} not found from {search_from}")
                return None
            logger.debug(f"[resolve:walk] {package_name} installed under {root}")
        else:
            logger.debug(f"[resolve:walk] {package_name} declared in {root}")

        package_path = resolve_package(package_name, root)
        self.caches.set_path(starting_path, package_name, package_path)
        return package_path

    def _walk_up(self, start: Path, matches: Callable[[Path], bool]) -> Path | None:
        for directory in (start, *start.parents):
            if matches(directory):
                return directory
            if self.stop_at is not None and self.stop_at(directory):
                return None
        return None

    def _declares_dependency(self, directory: Path, package_name: str) -> bool:
        manifest = self._read_manifest(directory)
        if not manifest:
            return False
        for section in ("dependencies", "devDependencies"):
            deps = manifest.get(section)
            if isinstance(deps, dict) and deps.get(package_name):
                return True
        return False

    def _read_manifest(self, directory: Path) -> dict | None:
        return read_manifest(directory)
