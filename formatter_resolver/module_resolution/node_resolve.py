"""Package entry-point resolution following the node_modules lookup algorithm.

Starting from a base directory, every ancestor's `node_modules/<name>` is
tried in turn. A candidate is loaded as a file first (as-is, then with a
module extension) and then as a directory (manifest `main`, then an index
file). Module files are Python sources.
"""

import json
import logging
from pathlib import Path

from ..errors import DependencyResolutionError

logger = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"
MODULES_DIR = "node_modules"
EXTENSIONS = (".py",)
INDEX_FILES = ("__init__.py", "index.py")


def read_manifest(directory: Path) -> dict | None:
    """Read the package manifest in `directory`.

    Returns:
        Parsed manifest, or None when it is missing, unreadable or not an object
    """
    manifest = directory / MANIFEST_FILE
    if not manifest.is_file():
        return None
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        # Unreadable manifests are treated as absent
        return None
    return data if isinstance(data, dict) else None


def node_modules_paths(basedir: Path) -> list[Path]:
    """Candidate `node_modules` directories for `basedir`, nearest first."""
    return [directory / MODULES_DIR for directory in (basedir, *basedir.parents) if directory.name != MODULES_DIR]


def _load_as_file(candidate: Path) -> Path | None:
    if candidate.is_file():
        return candidate
    for ext in EXTENSIONS:
        with_ext = candidate.with_name(candidate.name + ext)
        if with_ext.is_file():
            return with_ext
    return None


def _load_index(directory: Path) -> Path | None:
    for index in INDEX_FILES:
        candidate = directory / index
        if candidate.is_file():
            return candidate
    return None


def _load_as_directory(directory: Path) -> Path | None:
    if not directory.is_dir():
        return None

    manifest = read_manifest(directory)
    main = manifest.get("main") if manifest else None
    if isinstance(main, str) and main:
        main_path = directory / main
        entry = _load_as_file(main_path) or _load_index(main_path)
        if entry:
            return entry
        logger.debug(f"Manifest main '{main}' in {directory} does not exist, trying index files")

    return _load_index(directory)


def resolve_entry_file(path: str | Path) -> Path | None:
    """Resolve a concrete file or package directory to its entry file."""
    candidate = Path(path)
    entry = _load_as_file(candidate) or _load_as_directory(candidate)
    return entry.resolve() if entry else None


def resolve_package(package_name: str, basedir: str | Path) -> Path:
    """Resolve the entry file of `package_name` as seen from `basedir`.

    Raises:
        DependencyResolutionError: No node_modules directory above `basedir` has a loadable copy
    """
    basedir = Path(basedir).absolute()
    for modules_dir in node_modules_paths(basedir):
        entry = resolve_entry_file(modules_dir / package_name)
        if entry:
            return entry
    raise DependencyResolutionError(package_name, basedir)
