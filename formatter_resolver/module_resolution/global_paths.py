"""Global install roots of the supported package managers.

npm and yarn roots are found by probing the filesystem; pnpm is asked
directly with `pnpm root -g`. Each root is computed at most once per locator.
"""

import logging
import os
import shutil
import subprocess
import sys
from enum import Enum
from pathlib import Path

from ..errors import GlobalLookupError
from .node_resolve import MODULES_DIR

logger = logging.getLogger(__name__)


class PackageManager(str, Enum):
    NPM = "npm"
    PNPM = "pnpm"
    YARN = "yarn"


def _is_windows() -> bool:
    return sys.platform == "win32"


def resolve_global_npm_path() -> Path | None:
    """Locate npm's global node_modules from its install prefix."""
    prefix = os.environ.get("NPM_CONFIG_PREFIX") or os.environ.get("npm_config_prefix") or os.environ.get("PREFIX")
    if not prefix:
        node = shutil.which("node")
        if node is None:
            return None
        node_dir = Path(node).resolve().parent
        # <prefix>/bin/node on POSIX, <prefix>\node.exe on Windows
        prefix = str(node_dir if _is_windows() else node_dir.parent)

    root = Path(prefix) / MODULES_DIR if _is_windows() else Path(prefix) / "lib" / MODULES_DIR
    return root if root.is_dir() else None


def resolve_global_yarn_path() -> Path | None:
    """Locate yarn's global node_modules by probing its known data folders."""
    candidates: list[Path] = []
    if folder := os.environ.get("YARN_GLOBAL_FOLDER"):
        candidates.append(Path(folder) / MODULES_DIR)
    home = Path.home()
    candidates.append(home / ".config" / "yarn" / "global" / MODULES_DIR)
    candidates.append(home / ".yarn" / "global" / MODULES_DIR)
    if local_app_data := os.environ.get("LOCALAPPDATA"):
        candidates.append(Path(local_app_data) / "Yarn" / "Data" / "global" / MODULES_DIR)

    for candidate in candidates:
        if candidate.is_dir():
            return candidate
    return None


def resolve_global_pnpm_path() -> Path:
    """Ask pnpm for its global root.

    Raises:
        GlobalLookupError: pnpm is missing or the command failed
    """
    cmd = ["pnpm", "root", "-g"]
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, check=True, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise GlobalLookupError(PackageManager.PNPM.value, "pnpm executable not found") from e
    except subprocess.CalledProcessError as e:
        raise GlobalLookupError(PackageManager.PNPM.value, (e.stderr or str(e)).strip()) from e
    return Path(result.stdout.strip())


_STRATEGIES = {
    PackageManager.NPM: resolve_global_npm_path,
    PackageManager.PNPM: resolve_global_pnpm_path,
    PackageManager.YARN: resolve_global_yarn_path,
}


class GlobalPathLocator:
    """Memoized global roots, one per package manager.

    A root is looked up once; later calls return the remembered value (None
    included) even if the environment has changed since.
    """

    def __init__(self, strategies=None):
        self._strategies = dict(strategies or _STRATEGIES)
        self._cache: dict[PackageManager, Path | None] = {}

    def global_root(self, package_manager: PackageManager | str) -> Path | None:
        package_manager = PackageManager(package_manager)
        if package_manager not in self._cache:
            root = self._strategies[package_manager]()
            logger.debug(f"[resolve:global] {package_manager.value} root -> {root}")
            self._cache[package_manager] = root
        return self._cache[package_manager]
