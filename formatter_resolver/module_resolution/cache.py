"""Caches owned by a resolver instance."""

from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from types import ModuleType

PathCacheKey = tuple[str, str]


@dataclass
class ResolverCaches:
    """Path-resolution and module-instance caches.

    `paths` maps (starting path, package name) to the resolved entry file and
    is only ever emptied by `clear()`. `modules` maps a resolved module path to
    its loaded instance, one instance per path.
    """

    paths: dict[PathCacheKey, Path] = field(default_factory=dict)
    modules: dict[Path, ModuleType] = field(default_factory=dict)

    def get_path(self, starting_path: str | Path, package_name: str) -> Path | None:
        return self.paths.get((str(starting_path), package_name))

    def set_path(self, starting_path: str | Path, package_name: str, resolved: Path) -> None:
        self.paths[(str(starting_path), package_name)] = resolved

    def get_module(self, module_path: str | Path) -> ModuleType | None:
        return self.modules.get(Path(module_path))

    def set_module(self, module_path: str | Path, instance: ModuleType) -> None:
        self.modules[Path(module_path)] = instance

    def clear_modules(self) -> None:
        self.modules.clear()

    def clear(self) -> None:
        """Drop everything, including path resolutions."""
        self.paths.clear()
        self.modules.clear()
