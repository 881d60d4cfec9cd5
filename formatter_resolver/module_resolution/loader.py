"""Loading formatter modules from filesystem paths."""

import hashlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Protocol

from ..logging_service import LoggingService
from .node_resolve import resolve_entry_file

logger = logging.getLogger(__name__)

MODULE_NAME_PREFIX = "_formatter_resolver_module_"


class ModuleLoader(Protocol):
    """Loads a module from a path; None when it cannot be loaded."""

    def load(self, path: Path) -> ModuleType | None: ...


class ImportlibModuleLoader:
    """Loads Python sources with importlib under private module names.

    Each path gets its own name in `sys.modules`, so two installations of the
    same package never shadow each other. Every call executes the module
    afresh; deduplication is the resolver cache's job. Any failure while
    loading is logged and reported as None.
    """

    def __init__(self, logging_service: LoggingService | None = None):
        self.logging_service = logging_service or LoggingService()

    def load(self, path: Path) -> ModuleType | None:
        try:
            return self._load(Path(path))
        except Exception as e:
            self.logging_service.log_error(f"Error loading module '{path}'", e)
        return None

    def _load(self, path: Path) -> ModuleType:
        entry = resolve_entry_file(path)
        if entry is None:
            raise FileNotFoundError(f"No module entry point found at {path}")

        digest = hashlib.sha256(str(entry).encode()).hexdigest()[:12]
        module_name = f"{MODULE_NAME_PREFIX}{digest}"

        is_package = entry.name == "__init__.py"
        spec = importlib.util.spec_from_file_location(
            module_name,
            entry,
            submodule_search_locations=[str(entry.parent)] if is_package else None,
        )
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot create module spec for: {entry}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        logger.debug(f"Loaded module {module_name} from {entry}")
        return module
