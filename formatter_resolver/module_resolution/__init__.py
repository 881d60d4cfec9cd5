"""Formatter module resolution.

Finds the formatter module a file should be formatted with: project-local
first, then global, then the bundled fallback.
"""

from .cache import ResolverCaches
from .global_paths import GlobalPathLocator
from .global_paths import PackageManager
from .loader import ImportlibModuleLoader
from .loader import ModuleLoader
from .node_resolve import resolve_package
from .resolver import ModuleResolver
from .resolver import ResolvedConfig
from .validator import MIN_FORMATTER_VERSION
from .validator import ValidationResult
from .validator import validate
from .walker import ManifestWalker
from .walker import marker_file_predicate

__all__ = [
    "GlobalPathLocator",
    "ImportlibModuleLoader",
    "MIN_FORMATTER_VERSION",
    "ManifestWalker",
    "ModuleLoader",
    "ModuleResolver",
    "PackageManager",
    "ResolvedConfig",
    "ResolverCaches",
    "ValidationResult",
    "marker_file_predicate",
    "resolve_package",
    "validate",
]
