"""formatter-resolver: find the formatter module a file should be formatted with."""

from .errors import DependencyResolutionError
from .errors import FormatterResolverError
from .errors import GlobalLookupError
from .logging_service import LoggingService
from .module_resolution import ModuleResolver
from .module_resolution import PackageManager
from .paths import TextDocument
from .paths import Workspace
from .settings import ResolverSettings
from .settings import SettingsManager

__all__ = [
    "DependencyResolutionError",
    "FormatterResolverError",
    "GlobalLookupError",
    "LoggingService",
    "ModuleResolver",
    "PackageManager",
    "ResolverSettings",
    "SettingsManager",
    "TextDocument",
    "Workspace",
]
