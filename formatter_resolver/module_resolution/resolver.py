"""Formatter module resolution.

Decides which formatter module formats a file. Resolution order:
1. Explicit `prettierPath` setting (workspace-relative)
2. Project-local installation (declared in a manifest, else installed)
3. Global installation (if allowed; the user picks the package manager)
4. Bundled formatter (unless `onlyUseLocalVersion` is set)

A candidate that was found but is broken, outdated or not a formatter ends
resolution with None; only the absence of any candidate falls back to the
bundled formatter.
"""

import logging
from pathlib import Path
from types import ModuleType
from typing import Any
from typing import Literal

from .. import bundled
from ..errors import DependencyResolutionError
from ..logging_service import LoggingService
from ..messages import FAILED_TO_LOAD_MODULE_MESSAGE
from ..messages import INVALID_FORMATTER_CONFIG
from ..messages import INVALID_FORMATTER_PATH_MESSAGE
from ..messages import OUTDATED_FORMATTER_VERSION_MESSAGE
from ..messages import USING_BUNDLED_FORMATTER
from ..paths import TextDocument
from ..paths import Workspace
from ..paths import get_workspace_relative_path
from ..prompt import ChoicePrompt
from ..settings import ResolverSettings
from ..settings import SettingsManager
from .cache import ResolverCaches
from .global_paths import GlobalPathLocator
from .global_paths import PackageManager
from .loader import ImportlibModuleLoader
from .loader import ModuleLoader
from .node_resolve import MANIFEST_FILE
from .validator import ValidationResult
from .validator import validate
from .walker import ManifestWalker
from .walker import StopPredicate

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_NAME = "prettier"

ResolvedConfig = dict[str, Any] | None | Literal["error", "disabled"]


class ModuleResolver:
    """Resolves, validates and caches formatter modules per file."""

    def __init__(
        self,
        logging_service: LoggingService | None = None,
        settings: SettingsManager | None = None,
        prompt: ChoicePrompt | None = None,
        *,
        workspace: Workspace | None = None,
        loader: ModuleLoader | None = None,
        locator: GlobalPathLocator | None = None,
        bundled_module: ModuleType | None = None,
        stop_at: StopPredicate | None = None,
        package_name: str = DEFAULT_PACKAGE_NAME,
    ):
        """Initialize the resolver.

        Args:
            logging_service: Log sink (defaults to the `formatter_resolver` logger)
            settings: Per-file settings source
            prompt: Package manager chooser for global lookups. Without one,
                    global lookups behave as if the user cancelled.
            workspace: Workspace folders for relative setting paths
            loader: Module loader (defaults to importlib loading)
            locator: Global root locator
            bundled_module: Fallback formatter and config resolver
            stop_at: Walk stop predicate passed to the manifest walker
            package_name: Name of the formatter package to look for
        """
        self.logging_service = logging_service or LoggingService()
        self.workspace = workspace or (settings.workspace if settings else Workspace([Path.cwd()]))
        self.settings = settings or SettingsManager(self.workspace)
        self.prompt = prompt
        self.loader = loader or ImportlibModuleLoader(self.logging_service)
        self.locator = locator or GlobalPathLocator()
        self.bundled = bundled_module or bundled
        self.package_name = package_name
        self.caches = ResolverCaches()
        self.walker = ManifestWalker(self.caches, stop_at=stop_at)

    def get_bundled_instance(self) -> ModuleType:
        return self.bundled

    async def get_formatter_instance(self, file_name: str | Path) -> ModuleType | None:
        """Return the formatter module to use for `file_name`.

        Returns:
            A validated module, the bundled module, or None when resolution failed
        """
        settings = self.settings.get_settings(file_name)
        explicit_path = settings.prettier_path

        # Local module
        module_path: Path | None = None
        try:
            if explicit_path:
                module_path = get_workspace_relative_path(file_name, explicit_path, self.workspace)
            else:
                module_path = self.walker.find_package(file_name, self.package_name)
        except Exception as e:
            if isinstance(e, DependencyResolutionError):
                attempted = e.basedir
            else:
                attempted = explicit_path or MANIFEST_FILE
            self.logging_service.log_info(f"Attempted to determine module path from {attempted}")
            self.logging_service.log_error(FAILED_TO_LOAD_MODULE_MESSAGE, e)
            # Declared locally but not installed, or unreadable; the user has to fix it
            return None

        if module_path is None and settings.resolve_global_modules:
            module_path = await self._find_global_module()

        if module_path is None:
            if settings.only_use_local_version:
                self.logging_service.log_info("Ignored bundled formatter by onlyUseLocalVersion configuration.")
                return None
            self.logging_service.log_debug(USING_BUNDLED_FORMATTER)
            return self.bundled

        cached = self.caches.get_module(module_path)
        if cached is not None:
            self.logging_service.log_debug(f"Local formatter module path: '{module_path}'")
            return cached

        instance = self.loader.load(module_path)
        if instance is None:
            self.logging_service.log_info(f"Attempted to load formatter module from {module_path}")
            self.logging_service.log_error(FAILED_TO_LOAD_MODULE_MESSAGE)
            return None

        result = validate(instance, explicit_path_given=bool(explicit_path))
        if result is ValidationResult.INVALID_SHAPE:
            self.logging_service.log_error(INVALID_FORMATTER_PATH_MESSAGE)
            return None
        if result is ValidationResult.OUTDATED_VERSION:
            self.logging_service.log_info(f"Attempted to load formatter module from {module_path}")
            self.logging_service.log_error(OUTDATED_FORMATTER_VERSION_MESSAGE)
            return None

        self.caches.set_module(module_path, instance)
        return instance

    async def _find_global_module(self) -> Path | None:
        """Ask for a package manager and look in its global root.

        Raises:
            GlobalLookupError: The chosen package manager could not report its root
        """
        if self.prompt is None:
            return None

        choices = list(PackageManager)
        idx = await self.prompt.ask([pm.value for pm in choices], "Choose package manager")
        if idx is None or idx < 0 or idx >= len(choices):
            return None

        logger.debug(f"[resolve:global] chose {choices[idx].value}")
        global_root = self.locator.global_root(choices[idx])
        if not global_root:
            return None

        global_module_path = global_root / self.package_name
        if global_module_path.exists():
            return global_module_path
        return None

    async def resolve_config(self, document: TextDocument, settings: ResolverSettings) -> ResolvedConfig:
        """Resolve formatting options for `document`.

        Virtual documents never touch the filesystem and resolve to None.

        Returns:
            Options dict, None (no config), "error" (bad config) or "disabled"
            (no config while one is required)
        """
        if document.is_virtual:
            return None

        file_name = document.fs_path

        try:
            config_file = self.bundled.resolve_config_file(file_name)
        except Exception as e:
            self.logging_service.log_error(f"Error resolving formatter configuration for {file_name}", e)
            return "error"

        config = config_file
        if settings.config_path:
            config = get_workspace_relative_path(file_name, settings.config_path, self.workspace)

        try:
            resolved = self.bundled.resolve_config(file_name, config=config, editorconfig=settings.use_editor_config)
        except Exception as e:
            self.logging_service.log_error("Invalid formatter configuration file detected.", e)
            self.logging_service.log_error(INVALID_FORMATTER_CONFIG)
            return "error"

        if config:
            self.logging_service.log_info(f"Using config file at '{config}'")

        if resolved is None and settings.require_config:
            self.logging_service.log_info("Require config set to true and no config present. Skipping file.")
            return "disabled"
        return resolved

    def dispose(self) -> None:
        """Clear the config caches of every formatter and forget loaded modules.

        Path resolutions survive: they describe the filesystem layout.
        """
        self.bundled.clear_config_cache()
        for module in self.caches.modules.values():
            try:
                module.clear_config_cache()
            except Exception as e:
                self.logging_service.log_error("Error clearing module cache.", e)
        self.caches.clear_modules()
