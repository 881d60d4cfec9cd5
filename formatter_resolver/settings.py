"""Settings for formatter resolution.

Settings are read per document from three YAML scopes (later wins):
- User global (~/.formatter-resolver/settings.yaml)
- Project (<workspace folder>/.formatter-resolver/settings.yaml)
- Local (<workspace folder>/.formatter-resolver/settings.local.yaml)
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from .paths import Workspace

logger = logging.getLogger(__name__)

SETTINGS_DIR_NAME = ".formatter-resolver"


class ResolverSettings(BaseModel):
    """Configuration surface consumed by the resolver."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    prettier_path: str | None = Field(
        None, alias="prettierPath", description="Explicit path to a formatter module, workspace-relative"
    )
    resolve_global_modules: bool = Field(
        False, alias="resolveGlobalModules", description="Look for a globally installed formatter"
    )
    only_use_local_version: bool = Field(
        False, alias="onlyUseLocalVersion", description="Never fall back to the bundled formatter"
    )
    config_path: str | None = Field(
        None, alias="configPath", description="Explicit formatter config file, workspace-relative"
    )
    use_editor_config: bool = Field(True, alias="useEditorConfig", description="Merge .editorconfig settings")
    require_config: bool = Field(False, alias="requireConfig", description="Only format files with a config file")


class SettingsManager:
    """Reads resolver settings across user/project/local scopes."""

    def __init__(self, workspace: Workspace | None = None, user_settings_file: Path | None = None):
        """Initialize settings manager.

        Args:
            workspace: Workspace whose folders hold project/local settings.
                       If None, the current directory is the only folder.
            user_settings_file: User settings path override (for testing).
        """
        self.workspace = workspace or Workspace([Path.cwd()])
        self.user_settings_file = user_settings_file or Path.home() / SETTINGS_DIR_NAME / "settings.yaml"

    def get_settings(self, file_path: str | Path) -> ResolverSettings:
        """Get effective settings for the document at `file_path`."""
        return ResolverSettings.model_validate(self.get_merged_settings(file_path))

    def get_merged_settings(self, file_path: str | Path | None = None) -> dict[str, Any]:
        """Get merged settings from all scopes.

        Merge order (later overrides earlier):
        1. User settings
        2. Project settings
        3. Local settings

        Args:
            file_path: Document path used to pick the workspace folder.
                       Without one (or outside every folder) only user settings apply.
        """
        merged: dict[str, Any] = {}

        user = self._read_settings(self.user_settings_file)
        if user:
            merged = self._deep_merge(merged, user)

        folder = self.workspace.folder_for(file_path) if file_path is not None else None
        if folder is None:
            return merged

        project = self._read_settings(folder / SETTINGS_DIR_NAME / "settings.yaml")
        if project:
            merged = self._deep_merge(merged, project)

        local = self._read_settings(folder / SETTINGS_DIR_NAME / "settings.local.yaml")
        if local:
            merged = self._deep_merge(merged, local)

        return merged

    def _read_settings(self, path: Path) -> dict[str, Any] | None:
        """Read settings from YAML file.

        Returns:
            Settings dict or None if the file doesn't exist or can't be read
        """
        if not path.exists():
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings in {path}: expected a mapping, got {type(data).__name__}")
            return None
        return data

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries (overlay takes precedence)."""
        result = base.copy()

        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
