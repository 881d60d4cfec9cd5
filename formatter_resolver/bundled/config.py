"""Config discovery for the bundled formatter.

Option files are looked up from the formatted file's directory upward:
`.prettierrc` (YAML or JSON), `.prettierrc.json`, `.prettierrc.yaml`,
`.prettierrc.yml`, or a `prettier` key in `package.json`. `.editorconfig`
sections are translated into the equivalent options.
"""

import configparser
import fnmatch
import json
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILE_NAMES = (".prettierrc", ".prettierrc.json", ".prettierrc.yaml", ".prettierrc.yml")
MANIFEST_CONFIG_KEY = "prettier"

_EDITORCONFIG_ROOT_SECTION = "__root__"


class ConfigError(ValueError):
    """Raised when a config file cannot be parsed."""


def find_config_file(file_path: str | Path) -> Path | None:
    """Nearest config file for `file_path`, searching upward from its directory."""
    start = Path(file_path).absolute().parent
    for directory in (start, *start.parents):
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate
        manifest = directory / "package.json"
        if manifest.is_file() and _manifest_has_config(manifest):
            return manifest
    return None


def _manifest_has_config(manifest: Path) -> bool:
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return False
    return isinstance(data, dict) and isinstance(data.get(MANIFEST_CONFIG_KEY), dict)


def load_config_file(config_file: str | Path, file_path: str | Path) -> dict[str, Any]:
    """Load options from `config_file` and apply overrides matching `file_path`.

    Raises:
        ConfigError: The file is unreadable or does not hold a mapping
    """
    config_file = Path(config_file)
    try:
        text = config_file.read_text(encoding="utf-8")
        if config_file.name == "package.json":
            data = json.loads(text).get(MANIFEST_CONFIG_KEY, {})
        else:
            data = yaml.safe_load(text)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse {config_file}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_file} must contain a mapping")

    options = {key: value for key, value in data.items() if key != "overrides"}
    name = Path(file_path).name
    for override in data.get("overrides") or []:
        patterns = override.get("files", [])
        if isinstance(patterns, str):
            patterns = [patterns]
        if any(fnmatch.fnmatch(name, pattern) for pattern in patterns):
            options.update(override.get("options") or {})
    return options


def load_editorconfig(file_path: str | Path) -> dict[str, Any]:
    """Options derived from the `.editorconfig` files that apply to `file_path`."""
    path = Path(file_path).absolute()
    chain: list[Path] = []
    for directory in path.parents:
        candidate = directory / ".editorconfig"
        if candidate.is_file():
            chain.append(candidate)
            if _is_root_editorconfig(candidate):
                break

    properties: dict[str, str] = {}
    # Outermost first so nearer files win
    for editorconfig in reversed(chain):
        parser = _read_editorconfig(editorconfig)
        relative = path.relative_to(editorconfig.parent).as_posix()
        for section in parser.sections():
            if section == _EDITORCONFIG_ROOT_SECTION:
                continue
            pattern = section if "/" in section else f"**/{section}"
            if fnmatch.fnmatch(relative, pattern) or fnmatch.fnmatch(path.name, section):
                properties.update(parser[section])

    return _editorconfig_to_options(properties)


def _read_editorconfig(path: Path) -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.read_string(f"[{_EDITORCONFIG_ROOT_SECTION}]\n" + path.read_text(encoding="utf-8"))
    return parser


def _is_root_editorconfig(path: Path) -> bool:
    try:
        parser = _read_editorconfig(path)
    except (OSError, configparser.Error):
        return False
    return parser.get(_EDITORCONFIG_ROOT_SECTION, "root", fallback="").lower() == "true"


def _editorconfig_to_options(properties: dict[str, str]) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if style := properties.get("indent_style"):
        options["useTabs"] = style == "tab"
    size = properties.get("indent_size")
    if size == "tab":
        size = properties.get("tab_width")
    size = size or properties.get("tab_width")
    if size and size.isdigit():
        options["tabWidth"] = int(size)
    if (width := properties.get("max_line_length")) and width.isdigit():
        options["printWidth"] = int(width)
    if (eol := properties.get("end_of_line")) in ("lf", "crlf", "cr"):
        options["endOfLine"] = eol
    return options
