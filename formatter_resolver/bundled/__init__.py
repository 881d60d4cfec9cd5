"""Bundled formatter shipped with formatter-resolver.

Used when no project-local or global formatter is found. It exposes the same
surface the resolver requires of any formatter module and only normalizes
whitespace: trailing blanks, leading tabs, line endings and the final newline.
"""

import fnmatch
from pathlib import Path
from typing import Any

from .config import ConfigError
from .config import find_config_file
from .config import load_config_file
from .config import load_editorconfig

__version__ = "3.0.0"

_LANGUAGES = [
    {"name": "Python", "parsers": ["python"], "extensions": [".py", ".pyi"]},
    {"name": "JavaScript", "parsers": ["babel"], "extensions": [".js", ".cjs", ".mjs", ".jsx"]},
    {"name": "TypeScript", "parsers": ["typescript"], "extensions": [".ts", ".tsx"]},
    {"name": "JSON", "parsers": ["json"], "extensions": [".json"]},
    {"name": "YAML", "parsers": ["yaml"], "extensions": [".yml", ".yaml"]},
    {"name": "Markdown", "parsers": ["markdown"], "extensions": [".md", ".markdown"]},
]

_LINE_ENDINGS = {"lf": "\n", "crlf": "\r\n", "cr": "\r"}

_config_cache: dict[tuple[str, str | None, bool], dict[str, Any] | None] = {}


def get_support_info() -> dict[str, Any]:
    return {"languages": [dict(language) for language in _LANGUAGES]}


def _infer_parser(file_path: str | Path) -> str | None:
    suffix = Path(file_path).suffix.lower()
    for language in _LANGUAGES:
        if suffix in language["extensions"]:
            return language["parsers"][0]
    return None


def get_file_info(file_path: str | Path, ignore_path: str | Path | None = None) -> dict[str, Any]:
    """Whether `file_path` is ignored and which parser would handle it."""
    ignored = False
    if ignore_path is not None and Path(ignore_path).is_file():
        name = Path(file_path).name
        for line in Path(ignore_path).read_text(encoding="utf-8").splitlines():
            pattern = line.strip()
            if pattern and not pattern.startswith("#") and fnmatch.fnmatch(name, pattern):
                ignored = True
                break
    return {"ignored": ignored, "inferredParser": _infer_parser(file_path)}


def resolve_config_file(file_path: str | Path) -> str | None:
    config_file = find_config_file(file_path)
    return str(config_file) if config_file else None


def resolve_config(
    file_path: str | Path, config: str | Path | None = None, editorconfig: bool = False
) -> dict[str, Any] | None:
    """Options for `file_path`: editorconfig settings overlaid by the config file.

    Raises:
        ConfigError: The config file cannot be parsed
    """
    key = (str(file_path), str(config) if config else None, editorconfig)
    if key in _config_cache:
        return _config_cache[key]

    options: dict[str, Any] = {}
    if editorconfig:
        options.update(load_editorconfig(file_path))

    config_file = config or find_config_file(file_path)
    if config_file is not None:
        options.update(load_config_file(config_file, file_path))

    result = options if (options or config_file is not None) else None
    _config_cache[key] = result
    return result


def clear_config_cache() -> None:
    _config_cache.clear()


def format(source: str, **options: Any) -> str:
    """Normalize whitespace in `source`."""
    tab_width = int(options.get("tabWidth", 2))
    use_tabs = bool(options.get("useTabs", False))
    eol = _LINE_ENDINGS.get(options.get("endOfLine", "lf"), "\n")

    lines = []
    for line in source.splitlines():
        line = line.rstrip()
        stripped = line.lstrip("\t")
        if not use_tabs and len(stripped) != len(line):
            line = " " * (tab_width * (len(line) - len(stripped))) + stripped
        lines.append(line)

    while lines and not lines[-1]:
        lines.pop()
    return eol.join(lines) + eol if lines else ""


__all__ = [
    "ConfigError",
    "clear_config_cache",
    "format",
    "get_file_info",
    "get_support_info",
    "resolve_config",
    "resolve_config_file",
]
