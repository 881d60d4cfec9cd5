"""Shared fixtures for formatter-resolver tests."""

import json
from pathlib import Path

import pytest
from formatter_resolver import bundled
from formatter_resolver.logging_service import LoggingService
from formatter_resolver.paths import Workspace
from formatter_resolver.settings import ResolverSettings

FULL_SURFACE = (
    "format",
    "get_support_info",
    "get_file_info",
    "resolve_config",
    "resolve_config_file",
    "clear_config_cache",
)

TEST_ROOT_MARKER = ".formatter-resolver-test-root"


def formatter_source(version: str | None = "2.3.0", surface=FULL_SURFACE, extra: str = "") -> str:
    """Python source for a fake formatter module."""
    lines = ["CLEARED = []", ""]
    if version is not None:
        lines.append(f'__version__ = "{version}"')
    for name in surface:
        if name == "format":
            lines.append("def format(source, **options):\n    return source.strip() + '\\n'")
        elif name == "clear_config_cache":
            lines.append("def clear_config_cache():\n    CLEARED.append(True)")
        else:
            lines.append(f"def {name}(*args, **kwargs):\n    return None")
    if extra:
        lines.append(extra)
    return "\n\n".join(lines) + "\n"


def install_formatter(
    modules_root: Path,
    package_name: str = "prettier",
    version: str | None = "2.3.0",
    surface=FULL_SURFACE,
    source: str | None = None,
) -> Path:
    """Install a fake formatter package as `<modules_root>/node_modules/<package_name>`."""
    package_dir = modules_root / "node_modules" / package_name
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / "package.json").write_text(json.dumps({"name": package_name, "version": version or "0.0.0"}))
    (package_dir / "__init__.py").write_text(source if source is not None else formatter_source(version, surface))
    return package_dir


def write_manifest(directory: Path, dependencies: dict | None = None, dev_dependencies: dict | None = None) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    manifest: dict = {"name": directory.name, "version": "1.0.0"}
    if dependencies is not None:
        manifest["dependencies"] = dependencies
    if dev_dependencies is not None:
        manifest["devDependencies"] = dev_dependencies
    path = directory / "package.json"
    path.write_text(json.dumps(manifest))
    return path


class RecordingLoggingService(LoggingService):
    """Logging service that remembers every call."""

    def __init__(self):
        super().__init__()
        self.records: list[tuple[str, str, BaseException | None]] = []

    def log_info(self, message: str) -> None:
        self.records.append(("info", message, None))

    def log_debug(self, message: str) -> None:
        self.records.append(("debug", message, None))

    def log_error(self, message: str, error: BaseException | None = None) -> None:
        self.records.append(("error", message, error))

    def messages(self, level: str | None = None) -> list[str]:
        return [message for lvl, message, _ in self.records if level is None or lvl == level]


class StaticSettings:
    """Settings source returning the same settings for every file."""

    def __init__(self, workspace: Workspace | None = None, **settings):
        self.workspace = workspace or Workspace()
        self.settings = ResolverSettings(**settings)
        self.requested: list[Path] = []

    def get_settings(self, file_path) -> ResolverSettings:
        self.requested.append(Path(file_path))
        return self.settings


class FakePrompt:
    """Choice prompt answering with a fixed index and recording questions."""

    def __init__(self, answer: int | None):
        self.answer = answer
        self.calls: list[tuple[list[str], str]] = []

    async def ask(self, labels: list[str], title: str) -> int | None:
        self.calls.append((labels, title))
        return self.answer


@pytest.fixture
def log():
    return RecordingLoggingService()


@pytest.fixture
def project(tmp_path):
    """`<tmp>/proj` fenced by a test-root marker, with `src/a.js` inside."""
    (tmp_path / TEST_ROOT_MARKER).touch()
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    (root / "src" / "a.js").write_text("const a = 1\n")
    return root


@pytest.fixture(autouse=True)
def clear_bundled_config_cache():
    yield
    bundled.clear_config_cache()
