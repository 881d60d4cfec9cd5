"""Workspace and document path helpers.

Paths in settings (`prettierPath`, `configPath`) are interpreted relative to
the workspace folder that owns the document being formatted.
"""

from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from urllib.parse import unquote
from urllib.parse import urlparse
from urllib.request import url2pathname


@dataclass
class TextDocument:
    """A document identified by URI.

    Only `file:` URIs live on the real filesystem; any other scheme
    (`untitled:`, `git:`, ...) is a virtual document.
    """

    uri: str

    @classmethod
    def from_path(cls, path: str | Path) -> "TextDocument":
        return cls(Path(path).absolute().as_uri())

    @property
    def scheme(self) -> str:
        return urlparse(self.uri).scheme or "file"

    @property
    def is_virtual(self) -> bool:
        return self.scheme != "file"

    @property
    def fs_path(self) -> Path:
        parsed = urlparse(self.uri)
        if parsed.scheme == "file":
            return Path(url2pathname(parsed.path))
        if not parsed.scheme:
            return Path(self.uri)
        return Path(unquote(parsed.path))


@dataclass
class Workspace:
    """Ordered set of workspace folders."""

    folders: list[Path] = field(default_factory=list)

    def __post_init__(self):
        self.folders = [Path(folder).expanduser().absolute() for folder in self.folders]

    def folder_for(self, file_path: str | Path) -> Path | None:
        """Return the deepest workspace folder containing `file_path`."""
        path = Path(file_path).absolute()
        owners = [folder for folder in self.folders if path == folder or folder in path.parents]
        if not owners:
            return None
        return max(owners, key=lambda folder: len(folder.parts))


def get_workspace_relative_path(file_path: str | Path, path_for_folder: str, workspace: Workspace) -> Path | None:
    """Resolve a settings path for the document at `file_path`.

    Absolute paths and `~` paths are used as-is. Relative paths are joined to
    the workspace folder owning the document; without one there is no path.
    """
    if path_for_folder.startswith("~"):
        return Path(path_for_folder).expanduser()
    candidate = Path(path_for_folder)
    if candidate.is_absolute():
        return candidate
    folder = workspace.folder_for(file_path)
    if folder is None:
        return None
    return folder / candidate
