"""Exceptions raised by formatter module resolution.

Only failures that point at something the user explicitly relies on are
raised. Failures that just mean "this path didn't pan out" are absorbed by the
resolver and never reach callers as exceptions.
"""

from pathlib import Path


class FormatterResolverError(Exception):
    """Base class for formatter resolution errors."""

    pass


class DependencyResolutionError(FormatterResolverError):
    """Raised when a package is declared or installed but its entry point cannot be found."""

    def __init__(self, package_name: str, basedir: str | Path):
        self.package_name = package_name
        self.basedir = Path(basedir)
        super().__init__(f"Cannot find module '{package_name}' from '{basedir}'")


class GlobalLookupError(FormatterResolverError):
    """Raised when a package manager cannot report its global install root."""

    def __init__(self, package_manager: str, message: str):
        self.package_manager = package_manager
        super().__init__(f"Failed to resolve global {package_manager} root: {message}")
