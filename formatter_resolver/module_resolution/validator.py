"""Capability and version checks for loaded formatter modules."""

import logging
from enum import Enum
from typing import Any

from packaging.version import InvalidVersion
from packaging.version import Version

logger = logging.getLogger(__name__)

MIN_FORMATTER_VERSION = "1.13.0"

REQUIRED_QUERIES = ("get_support_info", "get_file_info", "resolve_config")


class ValidationResult(Enum):
    VALID = "valid"
    INVALID_SHAPE = "invalid_shape"
    OUTDATED_VERSION = "outdated_version"


def get_version(instance: Any) -> str | None:
    """Version string declared by a formatter module."""
    version = getattr(instance, "__version__", None) or getattr(instance, "version", None)
    return version if isinstance(version, str) and version else None


def is_version_at_least(version: str, minimum: str = MIN_FORMATTER_VERSION) -> bool:
    """Compare versions semantically; unparseable versions never qualify."""
    try:
        return Version(version) >= Version(minimum)
    except InvalidVersion:
        logger.debug(f"Unparseable formatter version: {version!r}")
        return False


def validate(instance: Any, explicit_path_given: bool) -> ValidationResult:
    """Check that `instance` is a usable formatter.

    A module without `format` is only rejected as the wrong kind of module when
    the user pointed at it explicitly; otherwise the version and surface checks
    decide.
    """
    if not callable(getattr(instance, "format", None)) and explicit_path_given:
        return ValidationResult.INVALID_SHAPE

    version = get_version(instance)
    has_queries = all(callable(getattr(instance, name, None)) for name in REQUIRED_QUERIES)
    if version is None or not has_queries or not is_version_at_least(version):
        return ValidationResult.OUTDATED_VERSION

    return ValidationResult.VALID
