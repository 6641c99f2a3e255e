"""Whitelist and bounds based sanitization of raw copy options.

Raw options arrive from an untrusted front end (form data, YAML presets).
Every field is reduced to a value that is safe to hand to the argument
builder: paths with shell metacharacters are rejected, patterns and lists are
checked against character whitelists, and numbers outside their inclusive
window are replaced by a declared default.

Examples:
    >>> sanitize_path("C:\\\\Data;del *")
    ''
    >>> sanitize_file_pattern("*.txt;rm -rf")
    '*.*'
    >>> sanitize_number("129", 1, 128, 8)
    8
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from typing import Final

from pydantic import ValidationError

from robocopy_status.exceptions import OptionValidationError

from .limits import (
    ATTRIBUTES_RE,
    DANGEROUS_PATH_CHARS,
    DEFAULT_FILE_PATTERN,
    EXCLUDE_LIST_RE,
    FILE_PATTERN_RE,
    NumericBound,
    ValidationLimits,
)
from .models import CopyRequest

logger = logging.getLogger(__name__)

# Leading integer of a form value, the way a browser form field is read
_LEADING_INT: Final[re.Pattern[str]] = re.compile(r"^\s*([+-]?\d+)")

# CopyRequest field -> key used by the front end form
_BOOLEAN_FIELDS: Final[dict[str, str]] = {
    "subdirectories": "subdirectories",
    "empty_subdirectories": "emptySubdirectories",
    "restart_mode": "restartMode",
    "backup_mode": "backupMode",
    "copy_all": "copyAll",
    "mirror_mode": "mirrorMode",
    "move_files": "moveFiles",
    "move_dirs": "moveDirs",
    "copy_archive": "copyArchive",
    "reset_archive": "resetArchive",
    "verbose": "verbose",
    "no_progress": "noProgress",
    "eta": "eta",
    "multi_thread": "multiThread",
}

_NUMERIC_FIELDS: Final[dict[str, tuple[str, NumericBound]]] = {
    "levels": ("levels", ValidationLimits.LEVELS),
    "retries": ("retries", ValidationLimits.RETRIES),
    "wait_time": ("waitTime", ValidationLimits.WAIT_SECONDS),
    "threads": ("threads", ValidationLimits.THREADS),
}


def _strip_nul(value: str) -> str:
    return value.strip().replace("\0", "")


def sanitize_path(value: object) -> str:
    """Sanitize a source or destination path.

    This is a deny-list against shell metacharacters, not a path grammar
    validator: drive paths (``C:\\...``) and UNC paths (``\\\\server\\share``)
    pass through unchanged.

    Args:
        value: Raw path value

    Returns:
        The trimmed path without NUL bytes, or an empty string if the value
        is not a string or contains a forbidden character
    """
    if not value or not isinstance(value, str):
        return ""

    sanitized = _strip_nul(value)
    if DANGEROUS_PATH_CHARS.search(sanitized):
        logger.warning(
            "Rejected path containing shell metacharacters",
            extra={"path": sanitized},
        )
        return ""

    return sanitized


def sanitize_file_pattern(value: object) -> str:
    """Sanitize the file pattern, falling back to ``*.*`` when invalid."""
    if not value or not isinstance(value, str):
        return DEFAULT_FILE_PATTERN

    sanitized = _strip_nul(value)
    if not FILE_PATTERN_RE.fullmatch(sanitized):
        logger.warning(
            "Rejected invalid file pattern, using default",
            extra={"pattern": sanitized, "default": DEFAULT_FILE_PATTERN},
        )
        return DEFAULT_FILE_PATTERN

    return sanitized


def sanitize_exclude_list(value: object) -> str:
    """Sanitize a comma-separated exclude list.

    An invalid list is dropped entirely (empty string), never defaulted.
    """
    if not value or not isinstance(value, str):
        return ""

    sanitized = _strip_nul(value)
    if not EXCLUDE_LIST_RE.fullmatch(sanitized):
        logger.warning("Rejected invalid exclude list", extra={"exclude_list": sanitized})
        return ""

    return sanitized


def sanitize_attributes(value: object) -> str:
    """Sanitize a robocopy attribute string (subset of ``RASHCNETOD``)."""
    if not value or not isinstance(value, str):
        return ""

    sanitized = value.strip().upper()
    if not ATTRIBUTES_RE.fullmatch(sanitized):
        logger.warning("Rejected invalid attribute string", extra={"attributes": sanitized})
        return ""

    return sanitized


def _parse_int(value: object) -> int | None:
    """Parse the leading integer of a value, or None if there is none."""
    # bool is an int subclass but a checkbox value is not a number
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def sanitize_number(value: object, minimum: int, maximum: int, default: int) -> int:
    """Parse an integer and enforce an inclusive [minimum, maximum] window.

    Args:
        value: Raw numeric value (int, float or string)
        minimum: Smallest accepted value
        maximum: Largest accepted value
        default: Value returned when parsing fails or the value is out of range

    Returns:
        The parsed value if it lies in range, else ``default``
    """
    number = _parse_int(value)
    if number is None or number < minimum or number > maximum:
        return default
    return number


def sanitize_bool(value: object) -> bool:
    """Coerce any value to a real boolean by truthiness."""
    return bool(value)


def _lookup(raw: Mapping[str, object], field: str, alias: str) -> object:
    """Read a raw option by its form key, falling back to the field name."""
    if alias in raw:
        return raw[alias]
    return raw.get(field)


def sanitize_options(raw: object) -> CopyRequest:
    """Sanitize a raw options mapping into a validated CopyRequest.

    Args:
        raw: Raw options, typically form data or a loaded preset

    Returns:
        A CopyRequest in which every field conforms to its whitelist or range

    Raises:
        OptionValidationError: If raw is not a mapping, or the source or
            destination path sanitizes to an empty string
    """
    if not isinstance(raw, Mapping):
        raise OptionValidationError(
            f"Copy options must be a mapping, got: {type(raw).__name__}",
            context={"type": type(raw).__name__},
        )

    options: Mapping[str, object] = raw  # pyright: ignore[reportUnknownVariableType]  # untyped front-end boundary

    source = sanitize_path(options.get("source"))
    if not source:
        raise OptionValidationError("Invalid or empty source path", field="source")

    destination = sanitize_path(options.get("destination"))
    if not destination:
        raise OptionValidationError("Invalid or empty destination path", field="destination")

    fields: dict[str, object] = {
        "source": source,
        "destination": destination,
        "file_pattern": sanitize_file_pattern(_lookup(options, "file_pattern", "files")),
        "include_attributes": sanitize_attributes(_lookup(options, "include_attributes", "includeAttributes")),
        "exclude_attributes": sanitize_attributes(_lookup(options, "exclude_attributes", "excludeAttributes")),
        "exclude_files": sanitize_exclude_list(_lookup(options, "exclude_files", "excludeFiles")),
        "exclude_dirs": sanitize_exclude_list(_lookup(options, "exclude_dirs", "excludeDirs")),
    }

    for field, alias in _BOOLEAN_FIELDS.items():
        fields[field] = sanitize_bool(_lookup(options, field, alias))

    for field, (alias, bound) in _NUMERIC_FIELDS.items():
        fields[field] = sanitize_number(
            _lookup(options, field, alias),
            bound.minimum,
            bound.maximum,
            bound.default,
        )

    try:
        request = CopyRequest.model_validate(fields)
    except ValidationError as e:
        # Unreachable while the helpers above and the model agree on the rules
        raise OptionValidationError(
            f"Sanitized options failed validation: {e}",
            context={"errors": [str(err["loc"]) for err in e.errors()]},
        ) from e

    logger.debug(
        "Sanitized copy options",
        extra={"source": request.source, "destination": request.destination},
    )
    return request


def _normalize_endpoint(path: str) -> str:
    return path.rstrip("\\/").casefold()


def ensure_distinct_endpoints(request: CopyRequest) -> CopyRequest:
    """Reject a request whose source and destination are the same directory.

    Comparison is case-insensitive and ignores trailing separators, matching
    Windows path semantics.

    Raises:
        OptionValidationError: If source and destination are the same
    """
    if _normalize_endpoint(request.source) == _normalize_endpoint(request.destination):
        raise OptionValidationError(
            "Source and destination cannot be the same",
            field="destination",
        )
    return request
