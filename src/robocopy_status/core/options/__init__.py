"""Option sanitization and robocopy argument construction."""

from __future__ import annotations

from .builder import build_arguments, format_command_line
from .limits import DEFAULT_FILE_PATTERN, NumericBound, ValidationLimits
from .models import CopyRequest, split_exclude_list
from .sanitizer import (
    ensure_distinct_endpoints,
    sanitize_attributes,
    sanitize_bool,
    sanitize_exclude_list,
    sanitize_file_pattern,
    sanitize_number,
    sanitize_options,
    sanitize_path,
)

__all__ = [
    "DEFAULT_FILE_PATTERN",
    "CopyRequest",
    "NumericBound",
    "ValidationLimits",
    "build_arguments",
    "ensure_distinct_endpoints",
    "format_command_line",
    "sanitize_attributes",
    "sanitize_bool",
    "sanitize_exclude_list",
    "sanitize_file_pattern",
    "sanitize_number",
    "sanitize_options",
    "sanitize_path",
    "split_exclude_list",
]
