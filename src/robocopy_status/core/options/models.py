"""Validated copy request model."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from .limits import (
    ATTRIBUTES_RE,
    DANGEROUS_PATH_CHARS,
    DEFAULT_FILE_PATTERN,
    EXCLUDE_LIST_RE,
    FILE_PATTERN_RE,
    ValidationLimits,
)


def split_exclude_list(value: str) -> tuple[str, ...]:
    """Split a comma-separated exclude list into trimmed, non-empty entries.

    Empty entries, such as the gap in ``"a,,b"`` or a trailing comma, are
    dropped rather than passed to robocopy as an empty ``/XF ""`` or
    ``/XD ""`` operand. All other entries keep their order.

    Examples:
        >>> split_exclude_list("*.tmp, *.bak,,thumbs.db")
        ('*.tmp', '*.bak', 'thumbs.db')
    """
    return tuple(entry.strip() for entry in value.split(",") if entry.strip())


class CopyRequest(BaseModel):
    """A sanitized, immutable description of one robocopy operation.

    Instances are normally produced by ``sanitize_options``. The validators
    below re-check every whitelist and bound so that a request built by hand
    cannot carry a value the sanitizer would have rejected.
    """

    source: Annotated[str, Field(description="Source directory")]
    destination: Annotated[str, Field(description="Destination directory")]
    file_pattern: Annotated[str, Field(description="File pattern to copy")] = DEFAULT_FILE_PATTERN

    # Copy options
    subdirectories: StrictBool = False
    empty_subdirectories: StrictBool = False
    levels: Annotated[
        int,
        Field(
            ge=ValidationLimits.LEVELS.minimum,
            le=ValidationLimits.LEVELS.maximum,
            description="Copy only the top N levels of the source tree (0 = unlimited)",
        ),
    ] = ValidationLimits.LEVELS.default

    # Copy mode
    restart_mode: StrictBool = False
    backup_mode: StrictBool = False
    copy_all: StrictBool = False
    mirror_mode: StrictBool = False
    move_files: StrictBool = False
    move_dirs: StrictBool = False

    # File selection
    copy_archive: StrictBool = False
    reset_archive: StrictBool = False
    include_attributes: str = ""
    exclude_attributes: str = ""
    exclude_files: str = ""
    exclude_dirs: str = ""

    # Retry options
    retries: Annotated[
        int,
        Field(
            ge=ValidationLimits.RETRIES.minimum,
            le=ValidationLimits.RETRIES.maximum,
            description="Number of retries on failed copies",
        ),
    ] = ValidationLimits.RETRIES.default
    wait_time: Annotated[
        int,
        Field(
            ge=ValidationLimits.WAIT_SECONDS.minimum,
            le=ValidationLimits.WAIT_SECONDS.maximum,
            description="Wait time between retries in seconds",
        ),
    ] = ValidationLimits.WAIT_SECONDS.default

    # Logging
    verbose: StrictBool = False
    no_progress: StrictBool = False
    eta: StrictBool = False

    # Performance
    multi_thread: StrictBool = False
    threads: Annotated[
        int,
        Field(
            ge=ValidationLimits.THREADS.minimum,
            le=ValidationLimits.THREADS.maximum,
            description="Thread count for multi-threaded copies",
        ),
    ] = ValidationLimits.THREADS.default

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("source", "destination")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate a path is non-empty and free of shell metacharacters."""
        if not v.strip():
            raise ValueError("Path cannot be empty")
        if "\0" in v:
            raise ValueError("Path cannot contain NUL bytes")
        if DANGEROUS_PATH_CHARS.search(v):
            raise ValueError("Path contains forbidden shell metacharacters")
        return v

    @field_validator("file_pattern")
    @classmethod
    def validate_file_pattern(cls, v: str) -> str:
        """Validate the file pattern against the whitelist."""
        if not FILE_PATTERN_RE.fullmatch(v):
            raise ValueError(f"Invalid file pattern: '{v}'")
        return v

    @field_validator("exclude_files", "exclude_dirs")
    @classmethod
    def validate_exclude_list(cls, v: str) -> str:
        """Validate an exclude list against the whitelist."""
        if not EXCLUDE_LIST_RE.fullmatch(v):
            raise ValueError(f"Invalid exclude list: '{v}'")
        return v

    @field_validator("include_attributes", "exclude_attributes")
    @classmethod
    def validate_attributes(cls, v: str) -> str:
        """Validate and upper-case an attribute string."""
        if not ATTRIBUTES_RE.fullmatch(v):
            raise ValueError(f"Invalid attribute string: '{v}'")
        return v.upper()

    @property
    def excluded_file_entries(self) -> tuple[str, ...]:
        """Excluded file names, one entry per /XF argument."""
        return split_exclude_list(self.exclude_files)

    @property
    def excluded_dir_entries(self) -> tuple[str, ...]:
        """Excluded directory names, one entry per /XD argument."""
        return split_exclude_list(self.exclude_dirs)
