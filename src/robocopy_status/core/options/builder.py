"""Deterministic rendering of a CopyRequest into robocopy arguments.

The argument vector is handed to the process spawner as-is and never joined
into a shell command. Token order follows robocopy's positional-then-flag
grammar and must stay stable.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence

from .limits import DEFAULT_FILE_PATTERN
from .models import CopyRequest

# Flags rendered in order when the corresponding boolean is set
_STRUCTURE_FLAGS: tuple[tuple[str, str], ...] = (
    ("subdirectories", "/S"),
    ("empty_subdirectories", "/E"),
)

_MODE_FLAGS: tuple[tuple[str, str], ...] = (
    ("restart_mode", "/Z"),
    ("backup_mode", "/B"),
    ("copy_all", "/COPYALL"),
    ("mirror_mode", "/MIR"),
    ("move_files", "/MOVE"),
    ("move_dirs", "/MOV"),
)

_LOGGING_FLAGS: tuple[tuple[str, str], ...] = (
    ("verbose", "/V"),
    ("no_progress", "/NP"),
    ("eta", "/ETA"),
)


def _flags(request: CopyRequest, table: tuple[tuple[str, str], ...]) -> list[str]:
    return [flag for field, flag in table if getattr(request, field)]


def build_arguments(request: CopyRequest) -> tuple[str, ...]:
    """Render a CopyRequest into an ordered robocopy argument list.

    The function is pure: equal requests always yield equal argument lists.
    A zero levels, retries, wait time or thread count suppresses its token,
    since zero means "unset" rather than an explicit zero.

    Args:
        request: Sanitized copy request

    Returns:
        Tuple of argument tokens, excluding the executable name

    Example:
        >>> build_arguments(CopyRequest(source="C:\\\\a", destination="D:\\\\b",
        ...                             subdirectories=True, retries=3, wait_time=0))
        ('C:\\\\a', 'D:\\\\b', '/S', '/R:3')
    """
    args: list[str] = [request.source, request.destination]

    if request.file_pattern.strip() and request.file_pattern != DEFAULT_FILE_PATTERN:
        args.append(request.file_pattern)

    # Copy options
    args.extend(_flags(request, _STRUCTURE_FLAGS))
    if request.levels > 0:
        args.append(f"/LEV:{request.levels}")

    # Copy mode
    args.extend(_flags(request, _MODE_FLAGS))

    # File selection
    if request.copy_archive:
        args.append("/A")
    if request.reset_archive:
        args.append("/M")
    if request.include_attributes:
        args.append(f"/IA:{request.include_attributes}")
    if request.exclude_attributes:
        args.append(f"/XA:{request.exclude_attributes}")

    for name in request.excluded_file_entries:
        args.extend(("/XF", name))
    for name in request.excluded_dir_entries:
        args.extend(("/XD", name))

    # Retry options
    if request.retries:
        args.append(f"/R:{request.retries}")
    if request.wait_time:
        args.append(f"/W:{request.wait_time}")

    # Logging
    args.extend(_flags(request, _LOGGING_FLAGS))

    # Performance
    if request.multi_thread and request.threads:
        args.append(f"/MT:{request.threads}")

    return tuple(args)


def format_command_line(args: Sequence[str], executable: str = "robocopy") -> str:
    """Render an argument list as a Windows command line for display only.

    The result is for logs and dry runs; it is never executed.
    """
    return subprocess.list2cmdline([executable, *args])
