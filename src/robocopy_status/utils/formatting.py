"""Pure formatting helpers for console output of copy statistics."""

from __future__ import annotations

from typing import Final

from robocopy_status.core.parser.models import StatisticsSnapshot

_UNITS: Final[tuple[str, ...]] = ("KB", "MB", "GB", "TB")


def format_size(size: int, *, precision: int = 1) -> str:
    """Convert a byte count to a human-readable size using binary units.

    Args:
        size: Number of bytes (must be non-negative)
        precision: Decimal places for KB and larger units

    Returns:
        Human-readable size string

    Examples:
        >>> format_size(512)
        '512 Bytes'
        >>> format_size(1536)
        '1.5 KB'
        >>> format_size(1610612736)
        '1.5 GB'
    """
    if size < 0:
        msg = "size must be non-negative"
        raise ValueError(msg)

    if size < 1024:
        return f"{size} Bytes"

    value = float(size)
    unit = _UNITS[0]
    for unit in _UNITS:
        value /= 1024
        if value < 1024 or unit == _UNITS[-1]:
            break

    return f"{value:.{precision}f} {unit}"


def format_progress_bar(percent: int, *, width: int = 30) -> str:
    """Render a percentage as a fixed-width text bar.

    Examples:
        >>> format_progress_bar(50, width=10)
        '[#####-----]  50%'
    """
    clamped = max(0, min(100, percent))
    filled = clamped * width // 100
    return f"[{'#' * filled}{'-' * (width - filled)}] {clamped:3d}%"


def format_statistics_summary(stats: StatisticsSnapshot) -> str:
    """Summarize a statistics snapshot as a multi-line report."""
    lines = [
        f"Directories: {stats.copied_dirs}/{stats.total_dirs} copied",
        (
            f"Files:       {stats.copied_files}/{stats.total_files} copied, "
            f"{stats.skipped_files} skipped, {stats.failed_files} failed"
        ),
        f"Data:        {format_size(stats.copied_bytes)} of {format_size(stats.total_bytes)}",
        f"Progress:    {format_progress_bar(stats.progress_percent)}",
    ]
    if stats.speed:
        lines.append(f"Speed:       {stats.speed}")
    if stats.time_elapsed:
        lines.append(f"Elapsed:     {stats.time_elapsed}")
    if stats.errors:
        lines.append(f"Errors:      {len(stats.errors)}")
    if stats.warnings:
        lines.append(f"Warnings:    {len(stats.warnings)}")
    return "\n".join(lines)
