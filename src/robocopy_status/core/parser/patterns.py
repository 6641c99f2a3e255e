"""Pre-compiled patterns for robocopy console output and size conversion."""

from __future__ import annotations

import math
import re
from typing import Final

# Summary table rows printed at the end of a robocopy run:
#                Total    Copied   Skipped  Mismatch    FAILED    Extras
#     Dirs :        10         8         2         0         0         0
DIRECTORIES: Final[re.Pattern[str]] = re.compile(
    r"Dirs\s*:\s*(\d+)\s+(\d+)\s+(\d+)\s+(\d+)\s+(\d+)\s+(\d+)"
)
FILES: Final[re.Pattern[str]] = re.compile(
    r"Files\s*:\s*(\d+)\s+(\d+)\s+(\d+)\s+(\d+)\s+(\d+)\s+(\d+)"
)
BYTES: Final[re.Pattern[str]] = re.compile(
    r"Bytes\s*:\s*([\d.]+\s*[kmgt]?)\s+([\d.]+\s*[kmgt]?)\s+([\d.]+\s*[kmgt]?)\s+([\d.]+\s*[kmgt]?)",
    re.IGNORECASE,
)
TIMES: Final[re.Pattern[str]] = re.compile(
    r"Times\s*:\s*([\d:]+)\s+([\d:]+)\s+([\d:]+)\s+([\d:]+)"
)

# Per-file progress ("  45.0%") and throughput ("12345678 Bytes/sec.")
PERCENTAGE: Final[re.Pattern[str]] = re.compile(r"(\d+(?:\.\d+)?)\s*%")
SPEED: Final[re.Pattern[str]] = re.compile(
    r"([\d.]+)\s*(bytes?|kb?|mb?|gb?|tb?)/s",
    re.IGNORECASE,
)

NEW_FILE: Final[re.Pattern[str]] = re.compile(r"^\s*New File\s+(\d+)\s+(.*)", re.IGNORECASE)
EXTRA_FILE: Final[re.Pattern[str]] = re.compile(r"^\s*\*EXTRA File\s+(.*)", re.IGNORECASE)

# 2024/01/01 10:00:00 ERROR 5 (0x00000005) Copying File C:\src\locked.db
ERROR: Final[re.Pattern[str]] = re.compile(
    r"ERROR\s+(\d+)\s+\((0x[0-9A-F]+)\)\s+(.*)",
    re.IGNORECASE,
)

_SIZE: Final[re.Pattern[str]] = re.compile(r"^([\d.]+)\s*([kmgt])?b?$", re.IGNORECASE)
_LEADING_FLOAT: Final[re.Pattern[str]] = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)")

_MULTIPLIERS: Final[dict[str, int]] = {
    "": 1,
    "k": 1024,
    "m": 1024**2,
    "g": 1024**3,
    "t": 1024**4,
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Examples:
        >>> round_half_up(44.5)
        45
        >>> round_half_up(44.49)
        44
    """
    return math.floor(value + 0.5)


def _leading_float(text: str) -> float | None:
    match = _LEADING_FLOAT.match(text)
    if match is None:
        return None
    return float(match.group(0))


def parse_size(size: object) -> int:
    """Convert a robocopy size token to a byte count.

    A ``k``/``m``/``g``/``t`` suffix multiplies by the matching power of
    1024; no suffix means bytes. Text that does not look like a size falls
    back to its leading number, or 0.

    Args:
        size: Size token such as ``"1.5 g"``, ``"500 m"`` or ``"1024"``

    Returns:
        Size in bytes, rounded to the nearest integer

    Examples:
        >>> parse_size("1.5 g")
        1610612736
        >>> parse_size("512")
        512
        >>> parse_size("garbage")
        0
    """
    if not size or not isinstance(size, str):
        return 0

    cleaned = size.strip().lower()
    match = _SIZE.match(cleaned)
    if match is None:
        fallback = _leading_float(cleaned)
        return round_half_up(fallback) if fallback is not None else 0

    value = _leading_float(match.group(1))
    if value is None:
        return 0

    unit = match.group(2) or ""
    return round_half_up(value * _MULTIPLIERS[unit])
