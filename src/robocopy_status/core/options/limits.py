"""Validation limits, defaults and whitelist patterns for copy options."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

DEFAULT_FILE_PATTERN: Final[str] = "*.*"

# Shell metacharacters that are never allowed in a source or destination path
DANGEROUS_PATH_CHARS: Final[re.Pattern[str]] = re.compile(r"[;&|<>`$(){}\[\]!]")

FILE_PATTERN_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9*?._ -]+$")
EXCLUDE_LIST_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9*?.,_ -]*$")
ATTRIBUTES_RE: Final[re.Pattern[str]] = re.compile(r"^[RASHCNETOD]*$", re.IGNORECASE)


@dataclass(slots=True, frozen=True)
class NumericBound:
    """Inclusive [minimum, maximum] window with the value used when out of range."""

    minimum: int
    maximum: int
    default: int

    def contains(self, value: int) -> bool:
        """Check whether value lies inside the inclusive window."""
        return self.minimum <= value <= self.maximum


class ValidationLimits:
    """Bounds shared by the sanitizer, the request model and schedule validation."""

    TASK_NAME_MAX: Final[int] = 200
    SCHEDULE_MAX: Final[int] = 100

    LEVELS: Final[NumericBound] = NumericBound(minimum=0, maximum=9999, default=0)
    RETRIES: Final[NumericBound] = NumericBound(minimum=0, maximum=10_000_000, default=1_000_000)
    WAIT_SECONDS: Final[NumericBound] = NumericBound(minimum=0, maximum=3600, default=30)
    THREADS: Final[NumericBound] = NumericBound(minimum=1, maximum=128, default=8)
