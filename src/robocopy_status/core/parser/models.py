"""Statistics and event models for robocopy output parsing.

``CopyStatistics`` is the single mutable record owned by one parser.
Everything that leaves the parser (snapshots and events) is frozen, so a
consumer never observes a later mutation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import override


class ParseEventKind(str, Enum):
    """Kind of change a parsed line produced."""

    DIRS = "dirs"
    FILES = "files"
    BYTES = "bytes"
    TIME = "time"
    PROGRESS = "progress"
    SPEED = "speed"
    FILE = "file"
    ERROR = "error"
    WARNING = "warning"
    LOG = "log"

    @override
    def __str__(self) -> str:
        """Return string representation."""
        return self.value


@dataclass(slots=True, frozen=True)
class ErrorRecord:
    """An error reported by robocopy (or any line mentioning an error)."""

    code: str  # robocopy error number, "unknown" for unstructured lines
    hex_code: str
    message: str
    timestamp: float


@dataclass(slots=True, frozen=True)
class WarningRecord:
    """A warning or access-denied line."""

    message: str
    timestamp: float


@dataclass(slots=True, frozen=True)
class ParseFault:
    """An unexpected exception raised while processing one line."""

    message: str
    stack: str


@dataclass(slots=True, frozen=True)
class StatisticsSnapshot:
    """Point-in-time, immutable copy of CopyStatistics."""

    total_dirs: int = 0
    copied_dirs: int = 0
    total_files: int = 0
    copied_files: int = 0
    failed_files: int = 0
    skipped_files: int = 0
    total_bytes: int = 0
    copied_bytes: int = 0
    errors: tuple[ErrorRecord, ...] = ()
    warnings: tuple[WarningRecord, ...] = ()
    current_file: str = ""
    progress_percent: int = 0
    speed: str = ""
    time_elapsed: str = ""

    def to_dict(self) -> dict[str, object]:
        """Serialize the snapshot to plain data for message payloads."""
        return {
            "total_dirs": self.total_dirs,
            "copied_dirs": self.copied_dirs,
            "total_files": self.total_files,
            "copied_files": self.copied_files,
            "failed_files": self.failed_files,
            "skipped_files": self.skipped_files,
            "total_bytes": self.total_bytes,
            "copied_bytes": self.copied_bytes,
            "errors": [
                {"code": e.code, "hex_code": e.hex_code, "message": e.message, "timestamp": e.timestamp}
                for e in self.errors
            ],
            "warnings": [{"message": w.message, "timestamp": w.timestamp} for w in self.warnings],
            "current_file": self.current_file,
            "progress_percent": self.progress_percent,
            "speed": self.speed,
            "time_elapsed": self.time_elapsed,
        }


@dataclass(slots=True)
class CopyStatistics:
    """Running tally of a single copy operation.

    Created or reset at operation start and mutated line by line by the
    parser that owns it. Readers must take a snapshot instead of holding a
    reference.
    """

    total_dirs: int = 0
    copied_dirs: int = 0
    total_files: int = 0
    copied_files: int = 0
    failed_files: int = 0
    skipped_files: int = 0
    total_bytes: int = 0
    copied_bytes: int = 0
    errors: list[ErrorRecord] = field(default_factory=list)
    warnings: list[WarningRecord] = field(default_factory=list)
    current_file: str = ""
    progress_percent: int = 0
    speed: str = ""
    time_elapsed: str = ""

    def snapshot(self) -> StatisticsSnapshot:
        """Take an immutable copy of the current statistics."""
        return StatisticsSnapshot(
            total_dirs=self.total_dirs,
            copied_dirs=self.copied_dirs,
            total_files=self.total_files,
            copied_files=self.copied_files,
            failed_files=self.failed_files,
            skipped_files=self.skipped_files,
            total_bytes=self.total_bytes,
            copied_bytes=self.copied_bytes,
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
            current_file=self.current_file,
            progress_percent=self.progress_percent,
            speed=self.speed,
            time_elapsed=self.time_elapsed,
        )


@dataclass(slots=True, frozen=True)
class ParseEvent:
    """Structured notification of how one line changed the statistics.

    ``stats`` is the snapshot taken right after the change; it is None only
    for ``log`` events, which report an unmatched line. Error events carry
    either the new ``error`` record or, for an internal failure, a ``fault``.
    """

    kind: ParseEventKind
    line: str
    stats: StatisticsSnapshot | None = None
    error: ErrorRecord | None = None
    warning: WarningRecord | None = None
    fault: ParseFault | None = None

    @property
    def changed(self) -> bool:
        """Whether the event reports a change to observable state."""
        return self.kind is not ParseEventKind.LOG
