"""Robocopy output parser and statistics engine.

Every line is tested against an ordered table of independent rules. Rules are
not mutually exclusive: a single line can update the byte counters, override
the progress percentage and record an error at once, and each rule that
fires produces its own event with its own snapshot.
"""

from __future__ import annotations

import logging
import time
import traceback
from collections.abc import Callable, Iterable

from . import patterns
from .models import (
    CopyStatistics,
    ErrorRecord,
    ParseEvent,
    ParseEventKind,
    ParseFault,
    StatisticsSnapshot,
    WarningRecord,
)

logger = logging.getLogger(__name__)

DEFAULT_TIME_ELAPSED = "0:00:00"

type Rule = Callable[[str], ParseEvent | None]


class OutputParser:
    """Incremental parser for one robocopy operation.

    The parser owns exactly one CopyStatistics record. Call ``reset()``
    before feeding the output of a new operation; construct separate parsers
    for operations that run side by side.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        """Initialize the parser.

        Args:
            clock: Wall-clock source for error and warning timestamps
        """
        self._clock: Callable[[], float] = clock
        self._stats: CopyStatistics = CopyStatistics()

        # Order matters: it is the order in which events are emitted
        self._rules: tuple[Rule, ...] = (
            self._apply_directories,
            self._apply_files,
            self._apply_bytes,
            self._apply_times,
            self._apply_percentage,
            self._apply_speed,
            self._apply_current_file,
            self._apply_error,
            self._apply_warning,
        )

    @property
    def statistics(self) -> CopyStatistics:
        """The live statistics record. Prefer ``snapshot()`` for reading."""
        return self._stats

    def snapshot(self) -> StatisticsSnapshot:
        """Return an immutable copy of the current statistics."""
        return self._stats.snapshot()

    def reset(self) -> StatisticsSnapshot:
        """Reinitialize the statistics record to zero/blank values.

        Returns:
            Snapshot of the fresh statistics
        """
        self._stats = CopyStatistics()
        logger.debug("Parser statistics reset")
        return self._stats.snapshot()

    def parse_line(self, line: str) -> list[ParseEvent]:
        """Parse one line of robocopy output.

        Never raises: an unexpected exception is converted into an ``error``
        event carrying a ParseFault.

        Args:
            line: Raw output line (partial lines are tolerated)

        Returns:
            One event per rule that fired, in rule order, or a single ``log``
            event when no rule matched. When a rule fails, the events of the
            rules before it are followed by the ``error`` event.
        """
        text = line if isinstance(line, str) else str(line)
        events: list[ParseEvent] = []
        try:
            for rule in self._rules:
                if (event := rule(text)) is not None:
                    events.append(event)
        except Exception as exc:
            logger.exception("Failed to parse output line", extra={"line": text})
            # Events from rules that already ran still describe applied changes
            return [*events, self._fault_event(text, exc)]

        if not events:
            return [ParseEvent(kind=ParseEventKind.LOG, line=text)]
        return events

    def parse_batch(self, lines: Iterable[str]) -> list[ParseEvent]:
        """Parse a batch of lines sequentially.

        A fault in one line does not affect the remaining lines.

        Args:
            lines: Output lines in arrival order

        Returns:
            Events for all lines that changed observable state; ``log``
            events are filtered out. Input that is not a list or tuple yields an
            empty list.
        """
        if not isinstance(lines, (list, tuple)):
            return []

        results: list[ParseEvent] = []
        for line in lines:
            results.extend(event for event in self.parse_line(line) if event.changed)
        return results

    def _event(
        self,
        kind: ParseEventKind,
        line: str,
        *,
        error: ErrorRecord | None = None,
        warning: WarningRecord | None = None,
    ) -> ParseEvent:
        return ParseEvent(
            kind=kind,
            line=line,
            stats=self._stats.snapshot(),
            error=error,
            warning=warning,
        )

    def _fault_event(self, line: str, exc: Exception) -> ParseEvent:
        fault = ParseFault(
            message=str(exc),
            stack="".join(traceback.format_exception(exc)),
        )
        return ParseEvent(
            kind=ParseEventKind.ERROR,
            line=line,
            stats=self._stats.snapshot(),
            fault=fault,
        )

    def _apply_directories(self, line: str) -> ParseEvent | None:
        match = patterns.DIRECTORIES.search(line)
        if match is None:
            return None
        self._stats.total_dirs = int(match.group(1))
        self._stats.copied_dirs = int(match.group(2))
        return self._event(ParseEventKind.DIRS, line)

    def _apply_files(self, line: str) -> ParseEvent | None:
        match = patterns.FILES.search(line)
        if match is None:
            return None
        self._stats.total_files = int(match.group(1))
        self._stats.copied_files = int(match.group(2))
        self._stats.skipped_files = int(match.group(3) or 0)
        self._stats.failed_files = int(match.group(5) or 0)
        return self._event(ParseEventKind.FILES, line)

    def _apply_bytes(self, line: str) -> ParseEvent | None:
        match = patterns.BYTES.search(line)
        if match is None:
            return None
        self._stats.total_bytes = patterns.parse_size(match.group(1))
        self._stats.copied_bytes = patterns.parse_size(match.group(2))
        if self._stats.total_bytes > 0:
            self._stats.progress_percent = patterns.round_half_up(
                self._stats.copied_bytes / self._stats.total_bytes * 100
            )
        return self._event(ParseEventKind.BYTES, line)

    def _apply_times(self, line: str) -> ParseEvent | None:
        match = patterns.TIMES.search(line)
        if match is None:
            return None
        self._stats.time_elapsed = match.group(1) or DEFAULT_TIME_ELAPSED
        return self._event(ParseEventKind.TIME, line)

    def _apply_percentage(self, line: str) -> ParseEvent | None:
        match = patterns.PERCENTAGE.search(line)
        if match is None:
            return None
        percentage = float(match.group(1))
        if not 0 <= percentage <= 100:
            return None
        # Last writer wins over the byte-derived percentage
        self._stats.progress_percent = patterns.round_half_up(percentage)
        return self._event(ParseEventKind.PROGRESS, line)

    def _apply_speed(self, line: str) -> ParseEvent | None:
        match = patterns.SPEED.search(line)
        if match is None:
            return None
        self._stats.speed = f"{match.group(1)} {match.group(2)}/s"
        return self._event(ParseEventKind.SPEED, line)

    def _apply_current_file(self, line: str) -> ParseEvent | None:
        match = patterns.NEW_FILE.search(line) or patterns.EXTRA_FILE.search(line)
        if match is None:
            return None
        self._stats.current_file = match.group(match.lastindex or 0).strip()
        return self._event(ParseEventKind.FILE, line)

    def _apply_error(self, line: str) -> ParseEvent | None:
        match = patterns.ERROR.search(line)
        if match is None and "error" not in line.lower():
            return None

        record = ErrorRecord(
            code=match.group(1) if match else "unknown",
            hex_code=match.group(2) if match else "",
            message=match.group(3) if match else line,
            timestamp=self._clock(),
        )
        self._stats.errors.append(record)
        return self._event(ParseEventKind.ERROR, line, error=record)

    def _apply_warning(self, line: str) -> ParseEvent | None:
        lowered = line.lower()
        if "warning" not in lowered and "access denied" not in lowered:
            return None

        record = WarningRecord(message=line, timestamp=self._clock())
        self._stats.warnings.append(record)
        return self._event(ParseEventKind.WARNING, line, warning=record)
