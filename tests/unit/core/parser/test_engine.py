"""Unit tests for the robocopy output parser."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from robocopy_status.core.parser import OutputParser, ParseEventKind, StatisticsSnapshot


def kinds(parser: OutputParser, line: str) -> list[ParseEventKind]:
    """Parse a line and return the emitted event kinds."""
    return [event.kind for event in parser.parse_line(line)]


class TestSummaryRows:
    """Test summary table rows."""

    def test_dirs_row(self, parser: OutputParser) -> None:
        """Test the Dirs row sets total and copied directories."""
        events = parser.parse_line("Dirs : 10 8 0 0 0 0")

        assert [e.kind for e in events] == [ParseEventKind.DIRS]
        assert events[0].stats is not None
        assert events[0].stats.total_dirs == 10
        assert events[0].stats.copied_dirs == 8

    def test_files_row(self, parser: OutputParser) -> None:
        """Test the Files row sets total, copied, skipped and failed files."""
        _ = parser.parse_line("   Files :       100        95         3         0         2         0")
        stats = parser.snapshot()

        assert stats.total_files == 100
        assert stats.copied_files == 95
        assert stats.skipped_files == 3
        assert stats.failed_files == 2

    def test_bytes_row_updates_progress(self, parser: OutputParser) -> None:
        """Test the Bytes row sets sizes and recomputes progress."""
        events = parser.parse_line("   Bytes :     1.5 g     750 m         0         0         0         0")

        assert [e.kind for e in events] == [ParseEventKind.BYTES]
        stats = events[0].stats
        assert stats is not None
        assert stats.total_bytes == 1_610_612_736
        assert stats.copied_bytes == 786_432_000
        assert stats.progress_percent == 49

    def test_bytes_row_with_zero_total_keeps_progress(self, parser: OutputParser) -> None:
        """Test a zero total never divides by zero."""
        _ = parser.parse_line("  45.0%")
        _ = parser.parse_line("   Bytes :         0         0         0         0         0         0")

        assert parser.snapshot().progress_percent == 45

    def test_times_row(self, parser: OutputParser) -> None:
        """Test the Times row sets the elapsed time."""
        _ = parser.parse_line("   Times :   0:01:23   0:01:20                       0:00:00   0:00:03")
        assert parser.snapshot().time_elapsed == "0:01:23"


class TestProgressLines:
    """Test percentage, speed and file rows."""

    def test_percentage(self, parser: OutputParser) -> None:
        """Test a percentage line sets progress."""
        assert kinds(parser, "  45.0%") == [ParseEventKind.PROGRESS]
        assert parser.snapshot().progress_percent == 45

    @pytest.mark.parametrize(("line", "expected"), [("44.5%", 45), ("0%", 0), ("100%", 100), ("12.4 %", 12)])
    def test_percentage_rounding(self, parser: OutputParser, line: str, expected: int) -> None:
        """Test percentages round half up."""
        _ = parser.parse_line(line)
        assert parser.snapshot().progress_percent == expected

    def test_percentage_above_100_is_ignored(self, parser: OutputParser) -> None:
        """Test out-of-range percentages do not change progress."""
        assert kinds(parser, "150%") == [ParseEventKind.LOG]
        assert parser.snapshot().progress_percent == 0

    def test_last_percentage_wins(self, parser: OutputParser) -> None:
        """Test a later percentage overrides the byte-derived value."""
        _ = parser.parse_line("   Bytes :     1.5 g     750 m         0         0         0         0")
        _ = parser.parse_line("  80%")
        assert parser.snapshot().progress_percent == 80

    def test_speed(self, parser: OutputParser) -> None:
        """Test throughput is recorded as value and unit."""
        assert kinds(parser, "   Speed :            12345678 Bytes/sec.") == [ParseEventKind.SPEED]
        assert parser.snapshot().speed == "12345678 Bytes/s"

    def test_new_file(self, parser: OutputParser) -> None:
        """Test a New File row sets the current file."""
        assert kinds(parser, "\t    New File  \t\t  524288\tholiday.jpg") == [ParseEventKind.FILE]
        assert parser.snapshot().current_file == "holiday.jpg"

    def test_extra_file(self, parser: OutputParser) -> None:
        """Test an *EXTRA File row sets the current file."""
        _ = parser.parse_line("\t*EXTRA File \t\t   stale.txt ")
        assert parser.snapshot().current_file == "stale.txt"


class TestErrorsAndWarnings:
    """Test error and warning accumulation."""

    def test_structured_error(self, parser: OutputParser, fixed_clock: Callable[[], float]) -> None:
        """Test a robocopy error row is parsed into its parts."""
        events = parser.parse_line("2024/01/01 10:00:00 ERROR 5 (0x00000005) Copying File C:\\a\\locked.db")

        assert [e.kind for e in events] == [ParseEventKind.ERROR]
        record = events[0].error
        assert record is not None
        assert record.code == "5"
        assert record.hex_code == "0x00000005"
        assert record.message == "Copying File C:\\a\\locked.db"
        assert record.timestamp == fixed_clock()

    def test_unstructured_error(self, parser: OutputParser) -> None:
        """Test any line mentioning an error is recorded verbatim."""
        events = parser.parse_line("An error occurred while scanning")

        record = events[0].error
        assert record is not None
        assert record.code == "unknown"
        assert record.hex_code == ""
        assert record.message == "An error occurred while scanning"

    def test_warning(self, parser: OutputParser) -> None:
        """Test warning lines are recorded."""
        events = parser.parse_line("WARNING: Volume does not support long paths")

        assert [e.kind for e in events] == [ParseEventKind.WARNING]
        assert events[0].warning is not None
        assert parser.snapshot().warnings[0].message == "WARNING: Volume does not support long paths"

    def test_access_denied_is_a_warning(self, parser: OutputParser) -> None:
        """Test access denied lines are recorded as warnings."""
        assert kinds(parser, "Access denied copying file") == [ParseEventKind.WARNING]

    def test_error_and_warning_on_one_line(self, parser: OutputParser) -> None:
        """Test a line can grow both the error and warning lists."""
        before = parser.snapshot()
        events = parser.parse_line("ERROR 5 (0x00000005) warning: retrying")

        assert [e.kind for e in events] == [ParseEventKind.ERROR, ParseEventKind.WARNING]
        after = parser.snapshot()
        assert len(after.errors) == len(before.errors) + 1
        assert len(after.warnings) == len(before.warnings) + 1

    def test_errors_accumulate_in_order(self, parser: OutputParser) -> None:
        """Test errors are appended in arrival order."""
        _ = parser.parse_line("ERROR 2 (0x00000002) first")
        _ = parser.parse_line("ERROR 3 (0x00000003) second")

        assert [e.code for e in parser.snapshot().errors] == ["2", "3"]


class TestParseLine:
    """Test general parse_line behaviour."""

    def test_unmatched_line_is_a_log_event(self, parser: OutputParser) -> None:
        """Test lines matching no rule produce a single log event."""
        events = parser.parse_line("   ROBOCOPY     ::     Robust File Copy for Windows")

        assert len(events) == 1
        assert events[0].kind is ParseEventKind.LOG
        assert events[0].stats is None
        assert not events[0].changed

    def test_multiple_rules_fire_in_order(self, parser: OutputParser) -> None:
        """Test rules are independent and emitted in table order."""
        line = "   Bytes :     1 g     512 m         0         0   50%   ERROR 1 (0x00000001) disk warning"
        assert kinds(parser, line) == [
            ParseEventKind.BYTES,
            ParseEventKind.PROGRESS,
            ParseEventKind.ERROR,
            ParseEventKind.WARNING,
        ]

    def test_event_snapshots_are_independent(self, parser: OutputParser) -> None:
        """Test each event carries the state right after its own change."""
        events = parser.parse_line("   Bytes :     1 g     256 m         0         0   90%")

        assert events[0].stats is not None and events[1].stats is not None
        assert events[0].stats.progress_percent == 25
        assert events[1].stats.progress_percent == 90

    def test_non_string_input_is_coerced(self, parser: OutputParser) -> None:
        """Test non-string lines are stringified, not rejected."""
        events = parser.parse_line(42)  # pyright: ignore[reportArgumentType]  # untyped caller
        assert events[0].kind is ParseEventKind.LOG
        assert events[0].line == "42"

    def test_internal_failure_becomes_fault_event(self) -> None:
        """Test an exception inside a rule is reported, not raised."""

        def broken_clock() -> float:
            raise RuntimeError("clock unavailable")

        parser = OutputParser(clock=broken_clock)
        events = parser.parse_line("An error occurred")

        assert len(events) == 1
        assert events[0].kind is ParseEventKind.ERROR
        assert events[0].fault is not None
        assert events[0].fault.message == "clock unavailable"
        assert "RuntimeError" in events[0].fault.stack
        assert parser.snapshot().errors == ()

    def test_failure_keeps_events_from_earlier_rules(self) -> None:
        """Test a rule failing after another applied its change keeps that change's event."""

        def broken_clock() -> float:
            raise RuntimeError("clock unavailable")

        parser = OutputParser(clock=broken_clock)
        events = parser.parse_line("Dirs : 3 2 0 0 0 0 error")

        assert [e.kind for e in events] == [ParseEventKind.DIRS, ParseEventKind.ERROR]
        assert events[0].fault is None
        assert events[0].stats is not None
        assert events[0].stats.total_dirs == 3
        assert events[1].fault is not None
        assert parser.snapshot().total_dirs == 3


class TestBatchAndReset:
    """Test batch parsing, snapshots and reset."""

    def test_sample_run(self, parser: OutputParser, sample_output: list[str]) -> None:
        """Test a full run yields the expected final statistics."""
        _ = parser.parse_batch(sample_output)
        stats = parser.snapshot()

        assert stats.total_dirs == 10
        assert stats.copied_dirs == 8
        assert stats.total_files == 100
        assert stats.copied_files == 95
        assert stats.failed_files == 2
        assert stats.total_bytes == 1_610_612_736
        assert stats.progress_percent == 49
        assert stats.current_file == "holiday.jpg"
        assert stats.speed == "12345678 Bytes/s"
        assert stats.time_elapsed == "0:01:23"
        assert len(stats.errors) == 1
        assert stats.errors[0].code == "5"

    def test_batch_filters_log_events(self, parser: OutputParser) -> None:
        """Test unmatched lines are dropped from batch results."""
        events = parser.parse_batch(["header", "Dirs : 1 1 0 0 0 0", "footer"])
        assert [e.kind for e in events] == [ParseEventKind.DIRS]

    @pytest.mark.parametrize("lines", [None, "Dirs : 1 1 0 0 0 0", 5, {"a": 1}])
    def test_batch_rejects_non_sequences(self, parser: OutputParser, lines: object) -> None:
        """Test anything other than a list or tuple yields no events."""
        assert parser.parse_batch(lines) == []  # pyright: ignore[reportArgumentType]  # untyped caller

    def test_batch_continues_after_fault(self) -> None:
        """Test a fault in one line does not stop the batch."""
        calls = iter([RuntimeError("boom")])

        def flaky_clock() -> float:
            failure = next(calls, None)
            if failure is not None:
                raise failure
            return 1.0

        parser = OutputParser(clock=flaky_clock)
        events = parser.parse_batch(["ERROR 1 (0x00000001) a", "Dirs : 3 2 0 0 0 0"])

        assert [e.kind for e in events] == [ParseEventKind.ERROR, ParseEventKind.DIRS]
        assert events[0].fault is not None
        assert parser.snapshot().total_dirs == 3

    def test_snapshot_is_not_live(self, parser: OutputParser) -> None:
        """Test snapshots do not observe later changes."""
        snapshot = parser.snapshot()
        _ = parser.parse_line("Dirs : 5 5 0 0 0 0")

        assert snapshot.total_dirs == 0
        assert parser.snapshot().total_dirs == 5

    def test_reset(self, parser: OutputParser, sample_output: list[str]) -> None:
        """Test reset zeroes every counter and list."""
        _ = parser.parse_batch(sample_output)
        fresh = parser.reset()

        assert fresh == StatisticsSnapshot()
        assert parser.snapshot() == StatisticsSnapshot()

    def test_snapshot_to_dict(self, parser: OutputParser, fixed_clock: Callable[[], float]) -> None:
        """Test snapshots serialize to plain data."""
        _ = parser.parse_line("ERROR 5 (0x00000005) denied")
        data = parser.snapshot().to_dict()

        assert data["errors"] == [
            {"code": "5", "hex_code": "0x00000005", "message": "denied", "timestamp": fixed_clock()}
        ]
        assert data["progress_percent"] == 0
