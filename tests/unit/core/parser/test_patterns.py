"""Unit tests for output patterns and size conversion."""

from __future__ import annotations

import pytest

from robocopy_status.core.parser import patterns
from robocopy_status.core.parser.patterns import parse_size, round_half_up


class TestParseSize:
    """Test robocopy size token conversion."""

    @pytest.mark.parametrize(
        ("token", "expected"),
        [
            ("1024", 1024),
            ("0", 0),
            ("1 k", 1024),
            ("1k", 1024),
            ("1.5 k", 1536),
            ("500 m", 524_288_000),
            ("1.5 g", 1_610_612_736),
            ("2 t", 2 * 1024**4),
            ("1.5 G", 1_610_612_736),
            ("10 kb", 10_240),
            ("  3 m  ", 3 * 1024**2),
        ],
    )
    def test_units_are_powers_of_1024(self, token: str, expected: int) -> None:
        """Test suffixes scale by powers of 1024."""
        assert parse_size(token) == expected

    def test_fractional_bytes_round_half_up(self) -> None:
        """Test fractional results round to the nearest integer."""
        assert parse_size("0.5") == 1
        assert parse_size("1.0001 k") == 1024

    @pytest.mark.parametrize(("token", "expected"), [("12 apples", 12), ("7.6x", 8), ("garbage", 0), ("", 0)])
    def test_fallback_to_leading_number(self, token: str, expected: int) -> None:
        """Test unrecognized text falls back to its leading number, else 0."""
        assert parse_size(token) == expected

    @pytest.mark.parametrize("token", [None, 1024, 1.5, ["1 k"]])
    def test_non_string_is_zero(self, token: object) -> None:
        """Test non-string tokens yield 0."""
        assert parse_size(token) == 0

    def test_always_returns_int(self) -> None:
        """Test the fallback path also yields an integer."""
        assert isinstance(parse_size("2.5 things"), int)


class TestRoundHalfUp:
    """Test rounding of progress values."""

    @pytest.mark.parametrize(("value", "expected"), [(0.5, 1), (1.5, 2), (2.5, 3), (44.49, 44), (99.999, 100)])
    def test_halves_round_up(self, value: float, expected: int) -> None:
        """Test halves round up rather than to even."""
        assert round_half_up(value) == expected


class TestPatterns:
    """Spot checks for the compiled line patterns."""

    def test_directories_row(self) -> None:
        """Test the Dirs summary row captures six counters."""
        match = patterns.DIRECTORIES.search("    Dirs :        10         8         2         0         0         0")
        assert match is not None
        assert match.groups() == ("10", "8", "2", "0", "0", "0")

    def test_error_line(self) -> None:
        """Test an error line captures code, hex code and message."""
        match = patterns.ERROR.search("2024/01/01 10:00:00 ERROR 32 (0x00000020) Copying File C:\\a.txt")
        assert match is not None
        assert match.groups() == ("32", "0x00000020", "Copying File C:\\a.txt")

    def test_speed_units(self) -> None:
        """Test speed values with byte units are recognized."""
        match = patterns.SPEED.search("Speed :   1.5 MB/s")
        assert match is not None
        assert match.groups() == ("1.5", "MB")

    def test_extra_file(self) -> None:
        """Test *EXTRA File rows capture the file name."""
        match = patterns.EXTRA_FILE.search("\t*EXTRA File \t\t   old.txt")
        assert match is not None
        assert match.group(1).strip() == "old.txt"
