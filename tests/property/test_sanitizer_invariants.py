"""Property-based tests for option sanitization invariants using Hypothesis.

These tests verify properties that must hold for every input reaching the
sanitizer from an untrusted front end:
    - No path containing a shell metacharacter ever survives sanitization
    - Numbers outside their window always fall back to the declared default
    - Every sanitized request renders to the same arguments every time
"""

from __future__ import annotations

from hypothesis import assume, given, strategies as st

from robocopy_status.core.options import (
    ValidationLimits,
    build_arguments,
    sanitize_exclude_list,
    sanitize_file_pattern,
    sanitize_number,
    sanitize_options,
    sanitize_path,
)
from robocopy_status.core.options.limits import DANGEROUS_PATH_CHARS, EXCLUDE_LIST_RE, FILE_PATTERN_RE

DANGEROUS = ";&|<>`$(){}[]!"

safe_path_chars = st.sampled_from("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789\\/:._- ")
safe_paths = st.text(safe_path_chars, min_size=1, max_size=60).filter(lambda p: p.strip() != "")


@st.composite
def paths_with_metacharacter(draw: st.DrawFn) -> str:
    """Generate a safe path with one metacharacter inserted somewhere."""
    path = draw(safe_paths)
    index = draw(st.integers(min_value=0, max_value=len(path)))
    char = draw(st.sampled_from(DANGEROUS))
    return path[:index] + char + path[index:]


class TestPathInvariants:
    """Property-based tests for path sanitization."""

    @given(paths_with_metacharacter())
    def test_metacharacters_never_survive(self, path: str) -> None:
        """Property: a path containing a metacharacter always sanitizes to empty."""
        assert sanitize_path(path) == ""

    @given(st.text())
    def test_output_is_safe(self, value: str) -> None:
        """Property: any sanitized path is empty or free of metacharacters and NUL."""
        sanitized = sanitize_path(value)
        assert sanitized == "" or (DANGEROUS_PATH_CHARS.search(sanitized) is None and "\0" not in sanitized)

    @given(safe_paths)
    def test_safe_paths_are_only_trimmed(self, path: str) -> None:
        """Property: safe paths are returned trimmed and otherwise unchanged."""
        assert sanitize_path(path) == path.strip()


class TestWhitelistInvariants:
    """Property-based tests for pattern and list whitelists."""

    @given(st.text())
    def test_file_pattern_always_whitelisted(self, value: str) -> None:
        """Property: the sanitized pattern always matches the whitelist."""
        assert FILE_PATTERN_RE.fullmatch(sanitize_file_pattern(value))

    @given(st.text())
    def test_exclude_list_always_whitelisted(self, value: str) -> None:
        """Property: the sanitized exclude list always matches the whitelist."""
        assert EXCLUDE_LIST_RE.fullmatch(sanitize_exclude_list(value))


class TestNumericInvariants:
    """Property-based tests for bounded numbers."""

    @given(st.integers())
    def test_threads_always_in_range(self, value: int) -> None:
        """Property: sanitized thread counts always lie in 1-128."""
        bound = ValidationLimits.THREADS
        result = sanitize_number(value, bound.minimum, bound.maximum, bound.default)

        assert bound.contains(result)
        assert result == (value if bound.contains(value) else bound.default)

    @given(st.integers().filter(lambda n: n < 0 or n > 10_000_000))
    def test_out_of_range_retries_fall_back(self, value: int) -> None:
        """Property: retries outside the window become one million."""
        bound = ValidationLimits.RETRIES
        assert sanitize_number(str(value), bound.minimum, bound.maximum, bound.default) == 1_000_000


class TestRequestInvariants:
    """Property-based tests for whole requests."""

    @given(
        source=safe_paths,
        destination=safe_paths,
        pattern=st.text(max_size=20),
        threads=st.one_of(st.integers(), st.text(max_size=6), st.none()),
        flags=st.dictionaries(
            st.sampled_from(["subdirectories", "mirrorMode", "moveFiles", "verbose", "multiThread"]),
            st.booleans(),
        ),
    )
    def test_sanitized_requests_build_deterministically(
        self,
        source: str,
        destination: str,
        pattern: str,
        threads: object,
        flags: dict[str, bool],
    ) -> None:
        """Property: sanitization succeeds and building is a pure function."""
        assume(source.strip() and destination.strip())
        raw: dict[str, object] = {"source": source, "destination": destination, "files": pattern, "threads": threads}
        raw.update(flags)

        request = sanitize_options(raw)
        args = build_arguments(request)

        assert args == build_arguments(sanitize_options(raw))
        assert args[:2] == (source.strip(), destination.strip())
        assert all(DANGEROUS_PATH_CHARS.search(token) is None for token in args)
