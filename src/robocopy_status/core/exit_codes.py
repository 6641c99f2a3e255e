"""Robocopy exit code interpretation.

Robocopy reports a bit field rather than a plain status: codes below 8 are
success or benign states, 8 and above mean at least one failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

FAILURE_THRESHOLD: Final[int] = 8

EXIT_CODE_MESSAGES: Final[dict[int, str]] = {
    0: "No files were copied. No failures were encountered.",
    1: "All files were copied successfully.",
    2: "Extra files or directories were detected.",
    3: "Files were copied and extra files/directories were detected.",
    4: "Some Mismatched files or directories were detected.",
    5: "Some files were copied. Some files were mismatched.",
    6: "Additional files and mismatched files exist.",
    7: "Files were copied, additional files and mismatched files exist.",
    8: "Several files did not copy (failure/access denied).",
}


def describe_exit_code(code: int) -> str:
    """Return the human-readable message for a robocopy exit code.

    Examples:
        >>> describe_exit_code(1)
        'All files were copied successfully.'
        >>> describe_exit_code(16)
        'Process exited with code 16'
    """
    return EXIT_CODE_MESSAGES.get(code, f"Process exited with code {code}")


def is_success(code: int) -> bool:
    """Check whether a robocopy exit code denotes success."""
    return 0 <= code < FAILURE_THRESHOLD


@dataclass(slots=True, frozen=True)
class CopyResult:
    """Outcome of one robocopy invocation.

    ``code`` is None when the process could not be spawned or its output could
    not be processed; ``error`` then holds the reason.
    """

    success: bool
    code: int | None
    message: str
    output: str = ""
    error_output: str = ""
    error: str | None = None

    @classmethod
    def from_exit_code(cls, code: int, output: str = "", error_output: str = "") -> CopyResult:
        """Build a result from a finished process."""
        return cls(
            success=is_success(code),
            code=code,
            message=describe_exit_code(code),
            output=output,
            error_output=error_output,
        )

    @classmethod
    def spawn_failure(cls, error: str) -> CopyResult:
        """Build a result for a process that never started."""
        return cls(success=False, code=None, message=f"Failed to start robocopy: {error}", error=error)

    @classmethod
    def stream_failure(cls, error: str, output: str = "", error_output: str = "") -> CopyResult:
        """Build a result for a run aborted while its output was being processed."""
        return cls(
            success=False,
            code=None,
            message=f"Robocopy output processing failed: {error}",
            output=output,
            error_output=error_output,
            error=error,
        )
