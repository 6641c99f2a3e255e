"""Exception hierarchy for robocopy-status."""

from __future__ import annotations

from typing import Any


class RobocopyStatusError(Exception):
    """Base exception for all robocopy-status errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:  # pyright: ignore[reportAny] # Flexible error context
        """Initialize RobocopyStatusError.

        Args:
            message: Error message
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.context: dict[str, Any] = context or {}  # pyright: ignore[reportAny] # Flexible error context


class OptionValidationError(RobocopyStatusError):
    """Raised when raw copy options cannot be turned into a safe CopyRequest."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        context: dict[str, Any] | None = None,  # pyright: ignore[reportAny] # Flexible error context
    ) -> None:
        """Initialize OptionValidationError.

        Args:
            message: Error message
            field: Name of the option field that failed validation
            context: Additional context information
        """
        full_context = context or {}
        if field is not None:
            full_context["field"] = field

        super().__init__(message, full_context)
        self.field: str | None = field


class ScheduleValidationError(RobocopyStatusError):
    """Raised when a scheduled task name or cron expression is invalid."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        context: dict[str, Any] | None = None,  # pyright: ignore[reportAny] # Flexible error context
    ) -> None:
        """Initialize ScheduleValidationError.

        Args:
            message: Error message
            field: Name of the schedule field (or cron field) that failed
            context: Additional context information
        """
        full_context = context or {}
        if field is not None:
            full_context["field"] = field

        super().__init__(message, full_context)
        self.field: str | None = field


class ConfigurationError(RobocopyStatusError):
    """Raised when configuration or preset loading fails.

    Carries detailed, actionable error messages for missing files, YAML
    parsing errors and validation failures.
    """


class EnvironmentVariableError(RobocopyStatusError):
    """Raised when a ${VAR} reference names an unset environment variable."""
