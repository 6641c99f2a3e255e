"""Validation of scheduled copy tasks and their cron-like schedules.

Only validation lives here; executing schedules is left to the host
scheduler.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Annotated, Final, override

from pydantic import BaseModel, ConfigDict, Field, field_validator

from robocopy_status.exceptions import ScheduleValidationError

from .options import CopyRequest, ValidationLimits, ensure_distinct_endpoints, sanitize_options

_CRON_TERM: Final[re.Pattern[str]] = re.compile(r"^(?:(\*)|(\d+)(?:-(\d+))?)(?:/(\d+))?$")


@dataclass(slots=True, frozen=True)
class CronField:
    """Name and inclusive value range of one cron field."""

    name: str
    minimum: int
    maximum: int


CRON_FIELDS: Final[tuple[CronField, ...]] = (
    CronField("minute", 0, 59),
    CronField("hour", 0, 23),
    CronField("day of month", 1, 31),
    CronField("month", 1, 12),
    CronField("day of week", 0, 7),  # 0 and 7 are both Sunday
)


class TaskStatus(str, Enum):
    """Scheduled task status."""

    ACTIVE = "active"
    PAUSED = "paused"

    @override
    def __str__(self) -> str:
        """Return string representation."""
        return self.value


def validate_task_name(name: object) -> str:
    """Validate a scheduled task name.

    Raises:
        ScheduleValidationError: If the name is empty or too long
    """
    if not isinstance(name, str) or not name.strip():
        raise ScheduleValidationError("Please enter a task name", field="name")

    trimmed = name.strip()
    if len(trimmed) > ValidationLimits.TASK_NAME_MAX:
        raise ScheduleValidationError(
            f"Task name exceeds {ValidationLimits.TASK_NAME_MAX} characters",
            field="name",
        )
    return trimmed


def _validate_cron_term(term: str, cron_field: CronField) -> None:
    match = _CRON_TERM.match(term)
    if match is None:
        raise ScheduleValidationError(f"Invalid {cron_field.name} value: '{term}'", field=cron_field.name)

    wildcard, start, end, step = match.groups()
    if step is not None and int(step) < 1:
        raise ScheduleValidationError(f"Step must be at least 1 in {cron_field.name}: '{term}'", field=cron_field.name)
    if wildcard:
        return

    low = int(start)
    high = int(end) if end is not None else low
    for value in (low, high):
        if not cron_field.minimum <= value <= cron_field.maximum:
            raise ScheduleValidationError(
                f"{cron_field.name.capitalize()} value {value} outside {cron_field.minimum}-{cron_field.maximum}",
                field=cron_field.name,
            )
    if low > high:
        raise ScheduleValidationError(f"Range start exceeds end in {cron_field.name}: '{term}'", field=cron_field.name)


def validate_cron_expression(expression: object) -> str:
    """Validate a five-field cron expression.

    Each field is a comma-separated list of ``*``, ``N`` or ``N-M`` terms,
    each optionally followed by ``/step``.

    Args:
        expression: Raw schedule string

    Returns:
        The expression with surrounding whitespace removed

    Raises:
        ScheduleValidationError: If the expression is empty, too long or any
            field is malformed or out of range

    Examples:
        >>> validate_cron_expression(" 0 2 * * 1-5 ")
        '0 2 * * 1-5'
    """
    if not isinstance(expression, str) or not expression.strip():
        raise ScheduleValidationError("Please enter a schedule (cron format)", field="schedule")

    trimmed = expression.strip()
    if len(trimmed) > ValidationLimits.SCHEDULE_MAX:
        raise ScheduleValidationError(
            f"Schedule exceeds {ValidationLimits.SCHEDULE_MAX} characters",
            field="schedule",
        )

    parts = trimmed.split()
    if len(parts) != len(CRON_FIELDS):
        raise ScheduleValidationError(
            f"Schedule must have {len(CRON_FIELDS)} fields, got {len(parts)}",
            field="schedule",
            context={"schedule": trimmed},
        )

    for part, cron_field in zip(parts, CRON_FIELDS, strict=True):
        for term in part.split(","):
            _validate_cron_term(term, cron_field)

    return trimmed


class ScheduledTask(BaseModel):
    """A named copy configuration bound to a cron-like schedule."""

    id: Annotated[str, Field(default_factory=lambda: str(uuid.uuid4()), description="Task identifier")]
    name: Annotated[str, Field(description="Task name")]
    schedule: Annotated[str, Field(description="Cron expression")]
    config: Annotated[CopyRequest, Field(description="Sanitized copy options")]
    status: TaskStatus = TaskStatus.ACTIVE
    created_at: Annotated[datetime, Field(default_factory=datetime.now)]

    model_config = ConfigDict(frozen=True)

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: object) -> str:
        """Validate the task name."""
        try:
            return validate_task_name(v)
        except ScheduleValidationError as e:
            raise ValueError(str(e)) from e

    @field_validator("schedule", mode="before")
    @classmethod
    def validate_schedule(cls, v: object) -> str:
        """Validate the cron expression."""
        try:
            return validate_cron_expression(v)
        except ScheduleValidationError as e:
            raise ValueError(str(e)) from e

    @classmethod
    def from_raw(cls, name: object, schedule: object, raw_options: Mapping[str, object]) -> ScheduledTask:
        """Validate a task submitted from the front end.

        Raises:
            ScheduleValidationError: If the name or schedule is invalid
            OptionValidationError: If the copy options are unsafe or the
                source and destination are the same
        """
        task_name = validate_task_name(name)
        cron = validate_cron_expression(schedule)
        request = ensure_distinct_endpoints(sanitize_options(raw_options))
        return cls(name=task_name, schedule=cron, config=request)

    def toggled(self) -> ScheduledTask:
        """Return a copy with the status switched between active and paused."""
        status = TaskStatus.PAUSED if self.status is TaskStatus.ACTIVE else TaskStatus.ACTIVE
        return self.model_copy(update={"status": status})
