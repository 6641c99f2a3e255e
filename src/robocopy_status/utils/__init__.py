"""Shared utilities for logging and human-readable formatting."""

from robocopy_status.utils.formatting import (
    format_progress_bar,
    format_size,
    format_statistics_summary,
)
from robocopy_status.utils.logging import (
    OperationIDFilter,
    StructuredFormatter,
    configure_logging,
    get_operation_id,
    operation_context,
)

__all__ = [
    "OperationIDFilter",
    "StructuredFormatter",
    "configure_logging",
    "format_progress_bar",
    "format_size",
    "format_statistics_summary",
    "get_operation_id",
    "operation_context",
]
