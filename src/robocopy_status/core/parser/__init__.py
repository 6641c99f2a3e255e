"""Robocopy output parsing and statistics tracking."""

from __future__ import annotations

from .engine import OutputParser
from .models import (
    CopyStatistics,
    ErrorRecord,
    ParseEvent,
    ParseEventKind,
    ParseFault,
    StatisticsSnapshot,
    WarningRecord,
)
from .patterns import parse_size
from .worker import ParserWorker, RequestKind, ResponseKind, WorkerRequest, WorkerResponse

__all__ = [
    "CopyStatistics",
    "ErrorRecord",
    "OutputParser",
    "ParseEvent",
    "ParseEventKind",
    "ParseFault",
    "ParserWorker",
    "RequestKind",
    "ResponseKind",
    "StatisticsSnapshot",
    "WarningRecord",
    "WorkerRequest",
    "WorkerResponse",
    "parse_size",
]
