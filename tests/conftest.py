"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import yaml

from robocopy_status.core.parser import OutputParser

FIXED_TIMESTAMP = 1_700_000_000.0

# Tail of a typical robocopy run: one copied file, one error and the summary table
SAMPLE_OUTPUT: list[str] = [
    "-------------------------------------------------------------------------------",
    "   ROBOCOPY     ::     Robust File Copy for Windows",
    "-------------------------------------------------------------------------------",
    r"  Source : C:\Data\Photos\ ",
    r"    Dest : D:\Backup\Photos\ ",
    "\t    New File  \t\t  524288\tholiday.jpg",
    "  45.0%",
    "100%",
    r"2024/01/01 10:00:00 ERROR 5 (0x00000005) Copying File C:\Data\Photos\locked.db",
    "Access is denied.",
    "               Total    Copied   Skipped  Mismatch    FAILED    Extras",
    "    Dirs :        10         8         2         0         0         0",
    "   Files :       100        95         3         0         2         0",
    "   Bytes :     1.5 g     750 m         0         0         0         0",
    "   Times :   0:01:23   0:01:20                       0:00:00   0:00:03",
    "   Speed :            12345678 Bytes/sec.",
]


@pytest.fixture
def fixed_clock() -> Callable[[], float]:
    """Clock returning a constant timestamp."""
    return lambda: FIXED_TIMESTAMP


@pytest.fixture
def parser(fixed_clock: Callable[[], float]) -> OutputParser:
    """Fresh parser with a deterministic clock."""
    return OutputParser(clock=fixed_clock)


@pytest.fixture
def sample_output() -> list[str]:
    """Lines of a representative robocopy run."""
    return list(SAMPLE_OUTPUT)


@pytest.fixture
def raw_options() -> dict[str, object]:
    """Raw form options as submitted by the front end."""
    return {
        "source": r"C:\Data\Photos",
        "destination": r"D:\Backup\Photos",
        "files": "*.jpg",
        "subdirectories": True,
        "emptySubdirectories": False,
        "restartMode": True,
        "excludeFiles": "thumbs.db, *.tmp",
        "excludeDirs": "cache",
        "retries": "3",
        "waitTime": "5",
        "multiThread": True,
        "threads": "16",
    }


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str, object], Path]:
    """Factory writing YAML documents into the temporary directory."""

    def _write(name: str, data: object) -> Path:
        path = tmp_path / name
        _ = path.write_text(yaml.safe_dump(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Restore root logger handlers and level after a test reconfigures them."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
