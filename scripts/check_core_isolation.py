#!/usr/bin/env python3
"""Core isolation validation script.

Enforces two architectural rules for the robocopy_status package:

- core/ and utils/ must not import the CLI entry point (``__main__``), so the
  option, parser and runner layers stay usable from any front end.
- No module may start a process through a shell (``shell=True``,
  ``os.system``, ``os.popen`` or ``create_subprocess_shell``); robocopy always
  receives an argument vector.

Exit codes:
    0: No violations found (clean)
    1: Violations detected (architectural rule broken)
"""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Final

# ANSI color codes for terminal output
RED: Final[str] = "\033[91m"
GREEN: Final[str] = "\033[92m"
YELLOW: Final[str] = "\033[93m"
RESET: Final[str] = "\033[0m"

# Directories that must not depend on the entry point
PROTECTED_DIRS: Final[tuple[str, ...]] = ("core", "utils")

CLI_IMPORT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\s*(?:from\s+robocopy_status\.__main__\b|from\s+robocopy_status\s+import\s+.*\bmain\b|import\s+robocopy_status\.__main__\b)"
)

SHELL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"shell\s*=\s*True|\bos\.system\s*\(|\bos\.popen\s*\(|create_subprocess_shell\s*\("
)


def check_file(file_path: Path, *, protected: bool) -> list[tuple[int, str]]:
    """Check a single Python file for isolation violations.

    Args:
        file_path: Path to the Python file to check.
        protected: Whether the file lives in a directory that must not
            import the CLI.

    Returns:
        List of (line_number, violation_description) tuples.
        Empty list if no violations found.
    """
    violations: list[tuple[int, str]] = []

    try:
        lines = file_path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        print(f"{YELLOW}Warning: Could not read {file_path}: {e}{RESET}", file=sys.stderr)
        return violations

    for line_num, line in enumerate(lines, start=1):
        stripped = line.strip()
        if stripped.startswith("#"):
            continue

        if protected and CLI_IMPORT_PATTERN.search(line):
            violations.append((line_num, f"CLI import from core module: {stripped}"))

        if SHELL_PATTERN.search(line):
            violations.append((line_num, f"Shell-based process execution: {stripped}"))

    return violations


def scan_package(package_path: Path) -> dict[Path, list[tuple[int, str]]]:
    """Scan every module of the package.

    Args:
        package_path: Root path of the robocopy_status package.

    Returns:
        Dictionary mapping file paths to their violations.
    """
    violations_by_file: dict[Path, list[tuple[int, str]]] = {}

    for py_file in package_path.rglob("*.py"):
        if "__pycache__" in py_file.parts:
            continue

        relative = py_file.relative_to(package_path)
        protected = bool(relative.parts) and relative.parts[0] in PROTECTED_DIRS
        file_violations = check_file(py_file, protected=protected)
        if file_violations:
            violations_by_file[py_file] = file_violations

    return violations_by_file


def main() -> int:
    """Main entry point for the core isolation check.

    Returns:
        Exit code: 0 if no violations, 1 if violations found.
    """
    project_root = Path(__file__).parent.parent
    src_path = project_root / "src" / "robocopy_status"

    if not src_path.exists():
        print(f"{RED}Error: Could not find src/robocopy_status directory{RESET}", file=sys.stderr)
        return 1

    print("Checking core isolation and shell-free process execution...")
    print(f"Scanning: {src_path}\n")

    all_violations = scan_package(src_path)

    if not all_violations:
        print(f"{GREEN}✓ No isolation violations found!{RESET}")
        return 0

    total_violations = sum(len(v) for v in all_violations.values())
    print(f"{RED}✗ Found {total_violations} isolation violations:{RESET}\n")

    for file_path, violations in sorted(all_violations.items()):
        try:
            rel_path = file_path.relative_to(project_root)
        except ValueError:
            rel_path = file_path

        print(f"{RED}{rel_path}{RESET}")
        for line_num, description in violations:
            print(f"  {line_num}: {description}")
        print()

    print(f"{RED}Core isolation check failed!{RESET}")
    print("\nKeep CLI code in __main__.py and pass argument vectors to child processes.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
