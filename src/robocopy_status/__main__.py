"""Application entry point and CLI for robocopy-status.

Loads configuration and a preset of copy options, sanitizes the options,
and either prints the resulting robocopy command (dry run) or runs robocopy
once while streaming its output through the parser worker.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn

from robocopy_status.core.config import AppConfig, load_config, load_preset
from robocopy_status.core.exit_codes import CopyResult
from robocopy_status.core.options import (
    CopyRequest,
    build_arguments,
    ensure_distinct_endpoints,
    format_command_line,
    sanitize_options,
)
from robocopy_status.core.parser import (
    ParseEvent,
    ParseEventKind,
    ParserWorker,
    RequestKind,
    StatisticsSnapshot,
)
from robocopy_status.core.runner import run_copy
from robocopy_status.core.schedule import ScheduledTask, validate_cron_expression, validate_task_name
from robocopy_status.exceptions import RobocopyStatusError
from robocopy_status.utils.formatting import format_statistics_summary
from robocopy_status.utils.logging import configure_logging

__all__ = ["main"]

DEFAULT_CONFIG_PATH: Path = Path("config/robocopy-status.yaml")

# Exit codes
EXIT_SUCCESS = 0
EXIT_COPY_FAILED = 1
EXIT_CONFIG_ERROR = 2

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser.

    Returns:
        Parser with ``run``, ``validate`` and ``check-schedule`` subcommands
    """
    parser = argparse.ArgumentParser(
        prog="robocopy-status",
        description="Configure and run robocopy with live progress and statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  robocopy-status run presets/photos.yaml
  robocopy-status run presets/photos.yaml --dry-run
  robocopy-status validate presets/photos.yaml
  robocopy-status check-schedule "Nightly photos" "0 2 * * *" --preset presets/photos.yaml
        """,
    )

    _ = parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH}, optional)",
        metavar="PATH",
    )
    _ = parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override log level from configuration",
        metavar="LEVEL",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run robocopy for a preset")
    _ = run_parser.add_argument("preset", type=Path, help="YAML preset of copy options")
    _ = run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the robocopy command without running it",
    )
    _ = run_parser.add_argument(
        "--simulate",
        action="store_true",
        default=None,
        help="Echo the command through a child process instead of running robocopy",
    )

    validate_parser = subparsers.add_parser("validate", help="Sanitize a preset and show the arguments")
    _ = validate_parser.add_argument("preset", type=Path, help="YAML preset of copy options")

    schedule_parser = subparsers.add_parser("check-schedule", help="Validate a scheduled task")
    _ = schedule_parser.add_argument("name", help="Task name")
    _ = schedule_parser.add_argument("schedule", help="Cron expression (five fields)")
    _ = schedule_parser.add_argument("--preset", type=Path, help="YAML preset the task would run")

    return parser


def load_request(preset_path: Path) -> CopyRequest:
    """Load, sanitize and check a preset.

    Raises:
        ConfigurationError: If the preset file cannot be loaded
        OptionValidationError: If the options are unsafe or source equals destination
    """
    return ensure_distinct_endpoints(sanitize_options(load_preset(preset_path)))


def print_event(event: ParseEvent) -> None:
    """Print the parse events worth showing on a terminal."""
    if event.kind is ParseEventKind.FILE and event.stats is not None:
        print(f"  -> {event.stats.current_file}")
    elif event.kind is ParseEventKind.ERROR:
        detail = event.fault.message if event.fault else (event.error.message if event.error else event.line)
        print(f"  ! {detail}", file=sys.stderr)
    elif event.kind is ParseEventKind.WARNING and event.warning is not None:
        print(f"  ? {event.warning.message}", file=sys.stderr)


async def execute(
    request: CopyRequest,
    config: AppConfig,
    *,
    simulate: bool | None,
) -> tuple[CopyResult, StatisticsSnapshot | None]:
    """Run one copy through a fresh parser worker.

    Returns:
        The copy result and the final statistics snapshot
    """
    async with ParserWorker() as worker:
        result = await run_copy(
            request,
            worker,
            executable=config.robocopy.executable,
            simulate=simulate if simulate is not None else (config.robocopy.simulate or None),
            on_event=print_event,
        )
        response = await worker.request(RequestKind.GET_STATS)

    stats = response.data if isinstance(response.data, StatisticsSnapshot) else None
    return result, stats


def command_run(args: argparse.Namespace, config: AppConfig) -> int:
    """Handle ``run``."""
    preset_arg: Path = args.preset  # pyright: ignore[reportAny]  # argparse boundary
    dry_run: bool = args.dry_run  # pyright: ignore[reportAny]  # argparse boundary
    simulate: bool | None = args.simulate  # pyright: ignore[reportAny]  # argparse boundary

    request = load_request(preset_arg)
    arguments = build_arguments(request)

    if dry_run:
        print(format_command_line(arguments, config.robocopy.executable))
        return EXIT_SUCCESS

    print(f"Source:      {request.source}")
    print(f"Destination: {request.destination}")
    print(f"Files:       {request.file_pattern}\n")

    result, stats = asyncio.run(execute(request, config, simulate=simulate))

    if stats is not None:
        print()
        print(format_statistics_summary(stats))

    if result.code is None:
        print(f"\nError: {result.error}", file=sys.stderr)
    else:
        print(f"\nExit Code: {result.code}")
        print(f"Message: {result.message}")

    return EXIT_SUCCESS if result.success else EXIT_COPY_FAILED


def command_validate(args: argparse.Namespace) -> int:
    """Handle ``validate``."""
    preset_arg: Path = args.preset  # pyright: ignore[reportAny]  # argparse boundary
    request = load_request(preset_arg)
    for token in build_arguments(request):
        print(token)
    return EXIT_SUCCESS


def command_check_schedule(args: argparse.Namespace) -> int:
    """Handle ``check-schedule``."""
    name: str = args.name  # pyright: ignore[reportAny]  # argparse boundary
    schedule: str = args.schedule  # pyright: ignore[reportAny]  # argparse boundary
    preset_arg: Path | None = args.preset  # pyright: ignore[reportAny]  # argparse boundary

    if preset_arg is not None:
        task = ScheduledTask.from_raw(name, schedule, load_preset(preset_arg))
        print(f"Scheduled task '{task.name}' is valid ({task.schedule}, {task.status})")
    else:
        task_name = validate_task_name(name)
        cron = validate_cron_expression(schedule)
        print(f"Scheduled task '{task_name}' is valid ({cron})")
    return EXIT_SUCCESS


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, configure logging and dispatch a subcommand.

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)
    config_arg: Path | None = args.config  # pyright: ignore[reportAny]  # argparse boundary
    log_level_arg: str | None = args.log_level  # pyright: ignore[reportAny]  # argparse boundary
    command: str = args.command  # pyright: ignore[reportAny]  # argparse boundary

    try:
        config = load_config(config_arg or DEFAULT_CONFIG_PATH, required=config_arg is not None)
        configure_logging(
            log_level=log_level_arg or config.application.log_level,
            log_format=config.application.log_format,
            log_file=config.application.log_file,
        )

        if command == "run":
            return command_run(args, config)
        if command == "validate":
            return command_validate(args)
        return command_check_schedule(args)

    except RobocopyStatusError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR


def main() -> NoReturn:
    """Main entry point for robocopy-status."""
    try:
        status = run_cli()
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        status = EXIT_COPY_FAILED
    except Exception as exc:
        print(f"Unexpected error: {exc}", file=sys.stderr)
        logger.exception("Unexpected error during application execution")
        status = EXIT_COPY_FAILED

    sys.exit(status)


if __name__ == "__main__":
    main()
