"""Single robocopy invocation with live output parsing.

The child process receives an argument vector and is never started through
a shell. Its stdout and stderr are forwarded chunk by chunk, as they arrive, to
a ParserWorker; every event that changes observable state is handed to the
caller's callback.
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
import re
import sys
from collections.abc import Callable, Sequence

from robocopy_status.utils.logging import operation_context

from .exit_codes import CopyResult
from .options import CopyRequest, build_arguments, format_command_line
from .parser import ParseEvent, ParserWorker, RequestKind, ResponseKind

logger = logging.getLogger(__name__)

type EventCallback = Callable[[ParseEvent], None]

READ_CHUNK_SIZE = 4096
SEGMENT_SEPARATOR_RE = re.compile(r"[\r\n]")


def simulation_command(args: Sequence[str], executable: str = "robocopy") -> list[str]:
    """Build a command that echoes the robocopy command line instead of running it."""
    return [
        sys.executable,
        "-c",
        "import sys; print(sys.argv[1])",
        f"Simulating: {format_command_line(args, executable)}",
    ]


def should_simulate(simulate: bool | None) -> bool:
    """Resolve the simulate flag; robocopy only exists on Windows."""
    if simulate is not None:
        return simulate
    return sys.platform != "win32"


async def _forward_segment(segment: str, worker: ParserWorker, on_event: EventCallback | None) -> None:
    if not segment.strip():
        return
    response = await worker.request(RequestKind.PARSE_LINE, segment)
    if response.kind is ResponseKind.ERROR:
        logger.error("Parser worker reported an error", extra={"detail": response.data})
        return
    if on_event is None or not isinstance(response.data, list):
        return
    for event in response.data:  # pyright: ignore[reportUnknownVariableType]  # message boundary
        if isinstance(event, ParseEvent) and event.changed:
            on_event(event)


async def _forward_stream(
    stream: asyncio.StreamReader,
    worker: ParserWorker,
    sink: list[str],
    on_event: EventCallback | None,
    encoding: str,
) -> None:
    decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
    pending = ""
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        text = decoder.decode(chunk, final=not chunk)
        if text:
            sink.append(text)

        # Progress updates are separated by carriage returns within one line
        *segments, pending = SEGMENT_SEPARATOR_RE.split(pending + text)
        for segment in segments:
            await _forward_segment(segment, worker, on_event)

        if not chunk:
            break

    await _forward_segment(pending, worker, on_event)


async def run_copy(
    request: CopyRequest,
    worker: ParserWorker,
    *,
    executable: str = "robocopy",
    simulate: bool | None = None,
    on_event: EventCallback | None = None,
    encoding: str = "utf-8",
) -> CopyResult:
    """Run robocopy once for a sanitized request.

    Args:
        request: Sanitized copy request
        worker: Running parser worker; it is reset before the copy starts
        executable: robocopy executable name or path
        simulate: Echo the command line instead of running robocopy
            (defaults to True on non-Windows hosts)
        on_event: Callback for every parse event that changed statistics
        encoding: Encoding used to decode the child's output

    Returns:
        CopyResult describing the outcome; spawn and output processing
        failures are reported in the result rather than raised. A child still
        running after such a failure is killed.
    """
    args = build_arguments(request)
    simulated = should_simulate(simulate)
    command = simulation_command(args, executable) if simulated else [executable, *args]

    with operation_context():
        logger.info(
            "Starting robocopy",
            extra={
                "command_line": format_command_line(args, executable),
                "simulated": simulated,
            },
        )

        _ = await worker.request(RequestKind.RESET)

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.error("Failed to start robocopy", extra={"error": str(exc)})
            return CopyResult.spawn_failure(str(exc))

        output: list[str] = []
        error_output: list[str] = []
        assert process.stdout is not None and process.stderr is not None

        readers = [
            asyncio.create_task(_forward_stream(process.stdout, worker, output, on_event, encoding)),
            asyncio.create_task(_forward_stream(process.stderr, worker, error_output, on_event, encoding)),
        ]
        try:
            _ = await asyncio.gather(*readers)
            code = await process.wait()
        except Exception as exc:
            logger.exception("Failed to process robocopy output", extra={"error": str(exc)})
            return CopyResult.stream_failure(str(exc), "".join(output), "".join(error_output))
        finally:
            for reader in readers:
                _ = reader.cancel()
            _ = await asyncio.gather(*readers, return_exceptions=True)
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                _ = await process.wait()

        result = CopyResult.from_exit_code(code, "".join(output), "".join(error_output))
        logger.log(
            logging.INFO if result.success else logging.ERROR,
            "Robocopy finished",
            extra={"exit_code": code, "result_message": result.message},
        )
        return result
