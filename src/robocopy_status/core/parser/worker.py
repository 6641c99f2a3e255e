"""Background execution context for the output parser.

The worker owns one OutputParser and talks to the rest of the application
strictly through messages: requests go in through ``post``/``request``,
responses come out on ``responses``. Requests are processed one at a time in
FIFO order, and line matching runs in a worker thread so a large batch never
blocks the event loop. Every payload that leaves the worker is an immutable
snapshot; failures become ``error`` responses instead of exceptions.
"""

from __future__ import annotations

import asyncio
import logging
import traceback
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Self, override

from .engine import OutputParser

logger = logging.getLogger(__name__)


class RequestKind(str, Enum):
    """Messages accepted by the worker."""

    PARSE_LINE = "parse-line"
    PARSE_BATCH = "parse-batch"
    RESET = "reset"
    GET_STATS = "get-stats"

    @override
    def __str__(self) -> str:
        """Return string representation."""
        return self.value


class ResponseKind(str, Enum):
    """Messages emitted by the worker."""

    READY = "ready"
    PARSE_RESULT = "parse-result"
    BATCH_RESULT = "batch-result"
    RESET_COMPLETE = "reset-complete"
    STATS = "stats"
    ERROR = "error"

    @override
    def __str__(self) -> str:
        """Return string representation."""
        return self.value


@dataclass(slots=True, frozen=True)
class WorkerRequest:
    """A request queued for the worker."""

    kind: str
    data: object = None
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass(slots=True, frozen=True)
class WorkerResponse:
    """A response produced by the worker."""

    kind: ResponseKind
    data: object = None
    request_id: str | None = None


class ParserWorker:
    """Message-passing wrapper that runs an OutputParser off the event loop."""

    def __init__(self, parser: OutputParser | None = None, max_pending: int = 1000) -> None:
        """Initialize the worker.

        Args:
            parser: Parser to drive; a new one is created if omitted
            max_pending: Maximum number of queued requests before ``post``
                waits for room
        """
        self._parser: OutputParser = parser or OutputParser()
        self._requests: asyncio.Queue[WorkerRequest | None] = asyncio.Queue(maxsize=max_pending)
        self.responses: asyncio.Queue[WorkerResponse] = asyncio.Queue()
        self._waiters: dict[str, asyncio.Future[WorkerResponse]] = {}
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        """Whether the worker task is alive."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the worker task and announce readiness."""
        if self.running:
            return

        self._task = asyncio.create_task(self._worker_loop(), name="parser-worker")
        await self.responses.put(WorkerResponse(kind=ResponseKind.READY))
        logger.debug("Parser worker started")

    async def stop(self) -> None:
        """Process the requests already queued, then stop the worker."""
        if self._task is None:
            return

        await self._requests.put(None)
        try:
            await self._task
        finally:
            self._task = None
            for waiter in self._waiters.values():
                if not waiter.done():
                    _ = waiter.cancel()
            self._waiters.clear()
        logger.debug("Parser worker stopped")

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def post(self, kind: str, data: object = None) -> str:
        """Queue a fire-and-forget request; its response lands on ``responses``.

        Args:
            kind: Request kind, one of the RequestKind values
            data: Request payload (a line for parse-line, a list for parse-batch)

        Returns:
            The request identifier echoed in the response
        """
        request = WorkerRequest(kind=str(kind), data=data)
        await self._requests.put(request)
        return request.request_id

    async def request(self, kind: str, data: object = None) -> WorkerResponse:
        """Queue a request and wait for its response.

        The response is delivered to the caller only, not to ``responses``.
        """
        if not self.running:
            raise RuntimeError("Parser worker is not running")

        request = WorkerRequest(kind=str(kind), data=data)
        waiter: asyncio.Future[WorkerResponse] = asyncio.get_running_loop().create_future()
        self._waiters[request.request_id] = waiter
        await self._requests.put(request)
        return await waiter

    async def _worker_loop(self) -> None:
        while True:
            request = await self._requests.get()
            if request is None:
                break

            response = await self._handle(request)

            waiter = self._waiters.pop(request.request_id, None)
            if waiter is not None:
                if not waiter.done():
                    waiter.set_result(response)
            else:
                await self.responses.put(response)

    async def _handle(self, request: WorkerRequest) -> WorkerResponse:
        try:
            kind = RequestKind(request.kind)
        except ValueError:
            logger.warning("Unknown worker message type", extra={"message_type": request.kind})
            return WorkerResponse(
                kind=ResponseKind.ERROR,
                data={"message": f"Unknown message type: {request.kind}", "stack": ""},
                request_id=request.request_id,
            )

        try:
            return await asyncio.to_thread(self._dispatch, kind, request)
        except Exception as exc:
            logger.exception("Parser worker failed to process message", extra={"message_type": kind.value})
            return WorkerResponse(
                kind=ResponseKind.ERROR,
                data={
                    "message": str(exc),
                    "stack": "".join(traceback.format_exception(exc)),
                },
                request_id=request.request_id,
            )

    def _dispatch(self, kind: RequestKind, request: WorkerRequest) -> WorkerResponse:
        match kind:
            case RequestKind.PARSE_LINE:
                line = request.data if isinstance(request.data, str) else str(request.data)
                return WorkerResponse(
                    kind=ResponseKind.PARSE_RESULT,
                    data=self._parser.parse_line(line),
                    request_id=request.request_id,
                )
            case RequestKind.PARSE_BATCH:
                lines = request.data if isinstance(request.data, (list, tuple)) else []
                return WorkerResponse(
                    kind=ResponseKind.BATCH_RESULT,
                    data=self._parser.parse_batch(lines),  # pyright: ignore[reportUnknownArgumentType]  # message boundary
                    request_id=request.request_id,
                )
            case RequestKind.RESET:
                return WorkerResponse(
                    kind=ResponseKind.RESET_COMPLETE,
                    data=self._parser.reset(),
                    request_id=request.request_id,
                )
            case RequestKind.GET_STATS:
                return WorkerResponse(
                    kind=ResponseKind.STATS,
                    data=self._parser.snapshot(),
                    request_id=request.request_id,
                )
