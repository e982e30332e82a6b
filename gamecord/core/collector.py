"""Bounded collection of input events for one round of a game."""

import asyncio
import inspect
import logging
from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable
from typing import Any

from gamecord.core.transport import EventSource, InputEvent, Unsubscribe

logger = logging.getLogger(__name__)

IDLE = "idle"
TIME = "time"

Handler = Callable[[InputEvent], Awaitable[None]]
Predicate = Callable[[InputEvent], bool]


class InputCollector:
    """Subscribe to an event source until a stop condition is met.

    The collector ends on the first of:

    * an explicit :meth:`stop` with a caller chosen reason,
    * no accepted event during ``idle`` seconds (reason ``"idle"``),
    * a total lifetime longer than ``time`` seconds (reason ``"time"``).

    Only accepted events reset the idle deadline. When it ends, the
    collector unsubscribes, waits for the handler invocations still running
    and then calls ``on_end`` once with the reason.
    """

    def __init__(  # noqa: PLR0913
        self,
        source: EventSource,
        handler: Handler | None = None,
        *,
        namespace: str | None = None,
        accept: Predicate | None = None,
        idle: float | None = None,
        time: float | None = None,
        on_reject: Handler | None = None,
        on_end: Callable[[str], Any] | None = None,
        on_error: Callable[[Exception], Any] | None = None,
    ) -> None:
        """Initialize the collector without subscribing yet.

        Args:
            source: Where the input events come from.
            handler: Coroutine function called for each accepted event.
            namespace: Required prefix of action ids, None to keep all.
            accept: Predicate selecting the events given to the handler.
            idle: Seconds without accepted event before ending.
            time: Maximum lifetime in seconds.
            on_reject: Coroutine function called for rejected events.
            on_end: Called once with the end reason.
            on_error: Called with the exceptions raised by the handlers.
        """
        self._source = source
        self._handler = handler
        self._namespace = namespace
        self._accept = accept
        self._idle = idle
        self._time = time
        self._on_reject = on_reject
        self._on_end = on_end
        self._on_error = on_error
        self._queue: asyncio.Queue[InputEvent | None] = asyncio.Queue()
        self._unsubscribe: Unsubscribe | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._opened = False
        self._reason: str | None = None
        self.collected = 0

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__qualname__} namespace={self._namespace!r} "
            f"reason={self._reason!r} collected={self.collected!r}>"
        )

    @property
    def reason(self) -> str | None:
        """Reason of the end, None while collecting."""
        return self._reason

    @property
    def ended(self) -> bool:
        """Whether a stop condition was met."""
        return self._reason is not None

    def stop(self, reason: str = "user") -> None:
        """End the collection, only the first reason is kept."""
        if self._reason is not None:
            return
        logger.debug("Stop %r with reason %r", self, reason)
        self._reason = reason
        self._queue.put_nowait(None)

    def _push(self, event: InputEvent) -> None:
        if self._reason is None:
            self._queue.put_nowait(event)

    def _open(self) -> None:
        if self._opened:
            error_message = "A collector cannot be reopened"
            raise RuntimeError(error_message)
        self._opened = True
        self._unsubscribe = self._source.subscribe(self._push)

    def _close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _matches(self, event: InputEvent) -> bool:
        if self._namespace is None:
            return True
        return event.action_id.startswith(self._namespace)

    def __aiter__(self) -> AsyncIterator[InputEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncGenerator[InputEvent, None]:
        self._open()
        loop = asyncio.get_running_loop()
        now = loop.time()
        idle_deadline = None if self._idle is None else now + self._idle
        time_deadline = None if self._time is None else now + self._time
        try:
            while self._reason is None:
                deadlines = [
                    deadline
                    for deadline in (idle_deadline, time_deadline)
                    if deadline is not None
                ]
                timeout = (
                    max(0.0, min(deadlines) - loop.time()) if deadlines else None
                )
                try:
                    event = await asyncio.wait_for(self._queue.get(), timeout)
                except asyncio.TimeoutError:
                    if time_deadline is not None and loop.time() >= time_deadline:
                        self.stop(TIME)
                    else:
                        self.stop(IDLE)
                    continue
                if event is None or self._reason is not None:
                    continue
                if not self._matches(event):
                    logger.debug("Discard %r outside of namespace", event)
                    continue
                if self._accept is not None and not self._accept(event):
                    logger.debug("Reject %r", event)
                    if self._on_reject is not None:
                        self._spawn(self._on_reject, event)
                    continue
                if self._idle is not None:
                    idle_deadline = loop.time() + self._idle
                self.collected += 1
                yield event
        finally:
            self._close()

    def _spawn(self, handler: Handler, event: InputEvent) -> None:
        task = asyncio.create_task(self._dispatch(handler, event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _dispatch(self, handler: Handler, event: InputEvent) -> None:
        try:
            await handler(event)
        except Exception as error:
            logger.exception("Handler failed on %r", event)
            if self._on_error is None:
                raise
            self._on_error(error)

    async def run(self) -> str:
        """Dispatch every accepted event to the handler until the end.

        Each event is handled in its own task. The method returns once
        every handler invocation has completed.

        Returns:
            The end reason.

        Raises:
            RuntimeError: If no handler was given or the collector was
                already used.
        """
        if self._handler is None:
            error_message = "A handler is required to run a collector"
            raise RuntimeError(error_message)
        events = self._iterate()
        try:
            async for event in events:
                self._spawn(self._handler, event)
        finally:
            await events.aclose()
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        reason = self._reason
        if reason is None:
            error_message = "Collection ended without a reason"
            raise RuntimeError(error_message)
        logger.debug("%r ended", self)
        if self._on_end is not None:
            result = self._on_end(reason)
            if inspect.isawaitable(result):
                await result
        return reason
