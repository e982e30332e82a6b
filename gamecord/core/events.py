"""Lifecycle event bus attached to every game session."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Literal, get_args

logger = logging.getLogger(__name__)

EventKind = Literal["error", "fatalError", "versusReject", "gameOver", "end"]
EVENT_KINDS: tuple[str, ...] = get_args(EventKind)
Listener = Callable[..., Awaitable[Any] | Any]


class LifecycleBus:
    """Typed publish/subscribe channel for session lifecycle events.

    Listeners are called synchronously in registration order. A listener
    may return an awaitable, it is then scheduled on the running loop and
    its failure is logged. Supported kinds are:

    * ``error``: a non fatal exception, the session goes on.
    * ``fatalError``: the session cannot continue, always followed by ``end``.
    * ``versusReject``: ``"user"`` or ``"time"``.
    * ``gameOver``: the result record of the session.
    * ``end``: published without payload, exactly once per session.
    """

    def __init__(self) -> None:
        """Initialize an empty bus."""
        self._listeners: dict[str, list[Listener]] = {
            kind: [] for kind in EVENT_KINDS
        }
        self._publishing: set[str] = set()
        self._tasks: set[asyncio.Future[Any]] = set()

    @staticmethod
    def _check(kind: str) -> None:
        if kind not in EVENT_KINDS:
            error_message = f"Unknown lifecycle event: {kind!r}"
            raise ValueError(error_message)

    def on(self, kind: EventKind, listener: Listener) -> Listener:
        """Register a listener for a kind of event.

        Args:
            kind: The kind of event to listen to.
            listener: Callable receiving the payload (nothing for ``end``).

        Returns:
            The listener itself.
        """
        self._check(kind)
        self._listeners[kind].append(listener)
        return listener

    def off(self, kind: EventKind, listener: Listener) -> None:
        """Remove a listener previously registered with :meth:`on`."""
        self._check(kind)
        try:
            self._listeners[kind].remove(listener)
        except ValueError:
            logger.warning("Listener %r is not registered on %s", listener, kind)

    def listener_count(self, kind: EventKind) -> int:
        """Return the number of listeners registered for a kind."""
        self._check(kind)
        return len(self._listeners[kind])

    def publish(self, kind: EventKind, payload: Any = None) -> None:
        """Deliver an event to every listener registered for its kind.

        Args:
            kind: The kind of event to publish.
            payload: The payload given to the listeners, ignored for ``end``.

        Raises:
            RuntimeError: If an event of the same kind is being delivered.
        """
        self._check(kind)
        if kind in self._publishing:
            error_message = f"Recursive publish of {kind!r}"
            raise RuntimeError(error_message)
        listeners = list(self._listeners[kind])
        if kind == "error" and not listeners:
            self._unhandled(payload)
            return
        logger.debug("Publish %s to %s listener(s)", kind, len(listeners))
        self._publishing.add(kind)
        try:
            for listener in listeners:
                try:
                    result = listener() if kind == "end" else listener(payload)
                except Exception:
                    logger.exception(
                        "Listener %r failed while handling %s", listener, kind
                    )
                    continue
                if inspect.isawaitable(result):
                    self._schedule(result, kind)
        finally:
            self._publishing.discard(kind)

    def _schedule(self, awaitable: Awaitable[Any], kind: str) -> None:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)

        def done(future: asyncio.Future[Any]) -> None:
            self._tasks.discard(future)
            if not future.cancelled() and future.exception() is not None:
                logger.error(
                    "Asynchronous listener failed while handling %s",
                    kind,
                    exc_info=future.exception(),
                )

        task.add_done_callback(done)

    @staticmethod
    def _unhandled(error: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("Unhandled game session error: %r", error)
            return
        context: dict[str, Any] = {"message": "Unhandled game session error"}
        if isinstance(error, BaseException):
            context["exception"] = error
        loop.call_exception_handler(context)
