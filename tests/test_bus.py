"""Test the lifecycle bus."""

import asyncio
from typing import Any

import pytest

from gamecord.core import LifecycleBus


def test_listeners_called_in_order() -> None:
    """Test that listeners receive the payload in registration order."""
    bus = LifecycleBus()
    calls: list[tuple[str, Any]] = []
    bus.on("gameOver", lambda result: calls.append(("first", result)))
    bus.on("gameOver", lambda result: calls.append(("second", result)))
    bus.publish("gameOver", 42)
    assert calls == [("first", 42), ("second", 42)]


def test_end_has_no_payload() -> None:
    """Test that end listeners are called without argument."""
    bus = LifecycleBus()
    calls = []
    bus.on("end", lambda: calls.append("end"))
    bus.publish("end")
    assert calls == ["end"]


def test_off_removes_listener() -> None:
    """Test that a removed listener is not called anymore."""
    bus = LifecycleBus()
    calls = []

    def listener(reason: str) -> None:
        calls.append(reason)

    bus.on("versusReject", listener)
    assert bus.listener_count("versusReject") == 1
    bus.off("versusReject", listener)
    bus.publish("versusReject", "user")
    assert calls == []
    assert bus.listener_count("versusReject") == 0


def test_unknown_kind() -> None:
    """Test that unknown kinds are refused."""
    bus = LifecycleBus()
    with pytest.raises(ValueError, match="Unknown lifecycle event"):
        bus.on("start", print)  # type: ignore[arg-type]


def test_failing_listener_does_not_stop_delivery() -> None:
    """Test that the next listeners are called after a failure."""
    bus = LifecycleBus()
    calls = []

    def failing(error: Exception) -> None:
        raise RuntimeError(error)

    bus.on("fatalError", failing)
    bus.on("fatalError", calls.append)
    error = RuntimeError("boom")
    bus.publish("fatalError", error)
    assert calls == [error]


def test_recursive_publish() -> None:
    """Test that a listener cannot publish the kind being delivered."""
    bus = LifecycleBus()
    errors: list[Exception] = []

    def republish(payload: Any) -> None:
        try:
            bus.publish("gameOver", payload)
        except RuntimeError as err:
            errors.append(err)

    bus.on("gameOver", republish)
    bus.publish("gameOver", 1)
    assert len(errors) == 1


@pytest.mark.asyncio
async def test_async_listener_is_scheduled() -> None:
    """Test that coroutine listeners run on the loop."""
    bus = LifecycleBus()
    done = asyncio.Event()

    async def listener() -> None:
        done.set()

    bus.on("end", listener)
    bus.publish("end")
    await asyncio.wait_for(done.wait(), 1)


@pytest.mark.asyncio
async def test_unhandled_error_goes_to_loop() -> None:
    """Test that an error without listener reaches the loop handler."""
    bus = LifecycleBus()
    loop = asyncio.get_running_loop()
    contexts: list[dict[str, Any]] = []
    previous = loop.get_exception_handler()
    loop.set_exception_handler(lambda _, context: contexts.append(context))
    try:
        error = RuntimeError("lost")
        bus.publish("error", error)
    finally:
        loop.set_exception_handler(previous)
    assert len(contexts) == 1
    assert contexts[0]["exception"] is error
