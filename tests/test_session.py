"""Test the lifecycle of a game session."""

import asyncio
import random

import pytest

from gamecord.core import (
    Embed,
    FatalTransportError,
    GameContext,
    InvalidActionError,
    SessionState,
    TransportError,
)
from gamecord.games.duel import DuelGame
from gamecord.games.flood import Flood
from gamecord.games.solo import SoloGame
from tests.constants import OPPONENT, PLAYER
from tests.fakes import EventLog, FakeInteraction, FakeTransport, click, wait_until

TWO_COLORS = {"size": 2, "emojis": ["🟥", "🟦"], "timeout": 5}
THREE_COLORS = {"size": 3, "emojis": ["🟥", "🟦", "🟧"], "timeout": 5}


async def wait_for_input(game: Flood) -> None:
    """Wait until the session listens to the buttons."""
    await wait_until(
        lambda: game.state is SessionState.AWAITING_INPUT
        and game.collector is not None
    )


@pytest.mark.asyncio
async def test_win_ends_once(
    context: GameContext, transport: FakeTransport, rng: random.Random
) -> None:
    """Test that a win publishes the result then the end."""
    game = Flood(context, TWO_COLORS, rng=rng)
    game.board = [0, 1, 1, 1]
    log = EventLog(game)
    assert game.state is SessionState.CREATED
    task = asyncio.create_task(game.start())
    await wait_for_input(game)
    transport.component_source.emit(click("flood", 1, actor=PLAYER))
    await asyncio.wait_for(task, 2)
    assert log.kinds == ["gameOver", "end"]
    (result,) = log.payloads("gameOver")
    assert result.outcome == "win"
    assert result.turns == 1
    assert result.player == PLAYER
    assert result.duration >= 0
    assert game.result is result
    assert game.state is SessionState.ENDED
    assert all(button.disabled for button in transport.last_view.buttons())
    assert transport.component_source.listeners == []


@pytest.mark.asyncio
async def test_idle_timeout(
    context: GameContext, transport: FakeTransport, rng: random.Random
) -> None:
    """Test that an idle player loses by timeout."""
    game = Flood(context, {**TWO_COLORS, "timeout": 0.05}, rng=rng)
    log = EventLog(game)
    await asyncio.wait_for(game.start(), 2)
    assert log.kinds == ["gameOver", "end"]
    assert log.payloads("gameOver")[0].outcome == "timeout"
    assert transport.sent == 1


@pytest.mark.asyncio
async def test_send_failure_is_fatal(rng: random.Random) -> None:
    """Test that a session whose first view fails ends without result."""
    game = Flood(
        GameContext(transport=FakeTransport(fail_send=True), player=PLAYER),
        TWO_COLORS,
        rng=rng,
    )
    log = EventLog(game)
    await asyncio.wait_for(game.start(), 2)
    assert log.kinds == ["fatalError", "end"]
    (error,) = log.payloads("fatalError")
    assert isinstance(error, FatalTransportError)
    assert error.operation == "send_initial"
    assert game.result is None


@pytest.mark.asyncio
async def test_start_twice(context: GameContext, rng: random.Random) -> None:
    """Test that a session cannot be restarted."""
    game = Flood(context, {**TWO_COLORS, "timeout": 0.01}, rng=rng)
    await asyncio.wait_for(game.start(), 2)
    with pytest.raises(InvalidActionError):
        await game.start()


@pytest.mark.asyncio
async def test_concurrent_clicks(
    context: GameContext, transport: FakeTransport, rng: random.Random
) -> None:
    """Test that a click during another turn is dropped."""
    game = Flood(context, THREE_COLORS, rng=rng)
    game.board = [0, 1, 2, 1, 1, 2, 2, 2, 0]
    log = EventLog(game)
    task = asyncio.create_task(game.start())
    await wait_for_input(game)

    gate = asyncio.Event()
    first = FakeInteraction(gate=gate)
    second = FakeInteraction()
    transport.component_source.emit(
        click("flood", 1, actor=PLAYER, interaction=first)
    )
    await wait_until(lambda: game.arbitrator.busy)
    transport.component_source.emit(
        click("flood", 2, actor=PLAYER, interaction=second)
    )
    await wait_until(lambda: second.replied)
    gate.set()
    await wait_until(lambda: first.edits)

    assert game.turns == 1
    assert game.board == [1, 1, 2, 1, 1, 2, 2, 2, 0]
    assert second.edits == []
    game.stop("idle")
    await asyncio.wait_for(task, 2)
    assert log.payloads("gameOver")[0].outcome == "timeout"


@pytest.mark.asyncio
async def test_failed_acknowledgment(
    context: GameContext, transport: FakeTransport, rng: random.Random
) -> None:
    """Test that a click which cannot be acknowledged is not applied."""
    game = Flood(context, THREE_COLORS, rng=rng)
    game.board = [0, 1, 2, 1, 1, 2, 2, 2, 0]
    log = EventLog(game)
    task = asyncio.create_task(game.start())
    await wait_for_input(game)
    transport.component_source.emit(
        click("flood", 1, actor=PLAYER, interaction=FakeInteraction(fail_defer=True))
    )
    await wait_until(lambda: log.payloads("error"))
    assert game.turns == 0
    assert game.board[0] == 0
    (error,) = log.payloads("error")
    assert isinstance(error, TransportError)
    assert error.operation == "defer_update"
    game.stop("idle")
    await asyncio.wait_for(task, 2)
    assert log.kinds[-1] == "end"


@pytest.mark.asyncio
async def test_other_user_is_rejected(
    context: GameContext, transport: FakeTransport, rng: random.Random
) -> None:
    """Test that clicks of other users are answered privately."""
    game = Flood(context, THREE_COLORS, rng=rng)
    game.board = [0, 1, 2, 1, 1, 2, 2, 2, 0]
    task = asyncio.create_task(game.start())
    await wait_for_input(game)
    interaction = FakeInteraction()
    transport.component_source.emit(
        click("flood", 1, actor=OPPONENT, interaction=interaction)
    )
    await wait_until(lambda: interaction.replied)
    assert interaction.replies == [f"Only {PLAYER.mention} can use these buttons."]
    assert game.turns == 0
    game.stop("idle")
    await asyncio.wait_for(task, 2)


@pytest.mark.asyncio
async def test_second_collector_refused(
    context: GameContext, rng: random.Random
) -> None:
    """Test that a session collects one round at a time."""
    game = Flood(context, THREE_COLORS, rng=rng)
    task = asyncio.create_task(game.start())
    await wait_for_input(game)
    with pytest.raises(InvalidActionError):
        await game.collect(game.apply)
    game.stop("idle")
    await asyncio.wait_for(task, 2)


@pytest.mark.asyncio
async def test_static_embed_option(
    context: GameContext, transport: FakeTransport, rng: random.Random
) -> None:
    """Test that static embed attributes override the game ones."""
    game = Flood(
        context,
        {**TWO_COLORS, "timeout": 0.01, "embed": {"title": "Paint", "color": "#FF0000"}},
        rng=rng,
    )
    await asyncio.wait_for(game.start(), 2)
    first = transport.views[0].embeds[0]
    assert first.title == "Paint"
    assert first.color == 0xFF0000
    assert first.author is not None
    assert first.author.name == PLAYER.name


@pytest.mark.asyncio
async def test_computed_end_embed(
    context: GameContext, transport: FakeTransport, rng: random.Random
) -> None:
    """Test that a computed end embed receives the result."""
    game = Flood(
        context,
        {
            **TWO_COLORS,
            "timeout": 0.01,
            "end_embed": lambda session, result: Embed(
                title=f"{session.player.name}: {result.outcome}"
            ),
        },
        rng=rng,
    )
    await asyncio.wait_for(game.start(), 2)
    assert transport.last_view.embeds == [Embed(title="alice: timeout")]


@pytest.mark.asyncio
async def test_end_surface_failure_is_not_fatal(
    rng: random.Random,
) -> None:
    """Test that the result is kept when the end view fails."""
    transport = FakeTransport(fail_update=True)
    game = Flood(
        GameContext(transport=transport, player=PLAYER),
        {**TWO_COLORS, "timeout": 0.01},
        rng=rng,
    )
    log = EventLog(game)
    await asyncio.wait_for(game.start(), 2)
    assert log.kinds == ["gameOver", "error", "end"]
    assert game.result is not None


@pytest.mark.parametrize(
    ("base", "hooks"),
    [
        (SoloGame, ("render_board", "apply", "conclude")),
        (DuelGame, ("emoji_of", "move")),
    ],
)
def test_game_hooks_are_abstract(
    context: GameContext, base: type, hooks: tuple[str, ...]
) -> None:
    """Test that a game family cannot be played without its hooks."""
    assert set(hooks) <= base.__abstractmethods__
    with pytest.raises(TypeError, match="abstract"):
        base(context)
