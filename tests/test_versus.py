"""Test the invitation played before a versus game."""

import asyncio

import pytest

from gamecord.core import (
    ConfigurationError,
    FatalTransportError,
    GameContext,
    InvitationState,
    SessionState,
)
from gamecord.games.tic_tac_toe import TicTacToe
from tests.constants import OPPONENT, PLAYER, STRANGER
from tests.fakes import (
    EventLog,
    FakeInteraction,
    FakeTransport,
    accept_invitation,
    click,
    versus,
    wait_until,
)


async def wait_for_invitation(game: TicTacToe) -> None:
    """Wait until the invitation listens to the buttons."""
    assert game.versus is not None
    await wait_until(
        lambda: game.versus.state is InvitationState.INVITED
        and game.collector is not None
    )


def test_self_challenge(context: GameContext) -> None:
    """Test that nobody can challenge themselves."""
    options = {"versus": {"opponent": {"id": PLAYER.id, "name": PLAYER.name}}}
    with pytest.raises(ConfigurationError):
        TicTacToe(context, options)


def test_opponent_required(context: GameContext) -> None:
    """Test that versus games need an opponent."""
    with pytest.raises(ConfigurationError):
        TicTacToe(context, {})


@pytest.mark.asyncio
async def test_invitation_view(
    context: GameContext, transport: FakeTransport
) -> None:
    """Test that the invitation mentions the opponent."""
    game = TicTacToe(context, versus())
    task = asyncio.create_task(game.start())
    await wait_for_invitation(game)
    view = transport.views[0]
    assert view.content == OPPONENT.mention
    assert view.mention_users
    assert [button.custom_id for button in view.buttons()] == [
        "$gamecord-versus-accept",
        "$gamecord-versus-reject",
    ]
    assert game.opponent == OPPONENT
    game.stop("idle")
    await asyncio.wait_for(task, 2)


@pytest.mark.asyncio
async def test_rejected(context: GameContext, transport: FakeTransport) -> None:
    """Test that a refused invitation ends without result."""
    game = TicTacToe(context, versus())
    log = EventLog(game)
    task = asyncio.create_task(game.start())
    await wait_for_invitation(game)
    transport.component_source.emit(click("versus", "reject", actor=OPPONENT))
    await asyncio.wait_for(task, 2)
    assert log.events == [("versusReject", "user"), ("end", None)]
    assert game.versus is not None
    assert game.versus.state is InvitationState.REJECTED
    assert game.result is None
    assert all(button.disabled for button in transport.last_view.buttons())
    assert "declined" in (transport.last_view.embeds[0].description or "")


@pytest.mark.asyncio
async def test_timed_out(context: GameContext, transport: FakeTransport) -> None:
    """Test that an unanswered invitation expires."""
    game = TicTacToe(context, versus(invite=0.05))
    log = EventLog(game)
    await asyncio.wait_for(game.start(), 2)
    assert log.events == [("versusReject", "time"), ("end", None)]
    assert game.versus is not None
    assert game.versus.state is InvitationState.TIMED_OUT
    assert "did not respond" in (transport.last_view.embeds[0].description or "")


@pytest.mark.asyncio
async def test_only_opponent_answers(
    context: GameContext, transport: FakeTransport
) -> None:
    """Test that the invitation ignores other users."""
    game = TicTacToe(context, versus())
    task = asyncio.create_task(game.start())
    await wait_for_invitation(game)
    for actor in (PLAYER, STRANGER):
        interaction = FakeInteraction()
        transport.component_source.emit(
            click("versus", "accept", actor=actor, interaction=interaction)
        )
        await wait_until(lambda: interaction.replied)  # noqa: B023
    assert game.versus is not None
    assert game.versus.state is InvitationState.INVITED
    game.stop("idle")
    await asyncio.wait_for(task, 2)


@pytest.mark.asyncio
async def test_accepted(context: GameContext, transport: FakeTransport) -> None:
    """Test that the game replaces the accepted invitation."""
    game = TicTacToe(context, versus(invite=0.2))
    log = EventLog(game)
    task = asyncio.create_task(game.start())
    await accept_invitation(game, transport, OPPONENT)
    assert transport.sent == 1
    assert transport.last_view.content is None
    assert len(list(transport.last_view.buttons())) == 9
    game.stop("idle")
    await asyncio.wait_for(task, 2)
    assert log.kinds == ["gameOver", "end"]
    (result,) = log.payloads("gameOver")
    assert result.outcome == "timeout"
    assert result.opponent == OPPONENT
    assert result.winner is None


@pytest.mark.asyncio
async def test_invitation_send_failure() -> None:
    """Test that an invitation which cannot be sent is fatal."""
    game = TicTacToe(
        GameContext(transport=FakeTransport(fail_send=True), player=PLAYER),
        versus(),
    )
    log = EventLog(game)
    await asyncio.wait_for(game.start(), 2)
    assert log.kinds == ["fatalError", "end"]


@pytest.mark.asyncio
async def test_board_render_failure_after_accept() -> None:
    """Test that a board which cannot replace the invitation is fatal."""
    transport = FakeTransport(fail_update=True)
    game = TicTacToe(GameContext(transport=transport, player=PLAYER), versus())
    log = EventLog(game)
    task = asyncio.create_task(game.start())
    await wait_for_invitation(game)
    transport.component_source.emit(click("versus", "accept", actor=OPPONENT))
    await asyncio.wait_for(task, 2)
    assert log.kinds == ["fatalError", "end"]
    assert game.versus is not None
    assert game.versus.state is InvitationState.ACCEPTED
    assert game.state is SessionState.ENDED
    (error,) = log.payloads("fatalError")
    assert isinstance(error, FatalTransportError)
    assert error.operation == "update_surface"
    assert game.arbitrator.turns == 0
    assert game.result is None
    assert transport.sent == 1
