"""Test the Rock Paper Scissors game."""

import asyncio

import pytest

from gamecord.core import GameContext, Player
from gamecord.games.rock_paper_scissors import (
    PAPER,
    ROCK,
    SCISSORS,
    RockPaperScissors,
    duel_winner,
)
from tests.constants import OPPONENT, PLAYER
from tests.fakes import (
    EventLog,
    FakeInteraction,
    FakeTransport,
    accept_invitation,
    click,
    versus,
    wait_until,
)


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        (ROCK, SCISSORS, 1),
        (PAPER, ROCK, 1),
        (SCISSORS, PAPER, 1),
        (SCISSORS, ROCK, 2),
        (PAPER, PAPER, 0),
    ],
)
def test_duel_winner(first: str, second: str, expected: int) -> None:
    """Test the comparison of choices."""
    assert duel_winner(first, second) == expected


async def choose(
    transport: FakeTransport, choice: str, actor: Player = PLAYER
) -> FakeInteraction:
    """Click a choice and wait for the answer."""
    interaction = FakeInteraction()
    transport.component_source.emit(
        click("rps", choice, actor=actor, interaction=interaction)
    )
    await wait_until(lambda: interaction.replied)
    return interaction


@pytest.mark.asyncio
async def test_player_wins(context: GameContext, transport: FakeTransport) -> None:
    """Test that rock beats scissors."""
    game = RockPaperScissors(context, versus())
    log = EventLog(game)
    task = asyncio.create_task(game.start())
    await accept_invitation(game, transport, OPPONENT)
    first = await choose(transport, ROCK)
    assert first.replies == ["You choose 🌑."]
    assert game.player_choice == ROCK
    await choose(transport, SCISSORS, OPPONENT)
    await asyncio.wait_for(task, 2)
    (result,) = log.payloads("gameOver")
    assert result.outcome == "win"
    assert result.winner == PLAYER
    assert result.player_choice == "🌑"
    assert result.opponent_choice == "✂️"


@pytest.mark.asyncio
async def test_choice_is_final(
    context: GameContext, transport: FakeTransport
) -> None:
    """Test that a second choice is ignored."""
    game = RockPaperScissors(context, versus())
    log = EventLog(game)
    task = asyncio.create_task(game.start())
    await accept_invitation(game, transport, OPPONENT)
    await choose(transport, PAPER)
    again = await choose(transport, SCISSORS)
    assert again.replies == []
    assert game.player_choice == PAPER
    await choose(transport, PAPER, OPPONENT)
    await asyncio.wait_for(task, 2)
    (result,) = log.payloads("gameOver")
    assert result.outcome == "tie"
    assert result.winner is None


@pytest.mark.asyncio
async def test_timeout_keeps_choice(
    context: GameContext, transport: FakeTransport
) -> None:
    """Test that an unfinished game reports the known choices."""
    game = RockPaperScissors(context, versus(timeout=0.1))
    log = EventLog(game)
    task = asyncio.create_task(game.start())
    await accept_invitation(game, transport, OPPONENT)
    await choose(transport, SCISSORS, OPPONENT)
    await asyncio.wait_for(task, 2)
    (result,) = log.payloads("gameOver")
    assert result.outcome == "timeout"
    assert result.player_choice is None
    assert result.opponent_choice == "✂️"
