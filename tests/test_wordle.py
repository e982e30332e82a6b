"""Test the Wordle game."""

import asyncio
import random

import pytest

from gamecord.core import ConfigurationError, GameContext, InputEvent
from gamecord.games.wordle import (
    GREEN,
    GREY,
    MAX_GUESSES,
    YELLOW,
    Wordle,
    is_valid_word,
    load_words,
    score_guess,
)
from tests.constants import OPPONENT, PLAYER
from tests.fakes import EventLog, FakeTransport, say, wait_until


@pytest.mark.parametrize(
    ("guess", "answer", "expected"),
    [
        ("crane", "crane", [GREEN] * 5),
        ("apple", "paper", [YELLOW, YELLOW, GREEN, GREY, YELLOW]),
        ("llama", "hello", [YELLOW, YELLOW, GREY, GREY, GREY]),
        ("xxxxx", "hello", [GREY] * 5),
    ],
)
def test_score_guess(guess: str, answer: str, expected: list[str]) -> None:
    """Test the colors of repeated and misplaced letters."""
    assert score_guess(guess, answer) == expected


def test_word_list() -> None:
    """Test that the bundled word list is usable."""
    words = load_words()
    assert words
    assert all(is_valid_word(word) for word in words)


@pytest.mark.parametrize("word", ["hi", "héllo", "hell0", "toolong"])
def test_invalid_word(context: GameContext, word: str) -> None:
    """Test that the word must have five ascii letters."""
    with pytest.raises(ConfigurationError):
        Wordle(context, {"word": word})


def test_word_from_list(context: GameContext, rng: random.Random) -> None:
    """Test that a random word is picked from the given words."""
    game = Wordle(context, {"words": ["Apple", "Grape"]}, rng=rng)
    assert game.word in ("apple", "grape")


async def start(context: GameContext) -> tuple[Wordle, EventLog, asyncio.Task[None]]:
    """Start a game on a known word."""
    game = Wordle(context, {"word": "hello", "timeout": 5})
    log = EventLog(game)
    task = asyncio.create_task(game.start())
    await wait_until(lambda: game.collector is not None)
    return game, log, task


@pytest.mark.asyncio
async def test_win(context: GameContext, transport: FakeTransport) -> None:
    """Test that guesses are read, deleted and scored."""
    game, log, task = await start(context)
    first = say("World", actor=PLAYER)
    transport.message_source.emit(first)
    await wait_until(lambda: game.guesses)
    assert first.message.deleted  # type: ignore[union-attr]
    assert "`WORLD`" in (transport.last_view.embeds[0].description or "")
    chatter = say("hello there", actor=PLAYER)
    stranger = say("hello", actor=OPPONENT)
    transport.message_source.emit(chatter)
    transport.message_source.emit(stranger)
    transport.message_source.emit(say("HELLO", actor=PLAYER))
    await asyncio.wait_for(task, 2)
    assert not chatter.message.deleted  # type: ignore[union-attr]
    assert not stranger.message.deleted  # type: ignore[union-attr]
    (result,) = log.payloads("gameOver")
    assert result.outcome == "win"
    assert result.guesses == ("world", "hello")
    assert result.word == "hello"


@pytest.mark.asyncio
async def test_lose_after_six_guesses(
    context: GameContext, transport: FakeTransport
) -> None:
    """Test that the game ends after the last guess."""
    game, log, task = await start(context)
    for word in ("crane", "slate", "pious", "dough", "funky", "myths"):
        expected = len(game.guesses) + 1
        transport.message_source.emit(say(word, actor=PLAYER))
        await wait_until(
            lambda: len(game.guesses) == expected  # noqa: B023
            and not game.arbitrator.busy
        )
    await asyncio.wait_for(task, 2)
    (result,) = log.payloads("gameOver")
    assert result.outcome == "lose"
    assert len(result.guesses) == MAX_GUESSES
    assert "You lost! The word was **hello**." in (
        transport.last_view.embeds[0].fields[0].value
    )


@pytest.mark.asyncio
async def test_timeout(context: GameContext, transport: FakeTransport) -> None:
    """Test that an idle player loses by timeout."""
    game = Wordle(context, {"word": "hello", "timeout": 0.05})
    log = EventLog(game)
    await asyncio.wait_for(game.start(), 2)
    (result,) = log.payloads("gameOver")
    assert result.outcome == "timeout"
    assert result.guesses == ()
    assert transport.sent == 1


class SlowMessage:
    """Chat message whose deletion waits for a signal."""

    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.deleted = False

    async def delete(self) -> None:
        await self.gate.wait()
        self.deleted = True


@pytest.mark.asyncio
async def test_guess_during_turn_is_deleted(
    context: GameContext, transport: FakeTransport
) -> None:
    """Test that a guess sent while another is applied is removed unscored."""
    game, log, task = await start(context)
    slow = SlowMessage()
    first = InputEvent(
        action_id="", actor_id=PLAYER.id, message=slow, content="world"
    )
    transport.message_source.emit(first)
    await wait_until(lambda: game.arbitrator.busy)

    dropped = say("about", actor=PLAYER)
    transport.message_source.emit(dropped)
    await wait_until(lambda: dropped.message.deleted)  # type: ignore[union-attr]
    assert game.guesses == []

    slow.gate.set()
    await wait_until(lambda: game.guesses == ["world"] and not game.arbitrator.busy)
    assert slow.deleted
    transport.message_source.emit(say("hello", actor=PLAYER))
    await asyncio.wait_for(task, 2)
    (result,) = log.payloads("gameOver")
    assert result.guesses == ("world", "hello")
