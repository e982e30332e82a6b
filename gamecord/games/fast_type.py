"""Fast Type, type a sentence in the chat before the time runs out."""

import logging
import random
import time
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar

import msgspec

from gamecord.core import (
    TIME,
    GameContext,
    GameSession,
    InputEvent,
    SessionOptions,
    Text,
    View,
    text,
)
from gamecord.core.result import GameResult
from gamecord.core.view import Colors, EmbedField

logger = logging.getLogger(__name__)

WIN = "$win"
LOSE = "$lose"


def words_per_minute(typed: str, seconds: float) -> int:
    """Typing speed, counting five characters as a word.

    Examples:
        >>> words_per_minute("a" * 50, 30)
        20
    """
    if seconds <= 0:
        return 0
    return int(len(typed) / (seconds / 60) / 5)


def spaced(sentence: str) -> str:
    """Render a sentence so it cannot be copied and pasted as is.

    Examples:
        >>> spaced("hi you")
        '`h i` `y o u`'
    """
    return " ".join(f"`{' '.join(word)}`" for word in sentence.split(" "))


class FastTypeOptions(SessionOptions, kw_only=True):
    """Options of the Fast Type game.

    ``timeout`` is the total time given to type the sentence.
    """

    sentence: Annotated[str, msgspec.Meta(min_length=1)] = (
        "Some really cool sentence to fast type."
    )
    timeout: Annotated[float, msgspec.Meta(gt=0)] = 30.0
    description: Text = msgspec.field(
        default_factory=lambda: text(
            lambda session: (
                f"You have {session.options.timeout:g} seconds to type the "
                "sentence below."
            )
        )
    )
    win_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda result, session: (
                "You won! You finished the type race in "
                f"{result.seconds_taken} seconds with word per minute of "
                f"{result.wpm}."
            )
        )
    )
    lose_message: Text = msgspec.field(
        default_factory=lambda: text(
            "You lost! You didn't type the correct sentence in time."
        )
    )


@dataclass(frozen=True, kw_only=True)
class FastTypeResult(GameResult):
    """Result of a Fast Type game.

    Attributes:
        time_taken: Milliseconds between the start and the answer.
        seconds_taken: ``time_taken`` in whole seconds.
        wpm: Words per minute, 0 unless the player won.
    """

    OUTCOMES: ClassVar[tuple[str, ...]] = ("win", "lose", "timeout")

    time_taken: int
    seconds_taken: int
    wpm: int


class FastType(GameSession[FastTypeResult]):
    """Single shot typing race over the chat messages of the player."""

    name = "fasttype"
    title = "Fast Type"
    options: FastTypeOptions
    options_type: ClassVar[type[SessionOptions]] = FastTypeOptions

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session, the clock starts with the first view."""
        self.race_started: float | None = None
        self.time_taken: int | None = None
        self.wpm = 0
        super().__init__(context, options, rng=rng)

    def _elapsed(self) -> int:
        if self.race_started is None:
            return 0
        return int((time.monotonic() - self.race_started) * 1000)

    async def render_board(self) -> View:
        """Build the view showing the sentence."""
        description = await self.options.description.resolve(self)
        embed = await self.build_embed(
            description=description,
            fields=[
                EmbedField(name="Sentence", value=spaced(self.options.sentence))
            ],
        )
        return View(content=None, embeds=[embed])

    async def _answer(self, event: InputEvent) -> None:
        if self.time_taken is not None:
            return
        self.time_taken = self._elapsed()
        typed = event.content.strip()
        if typed.lower() == self.options.sentence.lower():
            self.wpm = words_per_minute(typed, self.time_taken / 1000)
            self.stop(WIN)
        else:
            self.stop(LOSE)

    async def _on_message(self, event: InputEvent) -> None:
        await self.play_turn(event, self._answer)

    async def play(self) -> None:
        """Show the sentence and wait for a single message of the player."""
        if not await self.open(self.render_board):
            return
        self.race_started = time.monotonic()
        reason = await self.collect(
            self._on_message,
            source=self.transport.messages(self.surface),
            namespace=None,
            accept=self.is_player,
            time_limit=self.options.timeout,
        )
        outcome = {WIN: "win", LOSE: "lose", TIME: "timeout"}.get(reason)
        if outcome is None:
            logger.warning("Unexpected end of %s: %s", self, reason)
            return
        time_taken = self.time_taken if self.time_taken is not None else self._elapsed()
        await self.finalize(
            self.build_result(
                FastTypeResult,
                outcome=outcome,
                time_taken=time_taken,
                seconds_taken=time_taken // 1000,
                wpm=self.wpm,
            )
        )

    async def render_end(self, result: FastTypeResult) -> View:
        """Show the outcome of the race."""
        if result.outcome == "win":
            message = await self.options.win_message.resolve(result, self)
        else:
            message = await self.options.lose_message.resolve(result, self)
        embed = await self.build_end_embed(
            result,
            description=message,
            color=Colors.GREEN if result.outcome == "win" else Colors.RED,
            fields=[
                EmbedField(name="Sentence", value=spaced(self.options.sentence))
            ],
        )
        return View(content=None, embeds=[embed])
