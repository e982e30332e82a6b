"""Wordle, guess a five letter word in six tries over chat messages."""

import functools
import logging
import pathlib
import random
from collections import Counter
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar

import msgspec

from gamecord.config import RESOURCES
from gamecord.core import (
    IDLE,
    GameContext,
    GameSession,
    InputEvent,
    SessionOptions,
    Text,
    View,
    text,
)
from gamecord.core.errors import ConfigurationError, TransportError
from gamecord.core.result import GameResult
from gamecord.core.view import Colors, EmbedField

logger = logging.getLogger(__name__)

END = "$end"
WORD_LENGTH = 5
MAX_GUESSES = 6
WORDS_PATH = RESOURCES / "words.txt"

GREEN = "green"
YELLOW = "yellow"
GREY = "grey"


@functools.cache
def load_words(path: pathlib.Path = WORDS_PATH) -> tuple[str, ...]:
    """Read the playable words, one per line."""
    words = (line.strip().lower() for line in path.read_text("utf-8").splitlines())
    return tuple(word for word in words if is_valid_word(word))


def is_valid_word(word: str) -> bool:
    """Check if a word has five ascii letters."""
    return len(word) == WORD_LENGTH and word.isascii() and word.isalpha()


def score_guess(guess: str, answer: str) -> list[str]:
    """Color each letter of a guess.

    Exact letters are green first, then the other letters present in the
    answer are yellow as long as the answer has unmatched copies left.

    Examples:
        >>> score_guess("speed", "abide")
        ['grey', 'grey', 'yellow', 'grey', 'yellow']
    """
    colors = [GREY] * len(guess)
    remaining = Counter(
        letter for letter, expected in zip(answer, guess) if letter != expected
    )
    for i, (letter, expected) in enumerate(zip(guess, answer)):
        if letter == expected:
            colors[i] = GREEN
    for i, letter in enumerate(guess):
        if colors[i] != GREEN and remaining[letter] > 0:
            colors[i] = YELLOW
            remaining[letter] -= 1
    return colors


class WordleEmojis(msgspec.Struct, forbid_unknown_fields=True):
    """Squares of the board."""

    green: str = "🟩"
    yellow: str = "🟨"
    grey: str = "⬛"
    empty: str = "⬜"


class WordleOptions(SessionOptions, kw_only=True):
    """Options of the Wordle game.

    Without ``word``, a random word of ``words`` is picked, the bundled word
    list is used when ``words`` is empty.
    """

    timeout: Annotated[float, msgspec.Meta(gt=0)] = 120.0
    word: str | None = None
    words: list[str] = msgspec.field(default_factory=list)
    description: str = "Send a five letter word in the chat to make a guess."
    emojis: WordleEmojis = msgspec.field(default_factory=WordleEmojis)
    win_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda result, session: f"You won! The word was **{result.word}**."
        )
    )
    lose_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda result, session: f"You lost! The word was **{result.word}**."
        )
    )


@dataclass(frozen=True, kw_only=True)
class WordleResult(GameResult):
    """Result of a Wordle game.

    Attributes:
        word: The word to guess, in lowercase.
        guesses: Every guess of the player, in order.
    """

    OUTCOMES: ClassVar[tuple[str, ...]] = ("win", "lose", "timeout")

    word: str
    guesses: tuple[str, ...]


class Wordle(GameSession[WordleResult]):
    """Wordle played with the chat messages of the player.

    Guesses are deleted from the conversation once read.
    """

    name = "wordle"
    title = "Wordle"
    options: WordleOptions
    options_type: ClassVar[type[SessionOptions]] = WordleOptions

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session and pick the word.

        Raises:
            ConfigurationError: If a given word is not five letters long.
        """
        super().__init__(context, options, rng=rng)
        if self.options.word is not None:
            word = self.options.word.lower()
        else:
            words = [w.lower() for w in self.options.words] or load_words()
            word = self.rng.choice(words)
        if not is_valid_word(word):
            error_message = f"Invalid Wordle word: {word!r}"
            raise ConfigurationError(error_message)
        self.word = word
        self.guesses: list[str] = []

    def board_description(self) -> str:
        """Render the guesses as rows of colored squares."""
        emojis = self.options.emojis
        squares = {GREEN: emojis.green, YELLOW: emojis.yellow, GREY: emojis.grey}
        lines = []
        for guess in self.guesses:
            colors = score_guess(guess, self.word)
            row = "".join(squares[color] for color in colors)
            lines.append(f"{row} `{guess.upper()}`")
        for _ in range(MAX_GUESSES - len(self.guesses)):
            lines.append(emojis.empty * WORD_LENGTH)
        return "\n".join(lines)

    async def render_board(self) -> View:
        """Build the board with the guesses so far."""
        embed = await self.build_embed(
            description=f"{self.options.description}\n\n{self.board_description()}"
        )
        return View(content=None, embeds=[embed])

    def is_guess(self, event: InputEvent) -> bool:
        """Whether a message of the player looks like a guess."""
        return self.is_player(event) and is_valid_word(event.content.strip())

    async def _delete(self, event: InputEvent) -> None:
        if event.message is None:
            return
        try:
            await event.message.delete()
        except Exception as err:  # noqa: BLE001
            self.report(TransportError.wrap("delete", err))

    async def _guess(self, event: InputEvent) -> None:
        if len(self.guesses) >= MAX_GUESSES or self.word in self.guesses:
            return
        await self._delete(event)
        guess = event.content.strip().lower()
        self.guesses.append(guess)
        if guess == self.word or len(self.guesses) >= MAX_GUESSES:
            self.stop(END)
            return
        await self.refresh(await self.render_board())

    async def _on_message(self, event: InputEvent) -> None:
        # A guess typed while the previous one is applied is not counted
        if self.arbitrator.busy:
            logger.info("Drop guess %r in %s, turn in progress", event, self)
            await self._delete(event)
            return
        await self.play_turn(event, self._guess)

    async def play(self) -> None:
        """Show the empty board and read guesses until the game is decided."""
        if not await self.open(self.render_board):
            return
        reason = await self.collect(
            self._on_message,
            source=self.transport.messages(self.surface),
            namespace=None,
            accept=self.is_guess,
            idle=self.options.timeout,
        )
        if reason == END:
            outcome = "win" if self.word in self.guesses else "lose"
        elif reason == IDLE:
            outcome = "timeout"
        else:
            logger.warning("Unexpected end of %s: %s", self, reason)
            return
        await self.finalize(
            self.build_result(
                WordleResult,
                outcome=outcome,
                word=self.word,
                guesses=tuple(self.guesses),
            )
        )

    async def render_end(self, result: WordleResult) -> View:
        """Show the final board and the word."""
        if result.outcome == "win":
            message = await self.options.win_message.resolve(result, self)
        else:
            message = await self.options.lose_message.resolve(result, self)
        embed = await self.build_end_embed(
            result,
            description=self.board_description(),
            color=Colors.GREEN if result.outcome == "win" else Colors.RED,
            fields=[EmbedField(name="Game Over", value=message or "")],
        )
        return View(content=None, embeds=[embed])
