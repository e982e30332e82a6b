"""2048, slide the tiles and merge equal numbers.

Tiles are stored as exponents: 1 is the tile 2, 2 the tile 4 and so on, 0
is an empty cell. The board is a flat list indexed by ``y * SIZE + x``.
"""

import logging
import random
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar

import msgspec

from gamecord.core import (
    Button,
    GameContext,
    InputEvent,
    SessionOptions,
    View,
    action_id,
)
from gamecord.core.result import GameResult
from gamecord.core.view import ButtonStyle, Colors, EmbedField
from gamecord.games.solo import SoloGame, SoloOptions

logger = logging.getLogger(__name__)

SIZE = 4
EMPTY = 0
WINNING_EXPONENT = 11
OVER = "$over"
DIRECTIONS = ("up", "down", "left", "right")

# A spawned tile is a 4 when the random draw is above this threshold
FOUR_THRESHOLD = 0.8


def line_indices(size: int, direction: str) -> list[list[int]]:
    """Indexes of every line, ordered from the edge tiles slide towards.

    Raises:
        ValueError: If the direction is unknown.
    """
    if direction == "left":
        return [[y * size + x for x in range(size)] for y in range(size)]
    if direction == "right":
        return [
            [y * size + x for x in reversed(range(size))] for y in range(size)
        ]
    if direction == "up":
        return [[y * size + x for y in range(size)] for x in range(size)]
    if direction == "down":
        return [
            [y * size + x for y in reversed(range(size))] for x in range(size)
        ]
    error_message = f"Unknown direction: {direction!r}"
    raise ValueError(error_message)


def merge_line(line: list[int]) -> tuple[list[int], int]:
    """Slide a line towards its start, merging equal tiles once.

    Args:
        line: Exponents ordered from the edge tiles slide towards.

    Returns:
        The new line and the score gained, the square of every exponent
        produced by a merge.

    Examples:
        >>> merge_line([1, 1, 2, 0])
        ([2, 2, 0, 0], 4)
        >>> merge_line([1, 1, 1, 1])
        ([2, 2, 0, 0], 8)
    """
    result: list[int] = []
    merged: set[int] = set()
    gained = 0
    for exponent in line:
        if exponent == EMPTY:
            continue
        last = len(result) - 1
        if result and result[last] == exponent and last not in merged:
            result[last] += 1
            merged.add(last)
            gained += result[last] ** 2
        else:
            result.append(exponent)
    result.extend([EMPTY] * (len(line) - len(result)))
    return result, gained


def slide(board: list[int], size: int, direction: str) -> tuple[bool, int]:
    """Slide every tile of the board in a direction.

    Args:
        board: The board, modified in place.
        size: Width and height of the board.
        direction: One of ``DIRECTIONS``.

    Returns:
        Whether a tile moved and the score gained.
    """
    moved = False
    gained = 0
    for indices in line_indices(size, direction):
        line = [board[i] for i in indices]
        new_line, line_gain = merge_line(line)
        if new_line != line:
            moved = True
            for i, exponent in zip(indices, new_line):
                board[i] = exponent
        gained += line_gain
    return moved, gained


def spawn(board: list[int], rng: random.Random) -> int | None:
    """Place a 2 (or a 4 with a probability of 0.2) on a free cell.

    Returns:
        The index of the new tile, None if the board is full.
    """
    free = [i for i, exponent in enumerate(board) if exponent == EMPTY]
    if not free:
        return None
    index = rng.choice(free)
    board[index] = 2 if rng.random() > FOUR_THRESHOLD else 1
    return index


def can_move(board: list[int], size: int) -> bool:
    """Check if a free cell or two equal neighbours remain."""
    for y in range(size):
        for x in range(size):
            exponent = board[y * size + x]
            if exponent == EMPTY:
                return True
            if x + 1 < size and board[y * size + x + 1] == exponent:
                return True
            if y + 1 < size and board[(y + 1) * size + x] == exponent:
                return True
    return False


class Game2048Emojis(msgspec.Struct, forbid_unknown_fields=True):
    """Emojis of the direction buttons."""

    up: str = "🔼"
    down: str = "🔽"
    left: str = "◀️"
    right: str = "▶️"


class Game2048Options(SoloOptions, kw_only=True):
    """Options of the 2048 game."""

    button_style: ButtonStyle = ButtonStyle.SECONDARY
    emojis: Game2048Emojis = msgspec.field(default_factory=Game2048Emojis)
    cell_width: Annotated[int, msgspec.Meta(ge=1, le=8)] = 5


@dataclass(frozen=True, kw_only=True)
class Game2048Result(GameResult):
    """Result of a 2048 game.

    Attributes:
        score: Final score.
        has_won: Whether the tile 2048 was reached.
    """

    OUTCOMES: ClassVar[tuple[str, ...]] = ("over", "timeout")

    score: int
    has_won: bool


class Game2048(SoloGame[Game2048Result]):
    """2048 played alone with four direction buttons."""

    name = "2048"
    title = "2048"
    options: Game2048Options
    options_type: ClassVar[type[SessionOptions]] = Game2048Options

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session with two random tiles."""
        super().__init__(context, options, rng=rng)
        self.score = 0
        self.board = [EMPTY] * (SIZE * SIZE)
        spawn(self.board, self.rng)
        spawn(self.board, self.rng)

    @property
    def has_won(self) -> bool:
        """Whether the tile 2048 is on the board."""
        return any(exponent >= WINNING_EXPONENT for exponent in self.board)

    def board_description(self) -> str:
        """Render the board as a monospace grid of numbers."""
        width = self.options.cell_width
        lines = []
        for y in range(SIZE):
            cells = (
                (str(2**exponent) if exponent else ".").rjust(width)
                for exponent in self.board[y * SIZE : (y + 1) * SIZE]
            )
            lines.append("|".join(cells))
        return "```\n" + "\n".join(lines) + "\n```"

    def _buttons(self, *, disabled: bool = False) -> list[list[Button]]:
        emojis = self.options.emojis
        return [
            [
                Button(
                    custom_id=action_id(self.name, direction),
                    emoji=getattr(emojis, direction),
                    style=self.options.button_style,
                    disabled=disabled,
                )
                for direction in ("left", "up", "down", "right")
            ]
        ]

    def _score_field(self) -> EmbedField:
        return EmbedField(name="Current Score", value=str(self.score))

    async def render_board(self) -> View:
        """Build the board with the current score."""
        embed = await self.build_embed(
            description=self.board_description(), fields=[self._score_field()]
        )
        return View(content=None, embeds=[embed], rows=self._buttons())

    async def apply(self, event: InputEvent) -> None:
        """Slide the tiles in the clicked direction."""
        direction = event.args[-1] if event.args else ""
        if direction not in DIRECTIONS:
            logger.warning("Invalid direction in %r", event)
            return
        moved, gained = slide(self.board, SIZE, direction)
        self.score += gained
        if moved:
            spawn(self.board, self.rng)
        if not can_move(self.board, SIZE):
            self.stop(OVER)
            return
        await self.refresh(await self.render_board(), event)

    def conclude(self, reason: str) -> Game2048Result | None:
        """Map the end reason to the outcome."""
        outcome = {OVER: "over", "idle": "timeout"}.get(reason)
        if outcome is None:
            return None
        return self.build_result(
            Game2048Result,
            outcome=outcome,
            score=self.score,
            has_won=self.has_won,
        )

    async def render_end(self, result: Game2048Result) -> View:
        """Show the final board and score."""
        embed = await self.build_end_embed(
            result,
            description=self.board_description(),
            color=Colors.GREEN if result.has_won else Colors.GREY,
            fields=[EmbedField(name="Total Score", value=str(result.score))],
        )
        return View(content=None, embeds=[embed], rows=self._buttons(disabled=True))
