"""Connect 4 played with one button per column.

The board is a flat list of ``WIDTH * HEIGHT`` cells indexed by
``y * WIDTH + x``, row 0 being the top of the grid. A cell holds ``EMPTY``
or the number of the player owning it (1 or 2).
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, ClassVar

import msgspec
from typing_extensions import override

from gamecord.core import (
    Button,
    GameContext,
    InputEvent,
    SessionOptions,
    action_id,
)
from gamecord.core.view import ButtonStyle
from gamecord.games.duel import TIE, WIN, DuelGame, DuelOptions, DuelResult
from gamecord.utils import NUMBER_EMOJIS, chunk

logger = logging.getLogger(__name__)

WIDTH = 7
HEIGHT = 6
EMPTY = 0
WIN_COUNT = 4

# Directions checked for a line: horizontal, vertical and both diagonals
DIRECTIONS = ((1, 0), (0, 1), (1, 1), (1, -1))


def new_board() -> list[int]:
    """Create an empty board."""
    return [EMPTY] * (WIDTH * HEIGHT)


def is_column_full(board: list[int], column: int) -> bool:
    """Check if the top cell of a column is taken."""
    return board[column] != EMPTY


def is_board_full(board: list[int]) -> bool:
    """Check if no column can receive a piece anymore."""
    return all(is_column_full(board, column) for column in range(WIDTH))


def drop(board: list[int], column: int, number: int) -> int | None:
    """Drop a piece into a column, the piece falls to the lowest free row.

    Args:
        board: The board, modified in place.
        column: Index of the column.
        number: Board value of the player.

    Returns:
        The row where the piece landed, None if the column is full.
    """
    for row in range(HEIGHT - 1, -1, -1):
        if board[row * WIDTH + column] == EMPTY:
            board[row * WIDTH + column] = number
            return row
    return None


def _count(board: list[int], x: int, y: int, dx: int, dy: int) -> int:
    """Count pieces of the owner of (x, y) from (x, y), itself included."""
    owner = board[y * WIDTH + x]
    count = 0
    while 0 <= x < WIDTH and 0 <= y < HEIGHT and board[y * WIDTH + x] == owner:
        count += 1
        x += dx
        y += dy
    return count


def is_win_at(board: list[int], x: int, y: int) -> bool:
    """Check if the piece at (x, y) is part of a line of four.

    Args:
        board: The board.
        x: Column of the piece.
        y: Row of the piece.

    Returns:
        True if a line of ``WIN_COUNT`` pieces goes through the cell.
    """
    if board[y * WIDTH + x] == EMPTY:
        return False
    for dx, dy in DIRECTIONS:
        # The piece itself is counted in both directions
        length = _count(board, x, y, dx, dy) + _count(board, x, y, -dx, -dy) - 1
        if length >= WIN_COUNT:
            return True
    return False


class Connect4Emojis(msgspec.Struct, forbid_unknown_fields=True):
    """Pieces of the board."""

    board: str = "⚫"
    player1: str = "🔴"
    player2: str = "🟡"


class Connect4Options(DuelOptions, kw_only=True):
    """Options of the Connect 4 game."""

    emojis: Connect4Emojis = msgspec.field(default_factory=Connect4Emojis)
    button_style: ButtonStyle = ButtonStyle.SECONDARY


@dataclass(frozen=True, kw_only=True)
class Connect4Result(DuelResult):
    """Result of a Connect 4 game."""


class Connect4(DuelGame[Connect4Result]):
    """Connect 4 between the player and the opponent."""

    name = "connect4"
    title = "Connect 4"
    options: Connect4Options
    options_type: ClassVar[type[SessionOptions]] = Connect4Options
    result_type = Connect4Result

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session with an empty board."""
        self.board = new_board()
        super().__init__(context, options, rng=rng)

    def emoji_of(self, number: int) -> str:
        """Piece of a player from its board value."""
        if number == 1:
            return self.options.emojis.player1
        if number == 2:  # noqa: PLR2004
            return self.options.emojis.player2
        return self.options.emojis.board

    def board_description(self) -> str:
        """Render the board as lines of emojis."""
        lines = [
            "".join(
                self.emoji_of(self.board[y * WIDTH + x]) for x in range(WIDTH)
            )
            for y in range(HEIGHT)
        ]
        lines.append("".join(NUMBER_EMOJIS[:WIDTH]))
        return "\n".join(lines)

    @override
    def board_rows(self, *, disabled: bool = False) -> list[list[Button]]:
        """One button per column, split to fit the platform limits."""
        buttons = [
            Button(
                custom_id=action_id(self.name, x),
                emoji=NUMBER_EMOJIS[x],
                style=self.options.button_style,
                disabled=disabled or is_column_full(self.board, x),
            )
            for x in range(WIDTH)
        ]
        return chunk(buttons)

    @override
    async def move(self, event: InputEvent) -> bool | None:
        """Drop a piece of the current player in the clicked column."""
        try:
            column = int(event.args[-1])
        except (IndexError, ValueError):
            logger.warning("Invalid column in %r", event)
            return None
        if not 0 <= column < WIDTH or is_column_full(self.board, column):
            return None
        row = drop(self.board, column, self.current_number)
        if row is None:
            return None
        if is_win_at(self.board, column, row):
            self.stop(WIN)
            return True
        if is_board_full(self.board):
            self.stop(TIE)
            return True
        return False
