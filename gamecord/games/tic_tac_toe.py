"""TicTacToe played on a grid of nine buttons."""

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

logger = logging.getLogger(__name__)

SIZE = 3
EMPTY = 0

# Every line of three cells of the flat 3x3 grid
LINES = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


def is_win_at(board: list[int], cell: int) -> bool:
    """Check if the piece on a cell completes a line."""
    owner = board[cell]
    if owner == EMPTY:
        return False
    return any(
        cell in line and all(board[i] == owner for i in line) for line in LINES
    )


def is_board_full(board: list[int]) -> bool:
    """Check if every cell is taken."""
    return EMPTY not in board


class TicTacToeEmojis(msgspec.Struct, forbid_unknown_fields=True):
    """Pieces of the board."""

    x: str = "❌"
    o: str = "⭕"


class TicTacToeStyles(msgspec.Struct, forbid_unknown_fields=True):
    """Button styles of the cells."""

    empty: ButtonStyle = ButtonStyle.SECONDARY
    x: ButtonStyle = ButtonStyle.DANGER
    o: ButtonStyle = ButtonStyle.PRIMARY


class TicTacToeOptions(DuelOptions, kw_only=True):
    """Options of the TicTacToe game."""

    emojis: TicTacToeEmojis = msgspec.field(default_factory=TicTacToeEmojis)
    styles: TicTacToeStyles = msgspec.field(default_factory=TicTacToeStyles)


@dataclass(frozen=True, kw_only=True)
class TicTacToeResult(DuelResult):
    """Result of a TicTacToe game."""


class TicTacToe(DuelGame[TicTacToeResult]):
    """TicTacToe between the player (X) and the opponent (O)."""

    name = "tictactoe"
    title = "TicTacToe"
    options: TicTacToeOptions
    options_type: ClassVar[type[SessionOptions]] = TicTacToeOptions
    result_type = TicTacToeResult

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session with an empty grid."""
        self.board = [EMPTY] * (SIZE * SIZE)
        super().__init__(context, options, rng=rng)

    def emoji_of(self, number: int) -> str:
        """Piece of a player from its board value."""
        return self.options.emojis.x if number == 1 else self.options.emojis.o

    def _cell(self, index: int, *, disabled: bool) -> Button:
        owner = self.board[index]
        styles = self.options.styles
        if owner == EMPTY:
            return Button(
                custom_id=action_id(self.name, index),
                label="-",
                style=styles.empty,
                disabled=disabled,
            )
        return Button(
            custom_id=action_id(self.name, index),
            emoji=self.emoji_of(owner),
            style=styles.x if owner == 1 else styles.o,
            disabled=True,
        )

    @override
    def board_rows(self, *, disabled: bool = False) -> list[list[Button]]:
        """The grid, one button per cell."""
        return [
            [
                self._cell(y * SIZE + x, disabled=disabled)
                for x in range(SIZE)
            ]
            for y in range(SIZE)
        ]

    @override
    async def move(self, event: InputEvent) -> bool | None:
        """Place a piece of the current player on the clicked cell."""
        try:
            cell = int(event.args[-1])
        except (IndexError, ValueError):
            logger.warning("Invalid cell in %r", event)
            return None
        if not 0 <= cell < SIZE * SIZE or self.board[cell] != EMPTY:
            return None
        self.board[cell] = self.current_number
        if is_win_at(self.board, cell):
            self.stop(WIN)
            return True
        if is_board_full(self.board):
            self.stop(TIE)
            return True
        return False
