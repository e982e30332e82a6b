"""Flood, paint the board in one color from the top-left corner.

The board is a flat list of ``size * size`` color indexes. Each turn
repaints the region connected to the origin with the chosen color, the
player wins when the whole board has one color before the turn budget is
spent.
"""

import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar

import msgspec

from gamecord.core import (
    Button,
    GameContext,
    InputEvent,
    SessionOptions,
    Text,
    View,
    action_id,
    text,
)
from gamecord.core.errors import ConfigurationError
from gamecord.core.result import GameResult
from gamecord.core.view import ButtonStyle, Colors, EmbedField
from gamecord.games.solo import SoloGame, SoloOptions

logger = logging.getLogger(__name__)

WIN = "$win"
LOSE = "$lose"


def new_board(size: int, colors: int, rng: random.Random) -> list[int]:
    """Create a random board."""
    return [rng.randrange(colors) for _ in range(size * size)]


def flood_fill(board: list[int], size: int, color: int) -> int:
    """Repaint the region connected to the origin with a color.

    The region is every cell reachable from (0, 0) through orthogonal
    neighbours sharing the color of the origin.

    Args:
        board: The board, modified in place.
        size: Width and height of the board.
        color: The new color of the region.

    Returns:
        The number of repainted cells, 0 if the color is already the
        color of the origin.
    """
    target = board[0]
    if target == color:
        return 0
    queue = deque([(0, 0)])
    board[0] = color
    painted = 1
    while queue:
        x, y = queue.popleft()
        for nx, ny in ((x, y - 1), (x, y + 1), (x - 1, y), (x + 1, y)):
            if 0 <= nx < size and 0 <= ny < size and board[ny * size + nx] == target:
                # Painting on discovery marks the cell as visited
                board[ny * size + nx] = color
                painted += 1
                queue.append((nx, ny))
    return painted


def is_uniform(board: list[int]) -> bool:
    """Check if every cell has the same color."""
    return all(cell == board[0] for cell in board)


class FloodOptions(SoloOptions, kw_only=True):
    """Options of the Flood game.

    Result messages receive the result and the session.
    """

    size: Annotated[int, msgspec.Meta(ge=2, le=20)] = 13
    max_turns: Annotated[int, msgspec.Meta(ge=1)] = 25
    timeout: Annotated[float, msgspec.Meta(gt=0)] = 120.0
    button_style: ButtonStyle = ButtonStyle.PRIMARY
    emojis: Annotated[
        list[str], msgspec.Meta(min_length=2, max_length=5)
    ] = msgspec.field(default_factory=lambda: ["🟥", "🟦", "🟧", "🟪", "🟩"])
    win_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda result, session: (
                f"You won! You took **{result.turns}** turns."
            )
        )
    )
    lose_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda result, session: (
                f"You lost! You took **{result.turns}** turns."
            )
        )
    )


@dataclass(frozen=True, kw_only=True)
class FloodResult(GameResult):
    """Result of a Flood game.

    Attributes:
        turns: Number of turns played.
        max_turns: Turn budget of the game.
        board_color: Index of the color of the origin at the end.
    """

    OUTCOMES: ClassVar[tuple[str, ...]] = ("win", "lose", "timeout")

    turns: int
    max_turns: int
    board_color: int


class Flood(SoloGame[FloodResult]):
    """Flood played alone with one button per color."""

    name = "flood"
    title = "Flood"
    options: FloodOptions
    options_type: ClassVar[type[SessionOptions]] = FloodOptions

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session with a random board."""
        super().__init__(context, options, rng=rng)
        if len(set(self.options.emojis)) != len(self.options.emojis):
            error_message = "Flood emojis must be distinct"
            raise ConfigurationError(error_message)
        self.turns = 0
        self.board = new_board(
            self.options.size, len(self.options.emojis), self.rng
        )

    def board_description(self) -> str:
        """Render the board as lines of emojis."""
        size = self.options.size
        emojis = self.options.emojis
        return "\n".join(
            "".join(emojis[self.board[y * size + x]] for x in range(size))
            for y in range(size)
        )

    def _buttons(self, *, disabled: bool = False) -> list[list[Button]]:
        return [
            [
                Button(
                    custom_id=action_id(self.name, index),
                    emoji=emoji,
                    style=self.options.button_style,
                    disabled=disabled,
                )
                for index, emoji in enumerate(self.options.emojis)
            ]
        ]

    def _turns_field(self) -> EmbedField:
        return EmbedField(
            name="Turns", value=f"{self.turns}/{self.options.max_turns}"
        )

    async def render_board(self) -> View:
        """Build the board with the turn counter."""
        embed = await self.build_embed(
            description=self.board_description(), fields=[self._turns_field()]
        )
        return View(content=None, embeds=[embed], rows=self._buttons())

    async def apply(self, event: InputEvent) -> None:
        """Repaint the origin region with the clicked color."""
        try:
            color = int(event.args[-1])
        except (IndexError, ValueError):
            logger.warning("Invalid color in %r", event)
            return
        if not 0 <= color < len(self.options.emojis):
            return
        if flood_fill(self.board, self.options.size, color) == 0:
            return
        self.turns += 1
        if is_uniform(self.board):
            self.stop(WIN)
        elif self.turns >= self.options.max_turns:
            self.stop(LOSE)
        else:
            await self.refresh(await self.render_board(), event)

    def conclude(self, reason: str) -> FloodResult | None:
        """Map the end reason to the outcome."""
        outcome = {WIN: "win", LOSE: "lose", "idle": "timeout"}.get(reason)
        if outcome is None:
            return None
        return self.build_result(
            FloodResult,
            outcome=outcome,
            turns=self.turns,
            max_turns=self.options.max_turns,
            board_color=self.board[0],
        )

    async def render_end(self, result: FloodResult) -> View:
        """Show the final board and the outcome."""
        if result.outcome == "win":
            message = await self.options.win_message.resolve(result, self)
        else:
            message = await self.options.lose_message.resolve(result, self)
        embed = await self.build_end_embed(
            result,
            description=f"{self.board_description()}\n\n{message or ''}",
            color=Colors.GREEN if result.outcome == "win" else Colors.RED,
            fields=[self._turns_field()],
        )
        return View(content=None, embeds=[embed], rows=self._buttons(disabled=True))
