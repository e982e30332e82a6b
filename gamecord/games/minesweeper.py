"""Minesweeper, reveal every block except the mines.

Mines are a set of indexes of the flat ``SIZE * SIZE`` grid. Revealed
blocks are stored separately, a block is revealed at most once and shows
the number of mines around it.
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
    Text,
    View,
    action_id,
    text,
)
from gamecord.core.result import GameResult
from gamecord.core.view import ButtonStyle, Colors
from gamecord.games.solo import SoloGame, SoloOptions
from gamecord.utils import NUMBER_EMOJIS

logger = logging.getLogger(__name__)

SIZE = 5
WIN = "$win"
LOSE = "$lose"
BLANK = "\u200b"


def plant_mines(size: int, count: int, rng: random.Random) -> set[int]:
    """Pick distinct random blocks holding a mine."""
    return set(rng.sample(range(size * size), count))


def mines_around(mines: set[int], size: int, x: int, y: int) -> int:
    """Count the mines in the eight blocks around (x, y)."""
    count = 0
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            nx, ny = x + dx, y + dy
            if 0 <= nx < size and 0 <= ny < size and ny * size + nx in mines:
                count += 1
    return count


def first_block(mines: set[int], size: int, rng: random.Random) -> int:
    """Pick the block revealed at the start of the game.

    A block without any mine around it is preferred, any block without a
    mine is used otherwise.
    """
    empty = [i for i in range(size * size) if i not in mines]
    safe = [i for i in empty if not mines_around(mines, size, i % size, i // size)]
    return rng.choice(safe or empty)


def has_found_all_mines(mines: set[int], revealed: set[int], size: int) -> bool:
    """Check if every block without a mine is revealed."""
    return len(revealed) + len(mines) >= size * size


def _not_player_message(session: "Minesweeper") -> str:
    return f"Only {session.player.mention} can use this menu."


class MinesweeperEmojis(msgspec.Struct, forbid_unknown_fields=True):
    """Emojis of the mines shown at the end."""

    flag: str = "🚩"
    mine: str = "💣"


class MinesweeperOptions(SoloOptions, kw_only=True):
    """Options of the Minesweeper game.

    Result messages receive the result and the session.
    """

    timeout: Annotated[float, msgspec.Meta(gt=0)] = 120.0
    description: str = "Click on the buttons to reveal the blocks except mines."
    mines: Annotated[int, msgspec.Meta(ge=1, le=SIZE * SIZE - 1)] = 5
    emojis: MinesweeperEmojis = msgspec.field(default_factory=MinesweeperEmojis)
    win_message: Text = msgspec.field(
        default_factory=lambda: text(
            "You won the Game! You successfully avoided all the mines."
        )
    )
    lose_message: Text = msgspec.field(
        default_factory=lambda: text(
            "You lost the Game! Beware of the mines next time."
        )
    )
    not_player_message: Text = msgspec.field(
        default_factory=lambda: text(_not_player_message)
    )


@dataclass(frozen=True, kw_only=True)
class MinesweeperResult(GameResult):
    """Result of a Minesweeper game.

    Attributes:
        tiles_turned: Number of blocks revealed by the player.
    """

    OUTCOMES: ClassVar[tuple[str, ...]] = ("win", "lose", "timeout")

    tiles_turned: int


class Minesweeper(SoloGame[MinesweeperResult]):
    """Minesweeper on a 5x5 grid of buttons."""

    name = "minesweeper"
    title = "Minesweeper"
    options: MinesweeperOptions
    options_type: ClassVar[type[SessionOptions]] = MinesweeperOptions

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session, plant the mines and reveal a first block."""
        super().__init__(context, options, rng=rng)
        self.mines = plant_mines(SIZE, self.options.mines, self.rng)
        self.revealed = {first_block(self.mines, SIZE, self.rng)}
        self.tiles_turned = 0

    def _block(
        self, x: int, y: int, *, show_mines: bool, found: bool, disabled: bool
    ) -> Button:
        index = y * SIZE + x
        custom_id = action_id(self.name, x, y)
        if index in self.mines and show_mines:
            emojis = self.options.emojis
            return Button(
                custom_id=custom_id,
                emoji=emojis.flag if found else emojis.mine,
                style=ButtonStyle.SUCCESS if found else ButtonStyle.DANGER,
                disabled=disabled,
            )
        if index in self.revealed:
            count = mines_around(self.mines, SIZE, x, y)
            return Button(
                custom_id=custom_id,
                label=None if count else BLANK,
                emoji=NUMBER_EMOJIS[count - 1] if count else None,
                style=ButtonStyle.SECONDARY,
                disabled=disabled,
            )
        return Button(
            custom_id=custom_id,
            label=BLANK,
            style=ButtonStyle.PRIMARY,
            disabled=disabled,
        )

    def board_rows(
        self,
        *,
        show_mines: bool = False,
        found: bool = False,
        disabled: bool = False,
    ) -> list[list[Button]]:
        """The grid, one button per block."""
        return [
            [
                self._block(
                    x, y, show_mines=show_mines, found=found, disabled=disabled
                )
                for x in range(SIZE)
            ]
            for y in range(SIZE)
        ]

    async def render_board(self) -> View:
        """Build the grid with the revealed blocks."""
        embed = await self.build_embed(description=self.options.description)
        return View(content=None, embeds=[embed], rows=self.board_rows())

    async def apply(self, event: InputEvent) -> None:
        """Reveal the clicked block."""
        try:
            x, y = (int(arg) for arg in event.args[-2:])
        except ValueError:
            logger.warning("Invalid block in %r", event)
            return
        if not (0 <= x < SIZE and 0 <= y < SIZE):
            return
        index = y * SIZE + x
        if index in self.revealed:
            return
        if index in self.mines:
            self.stop(LOSE)
            return
        self.revealed.add(index)
        self.tiles_turned += 1
        if has_found_all_mines(self.mines, self.revealed, SIZE):
            self.stop(WIN)
            return
        await self.refresh(await self.render_board(), event)

    def conclude(self, reason: str) -> MinesweeperResult | None:
        """Map the end reason to the outcome."""
        outcome = {WIN: "win", LOSE: "lose", "idle": "timeout"}.get(reason)
        if outcome is None:
            return None
        return self.build_result(
            MinesweeperResult, outcome=outcome, tiles_turned=self.tiles_turned
        )

    async def render_end(self, result: MinesweeperResult) -> View:
        """Reveal the whole grid and the mines."""
        found = result.outcome == "win"
        self.revealed = {i for i in range(SIZE * SIZE) if i not in self.mines}
        if found:
            message = await self.options.win_message.resolve(result, self)
        else:
            message = await self.options.lose_message.resolve(result, self)
        embed = await self.build_end_embed(
            result,
            description=message,
            color=Colors.GREEN if found else Colors.RED,
        )
        return View(
            content=None,
            embeds=[embed],
            rows=self.board_rows(show_mines=True, found=found, disabled=True),
        )
