"""Memory, find every pair of emojis on a grid of hidden tiles.

The grid holds 12 pairs and a single joker. Turning the joker with any
tile matches that tile and reveals its partner.
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
from gamecord.core.errors import ConfigurationError
from gamecord.core.result import GameResult
from gamecord.core.view import ButtonStyle, Colors
from gamecord.games.solo import SoloGame, SoloOptions

logger = logging.getLogger(__name__)

SIZE = 5
PAIRS = 12
JOKER = "🃏"
WIN = "$win"
BLANK = "\u200b"

DEFAULT_EMOJIS = [
    "🍉",
    "🍇",
    "🍊",
    "🍋",
    "🥭",
    "🍎",
    "🍏",
    "🥝",
    "🥥",
    "🍓",
    "🍒",
    "🫐",
    "🍍",
    "🍅",
    "🍐",
    "🥔",
    "🌽",
    "🥕",
    "🥬",
    "🥦",
]


def new_tiles(emojis: list[str], rng: random.Random) -> list[str]:
    """Shuffle 12 random pairs and the joker into a flat grid."""
    chosen = rng.sample(emojis, PAIRS)
    tiles = [*chosen, *chosen, JOKER]
    rng.shuffle(tiles)
    return tiles


def partner_of(tiles: list[str], index: int) -> int | None:
    """Index of the other tile with the same emoji, None for the joker."""
    for other, emoji in enumerate(tiles):
        if other != index and emoji == tiles[index]:
            return other
    return None


def match(tiles: list[str], first: int, second: int) -> set[int]:
    """Compare two turned tiles.

    Returns:
        The indexes matched by the pair, empty if the tiles differ. A pair
        with the joker also matches the partner of the other tile.
    """
    if tiles[first] == JOKER or tiles[second] == JOKER:
        other = second if tiles[first] == JOKER else first
        partner = partner_of(tiles, other)
        return {first, second} if partner is None else {first, second, partner}
    if tiles[first] == tiles[second]:
        return {first, second}
    return set()


def _not_player_message(session: "Memory") -> str:
    return f"Only {session.player.mention} can use this menu."


class MemoryOptions(SoloOptions, kw_only=True):
    """Options of the Memory game.

    Result messages receive the result and the session.
    """

    timeout: Annotated[float, msgspec.Meta(gt=0)] = 120.0
    description: str = "**Click on the buttons to match emojis with their pairs.**"
    emojis: Annotated[list[str], msgspec.Meta(min_length=PAIRS)] = msgspec.field(
        default_factory=lambda: list(DEFAULT_EMOJIS)
    )
    win_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda result, session: (
                "**You won the Game! You turned a total of "
                f"`{result.tiles_turned}` tiles.**"
            )
        )
    )
    lose_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda result, session: (
                "**You lost the Game! You turned a total of "
                f"`{result.tiles_turned}` tiles.**"
            )
        )
    )
    not_player_message: Text = msgspec.field(
        default_factory=lambda: text(_not_player_message)
    )


@dataclass(frozen=True, kw_only=True)
class MemoryResult(GameResult):
    """Result of a Memory game.

    Attributes:
        tiles_turned: Number of tiles turned by the player.
        remaining_pairs: Number of pairs left to find.
    """

    OUTCOMES: ClassVar[tuple[str, ...]] = ("win", "timeout")

    tiles_turned: int
    remaining_pairs: int


class Memory(SoloGame[MemoryResult]):
    """Memory on a 5x5 grid of buttons."""

    name = "memory"
    title = "Memory"
    options: MemoryOptions
    options_type: ClassVar[type[SessionOptions]] = MemoryOptions

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session with shuffled tiles.

        Raises:
            ConfigurationError: If the emojis hold the joker or duplicates.
        """
        super().__init__(context, options, rng=rng)
        emojis = self.options.emojis
        if JOKER in emojis:
            error_message = f"Memory emojis cannot contain the joker {JOKER}"
            raise ConfigurationError(error_message)
        if len(set(emojis)) != len(emojis):
            error_message = "Memory emojis must be distinct"
            raise ConfigurationError(error_message)
        self.tiles = new_tiles(emojis, self.rng)
        self.selected: int | None = None
        self.matched: set[int] = set()
        self.mismatched: set[int] = set()
        self.remaining_pairs = PAIRS
        self.tiles_turned = 0

    def _tile(self, index: int, *, disabled: bool) -> Button:
        custom_id = action_id(self.name, index % SIZE, index // SIZE)
        emoji = self.tiles[index]
        if index in self.matched:
            return Button(
                custom_id=custom_id,
                emoji=emoji,
                style=ButtonStyle.SUCCESS,
                disabled=True,
            )
        if index in self.mismatched:
            return Button(
                custom_id=custom_id,
                emoji=emoji,
                style=ButtonStyle.DANGER,
                disabled=disabled,
            )
        if index == self.selected:
            return Button(
                custom_id=custom_id,
                emoji=emoji,
                style=ButtonStyle.PRIMARY,
                disabled=disabled,
            )
        return Button(custom_id=custom_id, label=BLANK, disabled=disabled)

    def board_rows(self, *, disabled: bool = False) -> list[list[Button]]:
        """The grid, one button per tile."""
        return [
            [self._tile(y * SIZE + x, disabled=disabled) for x in range(SIZE)]
            for y in range(SIZE)
        ]

    async def render_board(self) -> View:
        """Build the grid with the turned tiles."""
        embed = await self.build_embed(description=self.options.description)
        return View(content=None, embeds=[embed], rows=self.board_rows())

    async def apply(self, event: InputEvent) -> None:
        """Turn the clicked tile and compare it with the selected one."""
        try:
            x, y = (int(arg) for arg in event.args[-2:])
        except ValueError:
            logger.warning("Invalid tile in %r", event)
            return
        if not (0 <= x < SIZE and 0 <= y < SIZE):
            return
        index = y * SIZE + x
        if index in self.matched:
            return
        self.mismatched.clear()
        self.tiles_turned += 1
        if self.selected is None:
            self.selected = index
        elif self.selected == index:
            self.selected = None
        else:
            matched = match(self.tiles, self.selected, index)
            if matched:
                self.matched |= matched
                self.remaining_pairs -= 1
            else:
                # Shown until the next click
                self.mismatched = {self.selected, index}
            self.selected = None
            if self.remaining_pairs == 0:
                self.stop(WIN)
                return
        await self.refresh(await self.render_board(), event)

    def conclude(self, reason: str) -> MemoryResult | None:
        """Map the end reason to the outcome."""
        outcome = {WIN: "win", "idle": "timeout"}.get(reason)
        if outcome is None:
            return None
        return self.build_result(
            MemoryResult,
            outcome=outcome,
            tiles_turned=self.tiles_turned,
            remaining_pairs=self.remaining_pairs,
        )

    async def render_end(self, result: MemoryResult) -> View:
        """Show the grid with every button disabled."""
        if result.outcome == "win":
            message = await self.options.win_message.resolve(result, self)
        else:
            message = await self.options.lose_message.resolve(result, self)
        embed = await self.build_end_embed(
            result,
            description=message,
            color=Colors.GREEN if result.outcome == "win" else Colors.GREY,
        )
        return View(
            content=None, embeds=[embed], rows=self.board_rows(disabled=True)
        )
