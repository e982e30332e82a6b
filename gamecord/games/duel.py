"""Shared flow of the turn-based games played by two players.

Both players take turns on the same board. The session negotiates with the
opponent, then collects clicks of both players until a win, a tie or an
idle timeout.
"""

import logging
import random
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, NamedTuple, TypeVar

import msgspec

from gamecord.core import (
    IDLE,
    GameContext,
    GameSession,
    InputEvent,
    Player,
    SessionOptions,
    Text,
    VersusOptions,
    VersusResult,
    View,
    text,
)
from gamecord.core.view import Colors, EmbedField

logger = logging.getLogger(__name__)

WIN = "$win"
TIE = "$tie"

D = TypeVar("D", bound="DuelResult")


@dataclass(frozen=True, kw_only=True)
class DuelResult(VersusResult):
    """Result of a turn-based duel.

    Attributes:
        winner_emoji: Piece of the winner, None without winner.
    """

    winner_emoji: str | None = None


class Turn(NamedTuple):
    """Player expected to play and its piece."""

    player: Player
    emoji: str


def _win_message(result: DuelResult, session: "DuelGame[Any]") -> str:
    winner = result.winner.name if result.winner else "Nobody"
    return f"{result.winner_emoji} | **{winner}** won the {session.title} game."


def _not_player_message(session: "DuelGame[Any]") -> str:
    opponent = session.opponent
    mention = opponent.mention if opponent else "the opponent"
    return f"Only {session.player.mention} and {mention} can use this menu."


class DuelOptions(SessionOptions, kw_only=True):
    """Options shared by the duel games.

    ``turn_message`` functions receive the :class:`Turn` and the session,
    result messages receive the result and the session.
    """

    versus: VersusOptions
    status_text: str = "Game Status"
    turn_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda turn, session: (
                f"{turn.emoji} | It's player **{turn.player.name}**'s turn."
            )
        )
    )
    win_message: Text = msgspec.field(
        default_factory=lambda: text(_win_message)
    )
    tie_message: Text = msgspec.field(
        default_factory=lambda: text("The game tied! No one won the game!")
    )
    timeout_message: Text = msgspec.field(
        default_factory=lambda: text(
            "The game went unfinished! No one won the game!"
        )
    )
    not_player_message: Text = msgspec.field(
        default_factory=lambda: text(_not_player_message)
    )


class DuelGame(GameSession[D]):
    """Turn-based game between the player and the opponent.

    Subclasses render the board with :meth:`board_description` and
    :meth:`board_rows`, apply moves with :meth:`move` and give their pieces
    with :meth:`emoji_of`.
    """

    options: DuelOptions
    options_type: ClassVar[type[SessionOptions]] = DuelOptions
    result_type: ClassVar[type[DuelResult]] = DuelResult

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session, the player always plays first."""
        self.player1_turn = True
        super().__init__(context, options, rng=rng)

    @property
    def current(self) -> Player:
        """Player expected to play."""
        if self.player1_turn or self.opponent is None:
            return self.player
        return self.opponent

    @property
    def current_number(self) -> int:
        """Board value of the current player, 1 or 2."""
        return 1 if self.player1_turn else 2

    @abstractmethod
    def emoji_of(self, number: int) -> str:
        """Piece of a player from its board value."""

    def turn(self) -> Turn:
        """Data given to the turn message."""
        return Turn(self.current, self.emoji_of(self.current_number))

    def board_description(self) -> str | None:
        """Text board shown in the embed description."""
        return None

    def board_rows(self, *, disabled: bool = False) -> list[list[Any]]:
        """Buttons of the board."""
        return []

    @abstractmethod
    async def move(self, event: InputEvent) -> bool | None:
        """Apply a move of the current player.

        Returns:
            None if the move is illegal, True if it ends the game, False
            otherwise.
        """

    async def render_board(self) -> View:
        """Build the in-progress view."""
        status = await self.options.turn_message.resolve(self.turn(), self)
        embed = await self.build_embed(
            description=self.board_description(),
            fields=[
                EmbedField(name=self.options.status_text, value=status or "")
            ],
        )
        return View(content=None, embeds=[embed], rows=self.board_rows())

    async def render_end(self, result: D) -> View:
        """Build the view of the finished game."""
        if result.outcome == "win":
            message = await self.options.win_message.resolve(result, self)
        elif result.outcome == "tie":
            message = await self.options.tie_message.resolve(result, self)
        else:
            message = await self.options.timeout_message.resolve(result, self)
        embed = await self.build_end_embed(
            result,
            description=self.board_description(),
            color=Colors.GREEN if result.winner else Colors.GREY,
            fields=[
                EmbedField(name=self.options.status_text, value=message or "")
            ],
        )
        return View(
            content=None, embeds=[embed], rows=self.board_rows(disabled=True)
        )

    async def _apply(self, event: InputEvent) -> None:
        if event.actor_id != self.current.id:
            logger.debug("Ignore %r, not the turn of %s", event, event.actor_id)
            return
        over = await self.move(event)
        if over is None or over:
            return
        self.player1_turn = not self.player1_turn
        await self.refresh(await self.render_board(), event)

    async def _on_event(self, event: InputEvent) -> None:
        await self.play_turn(event, self._apply)

    async def play(self) -> None:
        """Negotiate, then play turns until the game is decided."""
        if not await self.open(self.render_board):
            return
        reason = await self.collect(
            self._on_event,
            accept=self.is_participant,
            idle=self.options.timeout,
            on_reject=self.reject,
        )
        if reason == WIN:
            result = self.build_result(
                self.result_type,
                outcome="win",
                opponent=self.opponent,
                winner=self.current,
                winner_emoji=self.emoji_of(self.current_number),
            )
        elif reason == TIE:
            result = self.build_result(
                self.result_type, outcome="tie", opponent=self.opponent
            )
        elif reason == IDLE:
            result = self.build_result(
                self.result_type, outcome="timeout", opponent=self.opponent
            )
        else:
            logger.warning("Unexpected end of %s: %s", self, reason)
            return
        await self.finalize(result)  # type: ignore[arg-type]
