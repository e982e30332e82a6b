"""Shared flow of the board games played alone with buttons."""

import logging
from abc import abstractmethod
from typing import Any, ClassVar, TypeVar

import msgspec

from gamecord.core import (
    GameResult,
    GameSession,
    InputEvent,
    SessionOptions,
    Text,
    View,
    text,
)

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=GameResult)


def _not_player_message(session: GameSession[Any]) -> str:
    return f"Only {session.player.mention} can use these buttons."


class SoloOptions(SessionOptions, kw_only=True):
    """Options shared by the solo games."""

    not_player_message: Text = msgspec.field(
        default_factory=lambda: text(_not_player_message)
    )


class SoloGame(GameSession[S]):
    """Board game where only the player may click.

    Each click is applied as a turn: :meth:`apply` validates it, mutates the
    board and either renders the board or stops the collection with a
    reason that :meth:`conclude` turns into a result.
    """

    options_type: ClassVar[type[SessionOptions]] = SoloOptions

    @abstractmethod
    async def render_board(self) -> View:
        """Build the in-progress view."""

    @abstractmethod
    async def apply(self, event: InputEvent) -> None:
        """Apply a click of the player, called while holding the turn."""

    @abstractmethod
    def conclude(self, reason: str) -> S | None:
        """Build the result from the reason of the end, None if unknown."""

    async def _on_event(self, event: InputEvent) -> None:
        await self.play_turn(event, self.apply)

    async def play(self) -> None:
        """Show the board and play turns until the game is decided."""
        if not await self.open(self.render_board):
            return
        reason = await self.collect(
            self._on_event,
            accept=self.is_player,
            idle=self.options.timeout,
            on_reject=self.reject,
        )
        result = self.conclude(reason)
        if result is None:
            logger.warning("Unexpected end of %s: %s", self, reason)
            return
        await self.finalize(result)
