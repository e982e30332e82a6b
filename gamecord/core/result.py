"""Immutable records describing how a session ended."""

from dataclasses import dataclass
from typing import ClassVar

from gamecord.core.transport import Player


@dataclass(frozen=True, kw_only=True)
class GameResult:
    """Result shared by every game.

    Attributes:
        player: The player who started the session.
        started_at: Creation timestamp of the session, in seconds since epoch.
        duration: Elapsed seconds between creation and termination.
        outcome: How the session ended, one of ``OUTCOMES``.
    """

    OUTCOMES: ClassVar[tuple[str, ...]] = ()

    player: Player
    started_at: float
    duration: float
    outcome: str

    def __post_init__(self) -> None:
        """Check the outcome and the duration.

        Raises:
            ValueError: If the outcome is not declared by the result class
                or the duration is negative.
        """
        if self.OUTCOMES and self.outcome not in self.OUTCOMES:
            error_message = (
                f"Invalid outcome {self.outcome!r} for "
                f"{self.__class__.__name__}, expected one of {self.OUTCOMES}"
            )
            raise ValueError(error_message)
        if self.duration < 0:
            error_message = f"Negative duration: {self.duration!r}"
            raise ValueError(error_message)


@dataclass(frozen=True, kw_only=True)
class VersusResult(GameResult):
    """Result of a two players session.

    Attributes:
        opponent: The invited player.
        winner: The winning player, None for a tie or a timeout.
    """

    OUTCOMES: ClassVar[tuple[str, ...]] = ("win", "tie", "timeout")

    opponent: Player
    winner: Player | None = None

    @property
    def loser(self) -> Player | None:
        """The losing player, if there is a winner."""
        if self.winner is None:
            return None
        return self.opponent if self.winner == self.player else self.player
