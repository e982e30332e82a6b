"""Rock Paper Scissors, both players choose at the same time."""

import logging
import random
from dataclasses import dataclass
from typing import Any, ClassVar

import msgspec

from gamecord.core import (
    IDLE,
    Button,
    GameContext,
    GameSession,
    InputEvent,
    SessionOptions,
    Text,
    VersusOptions,
    VersusResult,
    View,
    action_id,
    text,
)
from gamecord.core.view import ButtonStyle, Colors, EmbedField

logger = logging.getLogger(__name__)

END = "$end"
ROCK = "r"
PAPER = "p"
SCISSORS = "s"
CHOICES = (ROCK, PAPER, SCISSORS)

# Choice beaten by each choice
BEATS = {ROCK: SCISSORS, PAPER: ROCK, SCISSORS: PAPER}


def duel_winner(first: str, second: str) -> int:
    """Compare two choices.

    Returns:
        1 if the first choice wins, 2 if the second wins, 0 for a tie.
    """
    if first == second:
        return 0
    return 1 if BEATS[first] == second else 2


class RockPaperScissorsEmojis(msgspec.Struct, forbid_unknown_fields=True):
    """Emojis of the choices."""

    rock: str = "🌑"
    paper: str = "📰"
    scissors: str = "✂️"


class RockPaperScissorsButtons(msgspec.Struct, forbid_unknown_fields=True):
    """Labels of the choices."""

    rock: str = "Rock"
    paper: str = "Paper"
    scissors: str = "Scissors"


def _not_player_message(session: "RockPaperScissors") -> str:
    opponent = session.opponent
    mention = opponent.mention if opponent else "the opponent"
    return f"Only {session.player.mention} and {mention} can use this menu."


class RockPaperScissorsOptions(SessionOptions, kw_only=True):
    """Options of the Rock Paper Scissors game.

    ``choice_message`` functions receive the chosen emoji and the session.
    """

    versus: VersusOptions
    description: str = "Press a button below to make a choice."
    win_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda result, session: (
                f"**{result.winner.name}** won the game! Congratulations!"
            )
        )
    )
    tie_message: Text = msgspec.field(
        default_factory=lambda: text("The game tied! No one won the game!")
    )
    timeout_message: Text = msgspec.field(
        default_factory=lambda: text(
            "The game went unfinished! No one won the game!"
        )
    )
    choice_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda emoji, session: f"You choose {emoji}."
        )
    )
    not_player_message: Text = msgspec.field(
        default_factory=lambda: text(_not_player_message)
    )
    button_style: ButtonStyle = ButtonStyle.PRIMARY
    buttons: RockPaperScissorsButtons = msgspec.field(
        default_factory=RockPaperScissorsButtons
    )
    emojis: RockPaperScissorsEmojis = msgspec.field(
        default_factory=RockPaperScissorsEmojis
    )


@dataclass(frozen=True, kw_only=True)
class RockPaperScissorsResult(VersusResult):
    """Result of a Rock Paper Scissors game.

    Attributes:
        player_choice: Emoji chosen by the player, if any.
        opponent_choice: Emoji chosen by the opponent, if any.
    """

    player_choice: str | None = None
    opponent_choice: str | None = None


class RockPaperScissors(GameSession[RockPaperScissorsResult]):
    """Rock Paper Scissors between the player and the opponent.

    A choice is final. It is recorded before being confirmed to the player,
    so a failed confirmation does not cancel it.
    """

    name = "rps"
    title = "Rock Paper Scissors"
    options: RockPaperScissorsOptions
    options_type: ClassVar[type[SessionOptions]] = RockPaperScissorsOptions

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session without any choice."""
        self.player_choice: str | None = None
        self.opponent_choice: str | None = None
        super().__init__(context, options, rng=rng)

    def emoji_of(self, choice: str | None) -> str | None:
        """Emoji of a choice."""
        emojis = self.options.emojis
        mapping = {
            ROCK: emojis.rock,
            PAPER: emojis.paper,
            SCISSORS: emojis.scissors,
        }
        return mapping.get(choice or "")

    def _buttons(self, *, disabled: bool = False) -> list[list[Button]]:
        labels = self.options.buttons
        return [
            [
                Button(
                    custom_id=action_id(self.name, choice),
                    label=label,
                    emoji=self.emoji_of(choice),
                    style=self.options.button_style,
                    disabled=disabled,
                )
                for choice, label in (
                    (ROCK, labels.rock),
                    (PAPER, labels.paper),
                    (SCISSORS, labels.scissors),
                )
            ]
        ]

    async def render_board(self) -> View:
        """Build the view asking for a choice."""
        embed = await self.build_embed(description=self.options.description)
        return View(content=None, embeds=[embed], rows=self._buttons())

    async def render_end(self, result: RockPaperScissorsResult) -> View:
        """Show both choices and the outcome."""
        if result.outcome == "win":
            message = await self.options.win_message.resolve(result, self)
        elif result.outcome == "tie":
            message = await self.options.tie_message.resolve(result, self)
        else:
            message = await self.options.timeout_message.resolve(result, self)
        opponent = result.opponent
        embed = await self.build_end_embed(
            result,
            description=message,
            color=Colors.GREEN if result.winner else Colors.GREY,
            fields=[
                EmbedField(
                    name=self.player.name,
                    value=result.player_choice or "❔",
                    inline=True,
                ),
                EmbedField(
                    name=opponent.name,
                    value=result.opponent_choice or "❔",
                    inline=True,
                ),
            ],
        )
        return View(
            content=None, embeds=[embed], rows=self._buttons(disabled=True)
        )

    async def _choose(self, event: InputEvent) -> None:
        choice = event.args[-1] if event.args else ""
        if choice not in CHOICES:
            await self.acknowledge(event)
            return
        # The check and the assignment happen without suspension
        if self.is_player(event) and self.player_choice is None:
            self.player_choice = choice
        elif not self.is_player(event) and self.opponent_choice is None:
            self.opponent_choice = choice
        else:
            await self.acknowledge(event)
            return
        message = await self.options.choice_message.resolve(
            self.emoji_of(choice), self
        )
        if message:
            await self.notify(event, message)
        else:
            await self.acknowledge(event)
        if self.player_choice is not None and self.opponent_choice is not None:
            self.stop(END)

    async def play(self) -> None:
        """Negotiate, then wait for both choices."""
        if not await self.open(self.render_board):
            return
        reason = await self.collect(
            self._choose,
            accept=self.is_participant,
            idle=self.options.timeout,
            on_reject=self.reject,
        )
        fields: dict[str, Any] = {
            "opponent": self.opponent,
            "player_choice": self.emoji_of(self.player_choice),
            "opponent_choice": self.emoji_of(self.opponent_choice),
        }
        if reason == END and self.player_choice and self.opponent_choice:
            winner = duel_winner(self.player_choice, self.opponent_choice)
            if winner == 0:
                result = self.build_result(
                    RockPaperScissorsResult, outcome="tie", **fields
                )
            else:
                result = self.build_result(
                    RockPaperScissorsResult,
                    outcome="win",
                    winner=self.player if winner == 1 else self.opponent,
                    **fields,
                )
        elif reason == IDLE:
            result = self.build_result(
                RockPaperScissorsResult, outcome="timeout", **fields
            )
        else:
            logger.warning("Unexpected end of %s: %s", self, reason)
            return
        await self.finalize(result)
