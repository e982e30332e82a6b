"""Invitation handshake played before a two players session."""

import enum
import logging
from typing import TYPE_CHECKING, Annotated, Any

import msgspec

from gamecord.core.collector import IDLE
from gamecord.core.errors import FatalTransportError, TransportError
from gamecord.core.options import EmbedTemplate, embed
from gamecord.core.transport import NAMESPACE, InputEvent, Player, action_id
from gamecord.core.view import Button, ButtonStyle, Colors, Embed, View

if TYPE_CHECKING:
    from gamecord.core.session import GameSession

logger = logging.getLogger(__name__)

ACCEPT = "accept"
REJECT = "reject"


class InvitationState(enum.Enum):
    """State of a pending invitation."""

    INVITED = "invited"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"


def _request_embed(session: "GameSession[Any]") -> Embed:
    opponent = session.opponent
    return Embed(
        title=session.title,
        description=(
            f"{opponent.mention if opponent else 'Someone'}, "
            f"{session.player.mention} challenged you to a game of "
            f"{session.title}!"
        ),
        color=Colors.BLURPLE,
        footer=session.embed_footer(),
    )


def _reject_embed(session: "GameSession[Any]") -> Embed:
    opponent = session.opponent
    return Embed(
        title=session.title,
        description=(
            f"{opponent.mention if opponent else 'The opponent'} declined "
            f"your request for a game of {session.title}."
        ),
        color=Colors.RED,
        footer=session.embed_footer(),
    )


def _timeout_embed(session: "GameSession[Any]") -> Embed:
    opponent = session.opponent
    return Embed(
        title=session.title,
        description=(
            "The game was dropped because "
            f"{opponent.mention if opponent else 'the opponent'} "
            "did not respond."
        ),
        color=Colors.GREY,
        footer=session.embed_footer(),
    )


class VersusOptions(msgspec.Struct, forbid_unknown_fields=True, kw_only=True):
    """Options of the invitation.

    Embed functions receive the session.
    """

    opponent: Player
    timeout: Annotated[float, msgspec.Meta(gt=0)] = 60.0
    request_embed: EmbedTemplate = msgspec.field(
        default_factory=lambda: embed(_request_embed)
    )
    reject_embed: EmbedTemplate = msgspec.field(
        default_factory=lambda: embed(_reject_embed)
    )
    timeout_embed: EmbedTemplate = msgspec.field(
        default_factory=lambda: embed(_timeout_embed)
    )
    accept_label: str = "Accept"
    reject_label: str = "Reject"


class VersusNegotiator:
    """Ask the opponent to accept a game before it starts."""

    def __init__(
        self, session: "GameSession[Any]", options: VersusOptions
    ) -> None:
        """Initialize the negotiator.

        Args:
            session: The session waiting for the opponent.
            options: Invitation options.
        """
        self.session = session
        self.options = options
        self.opponent = options.opponent
        self.state: InvitationState | None = None
        self.surface: Any = None

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__qualname__} opponent={self.opponent.id!r} "
            f"state={self.state!r}>"
        )

    def buttons(self, *, disabled: bool = False) -> list[Button]:
        """Build the accept and reject buttons."""
        return [
            Button(
                custom_id=action_id("versus", ACCEPT),
                label=self.options.accept_label,
                style=ButtonStyle.SUCCESS,
                disabled=disabled,
            ),
            Button(
                custom_id=action_id("versus", REJECT),
                label=self.options.reject_label,
                style=ButtonStyle.DANGER,
                disabled=disabled,
            ),
        ]

    async def _render(self, template: EmbedTemplate, *, disabled: bool) -> View:
        return View(
            content=self.opponent.mention,
            embeds=[await template.resolve(self.session) or Embed()],
            rows=[self.buttons(disabled=disabled)],
            mention_users=True,
        )

    async def negotiate(self) -> Any:
        """Send the invitation and wait for the opponent.

        Returns:
            The invitation surface once accepted, None otherwise. When
            refused or expired, ``versusReject`` was published. When the
            invitation could not be sent, ``fatalError`` was published.
        """
        session = self.session
        try:
            view = await self._render(self.options.request_embed, disabled=False)
            self.surface = await session.transport.send_initial(view)
        except Exception as err:  # noqa: BLE001
            session.fail(FatalTransportError.wrap("send_initial", err))
            return None
        self.state = InvitationState.INVITED
        logger.info("Invitation sent for %s", session)

        reason = await session.collect(
            self._on_choice,
            source=session.transport.components(self.surface),
            namespace=f"{NAMESPACE}-versus",
            accept=lambda event: event.actor_id == self.opponent.id,
            idle=self.options.timeout,
            on_reject=session.acknowledge,
        )
        if reason == ACCEPT:
            self.state = InvitationState.ACCEPTED
            logger.info("Invitation accepted for %s", session)
            return self.surface

        timed_out = reason == IDLE
        self.state = (
            InvitationState.TIMED_OUT if timed_out else InvitationState.REJECTED
        )
        logger.info("Invitation %s for %s", self.state.value, session)
        template = (
            self.options.timeout_embed if timed_out else self.options.reject_embed
        )
        try:
            view = await self._render(template, disabled=True)
            self.surface = await session.transport.update_surface(
                self.surface, view
            )
        except Exception as err:  # noqa: BLE001
            session.report(TransportError.wrap("update_surface", err))
        session.events.publish("versusReject", "time" if timed_out else "user")
        return None

    async def _on_choice(self, event: InputEvent) -> None:
        await self.session.acknowledge(event)
        if event.args and event.args[0] in (ACCEPT, REJECT):
            self.session.stop(event.args[0])
