"""Interfaces between game sessions and the chat platform.

The engine never talks to a platform library directly. A host provides a
:class:`Transport` that knows how to show a :class:`~gamecord.core.view.View`
and where to listen for :class:`InputEvent` objects.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import msgspec

from gamecord.core.view import View

NAMESPACE = "$gamecord"


class Player(msgspec.Struct, frozen=True):
    """Identity of a participant.

    Attributes:
        id: Platform identifier of the user.
        name: Display name of the user.
        avatar_url: URL of the user avatar, if any.
    """

    id: int
    name: str
    avatar_url: str | None = None

    @property
    def mention(self) -> str:
        """Platform mention of the user."""
        return f"<@{self.id}>"

    def __str__(self) -> str:
        return self.mention


class Interaction(Protocol):
    """Handle used to answer a button click."""

    @property
    def replied(self) -> bool:
        """Whether the interaction was already acknowledged."""

    async def defer_update(self) -> None:
        """Acknowledge without sending anything."""

    async def reply(self, content: str, *, ephemeral: bool = True) -> None:
        """Acknowledge with a message, only visible by the clicker."""

    async def edit(self, view: View) -> None:
        """Edit the surface holding the clicked component."""


class ChatMessage(Protocol):
    """Handle on a message sent by a user."""

    async def delete(self) -> None:
        """Remove the message from the conversation."""


@dataclass(frozen=True)
class InputEvent:
    """A single input delivered by the platform.

    Attributes:
        action_id: Custom id of the clicked component, empty for messages.
        actor_id: Identifier of the user at the origin of the event.
        interaction: Handle used to acknowledge a click.
        message: Handle on the user message, for text input.
        content: Text of the user message.
    """

    action_id: str
    actor_id: int
    interaction: Interaction | None = None
    message: ChatMessage | None = None
    content: str = ""

    @property
    def game(self) -> str:
        """Name of the game targeted by the action id."""
        parts = self.action_id.split("-", 2)
        return parts[1] if len(parts) > 1 else ""

    @property
    def args(self) -> list[str]:
        """Arguments of the action id after the game name."""
        parts = self.action_id.split("-", 2)
        return parts[2].split("-") if len(parts) > 2 else []  # noqa: PLR2004


def action_id(game: str, *args: Any) -> str:
    """Build the custom id of a component.

    Examples:
        >>> action_id("connect4", 3)
        '$gamecord-connect4-3'
    """
    return "-".join((NAMESPACE, game, *(str(arg) for arg in args)))


Listener = Callable[[InputEvent], None]
Unsubscribe = Callable[[], None]


class EventSource(Protocol):
    """Stream of input events a collector can subscribe to."""

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register a listener and return the function removing it."""


class Transport(Protocol):
    """Chat platform operations used by a session.

    Surfaces are opaque handles returned by the platform, usually the
    message holding the game.
    """

    async def send_initial(self, view: View) -> Any:
        """Show the first view and return its surface."""

    async def update_surface(self, surface: Any, view: View) -> Any:
        """Replace the content of a surface and return it."""

    def components(self, surface: Any) -> EventSource:
        """Return the clicks on the components of a surface."""

    def messages(self, surface: Any) -> EventSource:
        """Return the messages sent next to a surface."""
