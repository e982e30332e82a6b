"""Transport of game sessions over discord.py.

Views are rendered as Discord messages, button clicks and chat messages are
routed back to the sessions through the :class:`~gamecord.client.cog.GameCog`
registries.
"""

import functools
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

import discord

from gamecord.core.transport import (
    EventSource,
    InputEvent,
    Listener,
    Player,
    Unsubscribe,
)
from gamecord.core.view import Button, Embed, View

if TYPE_CHECKING:
    from gamecord.client.cog import GameCog

logger = logging.getLogger(__name__)

# Lifetime of the token allowing to edit the response of an interaction
INTERACTION_LIFETIME = timedelta(minutes=15)

Registry = dict[int, list[Listener]]


def player_from_user(user: discord.User | discord.Member) -> Player:
    """Describe a Discord user as a game participant."""
    return Player(
        id=user.id,
        name=user.display_name,
        avatar_url=user.display_avatar.url,
    )


def to_discord_embed(embed: Embed) -> discord.Embed:
    """Convert an embed description into a :class:`discord.Embed`."""
    color = embed.color if isinstance(embed.color, int) else None
    result = discord.Embed(
        title=embed.title,
        description=embed.description,
        url=embed.url,
        color=color,
    )
    if embed.author is not None:
        result.set_author(name=embed.author.name, icon_url=embed.author.icon_url)
    if embed.footer is not None:
        result.set_footer(text=embed.footer.text, icon_url=embed.footer.icon_url)
    for field in embed.fields:
        result.add_field(name=field.name, value=field.value, inline=field.inline)
    if embed.image_url is not None:
        result.set_image(url=embed.image_url)
    if embed.thumbnail_url is not None:
        result.set_thumbnail(url=embed.thumbnail_url)
    return result


class KeyedSource:
    """Event source reading the listeners of a registry under one key."""

    def __init__(self, registry: Registry, key: int) -> None:
        """Initialize the source.

        Args:
            registry: Listeners by message or channel id.
            key: The id listened to.
        """
        self.registry = registry
        self.key = key

    def __repr__(self) -> str:
        return f"<{self.__class__.__qualname__} key={self.key!r}>"

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """Register a listener under the key of the source."""
        self.registry.setdefault(self.key, []).append(listener)

        def unsubscribe() -> None:
            listeners = self.registry.get(self.key, [])
            if listener in listeners:
                listeners.remove(listener)
            if not listeners:
                self.registry.pop(self.key, None)

        return unsubscribe


def dispatch(registry: Registry, key: int, event: InputEvent) -> bool:
    """Deliver an event to the listeners registered under a key.

    Returns:
        False if nobody listens to the key.
    """
    listeners = list(registry.get(key, ()))
    for listener in listeners:
        listener(event)
    return bool(listeners)


class DiscordInteraction:
    """Answer a button click through a :class:`discord.Interaction`."""

    def __init__(
        self, interaction: discord.Interaction, transport: "DiscordTransport"
    ) -> None:
        """Wrap an interaction of a component of the game."""
        self.interaction = interaction
        self.transport = transport

    @property
    def replied(self) -> bool:
        """Whether the interaction was acknowledged."""
        return self.interaction.response.is_done()

    async def defer_update(self) -> None:
        """Acknowledge the click without changing the message."""
        await self.interaction.response.defer()

    async def reply(self, content: str, *, ephemeral: bool = True) -> None:
        """Send a message to the user who clicked."""
        if self.interaction.response.is_done():
            await self.interaction.followup.send(content, ephemeral=ephemeral)
        else:
            await self.interaction.response.send_message(
                content, ephemeral=ephemeral
            )

    async def edit(self, view: View) -> None:
        """Edit the message holding the clicked component."""
        await self.interaction.edit_original_response(
            **self.transport.render(view, edit=True)
        )


class DiscordMessage:
    """Handle on a message written by a player."""

    def __init__(self, message: discord.Message) -> None:
        """Wrap a chat message."""
        self.message = message

    async def delete(self) -> None:
        """Remove the message from the channel."""
        await self.message.delete()


class DiscordTransport:
    """Show the views of a session in the conversation of a context.

    The context is the slash command interaction starting the game, or a
    message the game answers to. While the interaction token is valid, the
    original response is edited through it, otherwise the message is edited
    directly.
    """

    def __init__(
        self,
        cog: "GameCog",
        context: discord.Interaction | discord.Message,
    ) -> None:
        """Initialize the transport.

        Args:
            cog: The cog routing the inputs to the sessions.
            context: Interaction or message at the origin of the session.
        """
        self.cog = cog
        self.context = context
        self._original_response_id: int | None = None

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__qualname__} "
            f"context={type(self.context).__name__} "
            f"original={self._original_response_id!r}>"
        )

    def _can_edit_original(self, surface: discord.Message) -> bool:
        if not isinstance(self.context, discord.Interaction):
            return False
        if surface.id != self._original_response_id:
            return False
        expires_at = self.context.created_at + INTERACTION_LIFETIME
        return datetime.now(timezone.utc) < expires_at

    def _button(
        self, button: Button, row: int
    ) -> "discord.ui.Button[discord.ui.View]":
        item: discord.ui.Button[discord.ui.View] = discord.ui.Button(
            style=discord.ButtonStyle(int(button.style)),
            label=button.label,
            emoji=button.emoji,
            custom_id=button.custom_id,
            disabled=button.disabled,
            row=row,
        )
        item.callback = functools.partial(  # type: ignore[method-assign]
            self.on_click, button.custom_id
        )
        return item

    def render(self, view: View, *, edit: bool = False) -> dict[str, Any]:
        """Build the keyword arguments sending or editing a message.

        Args:
            view: What the game shows.
            edit: Whether the arguments are used to edit a message, missing
                parts are then removed from it.

        Returns:
            Arguments for ``send`` or ``edit`` of discord.py.
        """
        kwargs: dict[str, Any] = {
            "content": view.content,
            "embeds": [to_discord_embed(embed) for embed in view.embeds],
            "allowed_mentions": discord.AllowedMentions(
                users=view.mention_users, roles=False, everyone=False
            ),
        }
        if view.rows:
            components = discord.ui.View(timeout=None)
            for row, buttons in enumerate(view.rows):
                for button in buttons:
                    components.add_item(self._button(button, row))
            if all(button.disabled for button in view.buttons()):
                components.stop()
            kwargs["view"] = components
        elif edit:
            kwargs["view"] = None
        return kwargs

    async def on_click(
        self, custom_id: str, interaction: discord.Interaction
    ) -> None:
        """Forward a click on a game button to the listening sessions."""
        message = interaction.message
        if message is None:
            logger.warning("Click on %s without message", custom_id)
            return
        event = InputEvent(
            action_id=custom_id,
            actor_id=interaction.user.id,
            interaction=DiscordInteraction(interaction, self),
        )
        if not dispatch(self.cog.component_listeners, message.id, event):
            logger.info("No game listening to %s on %s", custom_id, message.id)
            await interaction.response.defer()

    async def send_initial(self, view: View) -> discord.Message:
        """Send the first message of the session."""
        kwargs = self.render(view)
        context = self.context
        if isinstance(context, discord.Message):
            return await context.reply(**kwargs)
        if context.response.is_done():
            return await context.followup.send(wait=True, **kwargs)
        await context.response.send_message(**kwargs)
        message = await context.original_response()
        self._original_response_id = message.id
        return message

    async def update_surface(
        self, surface: discord.Message, view: View
    ) -> discord.Message:
        """Replace the content of a message of the session."""
        kwargs = self.render(view, edit=True)
        if self._can_edit_original(surface) and isinstance(
            self.context, discord.Interaction
        ):
            return await self.context.edit_original_response(**kwargs)
        return await surface.edit(**kwargs)

    def components(self, surface: discord.Message) -> EventSource:
        """Listen to the clicks on the buttons of a message."""
        return KeyedSource(self.cog.component_listeners, surface.id)

    def messages(self, surface: discord.Message) -> EventSource:
        """Listen to the messages sent in the channel of a message."""
        return KeyedSource(self.cog.message_listeners, surface.channel.id)


def message_event(message: discord.Message) -> InputEvent:
    """Describe a chat message as an input event."""
    return InputEvent(
        action_id="",
        actor_id=message.author.id,
        message=DiscordMessage(message),
        content=message.content,
    )
