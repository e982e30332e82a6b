"""Cog running the game sessions of the bot.

It owns the registries routing button clicks (by message id) and chat
messages (by channel id) to the collectors of the running sessions.
"""

import logging
from typing import TYPE_CHECKING, Any
from uuid import UUID

import discord
from discord.ext import commands

from gamecord.client.transport import (
    DiscordTransport,
    Registry,
    dispatch,
    message_event,
    player_from_user,
)
from gamecord.core import GameContext, GameResult, GameSession

if TYPE_CHECKING:
    from gamecord.bot import Gamecord

logger = logging.getLogger(__name__)


class GameCog(commands.Cog):
    """Manage the active sessions and deliver their inputs."""

    def __init__(self, bot: "Gamecord") -> None:
        """Initialize the cog with empty registries.

        Args:
            bot: The bot this cog belongs to.
        """
        self.bot = bot
        self.component_listeners: Registry = {}
        self.message_listeners: Registry = {}
        self._active_sessions: dict[UUID, GameSession[Any]] = {}

    @property
    def active_sessions(self) -> list[GameSession[Any]]:
        """Sessions started and not ended yet."""
        return list(self._active_sessions.values())

    def create_session(
        self,
        game_class: type[GameSession[Any]],
        context: discord.Interaction | discord.Message,
        player: discord.User | discord.Member,
        opponent: discord.User | discord.Member | None = None,
        **overrides: Any,
    ) -> GameSession[Any]:
        """Build a session with the options of the configuration.

        Args:
            game_class: The game to play.
            context: Interaction or message the game answers to.
            player: The member starting the game.
            opponent: The invited member of a versus game.
            **overrides: Options taking precedence over the configuration.

        Returns:
            The session, not started yet.

        Raises:
            ConfigurationError: If the options are invalid.
        """
        config = self.bot.config
        options = config.game_options(game_class.name, **overrides)
        if opponent is not None:
            options["versus"] = {
                "timeout": config.versus_timeout,
                **options.get("versus", {}),
                "opponent": player_from_user(opponent),
            }
        transport = DiscordTransport(self, context)
        return game_class(
            GameContext(transport=transport, player=player_from_user(player)),
            options,
        )

    async def run_session(
        self, session: GameSession[Any]
    ) -> GameResult | None:
        """Run a session until it ends and return its result.

        Errors published by the session are logged.
        """
        self._active_sessions[session.id] = session

        def on_error(error: Exception) -> None:
            logger.warning("Error in %s: %r", session, error)

        def on_fatal_error(error: Exception) -> None:
            logger.error("Fatal error in %s: %r", session, error)

        def on_end() -> None:
            if self._active_sessions.pop(session.id, None) is None:
                logger.warning("Missing session: %s", session)

        session.on("error", on_error)
        session.on("fatalError", on_fatal_error)
        session.on("end", on_end)
        await session.start()
        return session.result

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        """Forward the messages of users to the sessions of the channel."""
        if message.author.bot:
            return
        if message.channel.id not in self.message_listeners:
            return
        dispatch(self.message_listeners, message.channel.id, message_event(message))
