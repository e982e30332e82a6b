"""Discord host of the game sessions."""

from typing import TYPE_CHECKING

from gamecord.client.cog import GameCog
from gamecord.client.transport import (
    DiscordInteraction,
    DiscordMessage,
    DiscordTransport,
    KeyedSource,
    player_from_user,
)

if TYPE_CHECKING:
    from gamecord.bot import Gamecord

__all__ = [
    "DiscordInteraction",
    "DiscordMessage",
    "DiscordTransport",
    "GameCog",
    "KeyedSource",
    "player_from_user",
]


async def setup(bot: "Gamecord") -> None:
    """Register the cog running the game sessions.

    Args:
        bot: The bot to register the cog to.
    """
    game_manager = GameCog(bot)
    bot.game = game_manager
    await bot.add_cog(game_manager)
