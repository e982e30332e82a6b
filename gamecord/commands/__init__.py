"""Gamecord commands package initializer.

This module imports the game commands and registers the root command group
when the bot is set up. Commands of disabled games are left out.
"""

import logging

from gamecord.bot import Gamecord
from gamecord.commands.base import game_command_group
from gamecord.commands.game import (
    connect4_command,
    fasttype_command,
    flood_command,
    game2048_command,
    memory_command,
    minesweeper_command,
    rockpaperscissors_command,
    start_game,
    tictactoe_command,
    trivia_command,
    wordle_command,
)

logger = logging.getLogger(__name__)

__all__ = [
    "connect4_command",
    "fasttype_command",
    "flood_command",
    "game2048_command",
    "game_command_group",
    "memory_command",
    "minesweeper_command",
    "rockpaperscissors_command",
    "start_game",
    "tictactoe_command",
    "trivia_command",
    "wordle_command",
]


async def setup(bot: Gamecord) -> None:
    """Register the root command group.

    Args:
        bot: The bot instance to register commands to.
    """
    game_command_group.name = bot.config.group
    for command in list(game_command_group.commands):
        if not bot.config.game(command.name).enabled:
            logger.info("Game %s is disabled", command.name)
            game_command_group.remove_command(command.name)
    bot.tree.add_command(game_command_group)
