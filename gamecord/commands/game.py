"""Slash commands starting the games.

Versus games take the member to challenge, solo games take a few options
overriding the configuration of the game.
"""

import logging
from typing import Any, Literal

import discord
from discord import app_commands

from gamecord.commands.base import (
    Context,
    InterruptedCommandError,
    controlled_command,
    game_command_group,
)
from gamecord.core import ConfigurationError, GameSession
from gamecord.games import (
    Connect4,
    FastType,
    Flood,
    Game2048,
    Memory,
    Minesweeper,
    RockPaperScissors,
    TicTacToe,
    Trivia,
    Wordle,
)

logger = logging.getLogger(__name__)


async def start_game(
    ctx: Context,
    game_class: type[GameSession[Any]],
    opponent: discord.Member | None = None,
    **overrides: Any,
) -> None:
    """Create a session for the command user and run it until the end.

    Args:
        ctx: The command context.
        game_class: The game to play.
        opponent: Member challenged in a versus game.
        **overrides: Options taking precedence over the configuration.

    Raises:
        InterruptedCommandError: If the game cannot be started.
    """
    if opponent is not None and (opponent.bot or opponent.id == ctx.user.id):
        await ctx.response.send_message(
            "You cannot challenge this member.", ephemeral=True
        )
        raise InterruptedCommandError
    try:
        session = ctx.client.game.create_session(
            game_class, ctx, ctx.user, opponent, **overrides
        )
    except ConfigurationError as err:
        logger.warning("Cannot start %s: %s", game_class.name, err)
        await ctx.response.send_message(
            "This game is not configured correctly.", ephemeral=True
        )
        raise InterruptedCommandError from err
    result = await ctx.client.game.run_session(session)
    if result is None:
        logger.info("%s ended without result", session)
    else:
        logger.info("%s ended with %s", session, result.outcome)


@game_command_group.command(
    name=Connect4.name,
    description="Play a game of Connect 4 against a member",
)
@app_commands.describe(member="Member to challenge")
@controlled_command(cooldown=True, channel_permissions={"send_messages": True})
async def connect4_command(ctx: Context, member: discord.Member) -> None:
    """Start a Connect 4 game against a member."""
    await start_game(ctx, Connect4, member)


@game_command_group.command(
    name=TicTacToe.name,
    description="Play a game of Tic Tac Toe against a member",
)
@app_commands.describe(member="Member to challenge")
@controlled_command(cooldown=True, channel_permissions={"send_messages": True})
async def tictactoe_command(ctx: Context, member: discord.Member) -> None:
    """Start a Tic Tac Toe game against a member."""
    await start_game(ctx, TicTacToe, member)


@game_command_group.command(
    name=RockPaperScissors.name,
    description="Play a game of Rock Paper Scissors against a member",
)
@app_commands.describe(member="Member to challenge")
@controlled_command(cooldown=True, channel_permissions={"send_messages": True})
async def rockpaperscissors_command(
    ctx: Context, member: discord.Member
) -> None:
    """Start a Rock Paper Scissors game against a member."""
    await start_game(ctx, RockPaperScissors, member)


@game_command_group.command(
    name=Flood.name,
    description="Fill the board with a single color",
)
@controlled_command(cooldown=True, channel_permissions={"send_messages": True})
async def flood_command(ctx: Context) -> None:
    """Start a Flood game."""
    await start_game(ctx, Flood)


@game_command_group.command(
    name=Game2048.name,
    description="Merge the tiles up to 2048",
)
@controlled_command(cooldown=True, channel_permissions={"send_messages": True})
async def game2048_command(ctx: Context) -> None:
    """Start a 2048 game."""
    await start_game(ctx, Game2048)


@game_command_group.command(
    name=Minesweeper.name,
    description="Reveal every block without hitting a mine",
)
@app_commands.describe(mines="Number of mines on the board")
@controlled_command(cooldown=True, channel_permissions={"send_messages": True})
async def minesweeper_command(
    ctx: Context, mines: app_commands.Range[int, 1, 24] | None = None
) -> None:
    """Start a Minesweeper game, optionally with a number of mines."""
    if mines is None:
        await start_game(ctx, Minesweeper)
    else:
        await start_game(ctx, Minesweeper, mines=mines)


@game_command_group.command(
    name=Memory.name,
    description="Find every pair of emojis",
)
@controlled_command(cooldown=True, channel_permissions={"send_messages": True})
async def memory_command(ctx: Context) -> None:
    """Start a Memory game."""
    await start_game(ctx, Memory)


@game_command_group.command(
    name=Trivia.name,
    description="Answer a trivia question",
)
@app_commands.describe(
    mode="Four answers or true and false",
    difficulty="Difficulty of the question, random by default",
)
@controlled_command(cooldown=True, channel_permissions={"send_messages": True})
async def trivia_command(
    ctx: Context,
    mode: Literal["multiple", "single"] | None = None,
    difficulty: Literal["easy", "medium", "hard"] | None = None,
) -> None:
    """Start a Trivia game."""
    overrides: dict[str, Any] = {}
    if mode is not None:
        overrides["mode"] = mode
    if difficulty is not None:
        overrides["difficulty"] = difficulty
    await start_game(ctx, Trivia, **overrides)


@game_command_group.command(
    name=FastType.name,
    description="Type a sentence as fast as possible",
)
@controlled_command(
    cooldown=True,
    channel_permissions={"send_messages": True, "read_message_history": True},
)
async def fasttype_command(ctx: Context) -> None:
    """Start a Fast Type game."""
    await start_game(ctx, FastType)


@game_command_group.command(
    name=Wordle.name,
    description="Guess a five letter word in six tries",
)
@controlled_command(
    cooldown=True,
    channel_permissions={"send_messages": True, "manage_messages": True},
)
async def wordle_command(ctx: Context) -> None:
    """Start a Wordle game."""
    await start_game(ctx, Wordle)
