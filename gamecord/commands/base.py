"""Base module for the slash commands.

Every game command goes through :func:`controlled_command`, which checks
that it runs in a guild channel the bot can write in, applies the cooldown
of the game and logs the invocation. Cooldowns live in memory, they are
forgotten when the bot restarts.
"""

import asyncio
import functools
import logging
from collections.abc import Callable, Coroutine
from time import time
from typing import Any, Concatenate, ParamSpec, TypeVar, cast

import discord
from discord import app_commands

from gamecord.bot import Gamecord

# Root command group, renamed from the configuration when loaded
game_command_group = app_commands.Group(
    name="game",
    description="Play a mini-game",
    guild_only=True,
)

logger = logging.getLogger(__name__)

CooldownKey = tuple[int, int, str]


class InterruptedCommandError(Exception):
    """Raised when a command is interrupted and should reset cooldown."""


class Cooldowns:
    """Last use of the commands by member, guild and command name."""

    def __init__(self, clock: Callable[[], float] = time) -> None:
        """Initialize an empty registry.

        Args:
            clock: Source of the current timestamp.
        """
        self.clock = clock
        self._lock = asyncio.Lock()
        self._last_uses: dict[CooldownKey, float] = {}

    def __len__(self) -> int:
        return len(self._last_uses)

    async def acquire(self, key: CooldownKey, duration: float) -> float | None:
        """Record a use of a command unless it is still cooling down.

        Args:
            key: Member id, guild id and command name.
            duration: Seconds between two uses.

        Returns:
            The timestamp at which the command is usable again, None if the
            use was recorded.
        """
        async with self._lock:
            now = self.clock()
            last_use = self._last_uses.get(key)
            if last_use is not None and now <= last_use + duration:
                return last_use + duration
            self._last_uses[key] = now
            return None

    async def reset(self, key: CooldownKey) -> None:
        """Forget the last use of a command."""
        async with self._lock:
            self._last_uses.pop(key, None)


cooldowns = Cooldowns()

InteractionChannel = (
    discord.VoiceChannel
    | discord.StageChannel
    | discord.TextChannel
    | discord.Thread
    | discord.DMChannel
    | discord.GroupChannel
)


class Context(discord.Interaction[Gamecord]):
    """Interaction of a guild command with guaranteed attributes."""

    user: discord.Member
    command: "app_commands.Command[Any, ..., Any]"  # type: ignore[assignment,unused-ignore]
    channel: InteractionChannel
    channel_id: int
    guild: discord.Guild
    guild_id: int


P = ParamSpec("P")
T = TypeVar("T")
Interaction = discord.Interaction[Gamecord]
Coro = Coroutine[Any, Any, T]


def bot_permissions(ctx: Context) -> discord.Permissions:
    """Permissions of the bot in the channel of a command."""
    me = ctx.client.user
    member = None if me is None else ctx.guild.get_member(me.id)
    if member is None:
        return discord.Permissions.none()
    return ctx.channel.permissions_for(member)


def describe(ctx: Context) -> str:
    """Describe a command invocation for the logs."""
    return (
        f"/{ctx.command.qualified_name} by {ctx.user} "
        f"({ctx.user.id}) in {ctx.channel.jump_url}"
    )


def as_context(interaction: Interaction) -> Context | None:
    """Return the interaction if it is a command used by a guild member."""
    if not isinstance(interaction.command, app_commands.Command):
        logger.warning("No command provided %s", interaction)
        return None
    if interaction.channel is None or interaction.channel_id is None:
        logger.warning("No channel provided %s", interaction)
        return None
    if interaction.guild is None or interaction.guild_id is None:
        logger.warning("Command must be used in a guild: %s", interaction)
        return None
    if not isinstance(interaction.user, discord.Member):
        logger.warning("User must be guild member %s", interaction)
        return None
    return cast("Context", interaction)


def controlled_command(
    *,
    cooldown: bool = True,
    channel_permissions: dict[str, bool] | None = None,
    **user_permissions: bool,
) -> Callable[
    [Callable[Concatenate[Context, P], Coro[None]]],
    Callable[Concatenate[Interaction, P], Coro[None]],
]:
    """Decorator that adds cooldown and permission checks to slash commands.

    Super admins bypass cooldowns and user permission checks. The cooldown
    of a command is the one of the game with the same name in the
    configuration. A command raising :class:`InterruptedCommandError` does
    not consume the cooldown.

    Args:
        cooldown: Whether to enforce command cooldowns.
        channel_permissions: Bot permissions required in the channel.
        **user_permissions: User permissions required to run the command.

    Returns:
        Decorated command function with all validations applied.
    """
    required_bot = discord.Permissions(**(channel_permissions or {}))
    required_user = discord.Permissions(**user_permissions)

    def decorator(
        command_function: Callable[Concatenate[Context, P], Coro[None]],
    ) -> Callable[Concatenate[Interaction, P], Coro[None]]:
        @functools.wraps(command_function)
        async def decorated_command(
            interaction: Interaction, *args: P.args, **kwargs: P.kwargs
        ) -> None:
            ctx = as_context(interaction)
            if ctx is None:
                return
            invocation = describe(ctx)

            if not bot_permissions(ctx).is_superset(required_bot):
                logger.warning("%s: missing bot permissions", invocation)
                await ctx.response.send_message(
                    "The bot is missing permissions in this channel.",
                    ephemeral=True,
                )
                return

            admin = ctx.client.is_super_admin(ctx.user)
            allowed = ctx.user.guild_permissions.is_superset(required_user)
            if not allowed and not admin:
                logger.warning("%s: missing user permissions", invocation)
                await ctx.response.send_message(
                    "You are not allowed to use this command.",
                    ephemeral=True,
                )
                return

            key = (ctx.user.id, ctx.guild_id, ctx.command.name)
            if cooldown and not admin:
                duration = ctx.client.config.game(ctx.command.name).cooldown
                usable_at = await cooldowns.acquire(key, duration)
                if usable_at is not None:
                    logger.warning("%s: cooling down", invocation)
                    await ctx.response.send_message(
                        f"You have to wait until <t:{usable_at + 1:.0f}:R>",
                        ephemeral=True,
                    )
                    return

            logger.info("%s", invocation)
            try:
                await command_function(ctx, *args, **kwargs)
            except InterruptedCommandError:
                logger.warning("%s: interrupted", invocation)
                await cooldowns.reset(key)

        return decorated_command

    return decorator
