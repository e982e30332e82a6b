"""Test the checks around the slash commands."""

import pytest

from gamecord.bot import Gamecord
from gamecord.commands.base import Cooldowns
from gamecord.config import MGame
from gamecord.core import ConfigurationError, Player


class Clock:
    """Clock moved by hand."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_cooldown() -> None:
    """Test that a command is refused until its cooldown expired."""
    clock = Clock()
    cooldowns = Cooldowns(clock)
    key = (1001, 1, "flood")
    assert await cooldowns.acquire(key, 10.0) is None
    clock.now += 5
    assert await cooldowns.acquire(key, 10.0) == 1010.0
    assert await cooldowns.acquire((1002, 1, "flood"), 10.0) is None
    assert await cooldowns.acquire((1001, 1, "wordle"), 10.0) is None
    clock.now += 6
    assert await cooldowns.acquire(key, 10.0) is None
    assert len(cooldowns) == 3


@pytest.mark.asyncio
async def test_reset_cooldown() -> None:
    """Test that an interrupted command can be used again."""
    cooldowns = Cooldowns(Clock())
    key = (1001, 1, "connect4")
    assert await cooldowns.acquire(key, 60.0) is None
    await cooldowns.reset(key)
    await cooldowns.reset(key)
    assert await cooldowns.acquire(key, 60.0) is None


def test_enabled_games(bot: Gamecord) -> None:
    """Test the check of the games at startup."""
    games = bot.enabled_games()
    assert {"connect4", "wordle"} <= set(games)
    bot.config.games["wordle"] = MGame(enabled=False)
    assert "wordle" not in bot.enabled_games()


def test_unknown_game(bot: Gamecord) -> None:
    """Test that a typo in the name of a game is reported."""
    bot.config.games["wordel"] = MGame()
    with pytest.raises(ConfigurationError, match="wordel"):
        bot.enabled_games()


def test_invalid_versus_options(bot: Gamecord) -> None:
    """Test that versus games are checked without an opponent."""
    bot.config.games["connect4"] = MGame(options={"versus": {"timeout": -1}})
    with pytest.raises(ConfigurationError):
        bot.enabled_games()


def test_super_admin(bot: Gamecord) -> None:
    """Test the members bypassing the checks."""
    bot.config.admins = [42]
    bot.owner_id = 7
    admin = Player(id=42, name="admin")
    owner = Player(id=7, name="owner")
    assert bot.is_super_admin(admin)  # type: ignore[arg-type]
    assert bot.is_super_admin(owner)  # type: ignore[arg-type]
    bot.config.owner_is_admin = False
    assert not bot.is_super_admin(owner)  # type: ignore[arg-type]
