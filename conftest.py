"""Configuration for all tests."""

import pathlib
import random
from typing import Any

import pytest

from gamecord.bot import Gamecord
from gamecord.config import MConfig
from gamecord.core import GameContext
from tests.constants import PLAYER
from tests.fakes import FakeTransport


@pytest.fixture(autouse=True)
def _add_bot(doctest_namespace: dict[str, Any], bot: Gamecord) -> None:
    """Update doctest namespace."""
    doctest_namespace["bot"] = bot
    doctest_namespace["config"] = bot.config


@pytest.fixture
def bot(tmp_path: pathlib.Path) -> Gamecord:
    """Get a bot ready-to-use."""
    return Gamecord.generate(str(tmp_path), env=True)


@pytest.fixture
def config(bot: Gamecord) -> MConfig:
    """Get the configuration of the bot."""
    return bot.config


@pytest.fixture
def transport() -> FakeTransport:
    """Get a transport keeping views in memory."""
    return FakeTransport()


@pytest.fixture
def context(transport: FakeTransport) -> GameContext:
    """Get the context of a session started by the player."""
    return GameContext(transport=transport, player=PLAYER)


@pytest.fixture
def rng() -> random.Random:
    """Get a seeded random generator."""
    return random.Random(2048)
