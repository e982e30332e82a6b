"""Identifiers shared by the tests."""

from gamecord.core import Player

PLAYER = Player(id=1001, name="alice")
OPPONENT = Player(id=1002, name="bob")
STRANGER = Player(id=1003, name="carol")
