"""Test the command line interface."""

import pathlib

import pytest

from gamecord.bot import Gamecord
from gamecord.cli import entrypoint, get_parser
from gamecord.games import GAMES


def test_parser_defaults() -> None:
    """Test that run reads config.yml by default."""
    namespace = get_parser().parse_args(["run", "-e"])
    assert str(namespace.config) == "config.yml"
    assert namespace.env
    assert not namespace.verbose


def test_games(capsys: pytest.CaptureFixture[str]) -> None:
    """Test the listing of the catalogue."""
    entrypoint(["games"])
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == len(GAMES)
    assert lines[0].split()[:2] == ["connect4", "versus"]
    assert any(line.split()[:2] == ["wordle", "solo"] for line in lines)


def test_check(
    bot: Gamecord,  # noqa: ARG001
    tmp_path: pathlib.Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """Test the validation of a generated configuration."""
    entrypoint(["check", "-c", str(tmp_path / "config.yml")])
    out = capsys.readouterr().out
    assert out.startswith("Enabled games: connect4, tictactoe, rps")


def test_check_invalid(
    tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Test that invalid game options make the check fail."""
    path = tmp_path / "config.yml"
    path.write_text("games:\n  flood:\n    options:\n      size: 1\n")
    with pytest.raises(SystemExit) as info:
        entrypoint(["check", "-c", str(path)])
    assert info.value.code == 1
    assert "Invalid configuration" in capsys.readouterr().err


def test_generate(tmp_path: pathlib.Path) -> None:
    """Test the generation of a bot directory from the command line."""
    destination = tmp_path / "bot"
    entrypoint(["generate", str(destination)])
    assert (destination / "config.yml").is_file()
