"""Test the Connect 4 game."""

import asyncio

import pytest

from gamecord.core import GameContext
from gamecord.games.connect4 import (
    HEIGHT,
    WIDTH,
    Connect4,
    drop,
    is_board_full,
    is_win_at,
    new_board,
)
from tests.constants import OPPONENT, PLAYER
from tests.fakes import (
    EventLog,
    FakeTransport,
    accept_invitation,
    click,
    play,
    versus,
)


def test_drop_stacks_pieces() -> None:
    """Test that pieces fall to the lowest free row."""
    board = new_board()
    assert drop(board, 3, 1) == HEIGHT - 1
    assert drop(board, 3, 2) == HEIGHT - 2
    assert board[(HEIGHT - 1) * WIDTH + 3] == 1
    assert board[(HEIGHT - 2) * WIDTH + 3] == 2


def test_drop_full_column() -> None:
    """Test that a full column refuses pieces."""
    board = new_board()
    for _ in range(HEIGHT):
        assert drop(board, 0, 1) is not None
    assert drop(board, 0, 1) is None
    assert not is_board_full(board)


def test_horizontal_line() -> None:
    """Test that four pieces on the bottom row win."""
    board = new_board()
    for x in range(3):
        drop(board, x, 1)
    assert not is_win_at(board, 2, HEIGHT - 1)
    drop(board, 3, 1)
    assert is_win_at(board, 3, HEIGHT - 1)
    assert is_win_at(board, 0, HEIGHT - 1)


def test_vertical_line() -> None:
    """Test that four stacked pieces win."""
    board = new_board()
    for _ in range(4):
        row = drop(board, 6, 2)
    assert row == HEIGHT - 4
    assert is_win_at(board, 6, row)


def test_diagonal_line() -> None:
    """Test that both diagonals are checked."""
    board = new_board()
    for x in range(4):
        for _ in range(x):
            drop(board, x, 2)
        drop(board, x, 1)
    assert is_win_at(board, 3, HEIGHT - 4)
    assert is_win_at(board, 0, HEIGHT - 1)
    assert not is_win_at(board, 1, HEIGHT - 1)


def test_empty_cell_never_wins() -> None:
    """Test that an empty cell is not part of a line."""
    assert not is_win_at(new_board(), 0, 0)


@pytest.mark.asyncio
async def test_player_wins(context: GameContext, transport: FakeTransport) -> None:
    """Test a full game won by the player on the bottom row."""
    game = Connect4(context, versus())
    log = EventLog(game)
    task = asyncio.create_task(game.start())
    await accept_invitation(game, transport, OPPONENT)
    for column in range(3):
        await play(game, click("connect4", column, actor=PLAYER))
        await play(game, click("connect4", column, actor=OPPONENT))
    assert game.player1_turn
    await play(game, click("connect4", 3, actor=PLAYER))
    await asyncio.wait_for(task, 2)
    assert log.kinds == ["gameOver", "end"]
    (result,) = log.payloads("gameOver")
    assert result.outcome == "win"
    assert result.winner == PLAYER
    assert result.loser == OPPONENT
    assert result.winner_emoji == "🔴"
    assert all(button.disabled for button in transport.last_view.buttons())


@pytest.mark.asyncio
async def test_out_of_turn(context: GameContext, transport: FakeTransport) -> None:
    """Test that the opponent cannot play first."""
    game = Connect4(context, versus())
    task = asyncio.create_task(game.start())
    await accept_invitation(game, transport, OPPONENT)
    await play(game, click("connect4", 0, actor=OPPONENT))
    assert game.board == new_board()
    assert game.player1_turn
    await play(game, click("connect4", 0, actor=PLAYER))
    assert game.board[(HEIGHT - 1) * WIDTH] == 1
    assert not game.player1_turn
    game.stop("idle")
    await asyncio.wait_for(task, 2)
    assert game.result is not None
    assert game.result.outcome == "timeout"
