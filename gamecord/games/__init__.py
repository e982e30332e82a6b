"""Catalogue of the playable games."""

from typing import Any

from gamecord.core import GameSession
from gamecord.games.connect4 import Connect4, Connect4Options, Connect4Result
from gamecord.games.fast_type import FastType, FastTypeOptions, FastTypeResult
from gamecord.games.flood import Flood, FloodOptions, FloodResult
from gamecord.games.game2048 import Game2048, Game2048Options, Game2048Result
from gamecord.games.memory import Memory, MemoryOptions, MemoryResult
from gamecord.games.minesweeper import (
    Minesweeper,
    MinesweeperOptions,
    MinesweeperResult,
)
from gamecord.games.rock_paper_scissors import (
    RockPaperScissors,
    RockPaperScissorsOptions,
    RockPaperScissorsResult,
)
from gamecord.games.tic_tac_toe import (
    TicTacToe,
    TicTacToeOptions,
    TicTacToeResult,
)
from gamecord.games.trivia import Trivia, TriviaData, TriviaOptions, TriviaResult
from gamecord.games.wordle import Wordle, WordleOptions, WordleResult

GAMES: dict[str, type[GameSession[Any]]] = {
    game.name: game
    for game in (
        Connect4,
        TicTacToe,
        RockPaperScissors,
        Flood,
        Game2048,
        Minesweeper,
        Memory,
        Trivia,
        FastType,
        Wordle,
    )
}

# Games played against an invited opponent
VERSUS_GAMES = frozenset(
    name
    for name, game in GAMES.items()
    if "versus" in game.options_type.__struct_fields__
)

__all__ = [
    "GAMES",
    "VERSUS_GAMES",
    "Connect4",
    "Connect4Options",
    "Connect4Result",
    "FastType",
    "FastTypeOptions",
    "FastTypeResult",
    "Flood",
    "FloodOptions",
    "FloodResult",
    "Game2048",
    "Game2048Options",
    "Game2048Result",
    "Memory",
    "MemoryOptions",
    "MemoryResult",
    "Minesweeper",
    "MinesweeperOptions",
    "MinesweeperResult",
    "RockPaperScissors",
    "RockPaperScissorsOptions",
    "RockPaperScissorsResult",
    "TicTacToe",
    "TicTacToeOptions",
    "TicTacToeResult",
    "Trivia",
    "TriviaData",
    "TriviaOptions",
    "TriviaResult",
    "Wordle",
    "WordleOptions",
    "WordleResult",
]
