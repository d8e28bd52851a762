"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Optional

import pytest

from src.checkers.board import Board
from src.checkers.game import Game
from src.checkers.pieces import Piece, PieceKind
from src.checkers.square import Square
from src.core.config import DEFAULT_CONFIG, EngineConfig
from src.core.shared_types import Player, Status

PieceSpec = tuple[str, int, int, Player] | tuple[str, int, int, Player, bool]


def piece(piece_id: str, x: int, y: int, owner: Player, king: bool = False) -> Piece:
    return Piece(piece_id, Square(x, y), owner, PieceKind.KING if king else PieceKind.MAN)


GameFactory = Callable[..., Game]


@pytest.fixture
def make_game() -> GameFactory:
    """
    Build a game in progress from a handful of pieces (id, x, y, owner[, king]) on an otherwise empty 8x8 board.
    Skips the standard setup, so positions can be constructed that test one rule at a time.
    """

    def _make_game(
        pieces: list[PieceSpec],
        current_player: Player = Player.A,
        rules: Optional[EngineConfig] = None,
    ) -> Game:
        rules = rules or DEFAULT_CONFIG
        board = Board.from_pieces(
            rules.width, rules.height, [piece(*spec) for spec in pieces]
        )
        return Game(
            board=board,
            current_player=current_player,
            moves=[],
            history=[],
            status=Status.IN_PROGRESS,
            rules=rules,
        )

    return _make_game
