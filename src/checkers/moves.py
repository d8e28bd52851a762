"""
Geometry/Base movement and capturing rules

Key idea: the directions a piece may use are a pure function of (kind, owner).
Everything else (steps, jumps, capture precedence) is derived from those directions and the occupancy of the board.

Turn order / forced continuation is handled later by Game
"""

import re
from dataclasses import dataclass
from typing import Optional, Protocol, Self

from src.checkers.pieces import Piece, PieceKind
from src.checkers.square import Square
from src.core.exceptions import InvalidPositionError
from src.core.shared_types import Player


class Board(Protocol):
    """Just the parts the movement rules need"""

    def piece_at(self, square: Square) -> Optional[Piece]: ...
    def is_empty(self, square: Square) -> bool: ...


Vector = tuple[int, int]

# Player A moves UP the board, Player B moves DOWN
FORWARD: dict[Player, int] = {Player.A: 1, Player.B: -1}

KING_DIRECTIONS: tuple[Vector, ...] = ((1, 1), (-1, 1), (1, -1), (-1, -1))

MOVE_PATTERN = re.compile(r"^([a-z][0-9]+)([-x])([a-z][0-9]+)$")


def legal_directions(kind: PieceKind, owner: Player) -> tuple[Vector, ...]:
    """Men only move forward (diagonally), kings along all four diagonals."""
    if kind == PieceKind.KING:
        return KING_DIRECTIONS
    dy = FORWARD[owner]
    return ((1, dy), (-1, dy))


@dataclass(frozen=True)
class Move:
    """A single step or a single jump. A capture chain is a sequence of jumps."""

    from_square: Square
    to_square: Square
    captured_square: Optional[Square] = None

    @property
    def is_capture(self) -> bool:
        return self.captured_square is not None

    @classmethod
    def from_notation(cls, notation: str) -> Self:
        """
        Notation
        ---
        * "c3-d4": simple move from c3 to d4
        * "c3xe5": jump from c3 to e5, taking the piece on d4
        """
        match = MOVE_PATTERN.match(notation.strip().lower())
        if match is None:
            raise InvalidPositionError(f"Cannot interpret {notation!r} as a move.")
        from_alg, separator, to_alg = match.groups()
        from_sq = Square.from_algebraic(from_alg)
        to_sq = Square.from_algebraic(to_alg)
        if separator == "-":
            return cls(from_sq, to_sq)

        dx, dy = to_sq.x - from_sq.x, to_sq.y - from_sq.y
        if abs(dx) != 2 or abs(dy) != 2:
            raise InvalidPositionError(f"A capture must jump two diagonal squares: {notation!r}")
        return cls(from_sq, to_sq, from_sq.offset(dx // 2, dy // 2))

    def to_notation(self) -> str:
        separator = "x" if self.is_capture else "-"
        return f"{self.from_square.to_algebraic()}{separator}{self.to_square.to_algebraic()}"


# --- MOVEMENT RULES ---
def candidate_steps(piece: Piece, board: Board) -> list[Move]:
    """One diagonal step onto an empty square."""
    moves: list[Move] = []
    for dx, dy in legal_directions(piece.kind, piece.owner):
        target_square = piece.square.offset(dx, dy)
        if board.is_empty(target_square):
            moves.append(Move(from_square=piece.square, to_square=target_square))
    return moves


def candidate_captures(piece: Piece, board: Board) -> list[Move]:
    """
    Jump over an adjacent opponent piece onto the (empty) square right behind it.
    NOTE: men only capture in their forward directions.
    """
    moves: list[Move] = []
    for dx, dy in legal_directions(piece.kind, piece.owner):
        adjacent_square = piece.square.offset(dx, dy)
        adjacent_piece = board.piece_at(adjacent_square)
        if adjacent_piece is None or adjacent_piece.owner == piece.owner:
            continue

        landing_square = adjacent_square.offset(dx, dy)
        if board.is_empty(landing_square):
            moves.append(
                Move(
                    from_square=piece.square,
                    to_square=landing_square,
                    captured_square=adjacent_square,
                )
            )
    return moves


def candidate_moves(piece: Piece, board: Board) -> list[Move]:
    """Capturing is mandatory: steps are only offered if the piece has nothing to take."""
    captures = candidate_captures(piece, board)
    if captures:
        return captures
    return candidate_steps(piece, board)
