"""The Game board keeps track of which piece stands where (in checkers: the configuration of pieces on the board)"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Self

from src.checkers.pieces import Piece
from src.checkers.square import Square
from src.core.config import MIN_BOARD_DIMENSION
from src.core.exceptions import InvalidPositionError, InvariantViolationError
from src.core.shared_types import Player

POSITION_TOKEN = re.compile(r"[0-9]+|[^0-9]")


def _is_valid_dimension(value: int) -> bool:
    return value >= MIN_BOARD_DIMENSION and value % 2 == 0


def assign_piece_ids(placements: list[tuple[Square, str]]) -> list[Piece]:
    """
    Number the pieces per player, row by row (y ascending, then x ascending).
    ex) on the standard 8x8 setup Player A gets a1..a12, Player B gets b1..b12
    """
    counters: dict[str, int] = {}
    pieces: list[Piece] = []
    for square, character in sorted(placements, key=lambda p: (p[0].y, p[0].x)):
        owner_char = character.lower()
        counters[owner_char] = counters.get(owner_char, 0) + 1
        piece_id = f"{owner_char}{counters[owner_char]}"
        pieces.append(Piece.from_char(character, piece_id, square))
    return pieces


@dataclass
class Board:
    width: int
    height: int
    position: dict[Square, Piece] = field(default_factory=dict, init=False)
    _by_id: dict[str, Piece] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        if not (_is_valid_dimension(self.width) and _is_valid_dimension(self.height)):
            raise InvariantViolationError(
                f"Board dimensions must be even and >= {MIN_BOARD_DIMENSION}: {self.width}x{self.height}"
            )

    @classmethod
    def from_pieces(cls, width: int, height: int, pieces: Iterable[Piece]) -> Self:
        board = cls(width, height)
        for piece in pieces:
            board.place(piece)
        return board

    @classmethod
    def standard_setup(cls, width: int, height: int, rows_per_player: int) -> Self:
        """The back rows of each side filled with men on the dark squares."""
        placements: list[tuple[Square, str]] = []
        for y in range(height):
            if y < rows_per_player:
                character = Player.A.value
            elif y >= height - rows_per_player:
                character = Player.B.value
            else:
                continue
            for x in range(width):
                square = Square(x, y)
                if square.is_dark:
                    placements.append((square, character))
        return cls.from_pieces(width, height, assign_piece_ids(placements))

    @classmethod
    def from_position(cls, position: str) -> Self:
        """Construct a board from a position string.

        Modelled on the board part of a chess FEN string:
        b1b1b1b1/1b1b1b1b/b1b1b1b1/8/8/1a1a1a1a/a1a1a1a1/1a1a1a1a
        means:
        * rows are read from the top row (y = height - 1) down to row 0, separated by slashes
        * 'a' / 'b' is a man of Player A / Player B, capitals 'A' / 'B' are kings
        * a number denotes that many empty squares after each other (can be more than one digit on wide boards)
        """
        rows = position.strip().split("/")
        height = len(rows)
        width: Optional[int] = None
        placements: list[tuple[Square, str]] = []
        for row_idx, row in enumerate(rows):
            y = height - 1 - row_idx
            x = 0
            for token in POSITION_TOKEN.findall(row):
                if token.isdigit():
                    x += int(token)
                    continue
                if token.lower() not in (Player.A.value, Player.B.value):
                    raise InvalidPositionError(
                        f"Unknown character {token!r} in position {position!r}"
                    )
                placements.append((Square(x, y), token))
                x += 1
            if width is None:
                width = x
            elif x != width:
                raise InvalidPositionError(
                    f"Row {row!r} has {x} squares, expected {width}."
                )

        if width is None or not (_is_valid_dimension(width) and _is_valid_dimension(height)):
            raise InvalidPositionError(
                f"Position {position!r} does not describe an even board of at least {MIN_BOARD_DIMENSION}x{MIN_BOARD_DIMENSION}."
            )
        return cls.from_pieces(width, height, assign_piece_ids(placements))

    def to_position(self) -> str:
        """Rows are separated by slashes, top row first."""
        return "/".join(self._row_to_position(y) for y in range(self.height - 1, -1, -1))

    def _row_to_position(self, y: int) -> str:
        characters: list[str] = []
        empty_count = 0
        for x in range(self.width):
            piece = self.piece_at(Square(x, y))
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                characters.append(str(empty_count))
                empty_count = 0
            characters.append(piece.to_char())

        # if the entire row is empty, then we still place this number in the string
        if empty_count > 0:
            characters.append(str(empty_count))
        return "".join(characters)

    # --- QUERIES ---
    def is_inside(self, square: Square) -> bool:
        return square.is_within_bounds(self.width, self.height)

    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def is_empty(self, square: Square) -> bool:
        return self.is_inside(square) and square not in self.position

    def get_piece(self, piece_id: str) -> Optional[Piece]:
        return self._by_id.get(piece_id)

    @property
    def pieces(self) -> list[Piece]:
        return list(self._by_id.values())

    def pieces_of(self, player: Player) -> list[Piece]:
        return [piece for piece in self._by_id.values() if piece.owner == player]

    # --- MUTATIONS ---
    def place(self, piece: Piece) -> None:
        if not self.is_inside(piece.square):
            raise InvariantViolationError(
                f"Piece {piece.id} placed outside the board: {piece.square}"
            )
        if piece.square in self.position:
            raise InvariantViolationError(
                f"Square {piece.square.to_algebraic()} already holds piece {self.position[piece.square].id}"
            )
        if piece.id in self._by_id:
            raise InvariantViolationError(f"Duplicate piece id: {piece.id}")
        self.position[piece.square] = piece
        self._by_id[piece.id] = piece

    def remove(self, piece: Piece) -> None:
        if self.position.get(piece.square) is not piece:
            raise InvariantViolationError(
                f"Piece {piece.id} is not standing on {piece.square.to_algebraic()}"
            )
        del self.position[piece.square]
        del self._by_id[piece.id]

    def move_piece(self, piece: Piece, to_square: Square) -> None:
        """Update the position on the board"""
        if not self.is_empty(to_square):
            raise InvariantViolationError(
                f"Cannot move {piece.id} onto {to_square.to_algebraic()}: outside the board or occupied"
            )
        self.remove(piece)
        piece.square = to_square
        self.place(piece)
