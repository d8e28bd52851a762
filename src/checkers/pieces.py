"""Defines the checkers pieces"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Self

from src.checkers.square import Square
from src.core.exceptions import InvalidPositionError
from src.core.shared_types import Player


class PieceKind(Enum):
    MAN = auto()
    KING = auto()


CHAR_TO_OWNER: dict[str, Player] = {"a": Player.A, "b": Player.B}


@dataclass
class Piece:
    id: str
    square: Square
    owner: Player
    kind: PieceKind = PieceKind.MAN

    @property
    def is_king(self) -> bool:
        return self.kind == PieceKind.KING

    @classmethod
    def from_char(cls, character: str, piece_id: str, square: Square) -> Self:
        # lower case: men, upper case: kings
        owner = CHAR_TO_OWNER.get(character.lower())
        if owner is None:
            raise InvalidPositionError(f"Unknown piece character: {character!r}")
        kind = PieceKind.KING if character.isupper() else PieceKind.MAN
        return cls(piece_id, square, owner, kind)

    def to_char(self) -> str:
        return self.owner.value.upper() if self.is_king else self.owner.value

    def promote(self) -> None:
        """Kings stay kings."""
        self.kind = PieceKind.KING
