"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from src.core.exceptions import InvalidPositionError

ALGEBRAIC_PATTERN = re.compile(r"^([a-z])([1-9][0-9]*)$")


@dataclass(frozen=True)
class Square:
    x: int
    y: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        match = ALGEBRAIC_PATTERN.match(sq.strip().lower())
        if match is None:
            raise InvalidPositionError(f"Cannot interpret {sq!r} as a square.")
        column, row = match.groups()
        return cls(ord(column) - ord("a"), int(row) - 1)

    def to_algebraic(self) -> str:
        return f"{chr(self.x + ord('a'))}{self.y + 1}"

    def offset(self, dx: int, dy: int) -> Square:
        return Square(self.x + dx, self.y + dy)

    def is_within_bounds(self, width: int, height: int) -> bool:
        return (0 <= self.x < width) and (0 <= self.y < height)

    @property
    def is_dark(self) -> bool:
        """Playable squares. a1 is dark."""
        return (self.x + self.y) % 2 == 0
