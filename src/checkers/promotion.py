"""Helpers for implementing the promotion rule. A man reaching the far row becomes a king."""

from src.checkers.moves import FORWARD
from src.checkers.pieces import Piece
from src.core.shared_types import Player


def promotion_row(owner: Player, height: int) -> int:
    """The opponent's back row: the last row in the player's forward direction."""
    return height - 1 if FORWARD[owner] > 0 else 0


def reaches_promotion_row(piece: Piece, height: int) -> bool:
    return piece.square.y == promotion_row(piece.owner, height)


def promote_if_needed(piece: Piece, height: int) -> bool:
    """
    Called once per committed move, after the piece has been put on its new square.
    Returns True only if the piece got promoted by this call (a king reaching the back row again is not a promotion).
    """
    if piece.is_king or not reaches_promotion_row(piece, height):
        return False
    piece.promote()
    return True
