"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    PLAYER_A_WON = "player a won"
    PLAYER_B_WON = "player b won"


class Player(StrEnum):
    """The two sides. Player A moves up the board (increasing y), Player B moves down."""

    A = "a"
    B = "b"

    @property
    def opponent(self) -> "Player":
        return Player.B if self == Player.A else Player.A
