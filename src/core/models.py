"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class PieceModel:
    id: str
    x: int
    y: int
    owner: str
    is_king: bool = False


@dataclass
class GameModel:
    """Transport-safe representation of a checkers game used between API, Service, DB, and Game layers."""

    pieces: list[PieceModel]
    current_player: str
    moves: list[str]
    status: str
    rules: dict[str, Any]
    selected_piece: Optional[str] = None
    forced_piece: Optional[str] = None
    version: int = 0
    history: list[str] = field(default_factory=list)
