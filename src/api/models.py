"""Requests and Response models"""

from typing import Optional, Self
from uuid import UUID

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from src.checkers.square import ALGEBRAIC_PATTERN
from src.core.config import EngineConfig
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Player

POSITION_CHARACTERS = set("aAbB0123456789/")


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    width: int = 8
    height: int = 8
    rows_per_player: int = 3
    board_wide_capture: bool = False
    starting_player: Player = Player.A
    starting_position: Optional[str] = None

    @field_validator("starting_position")
    @classmethod
    def validate_starting_position(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        value = value.strip()
        if not value or not set(value) <= POSITION_CHARACTERS:
            raise InvalidRequestError(
                f"Position string may only contain {''.join(sorted(POSITION_CHARACTERS))}: {value!r}"
            )
        return value

    @model_validator(mode="after")
    def validate_rules(self) -> Self:
        try:
            self.to_rules()
        except ValidationError as exc:
            raise InvalidRequestError(f"Invalid rules: {exc.errors()[0]['msg']}") from exc
        return self

    def to_rules(self) -> EngineConfig:
        return EngineConfig(
            width=self.width,
            height=self.height,
            rows_per_player=self.rows_per_player,
            board_wide_capture=self.board_wide_capture,
        )


class GetGameRequest(BaseModel):
    game_id: UUID


class SelectPieceRequest(BaseModel):
    game_id: UUID
    piece_id: str


class DeselectPieceRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    piece_id: str


class MoveRequest(BaseModel):
    game_id: UUID
    piece_id: str
    to_square: str
    expected_version: Optional[int] = None

    @field_validator("to_square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        if ALGEBRAIC_PATTERN.match(value.strip().lower()) is None:
            raise InvalidRequestError(
                f"Cannot interpret to_square: {value!r} as a valid square name."
            )
        return value.strip().lower()


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class PieceResponse(BaseModel):
    id: str
    square: str
    owner: Player
    is_king: bool


class GameResponse(BaseModel):
    game_id: UUID
    position: str
    pieces: list[PieceResponse]
    current_player: Player
    selected_piece: Optional[str]
    forced_piece: Optional[str]
    status: str
    winner: Optional[Player]
    move_history: list[str]
    version: int


class LegalMovesResponse(BaseModel):
    game_id: UUID
    piece_id: str
    legal_moves: list[str]
    capture_chains: list[list[str]]


class MoveResponse(BaseModel):
    game: GameResponse
    move: str
    captured_piece_id: Optional[str]
    promoted: bool
    continuation_required: bool
    next_player: Player
