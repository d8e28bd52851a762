"""Orchestration of communication from API router to business logic and storage layers (and the reverse direction)."""

import logging
from uuid import UUID

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    DeselectPieceRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
    PieceResponse,
    SelectPieceRequest,
)
from src.checkers.game import Game
from src.checkers.square import Square
from src.core.exceptions import RepositoryError
from src.core.models import GameModel
from src.db.repository import GameRepository

logger = logging.getLogger(__name__)


class CheckersService:
    """Orchestration of layers for a checkers game."""

    def __init__(self, repository: GameRepository) -> None:
        self.repo = repository

    # -- API routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Create a new game, from the standard setup or the requested position."""
        new_game = Game.new_game(
            rules=request.to_rules(),
            starting_position=request.starting_position,
            starting_player=request.starting_player,
        )

        # Store the GameModel in the repository
        _, game_id = self.repo.create_game(new_game.to_model())
        logger.info(f"Created game {game_id}")

        return self._create_game_response(game_id, new_game)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend to check when it is the player's turn for instance.
        """
        game = Game.from_model(self._fetch_game(request.game_id))
        return self._create_game_response(request.game_id, game)

    def select_piece(self, request: SelectPieceRequest) -> LegalMovesResponse:
        """Select a piece and return what it can do."""
        game = Game.from_model(self._fetch_game(request.game_id))
        game.select(request.piece_id)
        self._store(request.game_id, game)
        return self._create_legal_moves_response(request.game_id, game, request.piece_id)

    def deselect_piece(self, request: DeselectPieceRequest) -> GameResponse:
        game = Game.from_model(self._fetch_game(request.game_id))
        game.deselect()
        self._store(request.game_id, game)
        return self._create_game_response(request.game_id, game)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """retrieve set of legal moves, without changing the selection."""
        game = Game.from_model(self._fetch_game(request.game_id))
        return self._create_legal_moves_response(request.game_id, game, request.piece_id)

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """Make a move attempt."""

        # Create a new Game instance from the retrieved GameModel
        game = Game.from_model(self._fetch_game(request.game_id))

        # Attempt the move (a rejected move raises before anything gets stored)
        result = game.move(
            request.piece_id,
            Square.from_algebraic(request.to_square),
            expected_version=request.expected_version,
        )
        self._store(request.game_id, game)

        return MoveResponse(
            game=self._create_game_response(request.game_id, game),
            move=result.move.to_notation(),
            captured_piece_id=result.captured_piece_id,
            promoted=result.promoted,
            continuation_required=result.continuation_required,
            next_player=result.next_player,
        )

    def list_games(self) -> list[UUID]:
        """Show all registered games."""
        return self.repo.list_game_ids()

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        if self.repo.delete_game(request.game_id) is None:
            raise RepositoryError(f"Game with {request.game_id=} not found.")
        logger.info(f"Deleted game {request.game_id}")

    # -- Internal helpers --
    def _create_game_response(self, game_id: UUID, game: Game) -> GameResponse:
        return GameResponse(
            game_id=game_id,
            position=game.board.to_position(),
            pieces=[
                PieceResponse(
                    id=piece.id,
                    square=piece.square.to_algebraic(),
                    owner=piece.owner,
                    is_king=piece.is_king,
                )
                for piece in game.board.pieces
            ],
            current_player=game.current_player,
            selected_piece=game.selected_piece_id,
            forced_piece=game.forced_piece_id,
            status=game.status.value,
            winner=game.winner,
            move_history=[move.to_notation() for move in game.moves],
            version=game.version,
        )

    def _create_legal_moves_response(self, game_id: UUID, game: Game, piece_id: str) -> LegalMovesResponse:
        return LegalMovesResponse(
            game_id=game_id,
            piece_id=piece_id,
            legal_moves=[move.to_notation() for move in game.legal_moves(piece_id)],
            capture_chains=[
                [move.to_notation() for move in chain] for chain in game.capture_chains(piece_id)
            ],
        )

    def _store(self, game_id: UUID, game: Game) -> None:
        if self.repo.update_game(game_id, game.to_model()) is None:
            raise RepositoryError(f"Game with {game_id=} not found.")

    def _fetch_game(self, game_id: UUID) -> GameModel:
        """Attempt to find the game in the repository and raise error if it fails."""
        game_model = self.repo.get_game(game_id)
        if game_model is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return game_model
