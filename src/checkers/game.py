"""
The Game class will be the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn of checkers -->
passes this information to the service layer, which can then pass it onwards to the API layer.

A turn runs through three phases:
* IDLE: nothing selected, the current player picks one of their pieces that can move
* SELECTED: a piece is picked, its legal moves are exposed
* FORCED_CONTINUATION: the piece just captured and can capture again. Only those captures are legal, the piece cannot be
    deselected and the turn does not pass.
"""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Self

from src.checkers.board import Board
from src.checkers.captures import capture_chains, continuation_captures
from src.checkers.moves import Move, candidate_captures, candidate_moves
from src.checkers.pieces import Piece, PieceKind
from src.checkers.promotion import promote_if_needed
from src.checkers.square import Square
from src.core.config import DEFAULT_CONFIG, EngineConfig
from src.core.exceptions import (
    ForcedContinuationError,
    GameStateError,
    IllegalMoveError,
    InvalidPositionError,
    InvalidSelectionError,
    InvariantViolationError,
    StaleStateError,
)
from src.core.models import GameModel, PieceModel
from src.core.shared_types import Player, Status

logger = logging.getLogger(__name__)

WINNER_STATUS: dict[Player, Status] = {
    Player.A: Status.PLAYER_A_WON,
    Player.B: Status.PLAYER_B_WON,
}


class TurnPhase(Enum):
    IDLE = auto()
    SELECTED = auto()
    FORCED_CONTINUATION = auto()


@dataclass(frozen=True)
class CommitResult:
    """What happened when a move got committed. The caller uses this to update whatever it draws."""

    move: Move
    captured_piece_id: Optional[str]
    promoted: bool
    continuation_required: bool
    next_player: Player


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    current_player: Player
    moves: list[Move]
    history: list[str]  # list of position strings, before every move
    status: Status
    rules: EngineConfig
    selected_piece_id: Optional[str] = None
    forced_piece_id: Optional[str] = None
    version: int = 0

    @classmethod
    def new_game(
        cls,
        rules: Optional[EngineConfig] = None,
        starting_position: Optional[str] = None,
        starting_player: Player = Player.A,
    ) -> Self:
        """Start a new game, either from the standard setup or from a given position string."""
        rules = rules or DEFAULT_CONFIG
        if starting_position:
            board = Board.from_position(starting_position)
            # the board size is dictated by the position
            rules = EngineConfig(
                width=board.width,
                height=board.height,
                rows_per_player=min(rules.rows_per_player, (board.height - 1) // 2),
                board_wide_capture=rules.board_wide_capture,
            )
        else:
            board = Board.standard_setup(rules.width, rules.height, rules.rows_per_player)

        game = cls(
            board=board,
            current_player=starting_player,
            moves=[],
            history=[],
            status=Status.IN_PROGRESS,
            rules=rules,
        )
        game._update_game_status()
        logger.info(
            f"New game on a {board.width}x{board.height} board, {starting_player.name} to move"
        )
        return game

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """Define how to construct a Game from the information the Service layer actually has"""

        # Validation
        status_names = [status.value for status in Status]
        if model.status not in status_names:
            raise GameStateError(
                f"Invalid status code: {model.status!r}. \nPick one from {','.join(status_names)}"
            )
        player_names = [player.value for player in Player]
        if model.current_player not in player_names:
            raise GameStateError(f"Invalid player: {model.current_player!r}")
        if any(piece.owner not in player_names for piece in model.pieces):
            raise GameStateError(f"Invalid piece owner. Pick one from {','.join(player_names)}")

        # create the Game
        rules = EngineConfig.model_validate(model.rules)
        pieces = [
            Piece(
                id=piece.id,
                square=Square(piece.x, piece.y),
                owner=Player(piece.owner),
                kind=PieceKind.KING if piece.is_king else PieceKind.MAN,
            )
            for piece in model.pieces
        ]
        board = Board.from_pieces(rules.width, rules.height, pieces)
        try:
            moves = [Move.from_notation(notation) for notation in model.moves]
        except InvalidPositionError as e:
            raise GameStateError(f"Invalid move history: {e}") from e

        game = cls(
            board=board,
            current_player=Player(model.current_player),
            moves=moves,
            history=list(model.history),
            status=Status(model.status),
            rules=rules,
            selected_piece_id=model.selected_piece,
            forced_piece_id=model.forced_piece,
            version=model.version,
        )
        game._assert_consistent_selection()
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""

        return GameModel(
            pieces=[
                PieceModel(
                    id=piece.id,
                    x=piece.square.x,
                    y=piece.square.y,
                    owner=piece.owner.value,
                    is_king=piece.is_king,
                )
                for piece in self.board.pieces
            ],
            current_player=self.current_player.value,
            moves=[move.to_notation() for move in self.moves],
            status=self.status.value,
            rules=self.rules.model_dump(),
            selected_piece=self.selected_piece_id,
            forced_piece=self.forced_piece_id,
            version=self.version,
            history=list(self.history),
        )

    @property
    def phase(self) -> TurnPhase:
        if self.forced_piece_id is not None:
            return TurnPhase.FORCED_CONTINUATION
        if self.selected_piece_id is not None:
            return TurnPhase.SELECTED
        return TurnPhase.IDLE

    @property
    def winner(self) -> Optional[Player]:
        return next(
            (player for player, status in WINNER_STATUS.items() if status == self.status),
            None,
        )

    def select(self, piece_id: str) -> list[Move]:
        """
        Pick the piece to move this turn.
        ----

        1. While a capture chain is open, only the capturing piece may be (re)selected
        2. Must be one of your own pieces
        3. Must have at least one legal move

        Returns the legal moves of the selected piece.
        """
        self._assert_in_progress()
        piece = self._get_piece(piece_id)

        if self.forced_piece_id is not None and piece.id != self.forced_piece_id:
            raise ForcedContinuationError(
                f"Piece {self.forced_piece_id} must continue capturing before any other piece can be selected."
            )

        if piece.owner != self.current_player:
            raise InvalidSelectionError(
                f"Piece {piece.id} belongs to {piece.owner.name}. It is {self.current_player.name}'s turn."
            )

        legal_moves = self.legal_moves(piece.id)
        if not legal_moves:
            raise InvalidSelectionError(f"Piece {piece.id} has no legal moves.")

        self.selected_piece_id = piece.id
        logger.debug(f"Selected {piece.id} on {piece.square.to_algebraic()}")
        return legal_moves

    def select_at(self, square: Square) -> list[Move]:
        """Same as select(), for callers that only know which square got clicked."""
        piece = self.board.piece_at(square)
        if piece is None:
            raise InvalidSelectionError(f"No piece on {square.to_algebraic()}")
        return self.select(piece.id)

    def deselect(self) -> None:
        """Drop the current selection. A forced continuation cannot be aborted."""
        if self.forced_piece_id is not None:
            raise ForcedContinuationError(
                f"Piece {self.forced_piece_id} must finish its capture chain."
            )
        self.selected_piece_id = None

    def legal_moves(self, piece_id: str) -> list[Move]:
        """
        Legal moves of a single piece, given whose turn it is.
        ----

        Empty if: the game is over, the piece is not the current player's, or another piece is finishing a capture chain.
        Combines
        1. candidate moves (captures take precedence over steps, per piece)
        2. forced continuation: only captures of the chain's piece
        3. (rules variant) board-wide capture: if any of your pieces can capture, pieces that cannot have no moves
        """
        piece = self._get_piece(piece_id)
        if self.status != Status.IN_PROGRESS or piece.owner != self.current_player:
            return []

        if self.forced_piece_id is not None:
            if piece.id != self.forced_piece_id:
                return []
            return candidate_captures(piece, self.board)

        moves = candidate_moves(piece, self.board)
        if self.rules.board_wide_capture and not _has_capture(moves):
            if self._can_capture(piece.owner):
                return []
        return moves

    def capture_chains(self, piece_id: str) -> list[list[Move]]:
        """Every full capture path available to a piece that may currently move. Informational: any single jump is legal."""
        piece = self._get_piece(piece_id)
        if not _has_capture(self.legal_moves(piece.id)):
            return []
        return capture_chains(piece, self.board)

    def has_any_legal_move(self, player: Player) -> bool:
        """Pure query. A player without a legal move (or without pieces) has lost."""
        return any(candidate_moves(piece, self.board) for piece in self.board.pieces_of(player))

    def move(self, piece_id: str, to_square: Square, expected_version: Optional[int] = None) -> CommitResult:
        """Convenience method: a (piece id, target square) request as delivered by the input layer."""
        piece = self._get_piece(piece_id)
        return self.commit(Move(piece.square, to_square), expected_version)

    def commit(self, move: Move, expected_version: Optional[int] = None) -> CommitResult:
        """
        Attempt to make a move
        -----

        All checks happen before anything changes (a rejected move leaves the game as it was).

        1. update the board (remove the captured piece, move the piece)
        2. promote if the piece reached the far row
        3. check if the capture chain continues
        4. either keep the turn (forced continuation) or pass it to the opponent
        5. update game status (if needed)
        """
        if expected_version is not None and expected_version != self.version:
            raise StaleStateError(
                f"Move computed against version {expected_version}, game is at version {self.version}."
            )
        self._assert_in_progress()

        piece = self.board.piece_at(move.from_square)
        if piece is None:
            raise IllegalMoveError(f"No piece on {move.from_square.to_algebraic()}")

        accepted_move = self._match_legal_move(piece, move)

        # update the position history (with the position before the move)
        self.history.append(self.board.to_position())

        captured_piece_id = self._update_board(piece, accepted_move)
        promoted = promote_if_needed(piece, self.board.height)
        continuation = continuation_captures(piece, self.board, accepted_move)

        self.moves.append(accepted_move)
        self.version += 1

        if continuation:
            self.forced_piece_id = piece.id
            self.selected_piece_id = piece.id
        else:
            self._end_turn()

        logger.debug(
            f"{piece.owner.name} played {accepted_move.to_notation()}"
            f"{' (promoted)' if promoted else ''}{' (chain continues)' if continuation else ''}"
        )
        return CommitResult(
            move=accepted_move,
            captured_piece_id=captured_piece_id,
            promoted=promoted,
            continuation_required=bool(continuation),
            next_player=self.current_player,
        )

    # -- PRIVATE HELPERS ---
    def _get_piece(self, piece_id: str) -> Piece:
        piece = self.board.get_piece(piece_id)
        if piece is None:
            raise InvalidSelectionError(f"No piece with id {piece_id!r} on the board.")
        return piece

    def _assert_in_progress(self) -> None:
        if self.status != Status.IN_PROGRESS:
            raise GameStateError(f"Game is not in progress. status: {self.status}")

    def _assert_consistent_selection(self) -> None:
        """
        Selection state loaded from outside must make sense.
        A forced continuation only exists right after a capture, for a piece of the player to move that can capture again.
        """
        for piece_id in (self.selected_piece_id, self.forced_piece_id):
            if piece_id is None:
                continue
            piece = self.board.get_piece(piece_id)
            if piece is None or piece.owner != self.current_player:
                raise InvariantViolationError(
                    f"Selected piece {piece_id!r} is not a piece of the player to move."
                )

        if self.forced_piece_id is None:
            return
        if self.selected_piece_id not in (None, self.forced_piece_id):
            raise InvariantViolationError(
                f"Piece {self.forced_piece_id} must continue capturing, but {self.selected_piece_id} is selected."
            )
        forced_piece = self.board.get_piece(self.forced_piece_id)
        assert forced_piece is not None
        last_move = self.moves[-1] if self.moves else None
        if (
            last_move is None
            or not last_move.is_capture
            or last_move.to_square != forced_piece.square
            or not candidate_captures(forced_piece, self.board)
        ):
            raise InvariantViolationError(
                f"Piece {self.forced_piece_id} is marked to continue capturing, but did not just capture or cannot capture."
            )

    def _match_legal_move(self, piece: Piece, move: Move) -> Move:
        """
        The requested move only needs from/to squares. Look it up in the legal set (which also knows what gets captured).
        """
        if self.forced_piece_id is not None and piece.id != self.forced_piece_id:
            raise ForcedContinuationError(
                f"Piece {self.forced_piece_id} must continue capturing."
            )
        if piece.owner != self.current_player:
            raise InvalidSelectionError(
                f"Piece {piece.id} belongs to {piece.owner.name}. It is {self.current_player.name}'s turn."
            )

        legal_moves = self.legal_moves(piece.id)
        for legal_move in legal_moves:
            if (legal_move.from_square, legal_move.to_square) == (move.from_square, move.to_square):
                return legal_move
        raise IllegalMoveError(
            f"Move not allowed: {move.from_square.to_algebraic()} to {move.to_square.to_algebraic()}"
        )

    def _update_board(self, piece: Piece, move: Move) -> Optional[str]:
        """Call for the proper updates of the Board's position. Returns the id of the captured piece (if any)."""
        captured_piece_id = None
        if move.captured_square is not None:
            captured_piece = self.board.piece_at(move.captured_square)
            if captured_piece is None:
                raise InvariantViolationError(
                    f"Capture over {move.captured_square.to_algebraic()}, but the square is empty."
                )
            self.board.remove(captured_piece)
            captured_piece_id = captured_piece.id
        self.board.move_piece(piece, move.to_square)
        return captured_piece_id

    def _end_turn(self) -> None:
        self.forced_piece_id = None
        self.selected_piece_id = None
        self.current_player = self.current_player.opponent
        self._update_game_status()

    def _update_game_status(self) -> None:
        """The player to move loses if they cannot move (or have no pieces left)."""
        if self.has_any_legal_move(self.current_player):
            return
        self.status = WINNER_STATUS[self.current_player.opponent]
        logger.info(f"Game over: {self.status}")

    def _can_capture(self, player: Player) -> bool:
        return any(
            candidate_captures(piece, self.board) for piece in self.board.pieces_of(player)
        )


def _has_capture(moves: list[Move]) -> bool:
    return any(move.is_capture for move in moves)
