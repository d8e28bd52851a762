"""Unit tests for /src/checkers/game.py"""

import random

import pytest

from src.checkers.game import Game, TurnPhase
from src.checkers.moves import Move
from src.checkers.square import Square
from src.core.config import EngineConfig
from src.core.exceptions import (
    ForcedContinuationError,
    GameStateError,
    IllegalMoveError,
    InvalidSelectionError,
    InvariantViolationError,
    StaleStateError,
)
from src.core.models import GameModel, PieceModel
from src.core.shared_types import Player, Status

STANDARD_POSITION = "1b1b1b1b/b1b1b1b1/1b1b1b1b/8/8/a1a1a1a1/1a1a1a1a/a1a1a1a1"


def notations(moves: list[Move]) -> list[str]:
    return sorted(move.to_notation() for move in moves)


@pytest.fixture
def standard_game() -> Game:
    return Game.new_game()


@pytest.fixture
def chain_game(make_game) -> Game:
    """
    King of Player A on c5 that can jump e7 -> g5 after taking d6 first.
    f8 stays out of reach (the jump would leave the board). Another A man waits on a1.
    """
    return make_game(
        [
            ("king", 2, 4, Player.A, True),
            ("v1", 3, 5, Player.B),
            ("v2", 5, 7, Player.B),
            ("v3", 5, 5, Player.B),
            ("man", 0, 0, Player.A),
        ]
    )


# -- CREATION LOGIC --
def test_creating_new_game(standard_game: Game) -> None:
    """Creating a new game with canonical starting position"""
    assert standard_game.board.to_position() == STANDARD_POSITION
    assert standard_game.current_player == Player.A
    assert standard_game.status == Status.IN_PROGRESS
    assert standard_game.phase == TurnPhase.IDLE
    assert standard_game.version == 0
    assert standard_game.moves == []
    assert standard_game.winner is None


def test_new_game_from_position() -> None:
    """Board size is taken from the position string"""
    game = Game.new_game(starting_position="4/1B2/2A1/a3", starting_player=Player.B)
    assert (game.board.width, game.board.height) == (4, 4)
    assert (game.rules.width, game.rules.height) == (4, 4)
    assert game.current_player == Player.B
    assert game.status == Status.IN_PROGRESS


def test_new_game_where_starting_player_cannot_move() -> None:
    game = Game.new_game(starting_position="4/4/4/a3", starting_player=Player.B)
    assert game.status == Status.PLAYER_A_WON
    assert game.winner == Player.A


def test_new_game_on_larger_board() -> None:
    game = Game.new_game(EngineConfig(width=10, height=10, rows_per_player=4))
    assert len(game.board.pieces_of(Player.A)) == 20
    assert len(game.board.pieces_of(Player.B)) == 20


# -- SELECTION --
def test_select_own_piece(standard_game: Game) -> None:
    moves = standard_game.select("a9")
    assert notations(moves) == ["a3-b4"]
    assert standard_game.selected_piece_id == "a9"
    assert standard_game.phase == TurnPhase.SELECTED

    standard_game.deselect()
    assert standard_game.selected_piece_id is None
    assert standard_game.phase == TurnPhase.IDLE


def test_switch_selection(standard_game: Game) -> None:
    standard_game.select("a9")
    moves = standard_game.select("a10")
    assert notations(moves) == ["c3-b4", "c3-d4"]
    assert standard_game.selected_piece_id == "a10"


def test_select_opponent_piece(standard_game: Game) -> None:
    """Selecting a piece of the player that is not to move is rejected and changes nothing"""
    before = standard_game.to_model()
    with pytest.raises(InvalidSelectionError):
        standard_game.select("b1")
    assert standard_game.to_model() == before


def test_select_empty_square(standard_game: Game) -> None:
    with pytest.raises(InvalidSelectionError):
        standard_game.select_at(Square(3, 3))


def test_select_at_square(standard_game: Game) -> None:
    moves = standard_game.select_at(Square(0, 2))
    assert notations(moves) == ["a3-b4"]
    assert standard_game.selected_piece_id == "a9"


def test_select_blocked_piece(standard_game: Game) -> None:
    """a1 is boxed in by its own pieces"""
    with pytest.raises(InvalidSelectionError):
        standard_game.select("a1")
    assert standard_game.selected_piece_id is None


def test_select_unknown_piece(standard_game: Game) -> None:
    with pytest.raises(InvalidSelectionError):
        standard_game.select("z99")


# -- LEGAL MOVES --
def test_legal_moves_only_for_player_to_move(standard_game: Game) -> None:
    assert standard_game.legal_moves("b1") == []
    assert notations(standard_game.legal_moves("a12")) == ["g3-f4", "g3-h4"]


def test_man_without_captures_steps_forward_only(make_game) -> None:
    game = make_game([("m", 3, 3, Player.B), ("a", 0, 0, Player.A)], current_player=Player.B)
    assert notations(game.legal_moves("m")) == ["d4-c3", "d4-e3"]


def test_capture_is_mandatory_per_piece(make_game) -> None:
    game = make_game([("m", 3, 3, Player.A), ("v", 4, 4, Player.B)])
    assert notations(game.legal_moves("m")) == ["d4xf6"]


def test_has_any_legal_move(make_game) -> None:
    """The B man on b2 is stuck: both diagonals are blocked and jumps would leave the board"""
    game = make_game(
        [("bm", 1, 1, Player.B), ("a1", 0, 0, Player.A), ("a2", 2, 0, Player.A)]
    )
    assert not game.has_any_legal_move(Player.B)
    assert game.has_any_legal_move(Player.A)


# -- COMMITTING MOVES --
def test_simple_move(standard_game: Game) -> None:
    result = standard_game.move("a9", Square(1, 3))
    assert result.move == Move(Square(0, 2), Square(1, 3))
    assert result.captured_piece_id is None
    assert not result.promoted
    assert not result.continuation_required
    assert result.next_player == Player.B

    assert standard_game.current_player == Player.B
    assert standard_game.phase == TurnPhase.IDLE
    assert standard_game.version == 1
    assert standard_game.history == [STANDARD_POSITION]
    assert [move.to_notation() for move in standard_game.moves] == ["a3-b4"]
    assert standard_game.board.piece_at(Square(1, 3)).id == "a9"
    assert standard_game.board.piece_at(Square(0, 2)) is None


def test_illegal_destination(standard_game: Game) -> None:
    """Rejected moves leave the game untouched"""
    before = standard_game.to_model()
    with pytest.raises(IllegalMoveError):
        standard_game.commit(Move(Square(0, 2), Square(0, 3)))
    with pytest.raises(IllegalMoveError):
        standard_game.commit(Move(Square(3, 3), Square(4, 4)))
    assert standard_game.to_model() == before


def test_moving_opponent_piece(standard_game: Game) -> None:
    before = standard_game.to_model()
    with pytest.raises(InvalidSelectionError):
        standard_game.commit(Move(Square(1, 5), Square(0, 4)))
    assert standard_game.to_model() == before


def test_stale_commit(standard_game: Game) -> None:
    """A commit prepared for an older version of the game is a bug on the caller's side"""
    standard_game.move("a9", Square(1, 3), expected_version=0)
    before = standard_game.to_model()
    with pytest.raises(StaleStateError) as exc_info:
        standard_game.move("b1", Square(0, 4), expected_version=0)
    assert isinstance(exc_info.value, InvariantViolationError)
    assert standard_game.to_model() == before


def test_capture_without_continuation(make_game) -> None:
    """
    King on c5, opponent pieces on d6 and f8: after taking d6, f8 cannot be taken (g9 is off the board).
    """
    game = make_game(
        [
            ("king", 2, 4, Player.A, True),
            ("v1", 3, 5, Player.B),
            ("v2", 5, 7, Player.B),
        ]
    )
    assert notations(game.legal_moves("king")) == ["c5xe7"]

    result = game.commit(Move(Square(2, 4), Square(4, 6)))
    assert result.captured_piece_id == "v1"
    assert not result.continuation_required
    assert result.next_player == Player.B
    assert game.board.piece_at(Square(3, 5)) is None
    assert game.board.get_piece("v1") is None
    assert game.forced_piece_id is None


def test_capture_with_continuation(chain_game: Game) -> None:
    """The king must continue from e7 over f6, the turn does not pass"""
    result = chain_game.commit(Move(Square(2, 4), Square(4, 6)))
    assert result.captured_piece_id == "v1"
    assert result.continuation_required
    assert result.next_player == Player.A
    assert chain_game.current_player == Player.A
    assert chain_game.phase == TurnPhase.FORCED_CONTINUATION
    assert chain_game.forced_piece_id == "king"

    # only captures, all from the new square
    moves = chain_game.legal_moves("king")
    assert notations(moves) == ["e7xg5"]
    assert all(move.from_square == Square(4, 6) for move in moves)
    assert chain_game.legal_moves("man") == []


def test_forced_continuation_cannot_be_escaped(chain_game: Game) -> None:
    """Selecting another piece, deselecting or moving another piece are all rejected while the chain is open"""
    chain_game.commit(Move(Square(2, 4), Square(4, 6)))
    before = chain_game.to_model()

    with pytest.raises(ForcedContinuationError):
        chain_game.select("man")
    with pytest.raises(ForcedContinuationError):
        chain_game.deselect()
    with pytest.raises(ForcedContinuationError):
        chain_game.commit(Move(Square(0, 0), Square(1, 1)))
    with pytest.raises(IllegalMoveError):
        chain_game.commit(Move(Square(4, 6), Square(3, 7)))
    assert chain_game.to_model() == before

    # re-selecting the capturing piece is fine
    assert notations(chain_game.select("king")) == ["e7xg5"]


def test_finishing_the_chain(chain_game: Game) -> None:
    chain_game.commit(Move(Square(2, 4), Square(4, 6)))
    result = chain_game.move("king", Square(6, 4))
    assert result.captured_piece_id == "v3"
    assert not result.continuation_required
    assert result.next_player == Player.B
    assert chain_game.phase == TurnPhase.IDLE
    assert [move.to_notation() for move in chain_game.moves] == ["c5xe7", "e7xg5"]
    assert chain_game.version == 2


def test_free_choice_along_the_chain(make_game) -> None:
    """No longest-chain rule: at every hop, each available jump is legal"""
    game = make_game(
        [
            ("m", 0, 0, Player.A),
            ("v1", 1, 1, Player.B),
            ("v2", 1, 3, Player.B),
            ("v3", 3, 3, Player.B),
        ]
    )
    game.move("m", Square(2, 2))
    assert notations(game.legal_moves("m")) == ["c3xa5", "c3xe5"]
    assert sorted(
        [move.to_notation() for move in chain] for chain in game.capture_chains("m")
    ) == [["c3xa5"], ["c3xe5"]]

    result = game.move("m", Square(0, 4))
    assert result.captured_piece_id == "v2"
    assert result.next_player == Player.B


def test_capture_chains_of_piece_that_cannot_capture(standard_game: Game) -> None:
    assert standard_game.capture_chains("a9") == []


# -- PROMOTION --
def test_promotion(make_game) -> None:
    """Reaching the far row crowns the man, and it stays a king"""
    game = make_game([("m", 2, 6, Player.A), ("b", 7, 1, Player.B)])
    result = game.move("m", Square(3, 7))
    assert result.promoted
    assert game.board.get_piece("m").is_king

    # Player B promotes on row 0
    result = game.move("b", Square(6, 0))
    assert result.promoted
    assert game.board.get_piece("b").is_king

    # moving away from the back row does not undo it
    result = game.move("m", Square(2, 6))
    assert not result.promoted
    assert game.board.get_piece("m").is_king


def test_promotion_mid_chain(make_game) -> None:
    """Crowned by a capture, the new king immediately continues with a backward jump"""
    game = make_game(
        [
            ("m", 1, 5, Player.A),
            ("v1", 2, 6, Player.B),
            ("v2", 4, 6, Player.B),
            ("b", 7, 1, Player.B),
        ]
    )
    result = game.move("m", Square(3, 7))
    assert result.promoted
    assert result.continuation_required
    assert notations(game.legal_moves("m")) == ["d8xf6"]

    result = game.move("m", Square(5, 5))
    assert not result.promoted
    assert not result.continuation_required
    assert result.captured_piece_id == "v2"


# -- RULE VARIANT --
def test_per_piece_capture_rule_by_default(make_game) -> None:
    """Another piece may move although p1 could capture"""
    game = make_game([("p1", 3, 3, Player.A), ("v", 4, 4, Player.B), ("p2", 0, 0, Player.A)])
    assert notations(game.select("p2")) == ["a1-b2"]


def test_board_wide_capture_rule(make_game) -> None:
    game = make_game(
        [("p1", 3, 3, Player.A), ("v", 4, 4, Player.B), ("p2", 0, 0, Player.A)],
        rules=EngineConfig(board_wide_capture=True),
    )
    assert game.legal_moves("p2") == []
    with pytest.raises(InvalidSelectionError):
        game.select("p2")
    assert notations(game.select("p1")) == ["d4xf6"]


# -- END OF GAME --
def test_capturing_last_piece_wins(make_game) -> None:
    game = make_game([("a", 2, 2, Player.A), ("b", 3, 3, Player.B)])
    result = game.move("a", Square(4, 4))
    assert result.captured_piece_id == "b"
    assert game.status == Status.PLAYER_A_WON
    assert game.winner == Player.A

    assert game.legal_moves("a") == []
    with pytest.raises(GameStateError):
        game.select("a")
    with pytest.raises(GameStateError):
        game.commit(Move(Square(4, 4), Square(5, 5)))


def test_blocked_player_loses(make_game) -> None:
    """B still owns a piece, but it cannot move once the A king closes the last diagonal"""
    game = make_game(
        [
            ("bm", 1, 1, Player.B),
            ("a1", 0, 0, Player.A),
            ("k", 3, 1, Player.A, True),
        ]
    )
    game.move("k", Square(2, 0))
    assert game.board.get_piece("bm") is not None
    assert not game.has_any_legal_move(Player.B)
    assert game.status == Status.PLAYER_A_WON


# -- TRANSPORT MODEL --
def test_model_roundtrip_keeps_forced_continuation(chain_game: Game) -> None:
    chain_game.commit(Move(Square(2, 4), Square(4, 6)))
    model = chain_game.to_model()
    restored = Game.from_model(model)
    assert restored.to_model() == model
    assert restored.phase == TurnPhase.FORCED_CONTINUATION
    assert notations(restored.legal_moves("king")) == ["e7xg5"]


def test_model_contents(standard_game: Game) -> None:
    standard_game.move("a9", Square(1, 3))
    model = standard_game.to_model()
    assert model.current_player == "b"
    assert model.moves == ["a3-b4"]
    assert model.status == "in progress"
    assert model.version == 1
    assert model.history == [STANDARD_POSITION]
    assert model.rules == {
        "width": 8,
        "height": 8,
        "rows_per_player": 3,
        "board_wide_capture": False,
    }
    assert PieceModel(id="a9", x=1, y=3, owner="a", is_king=False) in model.pieces


def _model(pieces: list[PieceModel], **overrides) -> GameModel:
    data = dict(
        pieces=pieces,
        current_player="a",
        moves=[],
        status="in progress",
        rules=EngineConfig().model_dump(),
    )
    data.update(overrides)
    return GameModel(**data)


def test_model_with_overlapping_pieces() -> None:
    model = _model([PieceModel("a1", 2, 2, "a"), PieceModel("b1", 2, 2, "b")])
    with pytest.raises(InvariantViolationError):
        _ = Game.from_model(model)


def test_model_with_inconsistent_forced_piece() -> None:
    """A forced continuation only exists right after a capture by a piece that can capture again"""
    model = _model([PieceModel("a1", 2, 2, "a"), PieceModel("b1", 5, 5, "b")], forced_piece="a1")
    with pytest.raises(InvariantViolationError):
        _ = Game.from_model(model)


def test_model_with_other_piece_selected_during_chain(chain_game: Game) -> None:
    """While a chain is open only the capturing piece can be selected"""
    chain_game.commit(Move(Square(2, 4), Square(4, 6)))
    model = chain_game.to_model()
    assert model.forced_piece == "king"

    model.selected_piece = "man"
    with pytest.raises(InvariantViolationError):
        _ = Game.from_model(model)

    model.selected_piece = None
    assert Game.from_model(model).forced_piece_id == "king"


def test_model_with_opponent_selected() -> None:
    model = _model([PieceModel("a1", 2, 2, "a"), PieceModel("b1", 5, 5, "b")], selected_piece="b1")
    with pytest.raises(InvariantViolationError):
        _ = Game.from_model(model)


@pytest.mark.parametrize(
    "overrides",
    [
        {"status": "not_existing"},
        {"current_player": "c"},
        {"moves": ["not a move"]},
    ],
)
def test_invalid_model_values(overrides: dict) -> None:
    model = _model([PieceModel("a1", 2, 2, "a"), PieceModel("b1", 5, 5, "b")], **overrides)
    with pytest.raises(GameStateError):
        _ = Game.from_model(model)


def test_invalid_piece_owner() -> None:
    model = _model([PieceModel("a1", 2, 2, "c")])
    with pytest.raises(GameStateError):
        _ = Game.from_model(model)


# -- RANDOM PLAY --
MAX_PLIES = 200


@pytest.mark.parametrize("size, rows_per_player", [(6, 2), (8, 3), (10, 4)])
@pytest.mark.parametrize("board_wide_capture", [False, True])
@pytest.mark.parametrize("seed", range(5))
def test_random_games_keep_one_piece_per_square(
    size: int, rows_per_player: int, board_wide_capture: bool, seed: int
) -> None:
    """
    Play random legal moves from the standard setup.
    After every commit no two pieces share a square, and the game survives a trip through its transport model.
    """
    rng = random.Random(seed)
    game = Game.new_game(
        EngineConfig(
            width=size,
            height=size,
            rows_per_player=rows_per_player,
            board_wide_capture=board_wide_capture,
        )
    )

    for _ in range(MAX_PLIES):
        if game.status != Status.IN_PROGRESS:
            break
        options = [
            move
            for piece in game.board.pieces_of(game.current_player)
            for move in game.legal_moves(piece.id)
        ]
        assert options

        if game.forced_piece_id is not None:
            forced_piece = game.board.get_piece(game.forced_piece_id)
            assert all(move.is_capture for move in options)
            assert all(move.from_square == forced_piece.square for move in options)

        game.commit(rng.choice(options))

        squares = [piece.square for piece in game.board.pieces]
        assert len(set(squares)) == len(squares)
        assert len(game.board.position) == len(game.board.pieces)

        model = game.to_model()
        assert Game.from_model(model).to_model() == model
