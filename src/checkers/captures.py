"""
Capture chains
-----

After a jump, the same piece must keep jumping as long as it can.
The chain may change direction at every hop and nothing forces the longest chain: every immediately available jump is legal.
"""

from copy import deepcopy

from src.checkers.board import Board
from src.checkers.moves import Move, candidate_captures
from src.checkers.pieces import Piece
from src.checkers.promotion import promote_if_needed


def continuation_captures(piece: Piece, board: Board, last_move: Move) -> list[Move]:
    """
    Re-evaluate the piece on its new square.

    NOTE: call this AFTER the move was applied and after the promotion check, so a piece crowned mid-chain
    continues with king directions.
    """
    if not last_move.is_capture:
        return []
    return candidate_captures(piece, board)


def capture_chains(piece: Piece, board: Board) -> list[list[Move]]:
    """
    Enumerate every complete capture path the piece could take from where it stands.
    ----

    plan:
    1. Copy the board (the real one must never be touched)
    2. play out every available jump on the copy (incl. promotion)
    3. recurse until the piece has nothing left to take

    Returns an empty list if the piece cannot capture at all.
    """
    chains: list[list[Move]] = []
    for jump in candidate_captures(piece, board):
        chains.extend(_extend_chain(board, piece.id, jump, []))
    return chains


def _extend_chain(board: Board, piece_id: str, jump: Move, path: list[Move]) -> list[list[Move]]:
    simulated = deepcopy(board)
    moving_piece = simulated.get_piece(piece_id)
    # for the typechecker: the piece was found on the original board, so it is on the copy too
    assert moving_piece is not None

    captured = simulated.piece_at(jump.captured_square)  # type: ignore[arg-type]
    assert captured is not None
    simulated.remove(captured)
    simulated.move_piece(moving_piece, jump.to_square)
    promote_if_needed(moving_piece, simulated.height)

    new_path = path + [jump]
    next_jumps = continuation_captures(moving_piece, simulated, jump)
    if not next_jumps:
        return [new_path]

    chains: list[list[Move]] = []
    for next_jump in next_jumps:
        chains.extend(_extend_chain(simulated, piece_id, next_jump, new_path))
    return chains
