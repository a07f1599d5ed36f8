# chess_mistakes/core/position.py
"""
Position construction and pure continuation replay.

`chess.Board` is the single position interface of the analyzer. Every
function here works on a private copy, so replaying a hypothetical line can
never disturb the main-line walk that owns the live board.
"""

from typing import Dict, List, Optional, Sequence

import chess
import structlog

from chess_mistakes.core.chess_utils import get_material_diff, sanitize_san
from chess_mistakes.exceptions import SetupError
from chess_mistakes.types import FEN, CaptureInfo, MoveEvent, ReplayResult

logger = structlog.get_logger(__name__)


def starting_position(headers: Dict[str, str]) -> chess.Board:
    """
    Builds the starting position described by a game's headers.

    Raises:
        SetupError: If the `FEN` header is malformed or describes an illegal
            starting array.
    """
    fen = headers.get("FEN")
    if not fen:
        return chess.Board()

    chess960 = "960" in headers.get("Variant", "")
    try:
        board = chess.Board(fen, chess960=chess960)
    except ValueError as e:
        raise SetupError(f"Invalid FEN header: {e}", fen=fen) from e

    if not board.is_valid():
        raise SetupError(f"Illegal starting position: {board.status()!r}", fen=fen)
    return board


def parse_san_safely(board: chess.Board, san: str) -> Optional[chess.Move]:
    """
    Parses a SAN token against a position, returning None instead of raising.

    Null moves (`--`) are treated as unparseable.
    """
    try:
        move = board.parse_san(sanitize_san(san))
    except ValueError:
        return None
    return move if move else None


def capture_info(board: chess.Board, move: chess.Move) -> Optional[CaptureInfo]:
    """Describes the piece a move captures, including en-passant captures."""
    if board.is_en_passant(move):
        square = chess.square(chess.square_file(move.to_square), chess.square_rank(move.from_square))
        return CaptureInfo(role=chess.PAWN, color=not board.turn, square=square)
    if not board.is_capture(move):
        return None
    captured = board.piece_at(move.to_square)
    if captured is None:
        return None
    return CaptureInfo(role=captured.piece_type, color=captured.color, square=move.to_square)


def apply_move_with_event(board: chess.Board, move: chess.Move, perspective: chess.Color) -> MoveEvent:
    """
    Plays `move` on `board` (in place) and describes it as a `MoveEvent`.

    Material differentials are measured from `perspective`, normally the
    punishing side of a continuation.
    """
    fen_before = board.fen()
    mover = board.turn
    piece = board.piece_at(move.from_square)
    san = board.san(move)
    captured = capture_info(board, move)
    is_en_passant = board.is_en_passant(move)
    is_castling = board.is_castling(move)
    diff_before = get_material_diff(board, perspective)

    board.push(move)

    return MoveEvent(
        san=san,
        mover=mover,
        from_square=move.from_square,
        to_square=move.to_square,
        moved_role=piece.piece_type if piece else chess.PAWN,
        promotion=move.promotion,
        capture=captured,
        is_check=board.is_check(),
        is_mate=board.is_checkmate(),
        is_en_passant=is_en_passant,
        is_castling=is_castling,
        fen_before=fen_before,
        fen_after=board.fen(),
        material_diff_before=diff_before,
        material_diff_after=get_material_diff(board, perspective),
    )


def play_moves(fen: FEN, sans: Sequence[str]) -> chess.Board:
    """
    Clones the position and plays as many SAN moves as parse successfully.

    Replay stops at the first move that does not parse.
    """
    board = chess.Board(fen)
    for san in sans:
        move = parse_san_safely(board, san)
        if move is None:
            break
        board.push(move)
    return board


def play_moves_with_events(
    fen: FEN,
    sans: Sequence[str],
    perspective: chess.Color,
    max_plies: Optional[int] = None,
) -> ReplayResult:
    """
    Replays a SAN sequence from a position, collecting one `MoveEvent` per ply.

    Args:
        fen: The starting position.
        sans: The moves to play, in order.
        perspective: The side whose material differential the events record.
        max_plies: Optional cap on the number of plies replayed.

    Returns:
        A `ReplayResult` with the number of moves actually played, the final
        position and the events.
    """
    board = chess.Board(fen)
    events: List[MoveEvent] = []
    limit = len(sans) if max_plies is None else min(len(sans), max_plies)
    for san in sans[:limit]:
        move = parse_san_safely(board, san)
        if move is None:
            logger.debug("Continuation replay stopped at unparseable move.", san=san, fen=board.fen())
            break
        events.append(apply_move_with_event(board, move, perspective))
    return ReplayResult(moves_played=len(events), final_fen=board.fen(), events=tuple(events))
