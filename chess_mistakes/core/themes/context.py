# chess_mistakes/core/themes/context.py
"""
Builds immutable `ThemeContext` values from replayed continuations, plus the
small event queries most detectors share.
"""

from typing import List, Optional, Sequence

import chess

from chess_mistakes.core.chess_utils import get_material_diff
from chess_mistakes.core.position import play_moves_with_events
from chess_mistakes.core.themes.geometry import board_from_fen
from chess_mistakes.types import FEN, MoveEvent, ThemeContext


def is_endgame_fen(fen: FEN) -> bool:
    """
    Reduced material: no heavy pieces, or few heavy pieces and at most two
    minors (none at all when queens remain).
    """
    board = board_from_fen(fen)
    queens = len(board.pieces(chess.QUEEN, chess.WHITE)) + len(board.pieces(chess.QUEEN, chess.BLACK))
    rooks = len(board.pieces(chess.ROOK, chess.WHITE)) + len(board.pieces(chess.ROOK, chess.BLACK))
    minors = sum(
        len(board.pieces(piece_type, color))
        for piece_type in (chess.KNIGHT, chess.BISHOP)
        for color in chess.COLORS
    )
    majors = queens + rooks
    if majors == 0:
        return True
    if queens == 0 and minors <= 2 and majors <= 4:
        return True
    return queens > 0 and minors == 0 and majors <= 4


def build_theme_context(
    start_fen: FEN,
    sans: Sequence[str],
    player_color: chess.Color,
    punisher_color: chess.Color,
    max_plies: int,
    mate_in: Optional[int] = None,
) -> ThemeContext:
    """
    Replays a continuation and packages everything detectors need.

    Args:
        start_fen: Position the continuation starts from.
        sans: The continuation's moves.
        player_color: The side being punished.
        punisher_color: The side executing the continuation.
        max_plies: Replay cap.
        mate_in: Optional mate distance announced by the annotations.
    """
    replay = play_moves_with_events(start_fen, sans, punisher_color, max_plies=max_plies)
    start_board = chess.Board(start_fen)
    final_board = chess.Board(replay.final_fen)
    return ThemeContext(
        start_fen=start_fen,
        final_fen=replay.final_fen,
        move_sequence=tuple(event.san for event in replay.events),
        move_events=replay.events,
        regression_events=tuple(reversed(replay.events)),
        player_color=player_color,
        punisher_color=punisher_color,
        move_number=start_board.fullmove_number,
        moves_played=replay.moves_played,
        mate_in=mate_in,
        start_material_diff=get_material_diff(start_board, punisher_color),
        final_material_diff=get_material_diff(final_board, punisher_color),
        is_mate=final_board.is_checkmate(),
        is_endgame=is_endgame_fen(replay.final_fen),
    )


def punisher_moves(ctx: ThemeContext) -> List[MoveEvent]:
    return [event for event in ctx.move_events if event.mover == ctx.punisher_color]


def punisher_captures(ctx: ThemeContext) -> List[MoveEvent]:
    """Punisher moves that capture one of the player's pieces."""
    return [
        event for event in punisher_moves(ctx)
        if event.capture is not None and event.capture.color == ctx.player_color
    ]


def is_immediate_punish_capture(ctx: ThemeContext) -> bool:
    """The punisher's very first move is its only capture."""
    moves = punisher_moves(ctx)
    captures = [event for event in moves if event.is_capture]
    return bool(moves) and len(captures) == 1 and captures[0] is moves[0]


def material_gain(ctx: ThemeContext) -> int:
    return ctx.final_material_diff - ctx.start_material_diff
