# chess_mistakes/core/themes/phases.py
"""Game-phase and endgame-type detectors."""

from typing import Final, List

import chess

from chess_mistakes.core.themes.geometry import board_from_fen
from chess_mistakes.types import Theme, ThemeContext

# Continuations starting at or before this full move are tagged as opening play.
OPENING_MAX_FULLMOVES: Final[int] = 12


def detect_phases(ctx: ThemeContext) -> List[Theme]:
    tags: List[Theme] = []
    if ctx.move_number <= OPENING_MAX_FULLMOVES:
        tags.append(Theme.OPENING)
    if ctx.is_endgame:
        tags.append(Theme.ENDGAME)
    elif ctx.move_number > OPENING_MAX_FULLMOVES:
        tags.append(Theme.MIDDLEGAME)
    return tags


def _count(board: chess.BaseBoard, piece_type: chess.PieceType) -> int:
    return len(board.pieces(piece_type, chess.WHITE)) + len(board.pieces(piece_type, chess.BLACK))


def detect_endgames(ctx: ThemeContext) -> List[Theme]:
    """Classifies the material left at the end of the continuation."""
    board = board_from_fen(ctx.final_fen)
    queens, rooks = _count(board, chess.QUEEN), _count(board, chess.ROOK)
    bishops, knights = _count(board, chess.BISHOP), _count(board, chess.KNIGHT)
    majors, minors = queens + rooks, bishops + knights

    if majors == 0 and minors == 0:
        return [Theme.PAWN_ENDGAME]

    tags: List[Theme] = []
    if minors == 0:
        if rooks and not queens:
            tags.append(Theme.ROOK_ENDGAME)
        elif queens and not rooks:
            tags.append(Theme.QUEEN_ENDGAME)
        elif queens and rooks:
            tags.append(Theme.QUEEN_ROOK_ENDGAME)
    if majors == 0:
        if bishops and not knights:
            tags.append(Theme.BISHOP_ENDGAME)
        elif knights and not bishops:
            tags.append(Theme.KNIGHT_ENDGAME)
    return tags
