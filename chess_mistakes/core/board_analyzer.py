# chess_mistakes/core/board_analyzer.py
"""
Provides pure, stateless functions for positional feature extraction.

For every move of the analysed player the walker takes a `PositionalSnapshot`
before and after the move. The snapshot bundles four small feature groups:

1.  **King safety:** castled square, pawn shield, open king file and heavy
    pieces eyeing the king down its file.
2.  **Pawn structure:** islands, doubled, isolated and passed pawns.
3.  **Space:** presence on the extended centre and a weighted count of units
    in the opponent's half (pawns count double).
4.  **Development:** knights/bishops still at home, a composite development
    score and whether the queen has left its home square.

The snapshots feed the classifier's opening rules and the summary-theme
inference.
"""

from typing import Dict, Final, FrozenSet, List, Tuple

import chess

from chess_mistakes.types import (DevelopmentFeatures, KingSafety, PawnStructure,
                                  PositionalSnapshot, SpaceFeatures)

CASTLED_KING_SQUARES: Final[Dict[chess.Color, Tuple[chess.Square, chess.Square]]] = {
    chess.WHITE: (chess.G1, chess.C1),
    chess.BLACK: (chess.G8, chess.C8),
}

SHIELD_SQUARES: Final[Dict[Tuple[chess.Color, chess.Square], Tuple[chess.Square, ...]]] = {
    (chess.WHITE, chess.G1): (chess.F2, chess.G2, chess.H2),
    (chess.WHITE, chess.C1): (chess.A2, chess.B2, chess.C2),
    (chess.BLACK, chess.G8): (chess.F7, chess.G7, chess.H7),
    (chess.BLACK, chess.C8): (chess.A7, chess.B7, chess.C7),
}

MINOR_HOME_SQUARES: Final[Dict[chess.Color, FrozenSet[chess.Square]]] = {
    chess.WHITE: frozenset({chess.B1, chess.G1, chess.C1, chess.F1}),
    chess.BLACK: frozenset({chess.B8, chess.G8, chess.C8, chess.F8}),
}

QUEEN_HOME_SQUARES: Final[Dict[chess.Color, chess.Square]] = {
    chess.WHITE: chess.D1,
    chess.BLACK: chess.D8,
}

EXTENDED_CENTER: Final[Tuple[chess.Square, ...]] = (
    chess.C4, chess.D4, chess.E4, chess.F4,
    chess.C5, chess.D5, chess.E5, chess.F5,
)

CENTRAL_FILE_INDICES: Final = range(2, 6)  # c..f
SPACE_PIECE_TYPES: Final = (chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN)


def _in_enemy_half(color: chess.Color, square: chess.Square) -> bool:
    rank = chess.square_rank(square)
    return rank >= 4 if color == chess.WHITE else rank <= 3


def is_castled(board: chess.BaseBoard, color: chess.Color) -> bool:
    """A king standing on g1/c1 (g8/c8 for Black) counts as castled."""
    return board.king(color) in CASTLED_KING_SQUARES[color]


def undeveloped_minors(board: chess.BaseBoard, color: chess.Color) -> int:
    """Counts knights and bishops of `color` still on their home squares."""
    count = 0
    for square in MINOR_HOME_SQUARES[color]:
        piece = board.piece_at(square)
        if piece and piece.color == color and piece.piece_type in (chess.KNIGHT, chess.BISHOP):
            count += 1
    return count


def king_safety(board: chess.BaseBoard, color: chess.Color) -> KingSafety:
    king = board.king(color)
    if king is None:
        return KingSafety(castled=False, shield_pawns=0, on_open_file=False, xray_heavy=False)

    castled = king in CASTLED_KING_SQUARES[color]
    if castled:
        shield = SHIELD_SQUARES[(color, king)]
    else:
        forward_rank = chess.square_rank(king) + (1 if color == chess.WHITE else -1)
        file = chess.square_file(king)
        shield = tuple(
            chess.square(f, forward_rank)
            for f in (file - 1, file, file + 1)
            if 0 <= f <= 7 and 0 <= forward_rank <= 7
        )
    own_pawns = board.pieces(chess.PAWN, color)
    shield_pawns = sum(1 for square in shield if square in own_pawns)

    king_file = chess.square_file(king)
    all_pawns = board.pieces(chess.PAWN, chess.WHITE) | board.pieces(chess.PAWN, chess.BLACK)
    on_open_file = not any(chess.square_file(square) == king_file for square in all_pawns)

    return KingSafety(
        castled=castled,
        shield_pawns=shield_pawns,
        on_open_file=on_open_file,
        xray_heavy=_heavy_piece_on_king_file(board, color, king),
    )


def _heavy_piece_on_king_file(board: chess.BaseBoard, color: chess.Color, king: chess.Square) -> bool:
    """True if the first piece up or down the king's file is an enemy rook or queen."""
    file, rank = chess.square_file(king), chess.square_rank(king)
    for step in (1, -1):
        r = rank + step
        while 0 <= r <= 7:
            piece = board.piece_at(chess.square(file, r))
            if piece:
                if piece.color != color and piece.piece_type in (chess.ROOK, chess.QUEEN):
                    return True
                break
            r += step
    return False


def pawn_structure(board: chess.BaseBoard, color: chess.Color) -> PawnStructure:
    own = board.pieces(chess.PAWN, color)
    enemy = board.pieces(chess.PAWN, not color)
    counts: List[int] = [0] * 8
    for square in own:
        counts[chess.square_file(square)] += 1

    islands = 0
    in_island = False
    for count in counts:
        if count and not in_island:
            islands += 1
        in_island = bool(count)

    doubled = sum(max(0, count - 1) for count in counts)

    isolated = 0
    for file, count in enumerate(counts):
        if not count:
            continue
        left = counts[file - 1] if file > 0 else 0
        right = counts[file + 1] if file < 7 else 0
        if not left and not right:
            isolated += count

    passed = 0
    for square in own:
        file, rank = chess.square_file(square), chess.square_rank(square)
        blocked = any(
            abs(chess.square_file(e) - file) <= 1
            and (chess.square_rank(e) > rank if color == chess.WHITE else chess.square_rank(e) < rank)
            for e in enemy
        )
        if not blocked:
            passed += 1

    return PawnStructure(islands=islands, doubled=doubled, isolated=isolated, passed=passed)


def space_features(board: chess.BaseBoard, color: chess.Color) -> SpaceFeatures:
    center_presence = 0
    for square in EXTENDED_CENTER:
        piece = board.piece_at(square)
        if piece and piece.color == color:
            center_presence += 1

    advanced_pawns = sum(1 for sq in board.pieces(chess.PAWN, color) if _in_enemy_half(color, sq))
    advanced_pieces = sum(
        1
        for piece_type in SPACE_PIECE_TYPES
        for sq in board.pieces(piece_type, color)
        if _in_enemy_half(color, sq)
    )
    return SpaceFeatures(center_presence=center_presence, space_score=2 * advanced_pawns + advanced_pieces)


def development_features(board: chess.BaseBoard, color: chess.Color) -> DevelopmentFeatures:
    undeveloped = undeveloped_minors(board, color)
    central_advanced = 0
    for square in board.pieces(chess.PAWN, color):
        if chess.square_file(square) not in CENTRAL_FILE_INDICES:
            continue
        rank = chess.square_rank(square)
        if (rank >= 2) if color == chess.WHITE else (rank <= 5):
            central_advanced += 1

    queens = board.pieces(chess.QUEEN, color)
    queen_moved = bool(queens) and QUEEN_HOME_SQUARES[color] not in queens
    score = 2 * (4 - undeveloped) + 2 * int(is_castled(board, color)) + central_advanced
    return DevelopmentFeatures(undeveloped_minors=undeveloped, development_score=score, queen_moved=queen_moved)


def positional_snapshot(board: chess.BaseBoard, color: chess.Color) -> PositionalSnapshot:
    """Extracts all four feature groups for `color`."""
    return PositionalSnapshot(
        king=king_safety(board, color),
        pawns=pawn_structure(board, color),
        space=space_features(board, color),
        development=development_features(board, color),
    )
