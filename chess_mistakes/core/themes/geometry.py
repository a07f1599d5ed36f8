# chess_mistakes/core/themes/geometry.py
"""
Line geometry shared by the pin, skewer, x-ray, discovered-attack and
interference detectors.

All helpers work on a `chess.BaseBoard` (piece placement only) and scan the
eight queen directions square by square, so they never depend on whose turn
it is.
"""

from typing import Final, Iterator, List, Optional, Tuple

import chess

from chess_mistakes.core.chess_utils import KING_ORDER_VALUE, PIECE_VALUES
from chess_mistakes.types import FEN

Direction = Tuple[int, int]

DIRECTIONS: Final[Tuple[Direction, ...]] = (
    (1, 0), (-1, 0), (0, 1), (0, -1), (1, 1), (-1, 1), (1, -1), (-1, -1),
)
LINE_PIECES: Final = (chess.ROOK, chess.BISHOP, chess.QUEEN)


def board_from_fen(fen: FEN) -> chess.BaseBoard:
    """Piece placement of a FEN."""
    return chess.BaseBoard(fen.split(" ")[0])


def order_value(piece_type: chess.PieceType) -> int:
    """Piece value where the king outranks everything."""
    return KING_ORDER_VALUE if piece_type == chess.KING else PIECE_VALUES[piece_type]


def ray(origin: chess.Square, direction: Direction) -> Iterator[chess.Square]:
    df, dr = direction
    file, rank = chess.square_file(origin) + df, chess.square_rank(origin) + dr
    while 0 <= file <= 7 and 0 <= rank <= 7:
        yield chess.square(file, rank)
        file, rank = file + df, rank + dr


def line_direction(a: chess.Square, b: chess.Square) -> Optional[Direction]:
    """The unit step from `a` towards `b` if they share a rank, file or diagonal."""
    df = chess.square_file(b) - chess.square_file(a)
    dr = chess.square_rank(b) - chess.square_rank(a)
    if df == 0 and dr == 0:
        return None
    if df == 0 or dr == 0 or abs(df) == abs(dr):
        return ((df > 0) - (df < 0), (dr > 0) - (dr < 0))
    return None


def moves_along(piece_type: chess.PieceType, direction: Direction) -> bool:
    """Whether a piece type slides along `direction`."""
    df, dr = direction
    if df == 0 or dr == 0:
        return piece_type in (chess.ROOK, chess.QUEEN)
    return piece_type in (chess.BISHOP, chess.QUEEN)


def _squares_of(board: chess.BaseBoard, color: chess.Color, piece_types) -> List[chess.Square]:
    squares: List[chess.Square] = []
    for piece_type in piece_types:
        squares.extend(board.pieces(piece_type, color))
    return sorted(squares)


def pieces_between(board: chess.BaseBoard, a: chess.Square, b: chess.Square, direction: Direction) -> int:
    count = 0
    for square in ray(a, direction):
        if square == b:
            break
        if board.piece_at(square):
            count += 1
    return count


def has_pin(board: chess.BaseBoard, victim: chess.Color, attacker: chess.Color) -> bool:
    """A victim piece stands between its own king and an attacking slider."""
    king = board.king(victim)
    if king is None:
        return False
    for direction in DIRECTIONS:
        blocker_found = False
        for square in ray(king, direction):
            piece = board.piece_at(square)
            if piece is None:
                continue
            if not blocker_found:
                if piece.color != victim or piece.piece_type == chess.KING:
                    break
                blocker_found = True
                continue
            if piece.color == attacker and moves_along(piece.piece_type, direction):
                return True
            break
    return False


def has_skewer(board: chess.BaseBoard, victim: chess.Color, attacker: chess.Color) -> bool:
    """An attacking slider hits a victim piece with a less valuable victim piece behind it."""
    for origin in _squares_of(board, attacker, LINE_PIECES):
        slider = board.piece_at(origin)
        for direction in DIRECTIONS:
            if not moves_along(slider.piece_type, direction):
                continue
            front_value: Optional[int] = None
            for square in ray(origin, direction):
                piece = board.piece_at(square)
                if piece is None:
                    continue
                if front_value is None:
                    if piece.color != victim:
                        break
                    front_value = order_value(piece.piece_type)
                    continue
                if piece.color == victim and front_value > order_value(piece.piece_type):
                    return True
                break
    return False


def has_xray(board: chess.BaseBoard, victim: chess.Color, attacker: chess.Color) -> bool:
    """An attacking slider is aligned with the victim's king or queen through at least one piece."""
    targets = _squares_of(board, victim, (chess.KING, chess.QUEEN))
    for origin in _squares_of(board, attacker, LINE_PIECES):
        slider = board.piece_at(origin)
        for target in targets:
            direction = line_direction(origin, target)
            if direction is None or not moves_along(slider.piece_type, direction):
                continue
            if pieces_between(board, origin, target, direction) >= 1:
                return True
    return False


def has_line_attack(board: chess.BaseBoard, attacker: chess.Color, victim: chess.Color) -> bool:
    """An attacking slider has an unobstructed line to the victim's king or queen."""
    targets = _squares_of(board, victim, (chess.KING, chess.QUEEN))
    if not targets:
        return False
    for origin in _squares_of(board, attacker, LINE_PIECES):
        slider = board.piece_at(origin)
        for target in targets:
            direction = line_direction(origin, target)
            if direction is None or not moves_along(slider.piece_type, direction):
                continue
            if pieces_between(board, origin, target, direction) == 0:
                return True
    return False
