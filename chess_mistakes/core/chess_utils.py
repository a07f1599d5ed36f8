# chess_mistakes/core/chess_utils.py
"""
Provides a collection of pure, stateless functions for chess-related calculations.

This module acts as the "math library" for the chess domain: SAN text tests,
material counting and move labels. Its functions are deterministic and form
the foundational building blocks for the walker, the classifier and the
theme detectors.
"""

import re
from typing import Dict, Final

import chess

# A constant dictionary mapping piece types to their standard pawn-unit values.
PIECE_VALUES: Final[Dict[chess.PieceType, int]] = {
    chess.PAWN: 1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK: 5,
    chess.QUEEN: 9,
    chess.KING: 0,
}

# Used where a king must outrank every other piece (e.g. skewer ordering).
KING_ORDER_VALUE: Final[int] = 100

CASTLING_SANS: Final = frozenset({"O-O", "O-O-O", "0-0", "0-0-0"})
FLANK_FILES: Final = frozenset("abgh")
CENTRAL_FILES: Final = frozenset("cdef")

_TRAILING_GLYPHS: Final = re.compile(r"[!?]+$")
_PAWN_SAN: Final = re.compile(r"^[a-h]")


def sanitize_san(san: str) -> str:
    """Strips trailing annotation glyphs, keeping check and mate markers."""
    return _TRAILING_GLYPHS.sub("", san.strip())


def is_castling_san(san: str) -> bool:
    return sanitize_san(san).rstrip("+#") in CASTLING_SANS


def is_capture_san(san: str) -> bool:
    return "x" in san


def is_check_san(san: str) -> bool:
    return "+" in san or "#" in san


def is_pawn_san(san: str) -> bool:
    return bool(_PAWN_SAN.match(san))


def is_minor_piece_san(san: str) -> bool:
    return san.startswith(("N", "B"))


def looks_like_opening_principle_violation(san: str) -> bool:
    """
    A non-developing heavy-piece or king move, or a flank pawn push.

    Castling and minor-piece moves never qualify.
    """
    san = sanitize_san(san)
    if is_castling_san(san) or is_minor_piece_san(san):
        return False
    if san.startswith(("Q", "R", "K")):
        return True
    return is_pawn_san(san) and san[0] in FLANK_FILES


def is_clearly_non_developing(san: str) -> bool:
    """A queen move or a pawn move off the central files."""
    san = sanitize_san(san)
    if is_castling_san(san) or is_minor_piece_san(san):
        return False
    if san.startswith("Q"):
        return True
    return is_pawn_san(san) and san[0] not in CENTRAL_FILES


def get_material_value(board: chess.BaseBoard, color: chess.Color) -> int:
    """
    Calculates the total material value for a given color on the board.
    """
    return sum(
        len(board.pieces(piece_type, color)) * value
        for piece_type, value in PIECE_VALUES.items()
    )


def get_material_diff(board: chess.BaseBoard, perspective: chess.Color) -> int:
    """
    Calculates the material difference from a specific player's perspective.
    """
    return get_material_value(board, perspective) - get_material_value(board, not perspective)


def move_label(move_number: int, mover: chess.Color, san: str) -> str:
    """Formats a move as `12. Nf3` for White or `12... Nc6` for Black."""
    dots = "." if mover == chess.WHITE else "..."
    return f"{move_number}{dots} {san}"


def color_name(color: chess.Color) -> str:
    return chess.COLOR_NAMES[color]


def parse_color_name(name: str) -> chess.Color:
    """Converts 'white'/'black' (any case) into a `chess.Color`."""
    normalized = name.strip().lower()
    if normalized not in chess.COLOR_NAMES:
        raise ValueError(f"Unknown color: {name!r}")
    return chess.COLOR_NAMES.index(normalized) == 1
