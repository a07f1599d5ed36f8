# chess_mistakes/core/themes/special_moves.py
"""Special-move detector: castling, promotion, under-promotion and en passant."""

import re
from typing import Final, List

from chess_mistakes.types import Theme, ThemeContext

_PROMOTION: Final = re.compile(r"=([QRBN])")
_EN_PASSANT_MARKER: Final = re.compile(r"e\.p\.|ep", re.IGNORECASE)


def detect_special_moves(ctx: ThemeContext) -> List[Theme]:
    """
    Scans the continuation's SAN for special-move markers.

    Replayed SAN never carries an en-passant suffix, so the structured
    event flag is consulted alongside the textual marker.
    """
    tags: List[Theme] = []

    def add(tag: Theme) -> None:
        if tag not in tags:
            tags.append(tag)

    for san in ctx.move_sequence:
        if "O-O" in san:
            add(Theme.CASTLING)
        promotion = _PROMOTION.search(san)
        if promotion:
            add(Theme.PROMOTION)
            if promotion.group(1) != "Q":
                add(Theme.UNDERPROMOTION)
        if _EN_PASSANT_MARKER.search(san):
            add(Theme.EN_PASSANT)

    if any(event.is_en_passant for event in ctx.move_events):
        add(Theme.EN_PASSANT)
    return tags
