# chess_mistakes/core/themes/mates.py
"""Mate detectors."""

from typing import Dict, Final, List

from chess_mistakes.types import Theme, ThemeContext

MATE_IN_TAGS: Final[Dict[int, Theme]] = {
    1: Theme.MATE_IN_1,
    2: Theme.MATE_IN_2,
    3: Theme.MATE_IN_3,
    4: Theme.MATE_IN_4,
    5: Theme.MATE_IN_5,
}


def detect_mate_patterns(ctx: ThemeContext) -> List[Theme]:
    """
    Tags a continuation that ends in mate, or whose annotations announce one.

    The mate distance is the announced one when present, otherwise the number
    of moves the mating side made in the line. Named mating patterns (back
    rank, smothered, ...) are part of the tag set but not detected.
    """
    if not ctx.is_mate and not ctx.mate_in:
        return []

    tags = [Theme.MATE]
    distance = ctx.mate_in
    if not distance and ctx.is_mate and ctx.move_events:
        mating_side = ctx.move_events[-1].mover
        distance = sum(1 for event in ctx.move_events if event.mover == mating_side)
    if distance in MATE_IN_TAGS:
        tags.append(MATE_IN_TAGS[distance])
    return tags
