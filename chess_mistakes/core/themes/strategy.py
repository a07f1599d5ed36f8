# chess_mistakes/core/themes/strategy.py
"""
Strategy detector and the placeholder detectors.

`Advantage` and `Crushing` follow the net material swing of the whole
continuation. Zugzwang and the "other" categories (kingside/queenside
attack, quiet move, sacrifice, double bishop, ...) have no detection logic
and always return no tags.
"""

from typing import Final, List

from chess_mistakes.core.themes.context import is_immediate_punish_capture, material_gain
from chess_mistakes.types import Theme, ThemeContext

ADVANTAGE_GAIN_PAWNS: Final[int] = 2
CRUSHING_GAIN_PAWNS: Final[int] = 5


def detect_strategy(ctx: ThemeContext) -> List[Theme]:
    gain = material_gain(ctx)
    if ctx.is_mate:
        return [Theme.CRUSHING, Theme.ADVANTAGE] if gain > 0 else [Theme.CRUSHING]

    if is_immediate_punish_capture(ctx):
        return []

    tags: List[Theme] = []
    if gain >= ADVANTAGE_GAIN_PAWNS:
        tags.append(Theme.ADVANTAGE)
    if gain >= CRUSHING_GAIN_PAWNS:
        tags.append(Theme.CRUSHING)
    return tags


def detect_zugzwang(ctx: ThemeContext) -> List[Theme]:
    """Not implemented: always returns no tags."""
    return []


def detect_other(ctx: ThemeContext) -> List[Theme]:
    """Not implemented: always returns no tags."""
    return []
