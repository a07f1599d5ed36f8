# chess_mistakes/core/themes/registry.py
"""
The ordered detector registry and the category-priority filter.

Detectors run in registry order; their union is deduplicated, filtered so
that the most decisive category wins, and returned sorted.
"""

from typing import Dict, Final, FrozenSet, Iterable, List, Tuple

import structlog

from chess_mistakes.core.themes import mates, phases, special_moves, strategy, tactics
from chess_mistakes.types import Theme, ThemeCategory, ThemeContext, ThemeDetector

logger = structlog.get_logger(__name__)

DETECTORS: Final[Tuple[Tuple[str, ThemeDetector], ...]] = (
    ("phases", phases.detect_phases),
    ("endgames", phases.detect_endgames),
    ("mate", mates.detect_mate_patterns),
    ("special", special_moves.detect_special_moves),
    ("strategy", strategy.detect_strategy),
    ("zugzwang", strategy.detect_zugzwang),
    ("other", strategy.detect_other),
    ("capturing_defender", tactics.detect_capturing_defender),
    ("deflection", tactics.detect_deflection),
    ("discovered_attack", tactics.detect_discovered_attack),
    ("fork", tactics.detect_fork),
    ("hanging_piece", tactics.detect_hanging_piece),
    ("double_check", tactics.detect_double_check),
    ("double_threat", tactics.detect_double_threat),
    ("exposed_king", tactics.detect_exposed_king),
    ("interference", tactics.detect_interference),
    ("intermezzo", tactics.detect_intermezzo),
    ("pin", tactics.detect_pin),
    ("skewer", tactics.detect_skewer),
    ("trapped_piece", tactics.detect_trapped_piece),
    ("xray", tactics.detect_x_ray_attack),
)

CATEGORY_TAGS: Final[Dict[ThemeCategory, FrozenSet[Theme]]] = {
    ThemeCategory.MATE: frozenset({
        Theme.MATE, Theme.MATE_IN_1, Theme.MATE_IN_2, Theme.MATE_IN_3, Theme.MATE_IN_4,
        Theme.MATE_IN_5, Theme.BACK_RANK_MATE, Theme.SMOTHERED_MATE, Theme.ANASTASIA_MATE,
        Theme.ARABIAN_MATE, Theme.BODEN_MATE, Theme.DOUBLE_BISHOP_MATE,
    }),
    ThemeCategory.PHASE: frozenset({Theme.OPENING, Theme.MIDDLEGAME, Theme.ENDGAME}),
    ThemeCategory.ENDGAME: frozenset({
        Theme.BISHOP_ENDGAME, Theme.KNIGHT_ENDGAME, Theme.PAWN_ENDGAME,
        Theme.QUEEN_ROOK_ENDGAME, Theme.QUEEN_ENDGAME, Theme.ROOK_ENDGAME,
    }),
    ThemeCategory.SPECIAL: frozenset({
        Theme.CASTLING, Theme.EN_PASSANT, Theme.PROMOTION, Theme.UNDERPROMOTION,
    }),
    ThemeCategory.TACTIC: frozenset({
        Theme.CAPTURING_DEFENDER, Theme.DEFLECTION, Theme.DISCOVERED_ATTACK,
        Theme.DOUBLE_CHECK, Theme.DOUBLE_THREAT, Theme.EXPOSED_KING, Theme.FORK,
        Theme.HANGING_PIECE, Theme.INTERFERENCE, Theme.INTERMEZZO, Theme.PIN,
        Theme.SKEWER, Theme.TRAPPED_PIECE, Theme.X_RAY_ATTACK, Theme.ZUGZWANG,
    }),
    ThemeCategory.STRATEGY: frozenset({
        Theme.ADVANTAGE, Theme.CRUSHING, Theme.DEFENSIVE, Theme.EQUALITY, Theme.QUEENSIDE_ATTACK,
    }),
    ThemeCategory.OTHER: frozenset({
        Theme.ATTACKING_F2_F7, Theme.DOUBLE_BISHOP, Theme.KINGSIDE_ATTACK,
        Theme.QUEEN_ROOK, Theme.QUIET_MOVE, Theme.SACRIFICE,
    }),
}

# Categories that survive alongside the winning one.
_ALWAYS_KEPT: Final = (ThemeCategory.PHASE, ThemeCategory.ENDGAME, ThemeCategory.SPECIAL)


def category_of(tag: Theme) -> ThemeCategory:
    for category, tags in CATEGORY_TAGS.items():
        if tag in tags:
            return category
    raise ValueError(f"Theme {tag!r} has no category")


def _select(tags: Iterable[Theme], categories: Iterable[ThemeCategory]) -> List[Theme]:
    allowed = set(categories)
    return [tag for tag in tags if category_of(tag) in allowed]


def apply_priority_filter(tags: Iterable[Theme]) -> List[Theme]:
    """
    Keeps mate tags over tactic tags over strategy and "other" tags. Phase,
    endgame and special-move tags are always kept.
    """
    tags = list(tags)
    present = {category_of(tag) for tag in tags}
    if ThemeCategory.MATE in present:
        return _select(tags, (ThemeCategory.MATE, *_ALWAYS_KEPT))
    if ThemeCategory.TACTIC in present:
        return _select(tags, (ThemeCategory.TACTIC, *_ALWAYS_KEPT))
    return _select(tags, (*_ALWAYS_KEPT, ThemeCategory.STRATEGY, ThemeCategory.OTHER))


def sort_tags(tags: Iterable[Theme]) -> Tuple[Theme, ...]:
    return tuple(sorted(set(tags), key=lambda tag: tag.value))


def detect_themes(ctx: ThemeContext) -> Tuple[Theme, ...]:
    """Runs every registered detector and returns the filtered, sorted tag set."""
    collected: List[Theme] = []
    for name, detector in DETECTORS:
        found = detector(ctx)
        if found:
            logger.debug("theme_detector_fired", detector=name, tags=[tag.value for tag in found])
        for tag in found:
            if tag not in collected:
                collected.append(tag)
    return sort_tags(apply_priority_filter(collected))
