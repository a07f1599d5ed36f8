# chess_mistakes/core/evaluation.py
"""
Pure functions for reading evaluations and annotation glyphs out of PGN nodes.

Evaluations are embedded in comments as `[%eval 0.35]` (pawns, White-relative)
or `[%eval #-3]` (mate in N, negative when Black mates). Both forms are
converted to a single centipawn scale where mates always outrank ordinary
scores and shorter mates compare as more extreme. A comment without a
recognized annotation yields `None`, which callers treat as unknown.
"""

import re
from typing import Dict, Final, Iterable, Optional, Sequence

import chess

from chess_mistakes.types import AnnotationSymbols

EVAL_REGEX: Final = re.compile(
    r"\[%eval\s+(?:#\s*([+-]?\d+)|([+-]?(?:\d+(?:\.\d*)?|\.\d+)))[^\]]*\]"
)

MATE_SCORE_CP: Final[int] = 100_000
MATE_DISTANCE_STEP_CP: Final[int] = 100
MAX_MATE_DISTANCE: Final[int] = 999

# Names of the six standard move-quality NAGs (!, ?, !!, ??, !?, ?!).
NAG_NAMES: Final[Dict[int, str]] = {
    1: "good", 2: "mistake", 3: "brilliant", 4: "blunder", 5: "interesting", 6: "dubious",
}
QUESTION_NAGS: Final = frozenset({2, 4, 6})
DOUBLE_QUESTION_NAGS: Final = frozenset({4})
EXCLAMATION_NAGS: Final = frozenset({1, 3, 5})


def mate_to_cp(mate_in: int) -> int:
    """Maps a signed mate distance onto the centipawn scale."""
    sign = 1 if mate_in >= 0 else -1
    return sign * (MATE_SCORE_CP - min(MAX_MATE_DISTANCE, abs(mate_in)) * MATE_DISTANCE_STEP_CP)


def parse_eval_comment(comment: str) -> Optional[int]:
    """
    Parses the first `[%eval ...]` annotation in a comment.

    Returns:
        The White-relative evaluation in centipawns, or None if the comment
        carries no recognized annotation.
    """
    match = EVAL_REGEX.search(comment)
    if not match:
        return None
    mate, pawns = match.groups()
    if mate is not None:
        return mate_to_cp(int(mate))
    return round(float(pawns) * 100)


def eval_from_comments(comments: Iterable[str]) -> Optional[int]:
    """Returns the first recognized evaluation among a node's comments."""
    for comment in comments:
        value = parse_eval_comment(comment)
        if value is not None:
            return value
    return None


def mate_distance_from_comments(comments: Iterable[str]) -> Optional[int]:
    """Returns the signed mate distance of the first mate annotation, if any."""
    for comment in comments:
        match = EVAL_REGEX.search(comment)
        if match and match.group(1) is not None:
            return int(match.group(1))
    return None


def cp_to_player(cp_white: Optional[int], player_color: chess.Color) -> Optional[int]:
    """Reorients a White-relative evaluation to the given player's perspective."""
    if cp_white is None:
        return None
    return cp_white if player_color == chess.WHITE else -cp_white


def annotation_symbols(nags: Sequence[int], san: str = "") -> AnnotationSymbols:
    """
    Decodes move-quality glyphs from a node's NAGs.

    Glyphs still attached to the SAN text are honoured as well, since some
    writers keep them inline.
    """
    nag_set = set(nags)
    has_qm = bool(nag_set & QUESTION_NAGS) or "?" in san
    has_dqm = bool(nag_set & DOUBLE_QUESTION_NAGS) or "??" in san
    has_ex = bool(nag_set & EXCLAMATION_NAGS) or ("!" in san and "?" not in san)
    glyphs = tuple(NAG_NAMES[nag] for nag in sorted(nag_set) if nag in NAG_NAMES)
    return AnnotationSymbols(
        has_question_mark=has_qm, has_double_question=has_dqm,
        has_exclamation=has_ex, glyphs=glyphs,
    )
