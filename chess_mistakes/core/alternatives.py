# chess_mistakes/core/alternatives.py
"""
Evaluates sibling variations as alternatives to the move actually played.

A sibling is any non-main-line child of the decision node. Each one is
reported with its own evaluation (read from its comments), a printable line
and its gain over the played move.
"""

from typing import List, Optional, Sequence, Tuple

import chess

from chess_mistakes.core.chess_utils import sanitize_san
from chess_mistakes.core.evaluation import cp_to_player, eval_from_comments
from chess_mistakes.core.move_tree import MoveNode, MoveTree
from chess_mistakes.types import AlternativeSuggestion


def format_variation_line(
    tree: MoveTree,
    first: MoveNode,
    first_mover: chess.Color,
    move_number: int,
    max_plies: int,
) -> str:
    """
    Renders a variation as `12. Nf3 Nc6 13. Bb5` (or `12... Nc6 13. Bb5`).
    """
    parts: List[str] = [f"{move_number}." if first_mover == chess.WHITE else f"{move_number}..."]
    mover = first_mover
    for i, node in enumerate(tree.line_from(first.index)):
        if i >= max_plies:
            break
        if i > 0 and mover == chess.WHITE:
            parts.append(f"{move_number}.")
        parts.append(sanitize_san(node.san))
        if mover == chess.BLACK:
            move_number += 1
        mover = not mover
    return " ".join(parts)


def build_alternative(
    tree: MoveTree,
    sibling: MoveNode,
    mover: chess.Color,
    move_number: int,
    player_color: chess.Color,
    played_cp_after_player: Optional[int],
    max_plies: int,
) -> AlternativeSuggestion:
    """Describes one sibling variation from the player's perspective."""
    cp_white = eval_from_comments(sibling.comments)
    if cp_white is None:
        cp_white = eval_from_comments(sibling.starting_comments)
    cp_after = cp_to_player(cp_white, player_color)
    gain = None
    if cp_after is not None and played_cp_after_player is not None:
        gain = cp_after - played_cp_after_player
    return AlternativeSuggestion(
        san=sanitize_san(sibling.san),
        line=format_variation_line(tree, sibling, mover, move_number, max_plies),
        cp_after_player=cp_after,
        gain_cp_vs_played=gain,
    )


def rank_alternatives(candidates: Sequence[AlternativeSuggestion]) -> List[AlternativeSuggestion]:
    """Candidates with an evaluation first (best for the player first), then the rest in document order."""
    with_eval = sorted(
        (c for c in candidates if c.cp_after_player is not None),
        key=lambda c: -c.cp_after_player,  # type: ignore[operator]
    )
    return with_eval + [c for c in candidates if c.cp_after_player is None]


def choose_best_alternative(candidates: Sequence[AlternativeSuggestion]) -> Optional[AlternativeSuggestion]:
    """The best evaluated candidate, else the first sibling in document order."""
    if not candidates:
        return None
    evaluated = [c for c in candidates if c.cp_after_player is not None]
    if evaluated:
        return max(evaluated, key=lambda c: c.cp_after_player)  # type: ignore[arg-type, return-value]
    return candidates[0]


def analyze_alternatives(
    tree: MoveTree,
    played: MoveNode,
    mover: chess.Color,
    move_number: int,
    player_color: chess.Color,
    played_cp_after_player: Optional[int],
    max_siblings: int,
    max_plies: int,
) -> Tuple[List[AlternativeSuggestion], Optional[AlternativeSuggestion], int]:
    """
    Evaluates the siblings of a played move.

    Args:
        max_siblings: Cap on sibling variations examined at the decision
            node; the played move is not counted.

    Returns:
        The candidates in document order, the best one, and its positive gain
        over the played move (0 when unknown or not positive).
    """
    siblings = tree.siblings(played.index)[:max_siblings]
    candidates = [
        build_alternative(tree, s, mover, move_number, player_color, played_cp_after_player, max_plies)
        for s in siblings
    ]
    best = choose_best_alternative(candidates)
    gain = best.gain_cp_vs_played if best and best.gain_cp_vs_played is not None else 0
    return candidates, best, max(0, gain)
