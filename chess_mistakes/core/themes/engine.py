# chess_mistakes/core/themes/engine.py
"""
Chooses the continuation that illustrates a mistake and tags it.

Two sources are tried in order:

1. A sibling of the played move that carries its own evaluation. The best one
   for the player is replayed from the position before the mistake, with the
   player as the punishing side (the opportunity the player missed).
2. Otherwise the deepest sibling of the opponent's actual reply, replayed
   from the position after the mistake with the opponent punishing.

A mistake with neither gets no tags.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import chess
import structlog

from chess_mistakes.core.evaluation import cp_to_player, eval_from_comments, mate_distance_from_comments
from chess_mistakes.core.move_tree import MoveNode, MoveTree
from chess_mistakes.core.themes.context import build_theme_context
from chess_mistakes.core.themes.registry import detect_themes
from chess_mistakes.types import FEN, LineSource, Theme

logger = structlog.get_logger(__name__)

DEFAULT_MAX_PUNISHMENT_PLIES = 30


@dataclass(frozen=True, slots=True)
class Continuation:
    """A selected line, ready to be replayed."""
    nodes: Tuple[MoveNode, ...]; start_fen: FEN
    player_color: chess.Color; punisher_color: chess.Color; source: LineSource


def _node_eval(node: MoveNode) -> Optional[int]:
    value = eval_from_comments(node.comments)
    return value if value is not None else eval_from_comments(node.starting_comments)


def mate_in_from_line(nodes: Tuple[MoveNode, ...], first_mover: chess.Color,
                      punisher_color: chess.Color) -> Optional[int]:
    """
    Turns the first mate annotation favouring the punisher into a mate
    distance counted from the start of the line, in punisher moves.
    """
    mover = first_mover
    punisher_moves = 0
    for node in nodes:
        if mover == punisher_color:
            punisher_moves += 1
        distance = mate_distance_from_comments(node.comments)
        if distance is not None and distance != 0:
            favours_white = distance > 0
            if favours_white == (punisher_color == chess.WHITE):
                return abs(distance) + punisher_moves
        mover = not mover
    return None


class ThemeDetectionEngine:
    """Selects, replays and tags the continuation for one mistake."""

    def __init__(self, max_plies: int = DEFAULT_MAX_PUNISHMENT_PLIES):
        self.max_plies = max_plies

    def _line(self, tree: MoveTree, start: MoveNode) -> Tuple[MoveNode, ...]:
        nodes: List[MoveNode] = []
        for node in tree.line_from(start.index):
            if len(nodes) >= self.max_plies:
                break
            nodes.append(node)
        return tuple(nodes)

    def select_continuation(
        self,
        tree: MoveTree,
        played: MoveNode,
        player_color: chess.Color,
        fen_before: FEN,
        fen_after: FEN,
        max_siblings: Optional[int] = None,
    ) -> Optional[Continuation]:
        opponent = not player_color

        evaluated = [(s, _node_eval(s)) for s in tree.siblings(played.index)[:max_siblings]]
        evaluated = [(s, cp) for s, cp in evaluated if cp is not None]
        if evaluated:
            # max() keeps the first of equally good siblings, i.e. document order.
            best, _ = max(evaluated, key=lambda item: cp_to_player(item[1], player_color))
            return Continuation(
                nodes=self._line(tree, best), start_fen=fen_before,
                player_color=opponent, punisher_color=player_color,
                source=LineSource.MISSED_OPPORTUNITY,
            )

        replies = [tree.node(i) for i in played.children[1:]]
        if replies:
            deepest = max(replies, key=lambda node: tree.depth(node.index))
            return Continuation(
                nodes=self._line(tree, deepest), start_fen=fen_after,
                player_color=player_color, punisher_color=opponent,
                source=LineSource.PUNISHMENT,
            )
        return None

    def tag_mistake(
        self,
        tree: MoveTree,
        played: MoveNode,
        player_color: chess.Color,
        fen_before: FEN,
        fen_after: FEN,
        max_siblings: Optional[int] = None,
    ) -> Tuple[Tuple[Theme, ...], Optional[LineSource]]:
        """
        Returns:
            The sorted tag set and where the replayed line came from, or an
            empty tuple and None when the mistake has no continuation.
        """
        continuation = self.select_continuation(tree, played, player_color, fen_before, fen_after, max_siblings)
        if continuation is None or not continuation.nodes:
            return (), None

        first_mover = chess.Board(continuation.start_fen).turn
        mate_in = mate_in_from_line(continuation.nodes, first_mover, continuation.punisher_color)
        ctx = build_theme_context(
            start_fen=continuation.start_fen,
            sans=[node.san for node in continuation.nodes],
            player_color=continuation.player_color,
            punisher_color=continuation.punisher_color,
            max_plies=self.max_plies,
            mate_in=mate_in,
        )
        tags = detect_themes(ctx)
        logger.debug(
            "Tagged mistake continuation.",
            source=continuation.source.value, moves_played=ctx.moves_played,
            tags=[tag.value for tag in tags],
        )
        return tags, continuation.source
