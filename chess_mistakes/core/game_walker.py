# chess_mistakes/core/game_walker.py
"""
The per-game fold: walks a game's main line once and emits the analysed
player's mistakes.

The walker owns the only live `chess.Board` of a game. At every ply it reads
the evaluation before and after the move, decodes annotation glyphs and, for
the player's own moves, takes positional snapshots, weighs sibling
alternatives and asks the classifier whether the move is reported. The most
recently reported mistake stays pending until the opponent's reply has been
played, so that it can be enriched with what the reply actually did.
"""

from collections import deque
from dataclasses import dataclass, field, replace
from typing import Deque, List, Optional

import chess
import structlog

from chess_mistakes.config.settings import MistakeOptions
from chess_mistakes.core.alternatives import analyze_alternatives
from chess_mistakes.core.board_analyzer import positional_snapshot, undeveloped_minors
from chess_mistakes.core.chess_utils import get_material_value, move_label, sanitize_san
from chess_mistakes.core.evaluation import annotation_symbols, cp_to_player, eval_from_comments
from chess_mistakes.core.move_classifier import MistakeClassifier, cp_loss_from_swing, severity_for_loss
from chess_mistakes.core.move_tree import ParsedPgnGame
from chess_mistakes.core.position import parse_san_safely, starting_position
from chess_mistakes.core.theme_inference import infer_summary_theme
from chess_mistakes.core.themes.engine import ThemeDetectionEngine
from chess_mistakes.types import (ClassificationInput, GameIdentity, MistakeFlags,
                                  PendingEnrichment, PlayerMistake)

logger = structlog.get_logger(__name__)

# Alternatives kept on each record besides the best one.
MAX_ALTERNATIVE_CANDIDATES = 3


@dataclass
class WalkResult:
    """The mistakes of one game, in main-line order, and the plies skipped."""
    mistakes: List[PlayerMistake] = field(default_factory=list)
    unparsed_plies: int = 0


def _finalize(mistake: PlayerMistake) -> PlayerMistake:
    return replace(mistake, summary_theme=infer_summary_theme(mistake))


def analyze_game(
    parsed: ParsedPgnGame,
    identity: GameIdentity,
    player_name: str,
    player_color: chess.Color,
    options: MistakeOptions,
    classifier: MistakeClassifier,
    theme_engine: ThemeDetectionEngine,
) -> WalkResult:
    """
    Walks one game's main line and returns the player's mistakes.

    Raises:
        SetupError: If the game's headers describe an invalid starting
            position. Nothing is analysed in that case.
    """
    board = starting_position(parsed.headers)
    tree = parsed.tree
    result = WalkResult()

    context: Deque[str] = deque(maxlen=options.context_plies)
    last_cp_white = eval_from_comments(tree.root.comments)
    pending: Optional[PendingEnrichment] = None
    ply = 0

    for node in tree.mainline():
        mover = board.turn
        move_number = board.fullmove_number
        beyond_limit = options.max_move is not None and move_number > options.max_move
        if beyond_limit and pending is None:
            break

        fen_before = board.fen()
        played_san = sanitize_san(node.san)

        cp_white_before = eval_from_comments(node.starting_comments)
        if cp_white_before is None:
            cp_white_before = last_cp_white
        annotations = annotation_symbols(node.nags, node.san)

        is_player = mover == player_color
        undeveloped_before = undeveloped_minors(board, player_color)
        snapshot_before = positional_snapshot(board, player_color) if is_player else None

        move = parse_san_safely(board, played_san)
        if move is None:
            logger.warning("Skipping unparseable move.", ply=ply, san=played_san, fen=fen_before)
            result.unparsed_plies += 1
            context.append(played_san)
            ply += 1
            if beyond_limit:
                break
            continue

        board.push(move)
        fen_after = board.fen()
        cp_white_after = eval_from_comments(node.comments)
        if cp_white_after is not None:
            last_cp_white = cp_white_after

        if pending is not None and not is_player:
            material_lost = pending.material_baseline - get_material_value(board, player_color)
            enriched = classifier.enrich_with_reply(
                pending.mistake,
                reply_san=played_san,
                reply_label=move_label(move_number, mover, played_san),
                fen_after_reply=fen_after,
                material_lost_pawns=material_lost,
                options=options,
            )
            result.mistakes.append(_finalize(enriched))
            pending = None

        if beyond_limit:
            break

        if is_player:
            cp_before = cp_to_player(cp_white_before, player_color)
            cp_after = cp_to_player(cp_white_after, player_color)
            cp_swing = cp_after - cp_before if cp_before is not None and cp_after is not None else None
            cp_loss = cp_loss_from_swing(cp_swing)

            candidates, best, alt_gain = analyze_alternatives(
                tree, node, mover, move_number, player_color, cp_after,
                max_siblings=options.max_siblings_per_ply,
                max_plies=options.max_variation_plies,
            )

            if classifier.should_emit(cp_loss, cp_swing, annotations, alt_gain, options):
                loss_for_severity = max(cp_loss, alt_gain)
                opening_phase = ply < options.opening_phase_plies
                undeveloped_after = undeveloped_minors(board, player_color)
                classification = classifier.classify(ClassificationInput(
                    cp_loss=cp_loss,
                    severity=severity_for_loss(loss_for_severity, options),
                    opening_phase=opening_phase,
                    played_san=played_san,
                    annotations=annotations,
                    undeveloped_before=undeveloped_before,
                    undeveloped_after=undeveloped_after,
                    best_alternative=best,
                    alt_gain_abs=alt_gain,
                    options=options,
                ))
                tags, line_source = theme_engine.tag_mistake(
                    tree, node, player_color, fen_before, fen_after, options.max_siblings_per_ply)

                mistake = PlayerMistake(
                    game=identity,
                    player_name=player_name,
                    player_color=player_color,
                    ply=ply,
                    move_number=move_number,
                    mover=mover,
                    move_label=move_label(move_number, mover, played_san),
                    played_san=played_san,
                    san_context_before=tuple(context),
                    fen_before=fen_before,
                    fen_after=fen_after,
                    cp_before_player=cp_before,
                    cp_after_player=cp_after,
                    cp_swing_player=cp_swing,
                    cp_loss_abs=loss_for_severity if loss_for_severity > 0 else None,
                    kind=classification.kind,
                    severity=classification.severity,
                    flags=MistakeFlags(
                        annotations=annotations,
                        opening_phase=opening_phase,
                        undeveloped_minors_before=undeveloped_before,
                        undeveloped_minors_after=undeveloped_after,
                        snapshot_before=snapshot_before,
                        snapshot_after=positional_snapshot(board, player_color),
                    ),
                    best_alternative=best,
                    alternative_candidates=tuple(candidates[:MAX_ALTERNATIVE_CANDIDATES]),
                    tags=tags,
                    line_source=line_source,
                )
                logger.debug(
                    "Mistake emitted.", ply=ply, san=played_san,
                    kind=mistake.kind.value, severity=mistake.severity.value, cp_loss=mistake.cp_loss_abs,
                )

                if pending is not None:
                    result.mistakes.append(_finalize(pending.mistake))
                pending = PendingEnrichment(
                    mistake=mistake,
                    material_baseline=get_material_value(board, player_color),
                )

        context.append(played_san)
        ply += 1

    if pending is not None:
        result.mistakes.append(_finalize(pending.mistake))
    return result
