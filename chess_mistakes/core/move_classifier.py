# chess_mistakes/core/move_classifier.py
"""
Contains the central classification engine of the analyzer.

This module provides the `MistakeClassifier`, a pure component that decides
whether one of the player's moves is reported at all (the emission gate),
bands its severity, and assigns its kind by running a chain of composable
`Heuristic` objects. It also owns the deferred reply enrichment, which
revisits a reported move once the opponent's actual answer is known.
"""
from dataclasses import replace
from typing import TYPE_CHECKING, Dict, Final, List, Optional

import structlog

from chess_mistakes.core.heuristics import (MissedTacticHeuristic,
                                            OpeningPrincipleHeuristic,
                                            PieceInactivityHeuristic,
                                            PositionalMisplayHeuristic,
                                            StrongAlternativeHeuristic,
                                            SymbolOnlyHeuristic,
                                            TacticalLossHeuristic)
from chess_mistakes.types import (AnnotationSymbols, Classification, ClassificationInput,
                                  MistakeKind, PlayerMistake, Severity)

if TYPE_CHECKING:
    from chess_mistakes.config.settings import MistakeOptions
    from chess_mistakes.types import Heuristic

logger = structlog.get_logger(__name__)

# Material (in pawns) lost to the opponent's immediate reply that makes a move a material blunder.
MATERIAL_BLUNDER_PAWNS: Final[int] = 2

_TACTICAL_KIND_BY_SEVERITY: Final[Dict[Severity, MistakeKind]] = {
    Severity.BLUNDER: MistakeKind.TACTICAL_BLUNDER,
    Severity.MISTAKE: MistakeKind.TACTICAL_MISTAKE,
    Severity.INACCURACY: MistakeKind.TACTICAL_INACCURACY,
    Severity.INFO: MistakeKind.TACTICAL_INACCURACY,
}


def severity_for_loss(loss_cp: int, options: "MistakeOptions") -> Severity:
    """Maps a loss onto the configured severity bands."""
    if loss_cp >= options.cp_blunder:
        return Severity.BLUNDER
    if loss_cp >= options.cp_mistake:
        return Severity.MISTAKE
    if loss_cp >= options.cp_inaccuracy:
        return Severity.INACCURACY
    return Severity.INFO


def cp_loss_from_swing(cp_swing: Optional[int]) -> int:
    """The non-negative loss implied by a swing; an unknown swing loses nothing."""
    if cp_swing is None or cp_swing >= 0:
        return 0
    return -cp_swing


class MistakeClassifier:
    """
    A stateless classifier that runs a chain of heuristics over a candidate move.

    The order of the chain determines the priority of the rules: the
    symbol-only rule first, then the loss bands, then the inaccuracy-band
    sub-rules, and finally the strong-alternative rule for small losses.
    Moves no rule claims are reported as `unknown` with `info` severity.
    """

    def __init__(self):
        """Initializes the classifier and defines the ordered heuristic chain."""
        self._heuristic_chain: List["Heuristic"] = [
            SymbolOnlyHeuristic(),
            TacticalLossHeuristic(),
            OpeningPrincipleHeuristic(),
            PieceInactivityHeuristic(),
            MissedTacticHeuristic(),
            PositionalMisplayHeuristic(),
            StrongAlternativeHeuristic(),
        ]

    @staticmethod
    def should_emit(
        cp_loss: int,
        cp_swing: Optional[int],
        annotations: AnnotationSymbols,
        alt_gain_abs: int,
        options: "MistakeOptions",
    ) -> bool:
        """
        The emission gate.

        A move is reported when its loss reaches the inaccuracy threshold, when
        it carries a '?'/'??' glyph (if symbol-only reporting is enabled), or
        when no swing is known but a sibling beats it by a clear margin.
        """
        if cp_loss >= options.cp_inaccuracy:
            return True
        if options.allow_symbol_only and (annotations.has_question_mark or annotations.has_double_question):
            return True
        return cp_swing is None and alt_gain_abs >= options.min_alt_gain_cp

    def classify(self, context: ClassificationInput) -> Classification:
        """
        Runs the heuristic chain for a single emitted move.

        Args:
            context: The loss, banded severity and supporting signals of the move.

        Returns:
            The final kind and severity.
        """
        result = Classification(kind=None, severity=context.severity)
        for heuristic in self._heuristic_chain:
            result = heuristic.apply(context, result)

        if result.kind is None:
            return Classification(kind=MistakeKind.UNKNOWN, severity=Severity.INFO)
        return result

    @staticmethod
    def enrich_with_reply(
        mistake: PlayerMistake,
        reply_san: str,
        reply_label: str,
        fen_after_reply: str,
        material_lost_pawns: int,
        options: "MistakeOptions",
    ) -> PlayerMistake:
        """
        Back-fills the opponent's actual reply into a pending mistake.

        A reply that wins two or more pawns of material upgrades the mistake to
        `material_blunder`. A positional misplay answered by a capture or check
        becomes tactical when its original loss already reached the
        inaccuracy threshold.
        """
        captured = "x" in reply_san
        checked = "+" in reply_san or "#" in reply_san
        loss = max(0, material_lost_pawns)
        flags = replace(
            mistake.flags,
            opponent_replied_with_capture=captured,
            opponent_replied_with_check=checked,
            material_loss_soon_pawns=loss,
        )
        kind, severity = mistake.kind, mistake.severity

        if loss >= MATERIAL_BLUNDER_PAWNS:
            kind, severity = MistakeKind.MATERIAL_BLUNDER, Severity.BLUNDER
        elif (kind == MistakeKind.POSITIONAL_MISPLAY
                and (mistake.cp_loss_abs or 0) >= options.cp_inaccuracy
                and (captured or checked)):
            kind = _TACTICAL_KIND_BY_SEVERITY[severity]

        if kind != mistake.kind:
            logger.debug(
                "Mistake upgraded by opponent reply.",
                ply=mistake.ply, played=mistake.played_san, reply=reply_san,
                old_kind=mistake.kind.value, new_kind=kind.value,
            )

        return replace(
            mistake,
            kind=kind,
            severity=severity,
            flags=flags,
            opponent_reply_san=reply_san,
            opponent_reply_move_label=reply_label,
            fen_after_opponent_reply=fen_after_reply,
        )
