# chess_mistakes/core/heuristics.py
"""
Contains the concrete `Heuristic` implementations of the mistake classifier.

Each heuristic is a single rule in the kind-assignment chain, adhering to the
`Heuristic` protocol defined in `types.py`. Rules run in a fixed order and
the first one that assigns a kind wins; later rules leave a decided result
untouched.
"""

from dataclasses import replace

from chess_mistakes.core.chess_utils import (is_capture_san, is_check_san,
                                             is_clearly_non_developing,
                                             looks_like_opening_principle_violation)
from chess_mistakes.types import (Classification, ClassificationInput, Heuristic,
                                  MistakeKind, Severity)


def _stalled_development(context: ClassificationInput) -> bool:
    """At least three minors still at home and the move did not develop one."""
    return context.undeveloped_after >= 3 and context.undeveloped_after >= context.undeveloped_before


class SymbolOnlyHeuristic(Heuristic):
    """
    A '?' or '??' glyph on a move with a small (or unknown) loss.

    Annotated moves are reported as positional misplays of inaccuracy
    severity even when the evaluation does not back the glyph up.
    """
    def apply(self, context: ClassificationInput, result: Classification) -> Classification:
        if result.kind is not None:
            return result
        symbols = context.annotations
        has_symbol = symbols.has_question_mark or symbols.has_double_question
        if (context.cp_loss < context.options.cp_inaccuracy and has_symbol
                and result.severity == Severity.INFO):
            return replace(result, kind=MistakeKind.POSITIONAL_MISPLAY, severity=Severity.INACCURACY)
        return result


class TacticalLossHeuristic(Heuristic):
    """Losses in the mistake and blunder bands are tactical by definition."""
    def apply(self, context: ClassificationInput, result: Classification) -> Classification:
        if result.kind is not None:
            return result
        options = context.options
        if context.cp_loss >= options.cp_blunder:
            return replace(result, kind=MistakeKind.TACTICAL_BLUNDER, severity=Severity.BLUNDER)
        if context.cp_loss >= options.cp_mistake:
            return replace(result, kind=MistakeKind.TACTICAL_MISTAKE, severity=Severity.MISTAKE)
        return result


class OpeningPrincipleHeuristic(Heuristic):
    """
    An opening-phase heavy-piece, king or flank-pawn move that leaves the
    minor pieces at home.
    """
    def apply(self, context: ClassificationInput, result: Classification) -> Classification:
        if result.kind is not None or context.cp_loss < context.options.cp_inaccuracy:
            return result
        if (context.opening_phase
                and looks_like_opening_principle_violation(context.played_san)
                and _stalled_development(context)):
            return replace(result, kind=MistakeKind.OPENING_PRINCIPLE)
        return result


class PieceInactivityHeuristic(Heuristic):
    """An opening-phase queen move or wing pawn push with a strategic-sized loss."""
    def apply(self, context: ClassificationInput, result: Classification) -> Classification:
        if result.kind is not None or context.cp_loss < context.options.cp_inaccuracy:
            return result
        if (context.cp_loss >= context.options.min_strategic_loss_cp
                and context.opening_phase
                and is_clearly_non_developing(context.played_san)
                and _stalled_development(context)):
            return replace(result, kind=MistakeKind.PIECE_INACTIVITY)
        return result


class MissedTacticHeuristic(Heuristic):
    """A strong alternative that was itself a capture or a check."""
    def apply(self, context: ClassificationInput, result: Classification) -> Classification:
        if result.kind is not None or context.cp_loss < context.options.cp_inaccuracy:
            return result
        best = context.best_alternative
        if (best is not None and context.alt_gain_abs >= context.options.min_alt_gain_cp
                and (is_capture_san(best.san) or is_check_san(best.san))):
            return replace(result, kind=MistakeKind.TACTICAL_INACCURACY)
        return result


class PositionalMisplayHeuristic(Heuristic):
    """Anything else in the inaccuracy band is a positional misplay."""
    def apply(self, context: ClassificationInput, result: Classification) -> Classification:
        if result.kind is not None or context.cp_loss < context.options.cp_inaccuracy:
            return result
        return replace(result, kind=MistakeKind.POSITIONAL_MISPLAY)


class StrongAlternativeHeuristic(Heuristic):
    """Below the inaccuracy band, a clearly better sibling still marks the move."""
    def apply(self, context: ClassificationInput, result: Classification) -> Classification:
        if result.kind is not None:
            return result
        if context.best_alternative is not None and context.alt_gain_abs >= context.options.min_alt_gain_cp:
            return replace(result, kind=MistakeKind.POSITIONAL_MISPLAY, severity=Severity.INACCURACY)
        return result
