# chess_mistakes/core/theme_inference.py
"""Maps a finished mistake onto one coarse `SummaryTheme`."""

from typing import Final

from chess_mistakes.core.chess_utils import is_castling_san, is_clearly_non_developing
from chess_mistakes.core.move_classifier import MATERIAL_BLUNDER_PAWNS
from chess_mistakes.types import MistakeKind, PlayerMistake, PositionalSnapshot, SummaryTheme

KING_LOSS_CP: Final[int] = 30
PAWN_STRUCTURE_LOSS_CP: Final[int] = 40
DEVELOPMENT_LOSS_CP: Final[int] = 30
SPACE_LOSS_CP: Final[int] = 40
STALLED_UNDEVELOPED_MINORS: Final[int] = 3

TACTICAL_KINDS: Final = frozenset({
    MistakeKind.TACTICAL_BLUNDER, MistakeKind.TACTICAL_MISTAKE, MistakeKind.TACTICAL_INACCURACY,
})


def _king_worsened(before: PositionalSnapshot, after: PositionalSnapshot,
                   replied_with_check: bool, loss: int) -> bool:
    return (
        after.king.shield_pawns < before.king.shield_pawns
        or (not before.king.xray_heavy and after.king.xray_heavy)
        or (not before.king.on_open_file and after.king.on_open_file)
        or (replied_with_check and loss >= KING_LOSS_CP)
    )


def _pawns_worsened(before: PositionalSnapshot, after: PositionalSnapshot) -> bool:
    return (
        after.pawns.islands > before.pawns.islands
        or after.pawns.isolated > before.pawns.isolated
        or after.pawns.doubled > before.pawns.doubled
    )


def _development_stalled(mistake: PlayerMistake, before: PositionalSnapshot, after: PositionalSnapshot) -> bool:
    return (
        mistake.flags.opening_phase
        and after.development.development_score <= before.development.development_score
        and mistake.flags.undeveloped_minors_after >= STALLED_UNDEVELOPED_MINORS
        and not is_castling_san(mistake.played_san)
        and is_clearly_non_developing(mistake.played_san)
    )


def _space_lost(before: PositionalSnapshot, after: PositionalSnapshot) -> bool:
    return (
        after.space.center_presence + 1 <= before.space.center_presence
        or after.space.space_score + 1 <= before.space.space_score
    )


def infer_summary_theme(mistake: PlayerMistake) -> SummaryTheme:
    """
    Picks the first theme whose evidence is present, checking material,
    king safety, pawn structure, development and space in that order, before
    falling back to the mistake's kind.
    """
    loss = mistake.cp_loss_abs or 0
    flags = mistake.flags

    if mistake.kind == MistakeKind.MATERIAL_BLUNDER or (flags.material_loss_soon_pawns or 0) >= MATERIAL_BLUNDER_PAWNS:
        return SummaryTheme.HANGING_MATERIAL

    before, after = flags.snapshot_before, flags.snapshot_after
    if before is not None and after is not None:
        if _king_worsened(before, after, bool(flags.opponent_replied_with_check), loss) and loss >= KING_LOSS_CP:
            return SummaryTheme.KING_EXPOSED
        if _pawns_worsened(before, after) and loss >= PAWN_STRUCTURE_LOSS_CP:
            return SummaryTheme.PAWN_STRUCTURE
        if _development_stalled(mistake, before, after) and loss >= DEVELOPMENT_LOSS_CP:
            return SummaryTheme.DEVELOPMENT
        if _space_lost(before, after) and loss >= SPACE_LOSS_CP:
            return SummaryTheme.SPACE

    if mistake.kind in TACTICAL_KINDS:
        return SummaryTheme.MISSED_TACTIC
    return SummaryTheme.UNKNOWN if mistake.kind == MistakeKind.UNKNOWN else SummaryTheme.PLAN
