# tests/core/test_theme_inference.py
from chess_mistakes.core.theme_inference import infer_summary_theme
from chess_mistakes.types import (AnnotationSymbols, DevelopmentFeatures, KingSafety, MistakeFlags,
                                  MistakeKind, PawnStructure, PositionalSnapshot, SpaceFeatures,
                                  SummaryTheme)


def _snapshot(shield=3, open_file=False, xray=False, islands=1, isolated=0, doubled=0,
              center=2, space=1, undeveloped=2, development=5):
    return PositionalSnapshot(
        king=KingSafety(castled=True, shield_pawns=shield, on_open_file=open_file, xray_heavy=xray),
        pawns=PawnStructure(islands=islands, doubled=doubled, isolated=isolated, passed=0),
        space=SpaceFeatures(center_presence=center, space_score=space),
        development=DevelopmentFeatures(undeveloped_minors=undeveloped, development_score=development,
                                        queen_moved=False),
    )


def _flags(before=None, after=None, opening_phase=False, undeveloped_after=2, **extra):
    return MistakeFlags(
        annotations=AnnotationSymbols(False, False, False),
        opening_phase=opening_phase,
        undeveloped_minors_before=undeveloped_after,
        undeveloped_minors_after=undeveloped_after,
        snapshot_before=before,
        snapshot_after=after,
        **extra,
    )


def test_material_blunder_is_hanging_material(make_mistake):
    mistake = make_mistake(kind=MistakeKind.MATERIAL_BLUNDER)
    assert infer_summary_theme(mistake) == SummaryTheme.HANGING_MATERIAL


def test_material_lost_to_reply_is_hanging_material(make_mistake):
    mistake = make_mistake(flags=_flags(material_loss_soon_pawns=3))
    assert infer_summary_theme(mistake) == SummaryTheme.HANGING_MATERIAL


def test_weaker_king_shield(make_mistake):
    mistake = make_mistake(cp_loss_abs=80, flags=_flags(_snapshot(shield=3), _snapshot(shield=2)))
    assert infer_summary_theme(mistake) == SummaryTheme.KING_EXPOSED


def test_check_reply_counts_as_king_exposure(make_mistake):
    flags = _flags(_snapshot(), _snapshot(), opponent_replied_with_check=True)
    assert infer_summary_theme(make_mistake(cp_loss_abs=40, flags=flags)) == SummaryTheme.KING_EXPOSED


def test_small_loss_does_not_blame_king(make_mistake):
    mistake = make_mistake(cp_loss_abs=20, flags=_flags(_snapshot(shield=3), _snapshot(shield=2)))
    assert infer_summary_theme(mistake) == SummaryTheme.PLAN


def test_new_doubled_pawn(make_mistake):
    mistake = make_mistake(cp_loss_abs=60, flags=_flags(_snapshot(), _snapshot(doubled=1)))
    assert infer_summary_theme(mistake) == SummaryTheme.PAWN_STRUCTURE


def test_stalled_development(make_mistake):
    # Arrange: a flank pawn push in the opening with three minors at home.
    before = _snapshot(undeveloped=3, development=1)
    after = _snapshot(undeveloped=3, development=1)
    mistake = make_mistake(
        kind=MistakeKind.OPENING_PRINCIPLE, played_san="a3", cp_loss_abs=60,
        flags=_flags(before, after, opening_phase=True, undeveloped_after=3),
    )

    # Act / Assert
    assert infer_summary_theme(mistake) == SummaryTheme.DEVELOPMENT


def test_lost_central_presence(make_mistake):
    mistake = make_mistake(cp_loss_abs=50, flags=_flags(_snapshot(center=3), _snapshot(center=2)))
    assert infer_summary_theme(mistake) == SummaryTheme.SPACE


def test_fallback_by_kind(make_mistake):
    assert infer_summary_theme(make_mistake(kind=MistakeKind.TACTICAL_MISTAKE)) == SummaryTheme.MISSED_TACTIC
    assert infer_summary_theme(make_mistake(kind=MistakeKind.PIECE_INACTIVITY)) == SummaryTheme.PLAN
    assert infer_summary_theme(make_mistake(kind=MistakeKind.UNKNOWN)) == SummaryTheme.UNKNOWN
