# tests/conftest.py
import chess
import pytest

from chess_mistakes.types import (AnnotationSymbols, GameIdentity, MistakeFlags, MistakeKind,
                                  PlayerMistake, Severity)


@pytest.fixture
def make_identity():
    def _make(**overrides) -> GameIdentity:
        fields = dict(
            index=0, source="Lichess", site="https://lichess.org/abcdef", event="Rated Blitz game",
            date="2024.01.01", round="-", white="Alice", black="Bob", result="1-0",
            eco="C50", opening="Italian Game", variation=None,
        )
        fields.update(overrides)
        return GameIdentity(**fields)
    return _make


@pytest.fixture
def make_mistake(make_identity):
    """Builds a `PlayerMistake` with plausible defaults; any field can be overridden."""
    def _make(**overrides) -> PlayerMistake:
        fields = dict(
            game=make_identity(),
            player_name="Alice",
            player_color=chess.WHITE,
            ply=10,
            move_number=6,
            mover=chess.WHITE,
            move_label="6. h3",
            played_san="h3",
            san_context_before=(),
            fen_before=chess.STARTING_FEN,
            fen_after=chess.STARTING_FEN,
            cp_before_player=20,
            cp_after_player=-80,
            cp_swing_player=-100,
            cp_loss_abs=100,
            kind=MistakeKind.POSITIONAL_MISPLAY,
            severity=Severity.INACCURACY,
            flags=MistakeFlags(
                annotations=AnnotationSymbols(False, False, False),
                opening_phase=True,
                undeveloped_minors_before=2,
                undeveloped_minors_after=2,
            ),
        )
        fields.update(overrides)
        return PlayerMistake(**fields)
    return _make
