# tests/core/test_game_walker.py
import chess
import pytest

from chess_mistakes.config.settings import MistakeOptions
from chess_mistakes.core.game_walker import analyze_game
from chess_mistakes.core.move_classifier import MistakeClassifier
from chess_mistakes.core.pgn_parser import build_game_identity, read_games
from chess_mistakes.core.themes.engine import ThemeDetectionEngine
from chess_mistakes.exceptions import SetupError
from chess_mistakes.types import LineSource, MistakeKind, Severity, SummaryTheme, Theme

SCHOLARS_MATE = """
[White "Carol"]
[Black "Bob"]
[Result "1-0"]

1. e4 e5 2. Bc4 Nc6 3. Qh5 Nf6?? 4. Qxf7# 1-0
"""

KNIGHT_GRAB = """
[White "Alice"]
[Black "Bob"]
[Result "0-1"]

1. e4 {[%eval 0.3]} 1... e5 {[%eval 0.3]} 2. Nf3 {[%eval 0.3]} 2... Nc6 {[%eval 0.3]}
3. Bc4 {[%eval 0.5]} 3... Nd4 {[%eval 0.5]} 4. Nxe5 {[%eval -3.0]} 4... Qg5 0-1
"""

HANGING_ROOK = """
[White "Alice"]
[Black "Bob"]
[SetUp "1"]
[FEN "6k1/1b3ppp/8/8/8/6P1/5P1K/3R4 w - - 0 1"]
[Result "0-1"]

1. Rd5? Bxd5 0-1
"""

FLANK_PUSH = """
[White "Alice"]
[Black "Bob"]
[Result "*"]

1. e4 {[%eval 0.3]} 1... e5 {[%eval 0.3]} 2. a3 {[%eval -0.3]} (2. Nf3 {[%eval 0.9]}) 2... Nc6 *
"""

PUNISHED_PAWN_MOVE = """
[White "Alice"]
[Black "Bob"]
[Result "*"]

1. e4 e5 2. Qh5 Nc6 3. Nf3 d6?? 4. Bc4 (4. Qxf7+ Kxf7 5. Nxe5+) 4... g6 *
"""


def _walk(pgn, player_name, player_color, **options):
    game = read_games(pgn)[0]
    return analyze_game(
        game,
        build_game_identity(0, game.headers),
        player_name,
        player_color,
        MistakeOptions(**options),
        MistakeClassifier(),
        ThemeDetectionEngine(),
    )


def test_symbol_only_blunder_without_evaluations():
    # Act
    result = _walk(SCHOLARS_MATE, "Bob", chess.BLACK)

    # Assert
    assert len(result.mistakes) == 1
    mistake = result.mistakes[0]
    assert mistake.played_san == "Nf6"
    assert mistake.move_label == "3... Nf6"
    assert mistake.ply == 5
    assert mistake.kind == MistakeKind.POSITIONAL_MISPLAY
    assert mistake.severity == Severity.INACCURACY
    assert mistake.cp_loss_abs is None
    assert mistake.flags.annotations.has_double_question
    assert mistake.opponent_reply_san == "Qxf7#"
    assert mistake.opponent_reply_move_label == "4. Qxf7#"
    assert mistake.flags.material_loss_soon_pawns == 1
    assert mistake.tags == ()
    assert mistake.line_source is None
    assert mistake.summary_theme == SummaryTheme.PLAN


def test_evaluation_drop_is_tactical_blunder():
    # Act
    result = _walk(KNIGHT_GRAB, "Alice", chess.WHITE)

    # Assert
    assert len(result.mistakes) == 1
    mistake = result.mistakes[0]
    assert mistake.played_san == "Nxe5"
    assert mistake.cp_before_player == 50
    assert mistake.cp_after_player == -300
    assert mistake.cp_swing_player == -350
    assert mistake.cp_loss_abs == 350
    assert mistake.kind == MistakeKind.TACTICAL_BLUNDER
    assert mistake.severity == Severity.BLUNDER
    assert mistake.opponent_reply_san == "Qg5"
    assert mistake.flags.material_loss_soon_pawns == 0
    assert mistake.flags.opening_phase is True
    assert mistake.summary_theme == SummaryTheme.MISSED_TACTIC
    assert mistake.san_context_before == ("e4", "e5", "Nf3", "Nc6", "Bc4", "Nd4")


def test_context_window_is_bounded():
    result = _walk(KNIGHT_GRAB, "Alice", chess.WHITE, context_plies=2)
    assert result.mistakes[0].san_context_before == ("Bc4", "Nd4")


def test_reply_winning_material_upgrades_to_material_blunder():
    # Act
    result = _walk(HANGING_ROOK, "Alice", chess.WHITE)

    # Assert
    mistake = result.mistakes[0]
    assert mistake.move_label == "1. Rd5"
    assert mistake.kind == MistakeKind.MATERIAL_BLUNDER
    assert mistake.severity == Severity.BLUNDER
    assert mistake.flags.material_loss_soon_pawns == 5
    assert mistake.flags.opponent_replied_with_capture is True
    assert mistake.summary_theme == SummaryTheme.HANGING_MATERIAL
    assert mistake.fen_before == "6k1/1b3ppp/8/8/8/6P1/5P1K/3R4 w - - 0 1"


def test_strong_sibling_raises_severity_and_tags_missed_opportunity():
    # Act
    result = _walk(FLANK_PUSH, "Alice", chess.WHITE)

    # Assert
    assert len(result.mistakes) == 1
    mistake = result.mistakes[0]
    assert mistake.played_san == "a3"
    assert mistake.cp_swing_player == -60
    assert mistake.cp_loss_abs == 120
    assert mistake.severity == Severity.MISTAKE
    assert mistake.kind == MistakeKind.OPENING_PRINCIPLE
    assert mistake.best_alternative.san == "Nf3"
    assert mistake.best_alternative.gain_cp_vs_played == 120
    assert mistake.best_alternative.line == "2. Nf3"
    assert mistake.line_source == LineSource.MISSED_OPPORTUNITY
    assert mistake.tags == (Theme.OPENING,)
    assert mistake.summary_theme == SummaryTheme.DEVELOPMENT


def test_alternative_alone_is_reported_without_known_swing():
    result = _walk("1. a4 {[%eval -0.4]} (1. e4 {[%eval 0.8]}) 1... e5 *", "?", chess.WHITE)

    mistake = result.mistakes[0]
    assert mistake.cp_swing_player is None
    assert mistake.cp_loss_abs == 120
    assert mistake.kind == MistakeKind.POSITIONAL_MISPLAY
    assert mistake.severity == Severity.INACCURACY


def test_punishing_reply_variation_is_tagged():
    # Act
    result = _walk(PUNISHED_PAWN_MOVE, "Bob", chess.BLACK)

    # Assert
    assert len(result.mistakes) == 1
    mistake = result.mistakes[0]
    assert mistake.played_san == "d6"
    assert mistake.line_source == LineSource.PUNISHMENT
    assert mistake.tags == (Theme.EXPOSED_KING, Theme.INTERMEZZO, Theme.OPENING, Theme.TRAPPED_PIECE)
    assert list(mistake.tags) == sorted(mistake.tags, key=lambda tag: tag.value)
    assert mistake.opponent_reply_san == "Bc4"


def test_unparseable_moves_are_skipped_and_counted():
    pgn = '[White "Alice"]\n[Black "Bob"]\n\n1. e4 e5 2. Ke3 Nc6 3. Nf3 *'
    result = _walk(pgn, "Alice", chess.WHITE)
    assert result.unparsed_plies == 2
    assert result.mistakes == []


def test_max_move_stops_the_walk_after_the_pending_reply():
    # Arrange
    pgn = "1. e4 e5 2. a3? Nc6 3. h3? Nf6 *"

    # Act
    limited = _walk(pgn, "?", chess.WHITE, max_move=2)
    unlimited = _walk(pgn, "?", chess.WHITE)

    # Assert
    assert [m.played_san for m in limited.mistakes] == ["a3"]
    assert limited.mistakes[0].opponent_reply_san == "Nc6"
    assert [m.played_san for m in unlimited.mistakes] == ["a3", "h3"]


def test_only_the_players_moves_are_analysed():
    result = _walk(SCHOLARS_MATE, "Carol", chess.WHITE)
    assert result.mistakes == []


def test_invalid_starting_position_raises_setup_error():
    pgn = '[FEN "8/8/8/8/8/8/8/8 w - - 0 1"]\n[SetUp "1"]\n\n*'
    with pytest.raises(SetupError):
        _walk(pgn, "Alice", chess.WHITE)


def test_walk_is_deterministic():
    first = _walk(PUNISHED_PAWN_MOVE, "Bob", chess.BLACK)
    second = _walk(PUNISHED_PAWN_MOVE, "Bob", chess.BLACK)
    assert first.mistakes == second.mistakes


@pytest.mark.parametrize("pgn, player, color", [
    (KNIGHT_GRAB, "Alice", chess.WHITE),
    (HANGING_ROOK, "Alice", chess.WHITE),
    (FLANK_PUSH, "Alice", chess.WHITE),
    (PUNISHED_PAWN_MOVE, "Bob", chess.BLACK),
])
def test_played_move_leads_from_fen_before_to_fen_after(pgn, player, color):
    for mistake in _walk(pgn, player, color).mistakes:
        board = chess.Board(mistake.fen_before)
        board.push_san(mistake.played_san)
        assert board.fen() == mistake.fen_after
        assert mistake.cp_loss_abs is None or mistake.cp_loss_abs >= 0
