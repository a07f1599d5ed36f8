# tests/core/themes/test_theme_engine.py
import chess
import pytest

from chess_mistakes.core.move_tree import MoveNode
from chess_mistakes.core.pgn_parser import read_games
from chess_mistakes.core.themes.engine import ThemeDetectionEngine, mate_in_from_line
from chess_mistakes.types import LineSource, Theme

EVALUATED_SIBLINGS = """
1. e4 {[%eval 0.3]} 1... e5 {[%eval 0.3]} 2. a3 {[%eval -0.3]} (2. Nf3 {[%eval 0.9]}) (2. d4 {[%eval 0.5]}) 2... Nc6 *
"""

PUNISHED_PAWN_MOVE = "1. e4 e5 2. Qh5 Nc6 3. Nf3 d6?? 4. Bc4 (4. Qxf7+ Kxf7 5. Nxe5+) 4... g6 *"
FEN_AFTER_D6 = "r1bqkbnr/ppp2ppp/2np4/4p2Q/4P3/5N2/PPPP1PPP/RNB1KB1R w KQkq - 0 4"


def _tree_and_mainline(pgn_text):
    tree = read_games(pgn_text)[0].tree
    return tree, list(tree.mainline())


class TestMateInFromLine:
    def test_counts_punisher_moves_before_the_annotation(self):
        nodes = (
            MoveNode(index=1, parent=0, san="Qh5"),
            MoveNode(index=2, parent=1, san="g6", comments=["[%eval #1]"]),
        )
        assert mate_in_from_line(nodes, chess.WHITE, chess.WHITE) == 2

    def test_ignores_mate_for_the_other_side(self):
        nodes = (MoveNode(index=1, parent=0, san="Qh5", comments=["[%eval #-2]"]),)
        assert mate_in_from_line(nodes, chess.WHITE, chess.WHITE) is None
        assert mate_in_from_line(nodes, chess.WHITE, chess.BLACK) == 2

    def test_no_annotation(self):
        nodes = (MoveNode(index=1, parent=0, san="e4", comments=["[%eval 0.2]"]),)
        assert mate_in_from_line(nodes, chess.WHITE, chess.WHITE) is None


class TestSelectContinuation:
    def test_best_evaluated_sibling_for_white(self):
        # Arrange
        tree, mainline = _tree_and_mainline(EVALUATED_SIBLINGS)
        played = mainline[2]

        # Act
        continuation = ThemeDetectionEngine().select_continuation(
            tree, played, chess.WHITE, "fen-before", "fen-after")

        # Assert
        assert continuation.source == LineSource.MISSED_OPPORTUNITY
        assert [node.san for node in continuation.nodes] == ["Nf3"]
        assert continuation.start_fen == "fen-before"
        assert continuation.punisher_color == chess.WHITE
        assert continuation.player_color == chess.BLACK

    def test_best_evaluated_sibling_is_seen_from_the_player(self):
        tree, mainline = _tree_and_mainline(EVALUATED_SIBLINGS)
        continuation = ThemeDetectionEngine().select_continuation(
            tree, mainline[2], chess.BLACK, "fen-before", "fen-after")
        assert [node.san for node in continuation.nodes] == ["d4"]

    def test_sibling_cap_limits_the_candidates(self):
        tree, mainline = _tree_and_mainline(EVALUATED_SIBLINGS)
        continuation = ThemeDetectionEngine().select_continuation(
            tree, mainline[2], chess.BLACK, "fen-before", "fen-after", max_siblings=1)
        assert [node.san for node in continuation.nodes] == ["Nf3"]

    def test_falls_back_to_reply_sibling(self):
        # Arrange
        tree, mainline = _tree_and_mainline(PUNISHED_PAWN_MOVE)
        played = mainline[5]

        # Act
        continuation = ThemeDetectionEngine().select_continuation(
            tree, played, chess.BLACK, "fen-before", FEN_AFTER_D6)

        # Assert
        assert played.san == "d6"
        assert continuation.source == LineSource.PUNISHMENT
        assert [node.san for node in continuation.nodes] == ["Qxf7+", "Kxf7", "Nxe5+"]
        assert continuation.start_fen == FEN_AFTER_D6
        assert continuation.punisher_color == chess.WHITE

    def test_unevaluated_sibling_does_not_count(self):
        tree, mainline = _tree_and_mainline("1. e4 e5 2. a3 (2. Nf3) 2... Nc6 (2... d5 3. Nc3) *")
        continuation = ThemeDetectionEngine().select_continuation(
            tree, mainline[2], chess.WHITE, "fen-before", "fen-after")
        assert continuation.source == LineSource.PUNISHMENT
        assert [node.san for node in continuation.nodes] == ["d5", "Nc3"]

    def test_line_is_capped(self):
        tree, mainline = _tree_and_mainline(PUNISHED_PAWN_MOVE)
        continuation = ThemeDetectionEngine(max_plies=2).select_continuation(
            tree, mainline[5], chess.BLACK, "fen-before", FEN_AFTER_D6)
        assert len(continuation.nodes) == 2

    def test_no_variations(self):
        tree, mainline = _tree_and_mainline("1. e4 e5 2. a3 Nc6 *")
        engine = ThemeDetectionEngine()
        assert engine.select_continuation(tree, mainline[2], chess.WHITE, "a", "b") is None
        assert engine.tag_mistake(tree, mainline[2], chess.WHITE, "a", "b") == ((), None)


def test_tag_mistake_replays_punishment():
    # Arrange
    tree, mainline = _tree_and_mainline(PUNISHED_PAWN_MOVE)

    # Act
    tags, source = ThemeDetectionEngine().tag_mistake(
        tree, mainline[5], chess.BLACK, "unused", FEN_AFTER_D6)

    # Assert
    assert source == LineSource.PUNISHMENT
    assert Theme.OPENING in tags
    assert Theme.EXPOSED_KING in tags
    assert list(tags) == sorted(tags, key=lambda tag: tag.value)


@pytest.mark.parametrize("max_plies", [1, 30])
def test_tag_mistake_with_missed_win(max_plies):
    tree, mainline = _tree_and_mainline(EVALUATED_SIBLINGS)
    fen_before = "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq - 0 2"
    tags, source = ThemeDetectionEngine(max_plies=max_plies).tag_mistake(
        tree, mainline[2], chess.WHITE, fen_before, "unused")
    assert source == LineSource.MISSED_OPPORTUNITY
    assert Theme.OPENING in tags
