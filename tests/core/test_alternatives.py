# tests/core/test_alternatives.py
import chess

from chess_mistakes.core.alternatives import (analyze_alternatives, choose_best_alternative,
                                              format_variation_line, rank_alternatives)
from chess_mistakes.core.pgn_parser import read_games
from chess_mistakes.types import AlternativeSuggestion


def _suggestion(san, cp):
    return AlternativeSuggestion(san=san, line=san, cp_after_player=cp, gain_cp_vs_played=None)


def test_format_variation_line_for_white():
    # Arrange
    tree = read_games("1. e4 e5 2. Nf3 (2. Bc4 Nf6 3. d3) 2... Nc6 *")[0].tree
    nf3 = list(tree.mainline())[2]
    bc4 = tree.siblings(nf3.index)[0]

    # Act / Assert
    assert format_variation_line(tree, bc4, chess.WHITE, 2, max_plies=10) == "2. Bc4 Nf6 3. d3"
    assert format_variation_line(tree, bc4, chess.WHITE, 2, max_plies=2) == "2. Bc4 Nf6"


def test_format_variation_line_for_black():
    tree = read_games("1. e4 e5 (1... c5 2. Nf3 d6) 2. Nf3 *")[0].tree
    e5 = list(tree.mainline())[1]
    c5 = tree.siblings(e5.index)[0]
    assert format_variation_line(tree, c5, chess.BLACK, 1, max_plies=10) == "1... c5 2. Nf3 d6"


def test_rank_alternatives_puts_evaluated_first():
    ranked = rank_alternatives([_suggestion("a", None), _suggestion("b", 10), _suggestion("c", 50)])
    assert [c.san for c in ranked] == ["c", "b", "a"]


def test_choose_best_alternative():
    assert choose_best_alternative([]) is None
    assert choose_best_alternative([_suggestion("a", None), _suggestion("b", None)]).san == "a"
    assert choose_best_alternative([_suggestion("a", None), _suggestion("b", -20), _suggestion("c", 40)]).san == "c"


def test_analyze_alternatives_reports_gain_from_players_perspective():
    # Arrange: Black plays ...f6 (+1.5 for White) while ...Nf6 keeps equality.
    pgn = "1. e4 e5 2. Nf3 f6 {[%eval 1.5]} (2... Nf6 {[%eval 0.3]}) (2... d6) 3. Nxe5 *"
    tree = read_games(pgn)[0].tree
    played = list(tree.mainline())[3]

    # Act
    candidates, best, gain = analyze_alternatives(
        tree, played, chess.BLACK, 2, chess.BLACK, played_cp_after_player=-150,
        max_siblings=10, max_plies=4,
    )

    # Assert
    assert [c.san for c in candidates] == ["Nf6", "d6"]
    assert best.san == "Nf6"
    assert best.cp_after_player == -30
    assert gain == 120
    assert candidates[1].gain_cp_vs_played is None


def test_analyze_alternatives_sibling_cap_excludes_the_played_move():
    tree = read_games("1. e4 (1. d4) (1. c4) (1. Nf3) e5 *")[0].tree
    played = list(tree.mainline())[0]

    candidates, _, gain = analyze_alternatives(
        tree, played, chess.WHITE, 1, chess.WHITE, None, max_siblings=3, max_plies=4,
    )

    assert [c.san for c in candidates] == ["d4", "c4", "Nf3"]
    assert gain == 0


def test_analyze_alternatives_single_sibling_cap_still_finds_the_better_move():
    # Arrange
    tree = read_games("1. e4 {[%eval 0.0]} (1. d4 {[%eval 2.0]}) *")[0].tree
    played = list(tree.mainline())[0]

    # Act
    candidates, best, gain = analyze_alternatives(
        tree, played, chess.WHITE, 1, chess.WHITE, played_cp_after_player=0, max_siblings=1, max_plies=4,
    )

    # Assert
    assert [c.san for c in candidates] == ["d4"]
    assert best.san == "d4"
    assert gain == 200
