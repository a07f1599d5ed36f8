# tests/core/test_pawn_structures.py
import chess
import pytest

from chess_mistakes.core.pawn_structures import (build_pawn_structure_report, game_outcome,
                                                 position_after_move, structure_signature)
from chess_mistakes.core.pgn_parser import read_games
from chess_mistakes.types import PawnStructure

GAMES = """
[White "Alice"]
[Black "Bob"]
[Result "1-0"]

1. e4 e5 2. d4 exd4 1-0

[White "Alice"]
[Black "Carol"]
[Result "1/2-1/2"]

1. e4 e5 2. d4 exd4 1/2-1/2

[White "Bob"]
[Black "Alice"]
[Result "0-1"]

1. e4 e5 2. d4 exd4 0-1

[White "Alice"]
[Black "Dave"]
[Result "*"]

1. e4 e5 *

[White "Alice"]
[Black "Erin"]
[SetUp "1"]
[FEN "8/8/8/8/8/8/8/8 w - - 0 1"]
[Result "*"]

*
"""


def test_structure_signature():
    signature = structure_signature(PawnStructure(islands=2, doubled=1, isolated=0, passed=3))
    assert signature == "islands=2 isolated=0 doubled=1 passed=3"


@pytest.mark.parametrize("result, color, expected", [
    ("1-0", chess.WHITE, "win"),
    ("1-0", chess.BLACK, "loss"),
    ("0-1", chess.BLACK, "win"),
    ("1/2-1/2", chess.WHITE, "draw"),
    ("*", chess.WHITE, None),
    (None, chess.BLACK, None),
])
def test_game_outcome(result, color, expected):
    assert game_outcome(result, color) == expected


def test_position_after_move_for_each_side():
    game = read_games("1. e4 e5 2. d4 exd4 3. c3 *")[0]

    after_white = position_after_move(game, 2, chess.WHITE)
    after_black = position_after_move(game, 2, chess.BLACK)

    assert after_white.piece_at(chess.D4) == chess.Piece(chess.PAWN, chess.WHITE)
    assert after_black.piece_at(chess.D4) == chess.Piece(chess.PAWN, chess.BLACK)
    assert position_after_move(game, 5, chess.WHITE) is None


def test_build_pawn_structure_report():
    # Act
    report = build_pawn_structure_report(read_games(GAMES), "Alice", 2, chess.WHITE)

    # Assert
    assert report.total_games_parsed == 5
    assert report.games_matched_player == 4
    assert report.games_reaching_move == 2
    assert len(report.structures) == 1
    stat = report.structures[0]
    assert stat.signature == "islands=1 isolated=0 doubled=0 passed=0"
    assert (stat.games, stat.wins, stat.draws, stat.losses) == (2, 1, 1, 0)
    assert stat.win_rate == pytest.approx(0.75)


def test_build_pawn_structure_report_for_black():
    report = build_pawn_structure_report(read_games(GAMES), "Alice", 2, chess.BLACK)
    assert report.games_matched_player == 1
    stat = report.structures[0]
    assert stat.signature == "islands=2 isolated=0 doubled=1 passed=0"
    assert stat.wins == 1
