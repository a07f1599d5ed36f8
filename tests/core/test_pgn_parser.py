# tests/core/test_pgn_parser.py
import chess
import pytest

from chess_mistakes.core.evaluation import eval_from_comments
from chess_mistakes.core.pgn_parser import (build_game_identity, detect_player_color,
                                            extract_source_name, normalize_player_name,
                                            read_games)

TWO_GAMES = """
[Event "Game 1"]
[Site "https://lichess.org/abcd1234"]
[White "Alice"]
[Black "Bob"]
[Result "1-0"]

1. e4 e5 2. Nf3 1-0

[Event "Game 2"]
[Site "?"]
[White "Bob"]
[Black "Alice"]
[Result "0-1"]

1. d4 d5 0-1
"""


def test_read_games_keeps_document_order():
    # Act
    games = read_games(TWO_GAMES)

    # Assert
    assert len(games) == 2
    assert games[0].headers["White"] == "Alice"
    assert [node.san for node in games[0].tree.mainline()] == ["e4", "e5", "Nf3"]
    assert [node.san for node in games[1].tree.mainline()] == ["d4", "d5"]
    assert games[0].result == "1-0"


def test_read_games_blank_text_yields_nothing():
    assert read_games("") == []
    assert read_games("   \n  ") == []


def test_read_games_accepts_bare_movetext():
    games = read_games("1. e4 e5 2. Nf3 Nc6 *")
    assert len(games) == 1
    assert [node.san for node in games[0].tree.mainline()] == ["e4", "e5", "Nf3", "Nc6"]


def test_read_games_records_variations_comments_and_nags():
    # Arrange
    pgn = "{[%eval 0.2]} 1. e4 {[%eval 0.3]} 1... e5 2. a3? {[%eval -0.3]} (2. Nf3 {[%eval 0.9]} 2... Nc6) 2... Nc6 *"

    # Act
    tree = read_games(pgn)[0].tree
    mainline = list(tree.mainline())
    a3 = mainline[2]

    # Assert
    assert eval_from_comments(tree.root.comments) == 20
    assert eval_from_comments(mainline[0].comments) == 30
    assert a3.san == "a3"
    assert a3.nags == [2]
    assert eval_from_comments(a3.comments) == -30
    siblings = tree.siblings(a3.index)
    assert [s.san for s in siblings] == ["Nf3"]
    assert eval_from_comments(siblings[0].comments) == 90
    assert tree.depth(siblings[0].index) == 2


def test_read_games_stores_canonical_san():
    games = read_games("1. e4 e5 2. Bc4 Nc6 3. Qh5 Nf6 4. Qxf7 *")
    assert list(games[0].tree.mainline())[-1].san == "Qxf7#"


def test_read_games_keeps_unparseable_tokens():
    # Act
    mainline = list(read_games("1. e4 e5 2. Ke3 Nc6 3. Nf3 *")[0].tree.mainline())

    # Assert
    assert [node.san for node in mainline] == ["e4", "e5", "Ke3", "Nc6", "Nf3"]
    assert mainline[2].parsed is False
    assert mainline[3].parsed is True


@pytest.mark.parametrize("text, expected", [
    ("https://lichess.org/abcd", "Lichess"),
    ("https://www.chess.com/game/live/1", "Chess.com"),
    ("https://example.org/games/1", "example.org"),
    ("Lichess.org Arena", "Lichess"),
    ("Live Chess - chess.com", "Chess.com"),
    ("Local Club Championship", "Local Club Championship"),
    ("", "Unknown"),
])
def test_extract_source_name(text, expected):
    assert extract_source_name(text) == expected


def test_build_game_identity_falls_back_to_event_for_source():
    # Arrange
    headers = {"Site": "?", "Event": "Rated Blitz game", "White": "Alice", "Black": "Bob",
               "Result": "1-0", "ECO": "C50", "Opening": "Italian Game"}

    # Act
    identity = build_game_identity(3, headers)

    # Assert
    assert identity.index == 3
    assert identity.source == "Rated Blitz game"
    assert identity.eco == "C50"
    assert identity.variation is None


def test_normalize_player_name():
    assert normalize_player_name("  Carlsen,  Magnus ") == "carlsen magnus"
    assert normalize_player_name(None) == ""


@pytest.mark.parametrize("player, white, black, expected", [
    ("alice", "Alice Smith", "Bob", chess.WHITE),
    ("Bob", "Alice", "bob_jones", chess.BLACK),
    ("carol", "Alice", "Bob", None),
    ("Magnus Carlsen", "Carlsen, M.", "Someone", chess.WHITE),
    ("", "Alice", "Bob", None),
])
def test_detect_player_color(player, white, black, expected):
    assert detect_player_color(player, white, black) == expected


def test_detect_player_color_restricted_to_one_side():
    assert detect_player_color("alice", "Alice", "Bob", only_color=chess.BLACK) is None
    assert detect_player_color("alice", "Bob", "Alice", only_color=chess.BLACK) == chess.BLACK
