# tests/core/test_chess_utils.py
import chess
import pytest

from chess_mistakes.core.chess_utils import (get_material_diff, get_material_value,
                                             is_castling_san, is_clearly_non_developing,
                                             looks_like_opening_principle_violation, move_label,
                                             parse_color_name, sanitize_san)


def test_get_material_value_start_position():
    board = chess.Board()
    assert get_material_value(board, chess.WHITE) == 39
    assert get_material_value(board, chess.BLACK) == 39


def test_get_material_diff_after_capture():
    # Arrange: White has won a knight.
    board = chess.Board("rnbqkb1r/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1")

    # Act / Assert
    assert get_material_diff(board, chess.WHITE) == 3
    assert get_material_diff(board, chess.BLACK) == -3


@pytest.mark.parametrize("san, expected", [
    ("Nf3!?", "Nf3"),
    ("Qxf7#", "Qxf7#"),
    ("e4??", "e4"),
    (" O-O! ", "O-O"),
])
def test_sanitize_san(san, expected):
    assert sanitize_san(san) == expected


def test_is_castling_san():
    assert is_castling_san("O-O")
    assert is_castling_san("O-O-O+")
    assert is_castling_san("0-0")
    assert not is_castling_san("Kg1")


@pytest.mark.parametrize("san, expected", [
    ("Qh5", True),
    ("Rb1", True),
    ("Ke2", True),
    ("a3", True),
    ("h4", True),
    ("e4", False),
    ("Nf3", False),
    ("Bc4", False),
    ("O-O", False),
])
def test_looks_like_opening_principle_violation(san, expected):
    assert looks_like_opening_principle_violation(san) is expected


@pytest.mark.parametrize("san, expected", [
    ("Qd3", True),
    ("a4", True),
    ("g3", True),
    ("c4", False),
    ("Rb1", False),
    ("Nc3", False),
])
def test_is_clearly_non_developing(san, expected):
    assert is_clearly_non_developing(san) is expected


def test_move_label():
    assert move_label(12, chess.WHITE, "Nf3") == "12. Nf3"
    assert move_label(12, chess.BLACK, "Nc6") == "12... Nc6"


def test_parse_color_name():
    assert parse_color_name("White") == chess.WHITE
    assert parse_color_name(" black ") == chess.BLACK
    with pytest.raises(ValueError):
        parse_color_name("red")
