# tests/orchestration/test_run_config_factory.py
from pathlib import Path

import pytest
from pydantic import ValidationError

from chess_mistakes.orchestration.run_config_factory import RunConfigFactory
from main import build_parser


def _config(*argv):
    return RunConfigFactory.create_from_cli(build_parser().parse_args(list(argv)))


def test_defaults_place_reports_next_to_the_pgn():
    # Act
    config = _config("games/alice.pgn", "--player", "Alice")

    # Assert
    assert config.player_name == "Alice"
    assert Path(config.output_json_path) == Path("games/alice_mistakes.json")
    assert Path(config.output_csv_path) == Path("games/alice_mistakes.csv")
    assert config.pawn_structure_move is None
    assert config.analysis_settings.workers == 1
    assert config.analysis_settings.mistake_options.cp_blunder == 250


def test_cli_overrides():
    # Act
    config = _config(
        "alice.pgn", "-p", "Alice", "--color", "black", "--max-move", "20",
        "--cp-blunder", "400", "--workers", "3", "--json", "out/r.json", "--csv", "out/r.csv",
        "--pawn-move", "10", "--pawn-color", "black",
    )

    # Assert
    options = config.analysis_settings.mistake_options
    assert options.player_color == "black"
    assert options.max_move == 20
    assert options.cp_blunder == 400
    assert options.cp_mistake == 120
    assert config.analysis_settings.workers == 3
    assert config.output_json_path == "out/r.json"
    assert config.output_csv_path == "out/r.csv"
    assert config.pawn_structure_move == 10
    assert config.pawn_structure_color == "black"


def test_unsorted_thresholds_are_rejected():
    with pytest.raises(ValidationError):
        _config("alice.pgn", "-p", "Alice", "--cp-inaccuracy", "300")


def test_player_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["alice.pgn"])
