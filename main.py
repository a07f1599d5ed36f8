# main.py
"""
Command-line entry point of the mistake analyzer.

Usage:
  python main.py games.pgn --player "Magnus Carlsen"
  python main.py games.pgn --player alice --color white --max-move 20 --workers 4
  python main.py games.pgn --player alice --pawn-move 10 --pawn-color black
"""
import argparse
import sys
from pathlib import Path

import structlog

from chess_mistakes.config.settings import settings
from chess_mistakes.containers import get_container
from chess_mistakes.core.chess_utils import parse_color_name
from chess_mistakes.exceptions import ChessMistakesError, PgnServiceError
from chess_mistakes.orchestration.orchestrator import AnalysisOrchestrator
from chess_mistakes.orchestration.run_config_factory import RunConfigFactory
from chess_mistakes.output.report_generator import (ReportGenerator, pawn_report_to_dict,
                                                    report_to_dict)
from chess_mistakes.statistics import StatisticsTracker
from chess_mistakes.utils.logging_config import setup_logging

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find and classify a player's mistakes in annotated PGN games.")
    parser.add_argument("pgn", help="PGN file with one or more games")
    parser.add_argument("--player", "-p", required=True, help="Player name, matched loosely against White/Black")
    parser.add_argument("--color", choices=["white", "black"], default=None, help="Only analyse games with this colour")
    parser.add_argument("--max-move", type=int, default=None)
    parser.add_argument("--cp-inaccuracy", type=int, default=None)
    parser.add_argument("--cp-mistake", type=int, default=None)
    parser.add_argument("--cp-blunder", type=int, default=None)
    parser.add_argument("--workers", type=int, default=None, help="Worker processes (1 runs in-process)")
    parser.add_argument("--json", default=None, help="JSON report path")
    parser.add_argument("--csv", default=None, help="CSV report path")
    parser.add_argument("--pawn-move", type=int, default=None, help="Also collect pawn structures after this move")
    parser.add_argument("--pawn-color", choices=["white", "black"], default="white")
    parser.add_argument("--log-level", default=settings.default_log_level)
    parser.add_argument("--log-file", type=Path, default=None)
    return parser


def read_pgn_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise PgnServiceError(f"Cannot read PGN file {path}") from e


def main(argv=None) -> int:
    """Main function to set up and run an analysis from the command line."""
    args = build_parser().parse_args(argv)
    setup_logging(log_level=args.log_level, log_file=args.log_file)
    run_config = RunConfigFactory.create_from_cli(args)

    container = get_container(run_config.analysis_settings)
    orchestrator = container.resolve(AnalysisOrchestrator)
    stats = container.resolve(StatisticsTracker)
    generator = ReportGenerator()

    try:
        pgn_text = read_pgn_text(Path(run_config.input_pgn_path))
        report = orchestrator.analyze(pgn_text, run_config.player_name)

        output = report_to_dict(report)
        if run_config.pawn_structure_move is not None:
            pawn_report = orchestrator.pawn_structures(
                pgn_text,
                run_config.player_name,
                run_config.pawn_structure_move,
                parse_color_name(run_config.pawn_structure_color),
            )
            output["pawn_structures"] = pawn_report_to_dict(pawn_report)

        json_path = Path(run_config.output_json_path)
        generator.write_json(output, json_path)
        generator.write_mistakes_csv(report.mistakes, Path(run_config.output_csv_path))
        stats.set_report_path(str(json_path))
    except ChessMistakesError as e:
        logger.error("Analysis failed.", error=str(e))
        return 1
    finally:
        stats.log_summary()
    return 0


if __name__ == "__main__":
    sys.exit(main())
