# chess_mistakes/orchestration/run_config_factory.py
"""
A factory for creating RunConfig objects from various sources.
"""
import argparse
from pathlib import Path

from chess_mistakes.config.settings import MistakeOptions, RunConfig, settings


class RunConfigFactory:
    """A factory class to centralize the creation of RunConfig objects."""

    @staticmethod
    def create_from_cli(args: argparse.Namespace) -> RunConfig:
        """
        Creates a RunConfig object from parsed command-line arguments.

        Options left unset on the command line keep the values of the
        environment-driven `settings`. Output paths default to files next to
        the input PGN.

        Args:
            args: The namespace produced by the CLI parser.

        Returns:
            A fully populated RunConfig object.
        """
        pgn_filepath = Path(args.pgn)
        base_name = pgn_filepath.stem
        output_dir = pgn_filepath.parent

        option_overrides = {
            name: value
            for name, value in (
                ("cp_inaccuracy", args.cp_inaccuracy),
                ("cp_mistake", args.cp_mistake),
                ("cp_blunder", args.cp_blunder),
                ("max_move", args.max_move),
                ("player_color", args.color),
            )
            if value is not None
        }
        base = settings.analysis_settings
        # model_copy skips validation, so the merged options are validated explicitly.
        mistake_options = MistakeOptions.model_validate(
            {**base.mistake_options.model_dump(), **option_overrides}
        )
        analysis_settings = base.model_copy(update={
            "mistake_options": mistake_options,
            "workers": args.workers or base.workers,
        })

        return RunConfig(
            input_pgn_path=str(pgn_filepath),
            player_name=args.player,
            output_json_path=args.json or str(output_dir / f"{base_name}_mistakes.json"),
            output_csv_path=args.csv or str(output_dir / f"{base_name}_mistakes.csv"),
            pawn_structure_move=args.pawn_move,
            pawn_structure_color=args.pawn_color,
            analysis_settings=analysis_settings,
        )
