# chess_mistakes/analysis.py
"""
Public entry points of the mistake analyzer.

Both functions are pure with respect to I/O: the PGN text and the options are
their entire input, and they return immutable report objects.
"""

from typing import Any, Mapping, Optional, Union

import chess

from chess_mistakes.config.settings import AnalysisSettings, MistakeOptions
from chess_mistakes.containers import get_container
from chess_mistakes.orchestration.orchestrator import AnalysisOrchestrator
from chess_mistakes.types import MistakeAnalysisReport, PawnStructureReport

OptionsLike = Union[MistakeOptions, Mapping[str, Any], None]


def _resolve_settings(options: OptionsLike, settings: Optional[AnalysisSettings]) -> AnalysisSettings:
    """Merges per-call options (camelCase or snake_case keys) into the analysis settings."""
    base = settings or AnalysisSettings()
    if options is None:
        return base
    if not isinstance(options, MistakeOptions):
        options = MistakeOptions.model_validate(dict(options))
    return base.model_copy(update={"mistake_options": options})


def analyze_player_mistakes(
    pgn_text: str,
    player_name: str,
    options: OptionsLike = None,
    settings: Optional[AnalysisSettings] = None,
) -> MistakeAnalysisReport:
    """
    Finds, classifies and tags the mistakes `player_name` made in every game
    of `pgn_text`.

    Args:
        pgn_text: One or more PGN games, optionally annotated with
            `[%eval ...]` comments, NAGs and variations.
        player_name: The player to analyse; matched loosely against the
            White/Black headers.
        options: Mistake-detection options, either a `MistakeOptions` or a
            mapping using its field names or their camelCase aliases.
        settings: Full analysis settings (theme and aggregation limits,
            worker count). `options` overrides its mistake options.

    Returns:
        A `MistakeAnalysisReport`.

    Raises:
        pydantic.ValidationError: If the options are invalid.
    """
    resolved = _resolve_settings(options, settings)
    orchestrator = get_container(resolved).resolve(AnalysisOrchestrator)
    return orchestrator.analyze(pgn_text, player_name)


def compute_pawn_structure_stats(
    pgn_text: str,
    player_name: str,
    move_number: int,
    color: chess.Color,
    options: OptionsLike = None,
) -> PawnStructureReport:
    """
    Groups the player's games (played with `color`) by the player's pawn
    structure right after their move at `move_number`, with results per
    structure.
    """
    resolved = _resolve_settings(options, None)
    orchestrator = get_container(resolved).resolve(AnalysisOrchestrator)
    return orchestrator.pawn_structures(pgn_text, player_name, move_number, color)
