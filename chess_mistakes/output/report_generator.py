# chess_mistakes/output/report_generator.py
"""
Provides a service for writing analysis reports to JSON and CSV files.

This module contains the `ReportGenerator`, a "dumb" I/O service that is
responsible only for formatting and writing data. It contains no business
logic and relies on the core to provide it with finished report objects.
"""

import csv
import json
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Final, FrozenSet, List

import structlog

from chess_mistakes.core.chess_utils import color_name
from chess_mistakes.exceptions import ReportGenerationError
from chess_mistakes.types import MistakeAnalysisReport, PawnStructureReport, PlayerMistake

logger = structlog.get_logger(__name__)

# Fields holding a `chess.Color`, rendered as "white"/"black".
_COLOR_FIELDS: Final[FrozenSet[str]] = frozenset({"player_color", "mover", "color"})


def _jsonable(value: Any, key: str = "") -> Any:
    if key in _COLOR_FIELDS and isinstance(value, bool):
        return color_name(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {(k.value if isinstance(k, Enum) else k): _jsonable(v, k if isinstance(k, str) else "")
                for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def report_to_dict(report: MistakeAnalysisReport) -> Dict[str, Any]:
    """Converts a mistake report into plain JSON-ready data."""
    return _jsonable(asdict(report))


def pawn_report_to_dict(report: PawnStructureReport) -> Dict[str, Any]:
    return _jsonable(asdict(report))


class ReportGenerator:
    """A stateless service that writes reports to disk."""

    _CSV_HEADERS: List[str] = [
        "GameIndex", "Source", "White", "Black", "Result", "ECO", "Opening",
        "PlayerColor", "Ply", "Move", "PlayedSAN", "Kind", "Severity", "SummaryTheme",
        "CpBefore", "CpAfter", "CpLoss", "BestAlternative", "AlternativeLine",
        "OpponentReply", "MaterialLossSoon", "Tags", "LineSource", "FenBefore",
    ]

    @staticmethod
    def _mistake_row(m: PlayerMistake) -> Dict[str, Any]:
        g, best = m.game, m.best_alternative
        return {
            "GameIndex": g.index, "Source": g.source, "White": g.white, "Black": g.black,
            "Result": g.result, "ECO": g.eco, "Opening": g.opening,
            "PlayerColor": color_name(m.player_color), "Ply": m.ply, "Move": m.move_label,
            "PlayedSAN": m.played_san, "Kind": m.kind.value, "Severity": m.severity.value,
            "SummaryTheme": m.summary_theme.value,
            "CpBefore": m.cp_before_player, "CpAfter": m.cp_after_player, "CpLoss": m.cp_loss_abs,
            "BestAlternative": best.san if best else None,
            "AlternativeLine": best.line if best else None,
            "OpponentReply": m.opponent_reply_move_label,
            "MaterialLossSoon": m.flags.material_loss_soon_pawns,
            "Tags": "; ".join(tag.value for tag in m.tags),
            "LineSource": m.line_source.value if m.line_source else None,
            "FenBefore": m.fen_before,
        }

    def write_json(self, data: Dict[str, Any], output_path: Path) -> None:
        """
        Writes JSON-ready data to a file.

        Raises:
            ReportGenerationError: If the file cannot be written.
        """
        logger.info("Writing JSON report.", path=str(output_path))
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with output_path.open("w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, ensure_ascii=False)
        except (OSError, TypeError) as e:
            raise ReportGenerationError(f"Failed to write JSON report to {output_path}") from e

    def write_mistakes_csv(self, mistakes: List[PlayerMistake], output_path: Path) -> None:
        """
        Writes one CSV row per mistake.

        Raises:
            ReportGenerationError: If the file cannot be written.
        """
        if not mistakes:
            logger.warning("No mistakes to write to the CSV report. Skipping.")
            return

        rows = [self._mistake_row(m) for m in mistakes]
        logger.info("Writing CSV report.", path=str(output_path), num_rows=len(rows))
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with output_path.open("w", newline="", encoding="utf-8") as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=self._CSV_HEADERS, extrasaction='ignore')
                writer.writeheader()
                writer.writerows(rows)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write CSV report to {output_path}") from e
