# chess_mistakes/orchestration/orchestrator.py
"""
The top-level analysis orchestrator.

`AnalysisOrchestrator` turns one PGN text blob into a complete report: it
parses the games, hands them to the processor pool, records run statistics
and metrics, and folds the mistakes into the aggregated views. It performs no
file I/O.
"""

from typing import List

import chess
import structlog

from chess_mistakes.config.settings import AnalysisSettings
from chess_mistakes.core.pawn_structures import build_pawn_structure_report
from chess_mistakes.core.pgn_parser import read_games
from chess_mistakes.core.summary_aggregator import (build_global_stats, build_opening_stats,
                                                    sort_mistakes)
from chess_mistakes.orchestration.game_processor_pool import GameProcessorPool
from chess_mistakes.statistics import StatisticsTracker, StatKey
from chess_mistakes.tracing import trace_stage
from chess_mistakes.types import (GameAnalysisResult, GameStatus, MistakeAnalysisReport,
                                  PawnStructureReport, PlayerMistake)
from chess_mistakes.utils import metrics

logger = structlog.get_logger(__name__)


class AnalysisOrchestrator:
    def __init__(
        self,
        settings: AnalysisSettings,
        pool: GameProcessorPool,
        stats: StatisticsTracker,
    ):
        self._settings = settings
        self._pool = pool
        self._stats = stats

    def _record(self, results: List[GameAnalysisResult]) -> None:
        for result in results:
            self._stats.record_result(result)
            if result.status != GameStatus.MATCHED:
                metrics.GAMES_SKIPPED_TOTAL.labels(reason=result.status.value).inc()
                continue
            metrics.GAMES_ANALYZED_TOTAL.inc()
            metrics.GAME_ANALYSIS_DURATION_SECONDS.observe(result.duration_seconds)
            if result.unparsed_plies:
                metrics.UNPARSEABLE_PLIES_TOTAL.inc(result.unparsed_plies)
            for mistake in result.mistakes:
                metrics.MISTAKES_EMITTED_TOTAL.labels(kind=mistake.kind.value).inc()

    @trace_stage
    def analyze(self, pgn_text: str, player_name: str) -> MistakeAnalysisReport:
        """
        Analyses every game of `pgn_text` for `player_name`.

        Returns:
            The report. Its mistakes are sorted by absolute loss, largest first.
        """
        games = read_games(pgn_text)
        self._stats.add_stat(StatKey.GAMES_READ, len(games))
        metrics.GAMES_PARSED_TOTAL.inc(len(games))
        logger.info("Analysing games.", player=player_name, games=len(games))

        results = self._pool.run(player_name, games)
        self._record(results)

        mistakes: List[PlayerMistake] = []
        for result in results:
            mistakes.extend(result.mistakes)
        mistakes = sort_mistakes(mistakes)
        matched = sum(1 for result in results if result.status == GameStatus.MATCHED)

        aggregation = self._settings.aggregation
        report = MistakeAnalysisReport(
            player_name=player_name,
            total_games_parsed=len(games),
            games_matched_player=matched,
            mistakes=mistakes,
            stats=build_global_stats(mistakes, aggregation),
            by_opening=build_opening_stats(mistakes, aggregation),
        )
        logger.info("Analysis complete.", matched=matched, mistakes=len(mistakes))
        return report

    @trace_stage
    def pawn_structures(
        self,
        pgn_text: str,
        player_name: str,
        move_number: int,
        color: chess.Color,
    ) -> PawnStructureReport:
        """Pawn-structure statistics for the player's games with `color`."""
        games = read_games(pgn_text)
        report = build_pawn_structure_report(games, player_name, move_number, color)
        logger.info(
            "Pawn structures collected.",
            move_number=move_number, games=report.games_reaching_move,
            structures=len(report.structures),
        )
        return report
