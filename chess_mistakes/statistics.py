"""
Run counters for the mistake analyzer.

`StatisticsTracker` absorbs one `GameAnalysisResult` at a time and logs a
summary table at the end of a CLI run. Keys are a closed Enum so that a typo
cannot silently create a new counter.
"""
import os
from collections import Counter
from enum import Enum, auto
from typing import Dict

import structlog

from chess_mistakes.types import GameAnalysisResult, GameStatus, MistakeKind

logger = structlog.get_logger(__name__)


class StatKey(Enum):
    GAMES_READ = auto()
    GAMES_MATCHED = auto()
    GAMES_SKIPPED_TOTAL = auto()
    SKIPPED_NO_TARGET_PLAYER = auto()
    SKIPPED_SETUP_ERROR = auto()
    UNPARSEABLE_PLIES = auto()
    MISTAKES_EMITTED = auto()


STAT_DISPLAY_NAMES: Dict[StatKey, str] = {
    StatKey.GAMES_READ: "Games Read from PGN",
    StatKey.GAMES_MATCHED: "Games Featuring the Player",
    StatKey.GAMES_SKIPPED_TOTAL: "Games Skipped",
    StatKey.SKIPPED_NO_TARGET_PLAYER: "  - Player Not in Game",
    StatKey.SKIPPED_SETUP_ERROR: "  - Invalid Starting Position",
    StatKey.UNPARSEABLE_PLIES: "Unparseable Moves Skipped",
    StatKey.MISTAKES_EMITTED: "Mistakes Reported",
}

_SKIP_KEYS: Dict[GameStatus, StatKey] = {
    GameStatus.NO_TARGET_PLAYER: StatKey.SKIPPED_NO_TARGET_PLAYER,
    GameStatus.SETUP_ERROR: StatKey.SKIPPED_SETUP_ERROR,
}


class StatisticsTracker:
    """Aggregates the counters of one analysis run."""

    def __init__(self):
        self.stats: Counter[StatKey] = Counter()
        self.mistakes_by_kind: Counter[MistakeKind] = Counter()
        self.report_path: str = ""

    def reset(self) -> None:
        self.stats.clear()
        self.mistakes_by_kind.clear()
        self.report_path = ""

    def add_stat(self, key: StatKey, count: int = 1) -> None:
        self.stats[key] += count

    def get(self, key: StatKey) -> int:
        return self.stats.get(key, 0)

    def record_result(self, result: GameAnalysisResult) -> None:
        """Counts one processed game by its status, plies skipped and mistakes."""
        if result.status != GameStatus.MATCHED:
            self.add_stat(StatKey.GAMES_SKIPPED_TOTAL)
            self.add_stat(_SKIP_KEYS[result.status])
            return

        self.add_stat(StatKey.GAMES_MATCHED)
        self.add_stat(StatKey.UNPARSEABLE_PLIES, result.unparsed_plies)
        self.add_stat(StatKey.MISTAKES_EMITTED, len(result.mistakes))
        self.mistakes_by_kind.update(mistake.kind for mistake in result.mistakes)

    def set_report_path(self, path: str) -> None:
        self.report_path = os.path.abspath(path)

    def log_summary(self) -> None:
        """Logs the counters as a fixed-order table, followed by the mistakes per kind."""
        logger.info("\n" + "=" * 12 + " Analysis Run Summary " + "=" * 12)

        for key in StatKey:
            if key in self.stats:
                logger.info(f"{STAT_DISPLAY_NAMES[key]:<40}: {self.stats[key]:>6}")

        if self.mistakes_by_kind:
            logger.info("-" * 48)
            for kind, count in sorted(self.mistakes_by_kind.items(), key=lambda item: (-item[1], item[0].value)):
                logger.info(f"  {kind.value:<38}: {count:>6}")

        logger.info("-" * 48)
        if self.report_path:
            if os.path.exists(self.report_path):
                logger.info(f"Report Generated: '{self.report_path}'")
            else:
                logger.info(f"Report Path (not generated): '{self.report_path}'")
        logger.info("=" * 48)
