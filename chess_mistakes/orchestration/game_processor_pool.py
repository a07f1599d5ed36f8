# chess_mistakes/orchestration/game_processor_pool.py
"""
The worker-management engine of the analyzer.

Games are independent, so the pool maps the `GameProcessor` over them either
in-process or across worker processes. `ProcessPoolExecutor.map` yields
results in input order, so the report does not depend on the worker count.
"""

import functools
from concurrent.futures import ProcessPoolExecutor
from typing import List, Sequence, TYPE_CHECKING

import structlog

from chess_mistakes.orchestration.game_processor import GameProcessor
from chess_mistakes.types import GameAnalysisResult

if TYPE_CHECKING:
    from chess_mistakes.core.move_tree import ParsedPgnGame

logger = structlog.get_logger(__name__)


class GameProcessorPool:
    """Applies one `GameProcessor` to a sequence of games."""

    def __init__(self, processor: GameProcessor, workers: int = 1):
        self._processor = processor
        self._workers = max(1, workers)

    def run(self, player_name: str, games: Sequence["ParsedPgnGame"]) -> List[GameAnalysisResult]:
        """
        Processes every game and returns one result per game, in input order.
        """
        process = functools.partial(self._processor.process_game, player_name)
        indices = range(len(games))

        if self._workers == 1 or len(games) < 2:
            return [process(index, game) for index, game in zip(indices, games)]

        logger.info("Processing games in worker processes.", workers=self._workers, games=len(games))
        chunksize = max(1, len(games) // (self._workers * 4))
        with ProcessPoolExecutor(max_workers=self._workers) as executor:
            return list(executor.map(process, indices, games, chunksize=chunksize))
