# chess_mistakes/orchestration/game_processor.py
"""
Defines the `GameProcessor`, responsible for analysing a single parsed game
for one target player.
"""

import time
from typing import Optional, TYPE_CHECKING

import chess
import structlog

from chess_mistakes.core.chess_utils import parse_color_name
from chess_mistakes.core.game_walker import analyze_game
from chess_mistakes.core.pgn_parser import build_game_identity, detect_player_color
from chess_mistakes.exceptions import SetupError
from chess_mistakes.tracing import game_context
from chess_mistakes.types import GameAnalysisResult, GameStatus

if TYPE_CHECKING:
    from chess_mistakes.config.settings import AnalysisSettings
    from chess_mistakes.core.move_classifier import MistakeClassifier
    from chess_mistakes.core.move_tree import ParsedPgnGame
    from chess_mistakes.core.themes.engine import ThemeDetectionEngine

logger = structlog.get_logger(__name__)


class GameProcessor:
    """
    Runs the per-game walk. Instances are picklable so that a process pool can
    ship them to worker processes.
    """

    def __init__(
        self,
        settings: "AnalysisSettings",
        classifier: "MistakeClassifier",
        theme_engine: "ThemeDetectionEngine",
    ):
        self._settings = settings
        self._classifier = classifier
        self._theme_engine = theme_engine

    @property
    def _only_color(self) -> Optional[chess.Color]:
        color = self._settings.mistake_options.player_color
        return parse_color_name(color) if color else None

    def process_game(self, player_name: str, index: int, game: "ParsedPgnGame") -> GameAnalysisResult:
        """
        Analyses one game.

        Games in which the player does not appear, and games whose starting
        position is invalid, are reported by status rather than raised.
        """
        with game_context(index):
            headers = game.headers
            color = detect_player_color(player_name, headers.get("White"), headers.get("Black"), self._only_color)
            if color is None:
                logger.debug("Target player not in game.", white=headers.get("White"), black=headers.get("Black"))
                return GameAnalysisResult(index=index, status=GameStatus.NO_TARGET_PLAYER)

            started = time.perf_counter()
            try:
                walk = analyze_game(
                    game,
                    build_game_identity(index, headers),
                    player_name,
                    color,
                    self._settings.mistake_options,
                    self._classifier,
                    self._theme_engine,
                )
            except SetupError as e:
                logger.warning("Skipping game with invalid starting position.", fen=e.fen, error=str(e))
                return GameAnalysisResult(index=index, status=GameStatus.SETUP_ERROR, player_color=color)

            duration = time.perf_counter() - started
            logger.debug("Game analysed.", mistakes=len(walk.mistakes), duration=round(duration, 4))
            return GameAnalysisResult(
                index=index,
                status=GameStatus.MATCHED,
                player_color=color,
                mistakes=walk.mistakes,
                unparsed_plies=walk.unparsed_plies,
                duration_seconds=duration,
            )
