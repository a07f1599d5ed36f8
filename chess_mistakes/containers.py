# chess_mistakes/containers.py
"""
Defines the Dependency Injection (DI) container for the analyzer.

This module uses the `punq` library to manage the creation and wiring of the
services of one analysis run: the classifier, the theme engine, the game
processor and its pool, the run statistics and the orchestrator.
"""

import punq

from chess_mistakes.config.settings import AnalysisSettings
from chess_mistakes.core.move_classifier import MistakeClassifier
from chess_mistakes.core.themes.engine import ThemeDetectionEngine
from chess_mistakes.orchestration.game_processor import GameProcessor
from chess_mistakes.orchestration.game_processor_pool import GameProcessorPool
from chess_mistakes.orchestration.orchestrator import AnalysisOrchestrator
from chess_mistakes.statistics import StatisticsTracker


def get_container(analysis_settings: AnalysisSettings) -> punq.Container:
    """
    Initializes and returns a DI container configured for a specific analysis run.
    """
    container = punq.Container()

    # Register instances that are created outside the container's control.
    container.register(AnalysisSettings, instance=analysis_settings)

    container.register(MistakeClassifier, scope=punq.Scope.singleton)
    container.register(
        ThemeDetectionEngine,
        factory=lambda: ThemeDetectionEngine(analysis_settings.themes.max_punishment_plies),
        scope=punq.Scope.singleton,
    )
    # A single tracker per container, shared by the orchestrator and its caller.
    container.register(StatisticsTracker, scope=punq.Scope.singleton)

    container.register(
        GameProcessor,
        factory=lambda: GameProcessor(
            analysis_settings,
            container.resolve(MistakeClassifier),
            container.resolve(ThemeDetectionEngine),
        ),
    )
    container.register(
        GameProcessorPool,
        factory=lambda: GameProcessorPool(container.resolve(GameProcessor), analysis_settings.workers),
    )
    container.register(AnalysisOrchestrator)

    return container
