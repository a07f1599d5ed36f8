"""
Centralized Prometheus metrics definitions for the mistake analyzer.

This module uses the prometheus-client library to define the metrics the
analyzer records. They are observational only and never influence a report.
"""
from prometheus_client import Counter, Histogram

# A common prefix for all application-specific metrics.
PREFIX = "chess_mistakes"

# --- Game Processing Metrics ---

GAMES_PARSED_TOTAL = Counter(
    f"{PREFIX}_games_parsed_total",
    "Total number of games read from PGN input.",
)

GAMES_ANALYZED_TOTAL = Counter(
    f"{PREFIX}_games_analyzed_total",
    "Total number of games in which the target player was found and analysed.",
)

GAMES_SKIPPED_TOTAL = Counter(
    f"{PREFIX}_games_skipped_total",
    "Total number of games skipped for any reason.",
    ["reason"],  # e.g., reason="no_target_player", "setup_error"
)

GAME_ANALYSIS_DURATION_SECONDS = Histogram(
    f"{PREFIX}_game_analysis_duration_seconds",
    "Histogram of the time taken to walk a single game.",
    buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1, 5, float("inf"))
)

# --- Mistake Metrics ---

MISTAKES_EMITTED_TOTAL = Counter(
    f"{PREFIX}_mistakes_emitted_total",
    "Total number of mistakes reported.",
    ["kind"],  # e.g., kind="tactical_blunder", "material_blunder"
)

UNPARSEABLE_PLIES_TOTAL = Counter(
    f"{PREFIX}_unparseable_plies_total",
    "Total number of main-line moves skipped because their SAN did not parse.",
)
