# chess_mistakes/config/settings.py
"""
Configuration settings for the mistake analyzer, powered by Pydantic.

This module centralizes all tunable parameters, default values, and configuration
schemas. Option names are snake_case in Python and accept their camelCase
aliases (e.g. `cpBlunder`) so option dictionaries coming from other tools can be
validated directly.
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

PlayerColorName = Literal["white", "black"]

# --- Nested Models for Configuration Schemas ---

class MistakeOptions(BaseModel):
    """
    Thresholds and limits that drive mistake detection for a single run.

    Centipawn thresholds are measured from the analysed player's perspective.
    A ply is an inaccuracy once its loss reaches `cp_inaccuracy`, a mistake at
    `cp_mistake` and a blunder at `cp_blunder`.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    max_variation_plies: int = Field(10, ge=1, description="Maximum plies rendered for an alternative line.")
    opening_phase_plies: int = Field(20, ge=0, description="Plies (from the start of the game) treated as the opening phase.")
    cp_inaccuracy: int = Field(50, ge=0, description="Minimum loss (cp) for an inaccuracy.")
    cp_mistake: int = Field(120, ge=0, description="Minimum loss (cp) for a mistake.")
    cp_blunder: int = Field(250, ge=0, description="Minimum loss (cp) for a blunder.")
    min_alt_gain_cp: int = Field(80, ge=0, description="Minimum gain of a sibling over the played move to count as a strong alternative.")
    min_strategic_loss_cp: int = Field(50, ge=0, description="Minimum loss for the piece-inactivity rule.")
    allow_symbol_only: bool = Field(True, description="Emit '?'/'??' annotated plies even without evaluation data.")
    max_siblings_per_ply: int = Field(10, ge=1, description="Cap on sibling variations (not counting the played move) examined per ply.")
    context_plies: int = Field(8, ge=0, description="Number of preceding SANs kept as context for each mistake.")
    max_move: Optional[int] = Field(None, ge=1, description="Ignore plies whose full-move number exceeds this limit.")
    player_color: Optional[PlayerColorName] = Field(None, description="Only analyse games in which the player has this colour.")

    @model_validator(mode='after')
    def validate_thresholds_are_sorted(self) -> 'MistakeOptions':
        """Ensures that the cp thresholds are sorted in ascending order."""
        if not (self.cp_inaccuracy <= self.cp_mistake <= self.cp_blunder):
            raise ValueError("Configuration error: cp thresholds must satisfy inaccuracy <= mistake <= blunder.")
        return self


class ThemeSettingsModel(BaseModel):
    """Limits for replaying continuations into theme contexts."""
    max_punishment_plies: int = Field(30, ge=1, description="Maximum plies replayed from a continuation.")


class AggregationSettingsModel(BaseModel):
    """Encapsulates the size limits of the aggregated statistics."""
    frequent_mistakes_limit: int = Field(15, ge=5, le=15, description="Frequent mistakes kept per opening bucket.")
    scheme_limit: int = Field(20, ge=1, description="Entries kept in the global scheme-frequency table.")


class AnalysisSettings(BaseModel):
    """Groups all settings related to the core analysis logic."""
    mistake_options: MistakeOptions = Field(default_factory=MistakeOptions)
    themes: ThemeSettingsModel = Field(default_factory=ThemeSettingsModel)
    aggregation: AggregationSettingsModel = Field(default_factory=AggregationSettingsModel)
    workers: int = Field(1, ge=1, description="Worker processes used to analyse games. 1 runs in-process.")


class RunConfig(BaseModel):
    """
    Encapsulates all configuration for a single command-line run.

    This object is constructed at startup from command-line arguments and the
    main settings.
    """
    input_pgn_path: str
    player_name: str
    output_json_path: Optional[str] = None
    output_csv_path: Optional[str] = None
    pawn_structure_move: Optional[int] = None
    pawn_structure_color: PlayerColorName = "white"
    analysis_settings: AnalysisSettings = Field(default_factory=AnalysisSettings)

# --- Main Application Settings Class ---

class Settings(BaseSettings):
    """
    Main configuration class for the application.

    It loads settings from environment variables with the prefix 'CHESS_MISTAKES_'.
    Nested models can be configured using a double underscore delimiter, e.g.,
    `CHESS_MISTAKES_ANALYSIS_SETTINGS__MISTAKE_OPTIONS__CP_BLUNDER=300`.
    """
    model_config = SettingsConfigDict(env_prefix='CHESS_MISTAKES_', env_nested_delimiter='__')

    analysis_settings: AnalysisSettings = Field(default_factory=AnalysisSettings)
    default_json_report_path: str = "data/mistake_report.json"
    default_csv_report_path: str = "data/mistake_report.csv"
    default_log_level: str = "INFO"

# A singleton instance of the settings, accessible throughout the application.
settings = Settings()
