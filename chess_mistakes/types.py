# chess_mistakes/types.py
"""
A central module for shared data structures and service interfaces (Protocols).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import (Dict, List, Optional, Protocol, Tuple, TYPE_CHECKING,
                    TypeAlias, runtime_checkable)

import chess

if TYPE_CHECKING:
    from chess_mistakes.config.settings import MistakeOptions

FEN: TypeAlias = str


class MistakeKind(str, Enum):
    TACTICAL_BLUNDER = "tactical_blunder"; TACTICAL_MISTAKE = "tactical_mistake"
    TACTICAL_INACCURACY = "tactical_inaccuracy"; MATERIAL_BLUNDER = "material_blunder"
    OPENING_PRINCIPLE = "opening_principle"; PIECE_INACTIVITY = "piece_inactivity"
    POSITIONAL_MISPLAY = "positional_misplay"; UNKNOWN = "unknown"


class Severity(str, Enum):
    BLUNDER = "blunder"; MISTAKE = "mistake"; INACCURACY = "inaccuracy"; INFO = "info"


class SummaryTheme(str, Enum):
    """One coarse theme per mistake, inferred from its kind and feature deltas."""
    HANGING_MATERIAL = "hanging_material"; KING_EXPOSED = "king_exposed"
    PAWN_STRUCTURE = "pawn_structure"; DEVELOPMENT = "development"; SPACE = "space"
    MISSED_TACTIC = "missed_tactic"; PLAN = "plan"; UNKNOWN = "unknown"


class LineSource(str, Enum):
    """Where the continuation used for theme detection was taken from."""
    MISSED_OPPORTUNITY = "missed_opportunity"  # sibling at the mistake's own decision point
    PUNISHMENT = "punishment"                  # sibling at the opponent's reply point


class Theme(str, Enum):
    """The closed set of thematic tags a detector may emit."""
    # Endgames
    BISHOP_ENDGAME = "Bishop Endgame"; KNIGHT_ENDGAME = "Knight Endgame"
    PAWN_ENDGAME = "Pawn Endgame"; QUEEN_ROOK_ENDGAME = "Queen & Rook Endgame"
    QUEEN_ENDGAME = "Queen Endgame"; ROOK_ENDGAME = "Rook Endgame"
    # Phases
    OPENING = "Opening"; MIDDLEGAME = "Middlegame"; ENDGAME = "Endgame"
    # Mates
    MATE = "Mate"; MATE_IN_1 = "Mate in 1"; MATE_IN_2 = "Mate in 2"; MATE_IN_3 = "Mate in 3"
    MATE_IN_4 = "Mate in 4"; MATE_IN_5 = "Mate in 5"; BACK_RANK_MATE = "Back Rank Mate"
    SMOTHERED_MATE = "Smothered Mate"; ANASTASIA_MATE = "Anastasia's Mate"
    ARABIAN_MATE = "Arabian Mate"; BODEN_MATE = "Boden's Mate"
    DOUBLE_BISHOP_MATE = "Double Bishop Mate"
    # Special moves
    CASTLING = "Castling"; EN_PASSANT = "En Passant"; PROMOTION = "Promotion"
    UNDERPROMOTION = "Underpromotion"
    # Strategy
    ADVANTAGE = "Advantage"; CRUSHING = "Crushing"; DEFENSIVE = "Defensive"
    EQUALITY = "Equality"; QUEENSIDE_ATTACK = "Queenside Attack"
    # Tactics
    CAPTURING_DEFENDER = "Capturing Defender"; DEFLECTION = "Deflection"
    DISCOVERED_ATTACK = "Discovered Attack"; DOUBLE_CHECK = "Double Check"
    DOUBLE_THREAT = "Double Threat"; EXPOSED_KING = "Exposed King"; FORK = "Fork"
    HANGING_PIECE = "Hanging Piece"; INTERFERENCE = "Interference"; INTERMEZZO = "Intermezzo"
    PIN = "Pin"; SKEWER = "Skewer"; TRAPPED_PIECE = "Trapped Piece"; X_RAY_ATTACK = "X-Ray Attack"
    ZUGZWANG = "Zugzwang"
    # Other
    ATTACKING_F2_F7 = "Attacking f2/f7"; DOUBLE_BISHOP = "Double Bishop"
    KINGSIDE_ATTACK = "Kingside Attack"; QUEEN_ROOK = "Queen & Rook"
    QUIET_MOVE = "Quiet Move"; SACRIFICE = "Sacrifice"


class ThemeCategory(str, Enum):
    MATE = "mate"; PHASE = "phase"; ENDGAME = "endgame"; SPECIAL = "special"
    TACTIC = "tactic"; STRATEGY = "strategy"; OTHER = "other"


# --- Positional feature snapshots ---

@dataclass(frozen=True, slots=True)
class KingSafety:
    castled: bool; shield_pawns: int; on_open_file: bool; xray_heavy: bool

@dataclass(frozen=True, slots=True)
class PawnStructure:
    islands: int; doubled: int; isolated: int; passed: int

@dataclass(frozen=True, slots=True)
class SpaceFeatures:
    center_presence: int; space_score: int

@dataclass(frozen=True, slots=True)
class DevelopmentFeatures:
    undeveloped_minors: int; development_score: int; queen_moved: bool

@dataclass(frozen=True, slots=True)
class PositionalSnapshot:
    king: KingSafety; pawns: PawnStructure; space: SpaceFeatures; development: DevelopmentFeatures


# --- Game and move records ---

@dataclass(frozen=True, slots=True)
class GameIdentity:
    index: int; source: Optional[str]; site: Optional[str]; event: Optional[str]
    date: Optional[str]; round: Optional[str]; white: Optional[str]; black: Optional[str]
    result: Optional[str]; eco: Optional[str]; opening: Optional[str]; variation: Optional[str]

@dataclass(frozen=True, slots=True)
class AnnotationSymbols:
    has_question_mark: bool; has_double_question: bool; has_exclamation: bool
    glyphs: Tuple[str, ...] = ()

@dataclass(frozen=True, slots=True)
class AlternativeSuggestion:
    san: str; line: str; cp_after_player: Optional[int]; gain_cp_vs_played: Optional[int]

@dataclass(frozen=True, slots=True)
class MistakeFlags:
    annotations: AnnotationSymbols; opening_phase: bool
    undeveloped_minors_before: int; undeveloped_minors_after: int
    snapshot_before: Optional[PositionalSnapshot] = None
    snapshot_after: Optional[PositionalSnapshot] = None
    opponent_replied_with_capture: Optional[bool] = None
    opponent_replied_with_check: Optional[bool] = None
    material_loss_soon_pawns: Optional[int] = None

@dataclass(frozen=True)
class PlayerMistake:
    game: GameIdentity; player_name: str; player_color: chess.Color
    ply: int; move_number: int; mover: chess.Color; move_label: str
    played_san: str; san_context_before: Tuple[str, ...]
    fen_before: FEN; fen_after: FEN
    cp_before_player: Optional[int]; cp_after_player: Optional[int]
    cp_swing_player: Optional[int]; cp_loss_abs: Optional[int]
    kind: MistakeKind; severity: Severity; flags: MistakeFlags
    best_alternative: Optional[AlternativeSuggestion] = None
    alternative_candidates: Tuple[AlternativeSuggestion, ...] = ()
    tags: Tuple[Theme, ...] = ()
    line_source: Optional[LineSource] = None
    summary_theme: SummaryTheme = SummaryTheme.UNKNOWN
    opponent_reply_san: Optional[str] = None
    opponent_reply_move_label: Optional[str] = None
    fen_after_opponent_reply: Optional[FEN] = None

@dataclass(frozen=True, slots=True)
class PendingEnrichment:
    """The single mistake of a game still waiting for the opponent's reply."""
    mistake: PlayerMistake; material_baseline: int


# --- Continuation replay and theme detection ---

@dataclass(frozen=True, slots=True)
class CaptureInfo:
    role: chess.PieceType; color: chess.Color; square: chess.Square

@dataclass(frozen=True, slots=True)
class MoveEvent:
    san: str; mover: chess.Color; from_square: chess.Square; to_square: chess.Square
    moved_role: chess.PieceType; promotion: Optional[chess.PieceType]
    capture: Optional[CaptureInfo]; is_check: bool; is_mate: bool
    is_en_passant: bool; is_castling: bool
    fen_before: FEN; fen_after: FEN
    material_diff_before: int; material_diff_after: int

    @property
    def is_capture(self) -> bool:
        return self.capture is not None

@dataclass(frozen=True, slots=True)
class ReplayResult:
    moves_played: int; final_fen: FEN; events: Tuple[MoveEvent, ...]

@dataclass(frozen=True, slots=True)
class ThemeContext:
    start_fen: FEN; final_fen: FEN; move_sequence: Tuple[str, ...]
    move_events: Tuple[MoveEvent, ...]; regression_events: Tuple[MoveEvent, ...]
    player_color: chess.Color; punisher_color: chess.Color; move_number: int
    moves_played: int; mate_in: Optional[int]
    start_material_diff: int; final_material_diff: int
    is_mate: bool; is_endgame: bool


# --- Aggregates and reports ---

@dataclass(frozen=True, slots=True)
class FrequentMistake:
    ply: int; move_number: int; san: str; kind: MistakeKind
    count: int; avg_cp_loss: Optional[float]; summary_theme: SummaryTheme

@dataclass(frozen=True)
class OpeningStat:
    key: str; player_color: chess.Color; opening_id: str; name: str
    eco: Optional[str]; games: int; plies_analyzed: int
    issue_counts: Dict[MistakeKind, int]; theme_counts: Dict[SummaryTheme, int]
    tag_counts: Dict[Theme, int]; frequent_mistakes: List[FrequentMistake]

@dataclass(frozen=True, slots=True)
class SchemeFrequency:
    signature: str; count: int

@dataclass(frozen=True)
class GlobalStats:
    issue_counts: Dict[MistakeKind, int]; theme_counts: Dict[SummaryTheme, int]
    tag_counts: Dict[Theme, int]; most_common_schemes: List[SchemeFrequency]

@dataclass(frozen=True)
class MistakeAnalysisReport:
    player_name: str; total_games_parsed: int; games_matched_player: int
    mistakes: List[PlayerMistake]; stats: GlobalStats; by_opening: List[OpeningStat]

@dataclass(frozen=True, slots=True)
class PawnStructureStat:
    signature: str; games: int; wins: int; draws: int; losses: int; win_rate: float

@dataclass(frozen=True)
class PawnStructureReport:
    player_name: str; color: chess.Color; move_number: int
    total_games_parsed: int; games_matched_player: int; games_reaching_move: int
    structures: List[PawnStructureStat] = field(default_factory=list)


# --- Classification pipeline ---

@dataclass(frozen=True, slots=True)
class ClassificationInput:
    cp_loss: int; severity: Severity; opening_phase: bool; played_san: str
    annotations: AnnotationSymbols; undeveloped_before: int; undeveloped_after: int
    best_alternative: Optional[AlternativeSuggestion]; alt_gain_abs: int
    options: "MistakeOptions"

@dataclass(frozen=True, slots=True)
class Classification:
    kind: Optional[MistakeKind]; severity: Severity


# --- Service Interfaces (Protocols) ---

@runtime_checkable
class Heuristic(Protocol):
    """The interface for a single, composable rule in the classification chain."""
    def apply(self, context: ClassificationInput, result: Classification) -> Classification: ...

class ThemeDetector(Protocol):
    """A pure function from a theme context to the tags it recognises."""
    def __call__(self, ctx: ThemeContext) -> List[Theme]: ...


# --- Orchestration ---

class GameStatus(str, Enum):
    MATCHED = "matched"; NO_TARGET_PLAYER = "no_target_player"; SETUP_ERROR = "setup_error"

@dataclass(frozen=True)
class GameAnalysisResult:
    """The outcome of processing one game, returned across process boundaries."""
    index: int; status: GameStatus
    player_color: Optional[chess.Color] = None
    mistakes: List[PlayerMistake] = field(default_factory=list)
    unparsed_plies: int = 0
    duration_seconds: float = 0.0
