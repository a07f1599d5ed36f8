# chess_mistakes/core/pawn_structures.py
"""
Pawn-structure statistics: how often the player reaches each structure at a
fixed move and how those games ended.
"""

from collections import defaultdict
from typing import Dict, List, Optional

import chess
import structlog

from chess_mistakes.core.board_analyzer import pawn_structure
from chess_mistakes.core.move_tree import ParsedPgnGame
from chess_mistakes.core.pgn_parser import detect_player_color
from chess_mistakes.core.position import parse_san_safely, starting_position
from chess_mistakes.exceptions import SetupError
from chess_mistakes.types import PawnStructure, PawnStructureReport, PawnStructureStat

logger = structlog.get_logger(__name__)

WIN, DRAW, LOSS = "win", "draw", "loss"


def structure_signature(structure: PawnStructure) -> str:
    return (
        f"islands={structure.islands} isolated={structure.isolated} "
        f"doubled={structure.doubled} passed={structure.passed}"
    )


def game_outcome(result: Optional[str], color: chess.Color) -> Optional[str]:
    """The game's outcome for `color`, or None for unfinished games."""
    if result == "1/2-1/2":
        return DRAW
    if result == "1-0":
        return WIN if color == chess.WHITE else LOSS
    if result == "0-1":
        return WIN if color == chess.BLACK else LOSS
    return None


def position_after_move(parsed: ParsedPgnGame, move_number: int, color: chess.Color) -> Optional[chess.Board]:
    """
    Replays the main line up to and including `color`'s move at `move_number`.

    Unparseable moves are skipped like in the mistake walk.

    Returns:
        The position right after that move, or None if the game ends first.

    Raises:
        SetupError: If the starting position is invalid.
    """
    board = starting_position(parsed.headers)
    for node in parsed.tree.mainline():
        if board.fullmove_number > move_number:
            return None
        mover, current_move = board.turn, board.fullmove_number
        move = parse_san_safely(board, node.san)
        if move is None:
            continue
        board.push(move)
        if mover == color and current_move == move_number:
            return board
    return None


def build_pawn_structure_report(
    games: List[ParsedPgnGame],
    player_name: str,
    move_number: int,
    color: chess.Color,
) -> PawnStructureReport:
    """
    Groups the player's games (with `color`) by the player's pawn structure
    right after their move at `move_number`.

    Buckets are sorted by game count (descending), then signature.
    """
    matched = 0
    reaching = 0
    tallies: Dict[str, Dict[str, int]] = defaultdict(lambda: {"games": 0, WIN: 0, DRAW: 0, LOSS: 0})

    for index, parsed in enumerate(games):
        player_color = detect_player_color(
            player_name, parsed.headers.get("White"), parsed.headers.get("Black"), only_color=color,
        )
        if player_color is None:
            continue
        matched += 1

        try:
            board = position_after_move(parsed, move_number, color)
        except SetupError as e:
            logger.warning("Skipping game with invalid setup.", game_index=index, error=str(e))
            continue
        if board is None:
            continue
        reaching += 1

        signature = structure_signature(pawn_structure(board, color))
        tally = tallies[signature]
        tally["games"] += 1
        outcome = game_outcome(parsed.headers.get("Result") or parsed.result, color)
        if outcome is not None:
            tally[outcome] += 1

    structures = [
        PawnStructureStat(
            signature=signature,
            games=tally["games"],
            wins=tally[WIN],
            draws=tally[DRAW],
            losses=tally[LOSS],
            win_rate=(tally[WIN] + 0.5 * tally[DRAW]) / tally["games"],
        )
        for signature, tally in tallies.items()
    ]
    structures.sort(key=lambda s: (-s.games, s.signature))

    return PawnStructureReport(
        player_name=player_name,
        color=color,
        move_number=move_number,
        total_games_parsed=len(games),
        games_matched_player=matched,
        games_reaching_move=reaching,
        structures=structures,
    )
