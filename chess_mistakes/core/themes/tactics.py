# chess_mistakes/core/themes/tactics.py
"""
Tactical detectors.

Every detector is a pure function of a `ThemeContext`. Apart from the
hanging-piece, double-check and trapped-piece detectors, they return nothing
when the continuation is a bare immediate capture: that case is already
reported as a material blunder.

The geometric detectors (pin, skewer, x-ray, discovered attack and
interference) compare the position before and after a single punisher move
and only fire when that move creates (or, for interference, removes) the
pattern.
"""

from typing import Callable, Final, List

import chess

from chess_mistakes.core.chess_utils import PIECE_VALUES
from chess_mistakes.core.themes.context import (is_immediate_punish_capture, material_gain,
                                                punisher_captures, punisher_moves)
from chess_mistakes.core.themes.geometry import (LINE_PIECES, board_from_fen, has_line_attack,
                                                 has_pin, has_skewer, has_xray)
from chess_mistakes.types import MoveEvent, Theme, ThemeContext

FORK_MIN_GAIN_PAWNS: Final[int] = 3
DEFLECTION_SWING_PAWNS: Final[int] = 2
FORKING_PIECES: Final = (chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN)

BoardTest = Callable[[chess.BaseBoard, chess.Color, chess.Color], bool]


def _created_by_line_move(ctx: ThemeContext, test: BoardTest) -> bool:
    """Whether some punisher slider move turns `test` from false to true."""
    for event in punisher_moves(ctx):
        if event.moved_role not in LINE_PIECES:
            continue
        before = test(board_from_fen(event.fen_before), ctx.player_color, ctx.punisher_color)
        after = test(board_from_fen(event.fen_after), ctx.player_color, ctx.punisher_color)
        if not before and after:
            return True
    return False


def detect_capturing_defender(ctx: ThemeContext) -> List[Theme]:
    """A capture immediately followed by the punisher's capture of a more valuable piece."""
    if is_immediate_punish_capture(ctx):
        return []
    captures = punisher_captures(ctx)
    for first, following in zip(captures, captures[1:]):
        first_value = PIECE_VALUES[first.capture.role]
        next_value = PIECE_VALUES[following.capture.role]
        if next_value >= first_value + 1 and ctx.final_material_diff >= ctx.start_material_diff:
            return [Theme.CAPTURING_DEFENDER]
    return []


def detect_deflection(ctx: ThemeContext) -> List[Theme]:
    """The punisher gives up material and wins it back (or mates)."""
    if is_immediate_punish_capture(ctx):
        return []
    lowest = ctx.start_material_diff
    for event in punisher_moves(ctx):
        lowest = min(lowest, event.material_diff_after)
    dropped = lowest <= ctx.start_material_diff - DEFLECTION_SWING_PAWNS
    recovered = ctx.final_material_diff - lowest >= DEFLECTION_SWING_PAWNS
    if dropped and (recovered or ctx.is_mate):
        return [Theme.DEFLECTION]
    return []


def detect_discovered_attack(ctx: ThemeContext) -> List[Theme]:
    """A quiet non-king punisher move opens a line onto the player's king or queen."""
    if is_immediate_punish_capture(ctx):
        return []
    for event in punisher_moves(ctx):
        if event.is_capture or event.moved_role == chess.KING:
            continue
        had = has_line_attack(board_from_fen(event.fen_before), ctx.punisher_color, ctx.player_color)
        has = has_line_attack(board_from_fen(event.fen_after), ctx.punisher_color, ctx.player_color)
        if not had and has:
            return [Theme.DISCOVERED_ATTACK]
    return []


def detect_fork(ctx: ThemeContext) -> List[Theme]:
    """A quiet piece move followed directly by a winning capture, in a line with two or more captures."""
    if is_immediate_punish_capture(ctx):
        return []
    if len(punisher_captures(ctx)) < 2:
        return []
    moves = punisher_moves(ctx)
    for first, second in zip(moves, moves[1:]):
        if not second.is_capture or first.is_capture:
            continue
        if first.moved_role not in FORKING_PIECES:
            continue
        if second.material_diff_after - first.material_diff_before >= FORK_MIN_GAIN_PAWNS:
            return [Theme.FORK]
    return []


def detect_hanging_piece(ctx: ThemeContext) -> List[Theme]:
    """
    Material simply left en prise: either the punisher's first move is its
    only capture, or the line wins material with a single capture.
    """
    gain = material_gain(ctx)
    if gain <= 0:
        return []
    if not punisher_moves(ctx) or not punisher_captures(ctx):
        return []
    if is_immediate_punish_capture(ctx):
        return [Theme.HANGING_PIECE]
    if len(punisher_captures(ctx)) == 1 and gain >= 1:
        return [Theme.HANGING_PIECE]
    return []


def detect_double_check(ctx: ThemeContext) -> List[Theme]:
    """Flagged only from an explicit '++' marker in the SAN."""
    for event in ctx.move_events:
        if "++" in event.san:
            return [Theme.DOUBLE_CHECK]
    return []


def detect_double_threat(ctx: ThemeContext) -> List[Theme]:
    if is_immediate_punish_capture(ctx):
        return []
    moves = punisher_moves(ctx)
    captures = punisher_captures(ctx)
    has_quiet = any(not e.is_capture and not e.is_check and not e.is_mate for e in moves)
    has_check = any(e.is_check for e in moves)
    if has_quiet and (len(captures) >= 2 or (captures and has_check) or ctx.is_mate):
        return [Theme.DOUBLE_THREAT]
    return []


def detect_exposed_king(ctx: ThemeContext) -> List[Theme]:
    if is_immediate_punish_capture(ctx):
        return []
    checks = sum(1 for event in punisher_moves(ctx) if event.is_check)
    if checks >= 2 or (ctx.is_mate and checks >= 1):
        return [Theme.EXPOSED_KING]
    return []


def detect_interference(ctx: ThemeContext) -> List[Theme]:
    """A quiet punisher move cuts a line from the player's sliders onto the punisher's king or queen."""
    if is_immediate_punish_capture(ctx):
        return []
    for event in punisher_moves(ctx):
        if event.is_capture:
            continue
        before = has_line_attack(board_from_fen(event.fen_before), ctx.player_color, ctx.punisher_color)
        after = has_line_attack(board_from_fen(event.fen_after), ctx.player_color, ctx.punisher_color)
        if before and not after:
            return [Theme.INTERFERENCE]
    return []


def detect_intermezzo(ctx: ThemeContext) -> List[Theme]:
    """A punisher check inserted before a punisher capture two plies later."""
    if is_immediate_punish_capture(ctx):
        return []
    events = ctx.move_events
    for first, second in zip(events, events[2:]):
        if (first.mover == ctx.punisher_color and first.is_check
                and second.mover == ctx.punisher_color and second.is_capture):
            return [Theme.INTERMEZZO]
    return []


def detect_pin(ctx: ThemeContext) -> List[Theme]:
    if is_immediate_punish_capture(ctx):
        return []
    return [Theme.PIN] if _created_by_line_move(ctx, has_pin) else []


def detect_skewer(ctx: ThemeContext) -> List[Theme]:
    if is_immediate_punish_capture(ctx):
        return []
    return [Theme.SKEWER] if _created_by_line_move(ctx, has_skewer) else []


def detect_x_ray_attack(ctx: ThemeContext) -> List[Theme]:
    if is_immediate_punish_capture(ctx):
        return []
    return [Theme.X_RAY_ATTACK] if _created_by_line_move(ctx, has_xray) else []


def _is_trapped(event: MoveEvent, ctx: ThemeContext) -> bool:
    """Whether the piece about to be captured had no legal move and was attacked."""
    board = chess.Board(event.fen_before)
    board.turn = ctx.player_color
    board.ep_square = None
    target = event.capture.square
    piece = board.piece_at(target)
    if piece is None or piece.color != ctx.player_color or piece.piece_type == chess.KING:
        return False
    has_move = any(move.from_square == target for move in board.legal_moves)
    return not has_move and board.is_attacked_by(ctx.punisher_color, target)


def detect_trapped_piece(ctx: ThemeContext) -> List[Theme]:
    """A captured player piece that could not have moved anywhere before the capture."""
    for event in punisher_captures(ctx):
        if _is_trapped(event, ctx):
            return [Theme.TRAPPED_PIECE]
    return []
