# chess_mistakes/core/pgn_parser.py
"""
Reads PGN text into arena move trees and derives per-game identity.

This module acts as an Anti-Corruption Layer between the `python-chess` reader
and the analyzer's own data contracts. It is lenient by design of the input
format: text that yields no game at all is retried once wrapped in a minimal
synthetic header block, and reader errors are collected per game rather than
raised.
"""
import io
import re
from typing import Dict, Final, List, Optional
from urllib.parse import urlparse

import chess
import chess.pgn
import structlog

from chess_mistakes.core.move_tree import ArenaBuilder, ParsedPgnGame
from chess_mistakes.types import GameIdentity

logger = structlog.get_logger(__name__)

SYNTHETIC_HEADERS: Final[str] = (
    '[Event "?"]\n[Site "?"]\n[Date "????.??.??"]\n[Round "?"]\n'
    '[White "?"]\n[Black "?"]\n[Result "*"]\n\n'
)

_NAME_PUNCTUATION: Final = re.compile(r"[.,;:_\-]+")
_WHITESPACE: Final = re.compile(r"\s+")


def _read_all(pgn_text: str) -> List[ParsedPgnGame]:
    handle = io.StringIO(pgn_text)
    games: List[ParsedPgnGame] = []
    while (game := chess.pgn.read_game(handle, Visitor=ArenaBuilder)) is not None:
        games.append(game)
    return games


def read_games(pgn_text: str) -> List[ParsedPgnGame]:
    """
    Parses every game in a PGN text blob.

    If the text is not blank but yields no game, it is wrapped in a synthetic
    header block and parsed once more before giving up.

    Args:
        pgn_text: One or more PGN games.

    Returns:
        The parsed games in document order (possibly empty).
    """
    games = _read_all(pgn_text)
    if not games and pgn_text.strip():
        logger.warning("No games found, retrying with synthetic headers.")
        games = _read_all(f"{SYNTHETIC_HEADERS}{pgn_text}\n")
    logger.debug("PGN text parsed.", games=len(games))
    return games


def extract_source_name(site_or_event: str) -> str:
    """
    Derives a human-readable source (e.g. 'Lichess') from a Site or Event tag.
    """
    text = (site_or_event or "").strip()
    if not text:
        return "Unknown"

    if re.match(r"^https?://", text, re.IGNORECASE):
        host = (urlparse(text).hostname or "").lower()
        if "chess.com" in host:
            return "Chess.com"
        if "lichess.org" in host:
            return "Lichess"
        if host:
            return host

    lowered = text.lower()
    if "chess.com" in lowered:
        return "Chess.com"
    if "lichess" in lowered:
        return "Lichess"
    return text


def build_game_identity(index: int, headers: Dict[str, str]) -> GameIdentity:
    """Collects the identifying header fields of a game."""
    site, event = headers.get("Site"), headers.get("Event")
    source_label = next((v for v in (site, event) if v and v != "?"), "")
    return GameIdentity(
        index=index,
        source=extract_source_name(source_label),
        site=site,
        event=event,
        date=headers.get("Date"),
        round=headers.get("Round"),
        white=headers.get("White"),
        black=headers.get("Black"),
        result=headers.get("Result"),
        eco=headers.get("ECO"),
        opening=headers.get("Opening"),
        variation=headers.get("Variation"),
    )


def normalize_player_name(name: Optional[str]) -> str:
    """Lower-cases a name and collapses punctuation and whitespace runs."""
    text = _NAME_PUNCTUATION.sub(" ", (name or "").lower())
    return _WHITESPACE.sub(" ", text).strip()


def detect_player_color(
    player_name: str,
    white: Optional[str],
    black: Optional[str],
    only_color: Optional[chess.Color] = None,
) -> Optional[chess.Color]:
    """
    Decides which side the target player had in a game.

    Normalized names are first tested for containment in either direction
    (White before Black); failing that, any single token of the player's name
    contained in a side's name decides. `only_color` restricts the match to
    one side.

    Returns:
        The player's color, or None when neither side matches.
    """
    player = normalize_player_name(player_name)
    if not player:
        return None

    sides = [(chess.WHITE, normalize_player_name(white)), (chess.BLACK, normalize_player_name(black))]
    if only_color is not None:
        sides = [(color, name) for color, name in sides if color == only_color]

    for color, name in sides:
        if name and (player in name or name in player):
            return color

    tokens = [token for token in player.split(" ") if token]
    for color, name in sides:
        if name and any(token in name for token in tokens):
            return color
    return None
