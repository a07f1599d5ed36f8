# chess_mistakes/core/summary_aggregator.py
"""
Provides pure functions to fold a run's mistakes into summary statistics.

Two views are produced:

1.  **Global stats:** per-kind, per-summary-theme and per-tag counts plus a
    frequency table of tag combinations ("schemes").
2.  **Per-opening stats:** buckets keyed by the player's colour and a
    normalized base opening name (falling back to the ECO code), each with
    its own counts and its most frequent distinct mistakes.

Every counter is initialised with all members of its enumeration so that
reports have a stable shape.
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Final, List, Optional, Set, Tuple, TYPE_CHECKING

import chess

from chess_mistakes.types import (FrequentMistake, GlobalStats, MistakeKind, OpeningStat,
                                  PlayerMistake, SchemeFrequency, SummaryTheme, Theme)

if TYPE_CHECKING:
    from chess_mistakes.config.settings import AggregationSettingsModel

DEFAULT_FREQUENT_MISTAKES_LIMIT: Final[int] = 15
DEFAULT_SCHEME_LIMIT: Final[int] = 20

_BASE_NAME_SEPARATORS: Final = re.compile(r"[,:;]")
_APOSTROPHES: Final = re.compile(r"[’']")
_PUNCTUATION: Final = re.compile(r"[.,;:!?'\"()\[\]{}]")
_JOINERS: Final = re.compile(r"[_\-]+")
_WHITESPACE: Final = re.compile(r"\s+")
_NON_ALNUM: Final = re.compile(r"[^A-Z0-9]")
_CAPITALS: Final = re.compile(r"[A-Z]")

FrequencyKey = Tuple[int, str, MistakeKind]


def _zeroed(enum_type) -> Dict:
    return {member: 0 for member in enum_type}


def base_opening_name(opening: Optional[str]) -> str:
    """
    Strips variation names and commentary from an Opening header.

    'Italian Game, Two Knights Defense' and 'Italian Game: Rousseau Gambit'
    both become 'Italian Game'.
    """
    if not opening:
        return ""
    text = opening.strip()
    text = _BASE_NAME_SEPARATORS.split(text)[0]
    text = text.split("(")[0]
    text = text.split(" - ")[0]
    text = text.split(" / ")[0]
    return text.strip()


def normalize_opening_id(base: str) -> str:
    """Lower-cases a base opening name and collapses punctuation and whitespace."""
    text = _APOSTROPHES.sub("", base.lower())
    text = _PUNCTUATION.sub(" ", text)
    text = _JOINERS.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def normalize_opening_name(opening: Optional[str]) -> str:
    """The bucket identifier of a raw Opening header."""
    return normalize_opening_id(base_opening_name(opening))


def normalize_eco(eco: Optional[str]) -> str:
    return _NON_ALNUM.sub("", (eco or "").strip().upper())


def pick_better_display(current: Optional[str], candidate: Optional[str]) -> Optional[str]:
    """Prefers a capitalized name over an all-lowercase one, then a clearly longer one."""
    cur = (current or "").strip()
    new = (candidate or "").strip()
    if not new:
        return cur or None
    if not cur:
        return new
    if not _CAPITALS.search(cur) and _CAPITALS.search(new):
        return new
    if len(new) > len(cur) + 2:
        return new
    return cur


def scheme_signature(tags) -> str:
    return " + ".join(sorted(tag.value for tag in set(tags)))


def build_global_stats(
    mistakes: List[PlayerMistake],
    settings: Optional["AggregationSettingsModel"] = None,
) -> GlobalStats:
    """
    Counts kinds, summary themes and tags across all mistakes and ranks the
    most common tag combinations. Mistakes without tags have no scheme.
    """
    scheme_limit = settings.scheme_limit if settings else DEFAULT_SCHEME_LIMIT
    issue_counts: Dict[MistakeKind, int] = _zeroed(MistakeKind)
    theme_counts: Dict[SummaryTheme, int] = _zeroed(SummaryTheme)
    tag_counts: Dict[Theme, int] = _zeroed(Theme)
    schemes: Counter[str] = Counter()

    for mistake in mistakes:
        issue_counts[mistake.kind] += 1
        theme_counts[mistake.summary_theme] += 1
        for tag in mistake.tags:
            tag_counts[tag] += 1
        signature = scheme_signature(mistake.tags)
        if signature:
            schemes[signature] += 1

    ranked = sorted(schemes.items(), key=lambda item: (-item[1], item[0]))[:scheme_limit]
    return GlobalStats(
        issue_counts=issue_counts,
        theme_counts=theme_counts,
        tag_counts=tag_counts,
        most_common_schemes=[SchemeFrequency(signature=s, count=c) for s, c in ranked],
    )


@dataclass
class _FrequencyEntry:
    move_number: int; summary_theme: SummaryTheme
    count: int = 0; loss_sum: int = 0; loss_seen: int = 0


@dataclass
class _OpeningBucket:
    key: str; player_color: chess.Color; opening_id: str
    display: Optional[str] = None
    ecos: Set[str] = field(default_factory=set)
    games: Set[int] = field(default_factory=set)
    plies_analyzed: int = 0
    issue_counts: Dict[MistakeKind, int] = field(default_factory=lambda: _zeroed(MistakeKind))
    theme_counts: Dict[SummaryTheme, int] = field(default_factory=lambda: _zeroed(SummaryTheme))
    tag_counts: Dict[Theme, int] = field(default_factory=lambda: _zeroed(Theme))
    frequencies: Dict[FrequencyKey, _FrequencyEntry] = field(default_factory=dict)

    def add(self, mistake: PlayerMistake) -> None:
        self.games.add(mistake.game.index)
        self.plies_analyzed += 1
        self.issue_counts[mistake.kind] += 1
        self.theme_counts[mistake.summary_theme] += 1
        for tag in mistake.tags:
            self.tag_counts[tag] += 1

        key = (mistake.ply, mistake.played_san, mistake.kind)
        entry = self.frequencies.setdefault(
            key, _FrequencyEntry(move_number=mistake.move_number, summary_theme=mistake.summary_theme)
        )
        entry.count += 1
        if mistake.cp_loss_abs is not None:
            entry.loss_sum += mistake.cp_loss_abs
            entry.loss_seen += 1

    def frequent_mistakes(self, limit: int) -> List[FrequentMistake]:
        items = [
            FrequentMistake(
                ply=ply, move_number=entry.move_number, san=san, kind=kind, count=entry.count,
                avg_cp_loss=entry.loss_sum / entry.loss_seen if entry.loss_seen else None,
                summary_theme=entry.summary_theme,
            )
            for (ply, san, kind), entry in self.frequencies.items()
        ]
        items.sort(key=lambda f: (-f.count, -(f.avg_cp_loss or 0.0)))
        return items[:limit]


def build_opening_stats(
    mistakes: List[PlayerMistake],
    settings: Optional["AggregationSettingsModel"] = None,
) -> List[OpeningStat]:
    """
    Groups mistakes by the player's colour and base opening.

    Variations of the same opening share a bucket. The ECO code is reported
    only when every game in the bucket agrees on it.

    Returns:
        Buckets sorted by game count (descending), then display name, then
        colour (White first).
    """
    limit = settings.frequent_mistakes_limit if settings else DEFAULT_FREQUENT_MISTAKES_LIMIT
    buckets: Dict[str, _OpeningBucket] = {}

    for mistake in mistakes:
        eco = normalize_eco(mistake.game.eco)
        base = base_opening_name(mistake.game.opening)
        primary_id = normalize_opening_id(base) or eco or "?"
        color_label = "white" if mistake.player_color == chess.WHITE else "black"
        key = f"{color_label}|{primary_id}"

        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = _OpeningBucket(
                key=key, player_color=mistake.player_color, opening_id=primary_id
            )
        if eco:
            bucket.ecos.add(eco)
        bucket.display = pick_better_display(bucket.display, base)
        bucket.add(mistake)

    stats: List[OpeningStat] = []
    for bucket in buckets.values():
        eco = next(iter(bucket.ecos)) if len(bucket.ecos) == 1 else None
        name = bucket.display or eco or bucket.opening_id
        stats.append(OpeningStat(
            key=bucket.key,
            player_color=bucket.player_color,
            opening_id=bucket.opening_id,
            name=name,
            eco=eco,
            games=len(bucket.games),
            plies_analyzed=bucket.plies_analyzed,
            issue_counts=bucket.issue_counts,
            theme_counts=bucket.theme_counts,
            tag_counts=bucket.tag_counts,
            frequent_mistakes=bucket.frequent_mistakes(limit),
        ))

    stats.sort(key=lambda s: (-s.games, s.name.lower(), s.player_color != chess.WHITE))
    return stats


def sort_mistakes(mistakes: List[PlayerMistake]) -> List[PlayerMistake]:
    """Largest loss first; records without a loss count as zero. Stable."""
    return sorted(mistakes, key=lambda m: -(m.cp_loss_abs or 0))
