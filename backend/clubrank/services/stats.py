from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Match, MatchHistory, MatchParticipant, Player


@dataclass(frozen=True)
class MatchSummary:
    """Side line-ups and final score of one recorded match."""

    id: str
    side_a: tuple[str, ...]
    side_b: tuple[str, ...]
    score_a: int
    score_b: int
    winner_side: str

    @property
    def is_singles(self) -> bool:
        return len(self.side_a) == 1 and len(self.side_b) == 1

    @property
    def is_doubles(self) -> bool:
        return len(self.side_a) == 2 and len(self.side_b) == 2


@dataclass(frozen=True)
class LeaderboardEntry:
    player_id: str
    name: str
    rating: float
    bar_percent: float
    matches_played: int
    wins: int
    win_percent: float


@dataclass
class Rivalry:
    player1: str
    player2: str
    match_count: int = 0
    total_score_diff: int = 0
    player1_wins: int = 0
    player2_wins: int = 0

    @property
    def average_score_diff(self) -> float:
        return self.total_score_diff / self.match_count if self.match_count else 0.0


@dataclass
class Partnership:
    player1: str
    player2: str
    matches_played: int = 0
    matches_won: int = 0

    @property
    def win_rate(self) -> float:
        return self.matches_won / self.matches_played if self.matches_played else 0.0


def rating_trend(history: Iterable[MatchHistory]) -> List[tuple[datetime, float]]:
    """Return ``(date, rating_after)`` points in chronological order."""
    return [(h.date, h.rating_after) for h in sorted(history, key=lambda h: h.date)]


def compute_streaks(results: Sequence[bool]) -> Dict[str, int]:
    """Compute current, longest win, and longest loss streaks.

    ``current`` is positive for a winning run and negative for a losing run.
    """
    longest = {True: 0, False: 0}
    run_value: bool | None = None
    run_length = 0
    for won in results:
        if won == run_value:
            run_length += 1
        else:
            run_value, run_length = won, 1
        longest[won] = max(longest[won], run_length)

    current = 0
    if run_value is not None:
        current = run_length if run_value else -run_length
    return {
        "current": current,
        "longestWin": longest[True],
        "longestLoss": longest[False],
    }


def _bar_percent(value: float, min_val: float, max_val: float) -> float:
    """Place a rating on a 0-100 scale between the club's min and max.

    A neutral 50 is returned when every player has the same rating.
    """
    if max_val <= min_val:
        return 50.0
    return ((value - min_val) / (max_val - min_val)) * 100.0


def leaderboard(players: Sequence[Player]) -> List[LeaderboardEntry]:
    """Rank players by rating, highest first."""
    if not players:
        return []
    ratings = [p.rating for p in players]
    lo, hi = min(ratings), max(ratings)
    entries = []
    for p in sorted(players, key=lambda p: p.rating, reverse=True):
        played = p.matches_played or 0
        wins = p.wins or 0
        entries.append(
            LeaderboardEntry(
                player_id=p.id,
                name=p.name,
                rating=p.rating,
                bar_percent=_bar_percent(p.rating, lo, hi),
                matches_played=played,
                wins=wins,
                win_percent=(wins / played) * 100.0 if played else 0.0,
            )
        )
    return entries


def fierce_rivalries(
    matches: Iterable[MatchSummary], *, min_matches: int = 2, limit: int = 5
) -> List[Rivalry]:
    """Singles pairings with the closest average score difference."""
    rivalries: Dict[tuple[str, str], Rivalry] = {}
    for m in matches:
        if not m.is_singles:
            continue
        a, b = m.side_a[0], m.side_b[0]
        key = tuple(sorted((a, b)))
        rivalry = rivalries.setdefault(key, Rivalry(player1=key[0], player2=key[1]))
        rivalry.match_count += 1
        rivalry.total_score_diff += abs(m.score_a - m.score_b)
        winner = a if m.winner_side == "A" else b
        if winner == rivalry.player1:
            rivalry.player1_wins += 1
        else:
            rivalry.player2_wins += 1

    ranked = [r for r in rivalries.values() if r.match_count >= min_matches]
    ranked.sort(key=lambda r: (r.average_score_diff, -r.match_count))
    return ranked[:limit]


def team_synergies(
    matches: Iterable[MatchSummary], *, min_matches: int = 2, limit: int = 5
) -> List[Partnership]:
    """Doubles partnerships ranked by win rate, then wins, then matches played."""
    partnerships: Dict[tuple[str, str], Partnership] = {}
    for m in matches:
        if not m.is_doubles:
            continue
        for side, line_up in (("A", m.side_a), ("B", m.side_b)):
            key = tuple(sorted(line_up))
            team = partnerships.setdefault(key, Partnership(player1=key[0], player2=key[1]))
            team.matches_played += 1
            if m.winner_side == side:
                team.matches_won += 1

    ranked = [t for t in partnerships.values() if t.matches_played >= min_matches]
    ranked.sort(key=lambda t: (-t.win_rate, -t.matches_won, -t.matches_played))
    return ranked[:limit]


async def load_rating_history(session: AsyncSession, player_id: str) -> List[MatchHistory]:
    rows = (
        await session.execute(
            select(MatchHistory)
            .where(MatchHistory.player_id == player_id)
            .order_by(MatchHistory.date)
        )
    ).scalars().all()
    return list(rows)


async def load_match_summaries(session: AsyncSession) -> List[MatchSummary]:
    matches = (await session.execute(select(Match).order_by(Match.created_at))).scalars().all()
    if not matches:
        return []
    parts = (
        await session.execute(
            select(MatchParticipant).where(
                MatchParticipant.match_id.in_([m.id for m in matches])
            )
        )
    ).scalars().all()
    line_ups: Dict[str, Dict[str, tuple[str, ...]]] = defaultdict(dict)
    for part in parts:
        line_ups[part.match_id][part.side] = tuple(part.player_ids or ())

    summaries = []
    for m in matches:
        sides = line_ups.get(m.id, {})
        summaries.append(
            MatchSummary(
                id=m.id,
                side_a=sides.get("A", ()),
                side_b=sides.get("B", ()),
                score_a=m.score_a,
                score_b=m.score_b,
                winner_side=m.winner_side,
            )
        )
    return summaries
