"""Record a finished match and apply its rating updates.

The rating engine rates one winner/loser pairing at a time. A doubles match
fans out into up to four pairings, all computed from the same pre-match
snapshot. Each player's unrounded contributions are summed and the final
rating is built the way the engine builds it for a single pairing: floor the
summed change, add the summed streak bonus, round once. A singles match
therefore stores exactly the engine's ``new_rating``.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import CLAMP_SCORE_MARGIN
from ..exceptions import PlayerNotFound
from ..models import Match, MatchHistory, MatchParticipant, Player
from ..schemas import (
    MatchHistoryOut,
    MatchSubmission,
    PlayerRatingChangeOut,
    RecordedMatchOut,
)
from ..time_utils import coerce_utc, utcnow
from .inactivity import days_inactive
from .rating import (
    PairRatingResult,
    PlayerRatingState,
    RatingParameters,
    compute_rating_update,
    next_streak_count,
    round_half_up,
)

logger = logging.getLogger(__name__)

PairOutcome = Tuple[str, str, PairRatingResult]


@dataclass
class RatingAccumulator:
    """Running total of one player's rating contributions across pairings."""

    player_id: str
    is_winner: bool
    rating_before: float
    streak_before: Optional[int]
    total_change: float = 0.0
    total_bonus: float = 0.0
    pairings: int = 0

    def add(self, change: float, bonus: float = 0.0) -> None:
        self.total_change += change
        self.total_bonus += bonus
        self.pairings += 1

    @property
    def rating_change(self) -> int:
        return round_half_up(self.total_change + self.total_bonus)

    def rating_after(self, params: RatingParameters) -> int:
        if not self.pairings:
            return round_half_up(self.rating_before)
        floored = max(params.min_rating, self.rating_before + self.total_change)
        return round_half_up(floored + self.total_bonus)

    def streak_after(self, params: RatingParameters) -> int:
        if not self.is_winner or not self.pairings:
            return 0
        return next_streak_count(self.streak_before, self.rating_change / self.pairings, params)


def default_parameters() -> RatingParameters:
    return RatingParameters(clamp_margin=CLAMP_SCORE_MARGIN)


def aggregate_pair_results(
    states: Dict[str, PlayerRatingState],
    pairings: Sequence[PairOutcome],
) -> Dict[str, RatingAccumulator]:
    """Fold per-pair engine results into one accumulator per player.

    ``pairings`` holds ``(winner_id, loser_id, result)`` tuples. Every pair
    result is computed from the same pre-match snapshot, so contributions are
    summed rather than letting a later pairing overwrite an earlier one.
    """
    totals: Dict[str, RatingAccumulator] = {}

    def _acc(pid: str, is_winner: bool) -> RatingAccumulator:
        acc = totals.get(pid)
        if acc is None:
            state = states[pid]
            acc = RatingAccumulator(
                player_id=pid,
                is_winner=is_winner,
                rating_before=state.rating,
                streak_before=state.streak_count,
            )
            totals[pid] = acc
        return acc

    for winner_id, loser_id, result in pairings:
        _acc(winner_id, True).add(result.winner_change, result.bonus)
        _acc(loser_id, False).add(result.loser_change)
    return totals


async def _load_players(
    session: AsyncSession, player_ids: Sequence[str]
) -> Dict[str, Player]:
    # Row locks serialize concurrent read-modify-write cycles on the same player.
    rows = (
        await session.execute(
            select(Player).where(Player.id.in_(player_ids)).with_for_update()
        )
    ).scalars().all()
    players = {p.id: p for p in rows}
    for pid in player_ids:
        if pid not in players:
            logger.error("Player not found while recording match: %s", pid)
            raise PlayerNotFound(pid)
    return players


async def record_match(
    session: AsyncSession,
    submission: MatchSubmission,
    *,
    params: Optional[RatingParameters] = None,
    now: Optional[datetime] = None,
) -> RecordedMatchOut:
    """Rate a completed match and persist the results.

    Runs the rating engine once per winner/loser pairing (up to four calls
    for doubles), sums each player's contributions, then updates the player
    rows and appends one ``MatchHistory`` row per player. The session is
    flushed but not committed.

    Inactivity is measured at ``now``, falling back to the submission's
    ``playedAt`` and then the current time.

    Raises:
        PlayerNotFound: If any participant is missing. Nothing is written.
    """
    params = params or default_parameters()
    recorded_at = coerce_utc(now) or submission.playedAt or utcnow()
    match_id = submission.id or uuid.uuid4().hex

    winner_ids = submission.winner_ids
    loser_ids = submission.loser_ids
    winner_score = submission.winner_score
    loser_score = submission.loser_score

    players = await _load_players(session, winner_ids + loser_ids)

    states: Dict[str, PlayerRatingState] = {}
    inactivity: Dict[str, int] = {}
    for pid, player in players.items():
        states[pid] = PlayerRatingState(
            id=pid,
            rating=float(player.rating),
            streak_count=player.streak_count,
            last_played_at=player.last_played_at,
        )
        inactivity[pid] = days_inactive(player.last_played_at, now=recorded_at)

    pair_results: List[PairOutcome] = []
    for winner_id in winner_ids:
        for loser_id in loser_ids:
            result = compute_rating_update(
                states[winner_id],
                states[loser_id],
                winner_score,
                loser_score,
                inactivity[winner_id],
                inactivity[loser_id],
                params,
            )
            logger.debug(
                "Pair %s beat %s: %+d / %+d",
                winner_id,
                loser_id,
                result.winner.rating_change,
                result.loser.rating_change,
            )
            pair_results.append((winner_id, loser_id, result))

    totals = aggregate_pair_results(states, pair_results)

    session.add(
        Match(
            id=match_id,
            played_at=submission.playedAt or recorded_at,
            duration_minutes=submission.durationMinutes,
            score_a=submission.score[0],
            score_b=submission.score[1],
            winner_side=submission.winner_side,
            created_by=submission.createdBy,
        )
    )
    for part in submission.participants:
        session.add(
            MatchParticipant(
                id=uuid.uuid4().hex,
                match_id=match_id,
                side=part.side,
                player_ids=list(part.playerIds),
            )
        )

    changes: List[PlayerRatingChangeOut] = []
    history: List[MatchHistoryOut] = []
    for pid in winner_ids + loser_ids:
        acc = totals[pid]
        player = players[pid]
        rating_after = acc.rating_after(params)
        streak_after = acc.streak_after(params)
        score_difference = winner_score - loser_score
        if not acc.is_winner:
            score_difference = -score_difference

        player.rating = rating_after
        player.streak_count = streak_after
        player.last_played_at = recorded_at
        player.matches_played = (player.matches_played or 0) + 1
        if acc.is_winner:
            player.wins = (player.wins or 0) + 1
        player.win_rate = (player.wins or 0) / player.matches_played

        session.add(
            MatchHistory(
                id=uuid.uuid4().hex,
                player_id=pid,
                match_id=match_id,
                rating_before=acc.rating_before,
                rating_after=rating_after,
                rating_change=acc.rating_change,
                is_winner=acc.is_winner,
                score_difference=score_difference,
                date=recorded_at,
            )
        )

        changes.append(
            PlayerRatingChangeOut(
                playerId=pid,
                isWinner=acc.is_winner,
                ratingBefore=acc.rating_before,
                ratingAfter=rating_after,
                ratingChange=acc.rating_change,
                streakCount=streak_after,
                daysInactive=inactivity[pid],
                pairings=acc.pairings,
            )
        )
        history.append(
            MatchHistoryOut(
                playerId=pid,
                matchId=match_id,
                ratingBefore=acc.rating_before,
                ratingAfter=rating_after,
                ratingChange=acc.rating_change,
                isWinner=acc.is_winner,
                scoreDifference=score_difference,
                date=recorded_at,
            )
        )

    await session.flush()

    logger.info(
        "Recorded match %s (%d-%d, side %s won); rated %d pairing(s) for %d player(s)",
        match_id,
        submission.score[0],
        submission.score[1],
        submission.winner_side,
        len(pair_results),
        len(totals),
    )

    return RecordedMatchOut(
        matchId=match_id,
        winnerSide=submission.winner_side,
        score=list(submission.score),
        players=changes,
        history=history,
    )
