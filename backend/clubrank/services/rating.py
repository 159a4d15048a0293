"""Player rating engine.

Pure computation: given one winner/loser pairing and both players' prior
state, return new ratings and rating deltas. Nothing here touches the
database; persisting results is the job of
:mod:`clubrank.services.match_recording`.

The update has four parts:

1. A zero-sum performance adjustment (Elo-style expectation scaled by the
   normalized score margin).
2. A non-zero-sum activity adjustment: inflation for recently active players,
   linear decay once a player has been away longer than ``DECAY_START_DAYS``.
   Both use the *winner's* rating as their base for either side.
3. A hard floor at ``MIN_RATING``.
4. A streak bonus for significant wins by players already on a streak.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

BASE_K = 24.0
INFLATION_RATE = 0.0015
DECAY_RATE = 0.003
DECAY_START_DAYS = 15
BASELINE_RATING = 1000.0
MIN_RATING = 800.0
MARGIN_SCALE = 21.0
SCALE_FACTOR = 400.0
SIGNIFICANT_WIN_RATIO = 0.5
STREAK_BONUS_RATIO = 0.1
STREAK_BONUS_MIN_STREAK = 2


@dataclass(frozen=True)
class RatingParameters:
    base_k: float = BASE_K
    inflation_rate: float = INFLATION_RATE
    decay_rate: float = DECAY_RATE
    decay_start_days: int = DECAY_START_DAYS
    min_rating: float = MIN_RATING
    margin_scale: float = MARGIN_SCALE
    scale_factor: float = SCALE_FACTOR
    clamp_margin: bool = False

    @property
    def significant_win_threshold(self) -> float:
        return self.base_k * SIGNIFICANT_WIN_RATIO


DEFAULT_PARAMETERS = RatingParameters()


@dataclass(frozen=True)
class PlayerRatingState:
    """Snapshot of a player's rating state, read just before a match."""

    id: str
    rating: float
    streak_count: int | None = None
    last_played_at: datetime | None = None


@dataclass(frozen=True)
class RatingUpdate:
    new_rating: int
    rating_change: int


@dataclass(frozen=True)
class PairRatingResult:
    """Rounded updates for both sides plus the unrounded terms behind them.

    ``winner_change`` and ``loser_change`` exclude the streak bonus, which is
    reported separately in ``bonus`` because it is added after the floor.
    """

    winner: RatingUpdate
    loser: RatingUpdate
    winner_gain: float
    loser_loss: float
    winner_change: float = 0.0
    loser_change: float = 0.0
    bonus: float = 0.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going toward +infinity."""
    return int(math.floor(value + 0.5))


def expected_win_probability(
    rating: float, opponent_rating: float, scale_factor: float = SCALE_FACTOR
) -> float:
    """Logistic expectation that ``rating`` beats ``opponent_rating``."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


def score_margin(
    winner_score: int, loser_score: int, params: RatingParameters = DEFAULT_PARAMETERS
) -> float:
    """Normalized score dominance.

    Unclamped by default, so a win by more than ``margin_scale`` points yields
    a margin above 1.
    """
    margin = (winner_score - loser_score) / params.margin_scale
    if params.clamp_margin:
        margin = max(0.0, min(margin, 1.0))
    return margin


def performance_adjustment(
    winner_rating: float,
    loser_rating: float,
    winner_score: int,
    loser_score: int,
    params: RatingParameters = DEFAULT_PARAMETERS,
) -> tuple[float, float]:
    """Return ``(winner_gain, loser_loss)`` before activity adjustments.

    ``loser_loss`` goes negative once the margin exceeds 1.
    """
    margin = score_margin(winner_score, loser_score, params)
    expected_win = expected_win_probability(winner_rating, loser_rating, params.scale_factor)
    winner_gain = params.base_k * (1.0 - expected_win) * (1.0 + margin * 2.0)
    loser_loss = params.base_k * expected_win * (1.0 - margin)
    return winner_gain, loser_loss


def activity_inflation(
    days_inactive: int, base_rating: float, params: RatingParameters = DEFAULT_PARAMETERS
) -> float:
    active_days = max(0, params.decay_start_days - days_inactive)
    return params.inflation_rate * (active_days / params.decay_start_days) * base_rating


def activity_decay(
    days_inactive: int, base_rating: float, params: RatingParameters = DEFAULT_PARAMETERS
) -> float:
    return params.decay_rate * max(0, days_inactive - params.decay_start_days) * base_rating


def streak_bonus(
    winner_gain: float,
    streak_count: int | None,
    params: RatingParameters = DEFAULT_PARAMETERS,
) -> float:
    """Bonus for a significant win extending an existing streak of 2 or more."""
    if winner_gain <= params.significant_win_threshold:
        return 0.0
    if streak_count is None or streak_count < STREAK_BONUS_MIN_STREAK:
        return 0.0
    return params.base_k * STREAK_BONUS_RATIO * (streak_count + 1)


def compute_rating_update(
    winner: PlayerRatingState,
    loser: PlayerRatingState,
    winner_score: int,
    loser_score: int,
    days_inactive_winner: int,
    days_inactive_loser: int,
    params: RatingParameters = DEFAULT_PARAMETERS,
) -> PairRatingResult:
    """Compute post-match ratings for one winner/loser pairing.

    Scores must already be validated (``winner_score > loser_score``, both
    non-negative); no checks happen here. Internal arithmetic is floating
    point and only the returned values are rounded.
    """
    winner_gain, loser_loss = performance_adjustment(
        winner.rating, loser.rating, winner_score, loser_score, params
    )

    activity_base = winner.rating
    winner_change = (
        winner_gain
        + activity_inflation(days_inactive_winner, activity_base, params)
        - activity_decay(days_inactive_winner, activity_base, params)
    )
    loser_change = (
        -loser_loss
        + activity_inflation(days_inactive_loser, activity_base, params)
        - activity_decay(days_inactive_loser, activity_base, params)
    )

    new_winner_rating = max(params.min_rating, winner.rating + winner_change)
    new_loser_rating = max(params.min_rating, loser.rating + loser_change)

    bonus = streak_bonus(winner_gain, winner.streak_count, params)
    new_winner_rating += bonus

    return PairRatingResult(
        winner=RatingUpdate(
            new_rating=round_half_up(new_winner_rating),
            rating_change=round_half_up(winner_change + bonus),
        ),
        loser=RatingUpdate(
            new_rating=round_half_up(new_loser_rating),
            rating_change=round_half_up(loser_change),
        ),
        winner_gain=winner_gain,
        loser_loss=loser_loss,
        winner_change=winner_change,
        loser_change=loser_change,
        bonus=bonus,
    )


def next_streak_count(
    previous: int | None,
    rating_change: float,
    params: RatingParameters = DEFAULT_PARAMETERS,
) -> int:
    """Winner's streak after a match; a missing streak counts as 0."""
    if rating_change > params.significant_win_threshold:
        return (previous or 0) + 1
    return 0
