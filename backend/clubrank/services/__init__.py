"""Internal application services (pure helpers, no I/O)."""

from .validation import ValidationError, validate_match_score, validate_participants
from .rating import (
    DEFAULT_PARAMETERS,
    PairRatingResult,
    PlayerRatingState,
    RatingParameters,
    RatingUpdate,
    compute_rating_update,
    next_streak_count,
)
from .inactivity import days_inactive

__all__ = [
    "validate_match_score",
    "validate_participants",
    "ValidationError",
    "DEFAULT_PARAMETERS",
    "PairRatingResult",
    "PlayerRatingState",
    "RatingParameters",
    "RatingUpdate",
    "compute_rating_update",
    "next_streak_count",
    "days_inactive",
]
