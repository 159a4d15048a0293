from typing import Any, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator, field_validator, ConfigDict

from .config import MAX_POINTS_PER_SIDE
from .services.validation import (
    ValidationError,
    validate_match_score,
    validate_participants,
)
from .time_utils import require_utc


class Participant(BaseModel):
    side: Literal["A", "B"]
    playerIds: List[str]

    @field_validator("side", mode="before")
    @classmethod
    def _normalize_side(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("playerIds", mode="before")
    @classmethod
    def _strip_player_ids(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [v.strip() if isinstance(v, str) else v for v in value]
        return value


class MatchSubmission(BaseModel):
    """A completed singles or doubles match as logged by the club."""

    id: Optional[str] = Field(default=None, min_length=1, max_length=100)
    participants: List[Participant]
    score: List[int]
    playedAt: Optional[datetime] = None
    durationMinutes: Optional[int] = Field(default=None, ge=0)
    createdBy: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("playedAt")
    @classmethod
    def _normalize_played_at(cls, v: datetime | None) -> datetime | None:
        return require_utc(v, field_name="playedAt")

    @field_validator("score", mode="before")
    @classmethod
    def _validate_score(cls, value: Any) -> Any:
        try:
            return validate_match_score(value, max_points_per_side=MAX_POINTS_PER_SIDE)
        except ValidationError as exc:
            raise ValueError(exc.detail) from exc

    @model_validator(mode="after")
    def _validate_line_up(self) -> "MatchSubmission":
        sides = [p.side for p in self.participants]
        if len(sides) != len(set(sides)):
            raise ValueError("participants must have unique sides")
        try:
            validate_participants({p.side: p.playerIds for p in self.participants})
        except ValidationError as exc:
            raise ValueError(exc.detail) from exc
        return self

    def side_players(self, side: str) -> List[str]:
        for part in self.participants:
            if part.side == side:
                return list(part.playerIds)
        return []

    @property
    def winner_side(self) -> str:
        return "A" if self.score[0] > self.score[1] else "B"

    @property
    def loser_side(self) -> str:
        return "B" if self.winner_side == "A" else "A"

    @property
    def winner_ids(self) -> List[str]:
        return self.side_players(self.winner_side)

    @property
    def loser_ids(self) -> List[str]:
        return self.side_players(self.loser_side)

    @property
    def winner_score(self) -> int:
        return max(self.score)

    @property
    def loser_score(self) -> int:
        return min(self.score)


class PlayerRatingChangeOut(BaseModel):
    playerId: str
    isWinner: bool
    ratingBefore: float
    ratingAfter: float
    ratingChange: int
    streakCount: int
    daysInactive: int
    pairings: int


class MatchHistoryOut(BaseModel):
    playerId: str
    matchId: str
    ratingBefore: float
    ratingAfter: float
    ratingChange: int
    isWinner: bool
    scoreDifference: int
    date: datetime


class RecordedMatchOut(BaseModel):
    matchId: str
    winnerSide: Literal["A", "B"]
    score: List[int]
    players: List[PlayerRatingChangeOut]
    history: List[MatchHistoryOut]
