from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Float,
    Boolean,
    Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from .db import Base
from .services.rating import BASELINE_RATING


class Player(Base):
    __tablename__ = "player"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    rating = Column(Float, nullable=False, default=BASELINE_RATING)
    streak_count = Column(Integer, nullable=True, default=0)
    last_played_at = Column(DateTime(timezone=True), nullable=True)
    matches_played = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    win_rate = Column(Float, nullable=True)


class Match(Base):
    __tablename__ = "match"
    id = Column(String, primary_key=True)
    played_at = Column(DateTime(timezone=True), nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    score_a = Column(Integer, nullable=False)
    score_b = Column(Integer, nullable=False)
    winner_side = Column(String(1), nullable=False)  # "A" | "B"
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)


class MatchParticipant(Base):
    __tablename__ = "match_participant"
    id = Column(String, primary_key=True)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    side = Column(String, nullable=False)  # "A" | "B"
    player_ids = Column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False
    )


class MatchHistory(Base):
    """Per-player rating snapshot written once for every recorded match."""

    __tablename__ = "match_history"
    id = Column(String, primary_key=True)
    player_id = Column(String, ForeignKey("player.id"), nullable=False)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    rating_before = Column(Float, nullable=False)
    rating_after = Column(Float, nullable=False)
    rating_change = Column(Integer, nullable=False)
    is_winner = Column(Boolean, nullable=False)
    score_difference = Column(Integer, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_match_history_player_date", "player_id", "date"),
    )
