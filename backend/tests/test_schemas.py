from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from clubrank.schemas import MatchSubmission


def _payload(**overrides):
    payload = {
        "participants": [
            {"side": "A", "playerIds": ["p1", "p2"]},
            {"side": "B", "playerIds": ["p3", "p4"]},
        ],
        "score": [15, 21],
    }
    payload.update(overrides)
    return payload


def test_doubles_submission_exposes_winning_side():
    sub = MatchSubmission.model_validate(_payload())

    assert sub.winner_side == "B"
    assert sub.loser_side == "A"
    assert sub.winner_ids == ["p3", "p4"]
    assert sub.loser_ids == ["p1", "p2"]
    assert (sub.winner_score, sub.loser_score) == (21, 15)


def test_sides_and_ids_are_normalized():
    sub = MatchSubmission.model_validate(
        _payload(
            participants=[
                {"side": "a", "playerIds": [" p1 "]},
                {"side": "b ", "playerIds": ["p2"]},
            ],
            score=[21, 3],
        )
    )
    assert sub.winner_ids == ["p1"]
    assert sub.loser_ids == ["p2"]


def test_played_at_is_normalized_to_utc():
    sub = MatchSubmission.model_validate(
        _payload(playedAt="2026-05-01T20:00:00+02:00")
    )
    assert sub.playedAt == datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc)


def test_naive_played_at_is_rejected():
    with pytest.raises(ValidationError, match="playedAt must include a timezone offset"):
        MatchSubmission.model_validate(_payload(playedAt="2026-05-01T20:00:00"))


@pytest.mark.parametrize(
    "overrides, msg",
    [
        ({"score": [21, 21]}, "tie"),
        ({"score": [31, 12]}, "<= 30"),
        ({"score": [21]}, "exactly one value per side"),
        (
            {
                "participants": [
                    {"side": "A", "playerIds": ["p1"]},
                    {"side": "B", "playerIds": ["p1"]},
                ]
            },
            "more than once",
        ),
        (
            {
                "participants": [
                    {"side": "A", "playerIds": ["p1", "p2", "p3"]},
                    {"side": "B", "playerIds": ["p4"]},
                ]
            },
            "1 or 2 players",
        ),
        (
            {
                "participants": [
                    {"side": "A", "playerIds": ["p1"]},
                    {"side": "A", "playerIds": ["p2"]},
                ]
            },
            "unique sides",
        ),
        ({"durationMinutes": -5}, "greater than or equal to 0"),
        ({"winner": "team1"}, "Extra inputs are not permitted"),
    ],
)
def test_rejects_invalid_submissions(overrides, msg):
    with pytest.raises(ValidationError) as exc:
        MatchSubmission.model_validate(_payload(**overrides))
    assert msg in str(exc.value)
