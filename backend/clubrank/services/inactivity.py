from __future__ import annotations

from datetime import datetime, timedelta

from ..time_utils import coerce_utc, utcnow

ONE_DAY = timedelta(days=1)


def days_inactive(
    last_played_at: datetime | str | None, *, now: datetime | None = None
) -> int:
    """Return whole days since ``last_played_at``, never negative.

    A player who has never played counts as 0 days inactive. Future
    timestamps (clock skew between writers) also clamp to 0.
    """
    last_played = coerce_utc(last_played_at)
    if last_played is None:
        return 0
    reference = coerce_utc(now) or utcnow()
    return max(0, (reference - last_played) // ONE_DAY)
