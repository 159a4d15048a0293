#!/usr/bin/env python3
"""Admin helper to record a finished match and apply its rating updates."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import datetime
from typing import Optional

from pydantic import ValidationError

from clubrank import db
from clubrank.exceptions import DomainException
from clubrank.schemas import MatchSubmission
from clubrank.services.match_recording import record_match
from clubrank.utils.sentry import init_sentry

logger = logging.getLogger("record_match")


def _parse_score(raw: str) -> list[int]:
    try:
        a, b = raw.split("-", 1)
        return [int(a), int(b)]
    except ValueError:
        raise argparse.ArgumentTypeError(f"score must look like 21-15 (got {raw!r})")


def _parse_played_at(raw: str) -> datetime:
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"played-at must be an ISO-8601 timestamp (got {raw!r})"
        )


def _build_submission(
    side_a: list[str],
    side_b: list[str],
    score: list[int],
    *,
    match_id: Optional[str],
    played_at: Optional[datetime],
    duration: Optional[int],
) -> MatchSubmission:
    payload = {
        "participants": [
            {"side": "A", "playerIds": side_a},
            {"side": "B", "playerIds": side_b},
        ],
        "score": score,
    }
    if match_id:
        payload["id"] = match_id
    if played_at:
        payload["playedAt"] = played_at
    if duration is not None:
        payload["durationMinutes"] = duration
    return MatchSubmission.model_validate(payload)


async def main() -> int:
    parser = argparse.ArgumentParser(
        description=(
            "Record a singles or doubles match and update every participant's "
            "rating, streak and match history."
        )
    )
    parser.add_argument(
        "--side-a", nargs="+", required=True, help="Player id(s) on side A (1 or 2)"
    )
    parser.add_argument(
        "--side-b", nargs="+", required=True, help="Player id(s) on side B (1 or 2)"
    )
    parser.add_argument(
        "--score", type=_parse_score, required=True, help="Final score as A-B, e.g. 21-15"
    )
    parser.add_argument("--match-id", help="Explicit match identifier")
    parser.add_argument(
        "--played-at",
        type=_parse_played_at,
        help="ISO-8601 timestamp with a timezone offset",
    )
    parser.add_argument("--duration", type=int, help="Match duration in minutes")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and print the updates without writing them to the database.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log per-pairing results")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_sentry()

    try:
        submission = _build_submission(
            args.side_a,
            args.side_b,
            args.score,
            match_id=args.match_id,
            played_at=args.played_at,
            duration=args.duration,
        )
    except ValidationError as exc:
        parser.error(str(exc))

    try:
        engine = db.get_engine()
    except RuntimeError as exc:
        parser.error(str(exc))

    try:
        async with db.AsyncSessionLocal() as session:
            try:
                result = await record_match(session, submission)
            except DomainException as exc:
                await session.rollback()
                logger.error("Match not recorded: %s", exc.detail or exc.title)
                return 1

            print(json.dumps(result.model_dump(mode="json"), indent=2, sort_keys=True))

            if args.dry_run:
                await session.rollback()
                print("Dry run; no updates written.")
                return 0

            await session.commit()
            print("Match recorded.")
            return 0
    finally:
        await engine.dispose()


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
