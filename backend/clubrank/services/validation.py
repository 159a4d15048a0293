from typing import Any, Dict, List, Optional, Sequence

MATCH_SIDES = ("A", "B")
MIN_PLAYERS_PER_SIDE = 1
MAX_PLAYERS_PER_SIDE = 2


class ValidationError(Exception):
    """Raised when a submitted match result is invalid."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


def validate_match_score(
    score: Sequence[Any],
    *,
    max_points_per_side: Optional[int] = 30,
) -> List[int]:
    """Validate a final ``[A, B]`` score and return it as integers.

    Rules:
    - Exactly two values, one per side
    - Values must be integers >= 0 (booleans are rejected)
    - Values must be <= ``max_points_per_side`` (if provided)
    - Ties are not allowed
    """

    if not isinstance(score, Sequence) or isinstance(score, (str, bytes)):
        raise ValidationError("Score must be provided as a sequence of two integers.")
    if len(score) != len(MATCH_SIDES):
        raise ValidationError("Score must include exactly one value per side.")

    normalized: List[int] = []
    for side, raw in zip(MATCH_SIDES, score):
        # Reject booleans explicitly (bool is a subclass of int in Python)
        if isinstance(raw, bool):
            raise ValidationError(f"Side {side} score must be an integer (not a boolean).")
        if isinstance(raw, float) and not raw.is_integer():
            raise ValidationError(f"Side {side} score must be an integer.")
        try:
            value = int(raw)
        except (TypeError, ValueError):
            raise ValidationError(f"Side {side} score must be an integer.")

        if value < 0:
            raise ValidationError(f"Side {side} score must be >= 0.")
        if max_points_per_side is not None and value > max_points_per_side:
            raise ValidationError(
                f"Side {side} score must be <= {max_points_per_side}."
            )
        normalized.append(value)

    if normalized[0] == normalized[1]:
        raise ValidationError("Match cannot end in a tie.")

    return normalized


def validate_participants(side_players: Dict[str, List[str]]) -> None:
    """Validate the player line-up of a singles or doubles match."""

    if sorted(side_players) != list(MATCH_SIDES):
        raise ValidationError("Matches require exactly two sides, A and B.")

    seen: set[str] = set()
    for side in MATCH_SIDES:
        players = side_players[side]
        if not MIN_PLAYERS_PER_SIDE <= len(players) <= MAX_PLAYERS_PER_SIDE:
            raise ValidationError(
                f"Side {side} must have {MIN_PLAYERS_PER_SIDE} or "
                f"{MAX_PLAYERS_PER_SIDE} players."
            )
        for pid in players:
            if not isinstance(pid, str) or not pid.strip():
                raise ValidationError(f"Side {side} has an empty player id.")
            if pid in seen:
                raise ValidationError(f"Player '{pid}' appears more than once.")
            seen.add(pid)
