import logging
import os

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return default

    try:
        value = int(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid integer (got %r); defaulting to %d",
            name,
            raw_value,
            default,
        )
        return default

    if value < minimum:
        logger.warning("%s must be >= %d; defaulting to %d", name, minimum, default)
        return default

    return value


def _env_flag(name: str, default: bool = False) -> bool:
    """
    Interpret an environment variable as a boolean switch:
      - '1', 'true', 'yes', 'on' (any case) enable it
      - '0', 'false', 'no', 'off' disable it
      - anything else keeps the default
    """
    raw_value = (os.getenv(name) or "").strip().lower()
    if raw_value in {"1", "true", "yes", "on"}:
        return True
    if raw_value in {"0", "false", "no", "off"}:
        return False
    if raw_value:
        logger.warning("%s is not a valid flag (got %r); defaulting to %s", name, raw_value, default)
    return default


# Match logger form cap; scores above this are rejected before rating.
MAX_POINTS_PER_SIDE = _env_int("MAX_POINTS_PER_SIDE", 30, minimum=1)

# Clamp the normalized score margin to [0, 1]. Off keeps blowout wins
# beyond 21 points able to push the loser's rating up.
CLAMP_SCORE_MARGIN = _env_flag("CLAMP_SCORE_MARGIN")
