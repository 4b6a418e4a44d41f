"""Experience points and level progression."""
import logging
import math

from n3_chronos.models import UserProgress
from n3_chronos.store import USER_PROGRESS_KEY

logger = logging.getLogger(__name__)

BASE_XP = 250
XP_GROWTH = 1.1
XP_FOR_LEVEL_UP = 10
XP_FOR_QUIZ_CORRECT_ANSWER = 5
XP_FOR_PRACTICE_CORRECT = 2


def xp_threshold(level: int) -> int:
    """XP needed to leave `level`: 250 at level 1, compounding 10% per level."""
    return math.floor(BASE_XP * XP_GROWTH ** (level - 1))


def load_user_progress(store) -> UserProgress:
    raw = store.load(USER_PROGRESS_KEY, None)
    if raw is None:
        return UserProgress()
    try:
        progress = UserProgress.from_dict(raw)
        valid = (
            progress.level >= 1
            and progress.xp_to_next_level == xp_threshold(progress.level)
            and 0 <= progress.xp < progress.xp_to_next_level
        )
    except (AttributeError, TypeError, ValueError):
        valid = False
    if not valid:
        logger.warning("Malformed user progress %r, using defaults", raw)
        return UserProgress()
    return progress


def save_user_progress(store, progress: UserProgress) -> bool:
    return store.save(USER_PROGRESS_KEY, progress.to_dict())


def apply_xp(progress: UserProgress, amount) -> list[int]:
    """Add XP and roll over into as many levels as it covers.

    Returns the levels reached, ascending. Afterwards
    0 <= progress.xp < progress.xp_to_next_level.
    """
    if amount < 0:
        raise ValueError(f"XP amount must be non-negative, got {amount}")
    progress.xp += amount
    reached = []
    while progress.xp >= progress.xp_to_next_level:
        progress.xp -= progress.xp_to_next_level
        progress.level += 1
        progress.xp_to_next_level = xp_threshold(progress.level)
        reached.append(progress.level)
    if reached:
        logger.info("Level up: now level %d", progress.level)
    return reached
