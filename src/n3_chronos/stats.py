"""Daily streak and unlocked achievements."""
import logging
from datetime import datetime

from n3_chronos.dates import is_same_day, is_yesterday
from n3_chronos.models import UserStats
from n3_chronos.store import USER_STATS_KEY

logger = logging.getLogger(__name__)


def load_user_stats(store) -> UserStats:
    raw = store.load(USER_STATS_KEY, None)
    if raw is None:
        return UserStats()
    try:
        return UserStats.from_dict(raw)
    except (AttributeError, TypeError, ValueError):
        logger.warning("Malformed user stats, using defaults")
        return UserStats()


def save_user_stats(store, stats: UserStats) -> bool:
    return store.save(USER_STATS_KEY, stats.to_dict())


def check_daily_login(stats: UserStats, now: datetime) -> str:
    """Advance the streak for a login at `now`.

    Returns "unchanged" (already logged in today), "continued" (last login
    was yesterday) or "reset" (any longer gap, or no previous login).
    """
    last = stats.last_login
    if last is not None and is_same_day(last, now):
        return "unchanged"
    if last is not None and is_yesterday(last, now):
        stats.streak += 1
        stats.last_login = now
        logger.info("Streak continued: %d days", stats.streak)
        return "continued"
    stats.streak = 1
    stats.last_login = now
    logger.info("Streak reset")
    return "reset"


def add_achievements(stats: UserStats, achievement_ids: list[str]) -> list[str]:
    """Append ids not yet unlocked. Returns the ones actually added."""
    added = []
    for achievement_id in achievement_ids:
        if achievement_id not in stats.achievements:
            stats.achievements.append(achievement_id)
            added.append(achievement_id)
    return added
