"""
Streak Tracking System

Tracks consecutive days of qualifying activity.

Logic:
- Same calendar day as last activity: already counted, no change
- Next calendar day: streak continues (+1)
- Gap of more than one day: streak resets to 1
- First activity ever: streak starts at 1
- Longest streak is kept as max(longest, current)

Days are calendar dates in the user's time zone, never elapsed hours.
"""

from dataclasses import dataclass
from datetime import date, timedelta
import logging

from soloist.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakOutcome:
    """Result of touching the streak"""
    user: User
    extended: bool
    broken: bool


def touch(user: User, today: date) -> StreakOutcome:
    """
    Count today's activity towards the streak

    Args:
        user: Current snapshot (not mutated)
        today: Calendar day in the user's time zone

    Returns:
        StreakOutcome with the updated snapshot
    """
    last_date = user.last_active
    streak = user.streak_days
    extended = False
    broken = False

    if last_date is None:
        streak = 1
        extended = True
    elif today == last_date:
        pass
    elif today == last_date + timedelta(days=1):
        streak += 1
        extended = True
    elif today > last_date:
        broken = user.streak_days > 0
        logger.info(
            f"User {user.id} streak broken. "
            f"Was {user.streak_days}, gap was {(today - last_date).days} days"
        )
        streak = 1
    else:
        # Clock went backwards; keep the recorded streak as is
        logger.warning(f"User {user.id} activity on {today} precedes last activity {last_date}")
        return StreakOutcome(user=user.model_copy(deep=True), extended=False, broken=False)

    updated = user.model_copy(
        update={
            "streak_days": streak,
            "longest_streak": max(user.longest_streak, streak),
            "last_active": today,
        },
        deep=True,
    )

    if streak != user.streak_days:
        logger.info(f"Updated streak for user {user.id}: {user.streak_days} → {streak} days")

    return StreakOutcome(user=updated, extended=extended, broken=broken)
