"""
Daily Win Tracker

One win per category per calendar day:
- physical
- mental
- spiritual
- intelligence

There is no background timer. A category rolls over lazily the first time
it is touched on a new day, so stale progress from yesterday never counts.
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional
import logging

from soloist.models.user import DailyWinCategory, DailyWinProgress, User

logger = logging.getLogger(__name__)

# Wins needed for a category to count as completed for the day
WIN_THRESHOLD = 1


@dataclass(frozen=True)
class DailyWinOutcome:
    """Result of recording one daily win"""
    user: User
    category: DailyWinCategory
    newly_completed: bool


def _rolled(progress: DailyWinProgress, today: date) -> DailyWinProgress:
    if progress.last_updated_day != today:
        return DailyWinProgress(last_updated_day=today)
    return progress.model_copy(deep=True)


def record_win(
    user: User,
    category: DailyWinCategory,
    today: date,
    task_id: Optional[str] = None,
) -> DailyWinOutcome:
    """
    Record a daily win for a category

    Args:
        user: Current snapshot (not mutated)
        category: Daily win category
        today: Calendar day in the user's time zone
        task_id: Task that earned the win (optional)

    Returns:
        DailyWinOutcome; newly_completed is True only on the transition to completed
    """
    category = DailyWinCategory(category)
    progress = _rolled(user.daily_wins[category], today)
    was_completed = progress.is_completed

    progress.count += 1
    progress.is_completed = progress.count >= WIN_THRESHOLD
    if task_id is not None:
        progress.completed_tasks.append(task_id)

    daily_wins = {key: value.model_copy(deep=True) for key, value in user.daily_wins.items()}
    daily_wins[category] = progress
    updated = user.model_copy(update={"daily_wins": daily_wins}, deep=True)

    newly_completed = progress.is_completed and not was_completed
    if newly_completed:
        logger.info(f"User {user.id} completed the {category.value} daily win for {today}")

    return DailyWinOutcome(user=updated, category=category, newly_completed=newly_completed)


def reset_stale_wins(user: User, today: date) -> User:
    """Roll every category that was last touched before today"""
    daily_wins = {category: _rolled(progress, today) for category, progress in user.daily_wins.items()}
    return user.model_copy(update={"daily_wins": daily_wins}, deep=True)


def all_wins_completed(user: User, today: date) -> bool:
    """Whether every category has been won today"""
    return all(
        progress.is_completed and progress.last_updated_day == today
        for progress in user.daily_wins.values()
    )


@dataclass(frozen=True)
class DailyWinBoard:
    """Today's view of the daily wins; stale categories show as not started"""
    wins: Dict[DailyWinCategory, DailyWinProgress]
    all_completed: bool

    def is_completed(self, category: DailyWinCategory) -> bool:
        return self.wins[DailyWinCategory(category)].is_completed

    @classmethod
    def empty(cls) -> "DailyWinBoard":
        return cls(wins={category: DailyWinProgress() for category in DailyWinCategory}, all_completed=False)


def daily_win_board(user: User, today: date) -> DailyWinBoard:
    """Read-only daily win state for today (the stored snapshot is not rolled)"""
    current = reset_stale_wins(user, today)
    return DailyWinBoard(wins=current.daily_wins, all_completed=all_wins_completed(current, today))
