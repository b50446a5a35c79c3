"""
Mission Availability Filter

Decides which predefined missions a hunter can see and complete.

Each catalog entry is classified with this precedence:
1. expired      - expiry_date set and today is past it (terminal)
2. locked       - mission rank above the hunter's rank (also an upcoming preview)
3. locked       - release_date still in the future
4. locked       - required tasks not all completed
5. available    - everything else

Classification is a pure query. Completion lives in per-user
MissionCompletion records, never on the shared catalog entry.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional, Sequence
import logging

from soloist.exceptions import (
    AlreadyCompletedError,
    LockReason,
    NotAvailableError,
    RecordNotFoundError,
)
from soloist.models.mission import MissionBuckets, MissionCompletion, PredefinedMission
from soloist.models.rank import Rank, RankThreshold
from soloist.models.user import User
from soloist.progression import xp_system
from soloist.progression.rank_table import DEFAULT_RANK_THRESHOLDS, rank_index
from soloist.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)

# A new mission opens this long after the last completion
MISSION_RELEASE_INTERVAL = timedelta(hours=24)


def classify_mission(
    mission: PredefinedMission,
    user_rank: Rank,
    today: date,
    completed_task_ids: Iterable[str] = (),
) -> Optional[LockReason]:
    """
    Classify one catalog entry

    Returns:
        None when the mission is available, otherwise the first LockReason
        in precedence order
    """
    if mission.expiry_date is not None and today > mission.expiry_date:
        return LockReason.EXPIRED
    if rank_index(mission.rank) > rank_index(user_rank):
        return LockReason.RANK_TOO_LOW
    if mission.release_date > today:
        return LockReason.NOT_RELEASED
    if mission.required_tasks:
        done = set(completed_task_ids)
        if not all(task_id in done for task_id in mission.required_tasks):
            return LockReason.PREREQUISITES_INCOMPLETE
    return None


def visible_missions(
    catalog: Sequence[PredefinedMission],
    user_rank: Rank,
    today: date,
    completed_task_ids: Iterable[str] = (),
) -> MissionBuckets:
    """
    Partition the catalog into available / locked / upcoming_preview / expired

    Every rank-locked mission is also an upcoming preview. Hiding is left to
    the presentation layer (see PredefinedMission.is_hidden).
    """
    done = set(completed_task_ids)
    buckets = MissionBuckets()

    for mission in catalog:
        reason = classify_mission(mission, user_rank, today, done)

        if reason is None:
            buckets.available.append(mission)
        elif reason == LockReason.EXPIRED:
            buckets.expired.append(mission)
        else:
            buckets.locked.append(mission)
            if reason == LockReason.RANK_TOO_LOW:
                buckets.upcoming_preview.append(mission)

    return buckets


def newly_available(before: MissionBuckets, after: MissionBuckets) -> List[PredefinedMission]:
    """Missions available in `after` that were not available in `before` (catalog order)"""
    previous = before.available_ids()
    return [mission for mission in after.available if mission.id not in previous]


def completion_day(completion: MissionCompletion, tz: Optional[tzinfo] = None) -> date:
    """Calendar day of a completion in the given zone (UTC when naive or no zone given)"""
    completed_at = completion.completed_at
    if completed_at.tzinfo is None:
        completed_at = completed_at.replace(tzinfo=timezone.utc)
    return completed_at.astimezone(tz or timezone.utc).date()


def has_completed_mission_on(
    completions: Iterable[MissionCompletion],
    day: date,
    tz: Optional[tzinfo] = None,
) -> bool:
    """Whether any mission completion falls on the given calendar day"""
    return any(completion_day(completion, tz) == day for completion in completions)


def mission_streak(completions: Sequence[MissionCompletion], today: date, tz: Optional[tzinfo] = None) -> int:
    """
    Consecutive days with at least one mission completion, ending today

    Zero when nothing was completed today.
    """
    streak = 0
    day = today
    while has_completed_mission_on(completions, day, tz):
        streak += 1
        day -= timedelta(days=1)
    return streak


def next_mission_release(completions: Sequence[MissionCompletion]) -> Optional[datetime]:
    """The next mission opens 24 hours after the most recent completion"""
    if not completions:
        return None
    return max(completion.completed_at for completion in completions) + MISSION_RELEASE_INTERVAL


@dataclass(frozen=True)
class MissionStats:
    """Mission history summary for one hunter"""
    completed_today: int = 0
    total_completed: int = 0
    streak: int = 0
    remaining: int = 0
    next_release: Optional[datetime] = None


def mission_stats(
    completions: Sequence[MissionCompletion],
    catalog: Sequence[PredefinedMission],
    today: date,
    tz: Optional[tzinfo] = None,
) -> MissionStats:
    """
    Summarize a hunter's mission history

    Args:
        completions: This user's completion records
        catalog: Mission catalog
        today: Calendar day in the user's time zone
        tz: Zone used to place completion timestamps on calendar days
    """
    done = {completion.mission_id for completion in completions}
    return MissionStats(
        completed_today=sum(1 for completion in completions if completion_day(completion, tz) == today),
        total_completed=len(completions),
        streak=mission_streak(completions, today, tz),
        remaining=sum(1 for mission in catalog if mission.id not in done),
        next_release=next_mission_release(completions),
    )


@dataclass(frozen=True)
class MissionCompletionResult:
    """Outcome of completing a mission"""
    completion: MissionCompletion
    award: xp_system.AwardResult

    @property
    def user(self) -> User:
        return self.award.user


def complete_mission(
    user: User,
    mission_id: str,
    catalog: Sequence[PredefinedMission],
    completions: Iterable[MissionCompletion],
    today: date,
    level_thresholds: Sequence[int] = xp_system.DEFAULT_LEVEL_THRESHOLDS,
    rank_thresholds: Sequence[RankThreshold] = DEFAULT_RANK_THRESHOLDS,
    completed_at: Optional[datetime] = None,
    exp_amount: Optional[int] = None,
    days_active: Optional[int] = None,
) -> MissionCompletionResult:
    """
    Complete a predefined mission for one hunter

    Args:
        user: Current snapshot (not mutated)
        mission_id: Catalog id
        catalog: Mission catalog
        completions: This user's existing completion records
        today: Calendar day in the user's time zone
        completed_at: Timestamp for the record (defaults to now_utc())
        exp_amount: Override of the mission's reward (rank bonus applied by the caller)
        days_active: Days since account creation, for ranks with day requirements

    Raises:
        RecordNotFoundError: mission id not in the catalog
        AlreadyCompletedError: the user already completed this mission
        NotAvailableError: mission is expired or locked (reason attached)
    """
    mission = next((m for m in catalog if m.id == mission_id), None)
    if mission is None:
        raise RecordNotFoundError(
            message=f"Mission {mission_id} not found in catalog",
            record_type="Mission",
            record_id=mission_id,
            user_id=user.id,
            operation="complete_mission",
        )

    if any(c.mission_id == mission_id and c.user_id == user.id for c in completions):
        raise AlreadyCompletedError("mission", mission_id, user_id=user.id, operation="complete_mission")

    reason = classify_mission(mission, user.rank, today, user.completed_task_ids)
    if reason is not None:
        raise NotAvailableError(mission_id, reason, user_id=user.id, operation="complete_mission")

    award = xp_system.award(
        user,
        exp_amount if exp_amount is not None else mission.exp_reward,
        level_thresholds,
        rank_thresholds,
        days_active,
    )
    completion = MissionCompletion(
        user_id=user.id,
        mission_id=mission_id,
        completed_at=completed_at or now_utc(),
    )

    logger.info(f"User {user.id} completed mission {mission_id} ({mission.title})")
    return MissionCompletionResult(completion=completion, award=award)
