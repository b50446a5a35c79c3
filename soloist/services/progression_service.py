"""
ProgressionEngine - Progression Orchestrator

Applies one user action at a time to a hunter's snapshot:
streak (attendance) -> entity rules + daily wins -> experience -> mission unlocks,
then persists everything with a single write.

Notifications are returned in the order the presentation layer shows them:
DailyWinCompleted, LeveledUp, RankedUp, MissionUnlocked...
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Sequence, Set
import logging

from soloist.config import EngineConfig
from soloist.db.store import ProgressionStore, ProgressSnapshot
from soloist.exceptions import AlreadyCompletedError, SoloistError
from soloist.models.events import (
    DailyWinCompleted,
    DailyWinRecorded,
    LeveledUp,
    MissionCompleted,
    MissionUnlocked,
    NotificationEvent,
    ProgressionEvent,
    QuestCompleted,
    RankedUp,
    TaskCompleted,
)
from soloist.models.mission import MissionBuckets, MissionCompletion, PredefinedMission
from soloist.models.quest import Quest
from soloist.models.user import DailyWinCategory, User
from soloist.progression import daily_wins, missions, quests, streak_system, xp_system
from soloist.utils.datetime_helpers import Clock, SystemClock

logger = logging.getLogger(__name__)


class EngineState(str, Enum):
    """Engine lifecycle around one logical event"""
    IDLE = "idle"
    APPLYING = "applying"


@dataclass
class ApplyResult:
    """
    Typed outcome of an engine call

    On failure `error` holds the typed rejection (InvalidAmountError,
    RecordNotFoundError, AlreadyCompletedError, NotAvailableError, ...) and
    nothing was written.
    """
    success: bool
    user: Optional[User] = None
    events: List[NotificationEvent] = field(default_factory=list)
    quests: List[Quest] = field(default_factory=list)
    error: Optional[SoloistError] = None

    @classmethod
    def failed(cls, error: SoloistError) -> "ApplyResult":
        return cls(success=False, error=error)


@dataclass
class _Mutation:
    """Working state of one apply() call, discarded on rejection"""
    user: User
    today: date
    reward: int = 0
    category: Optional[DailyWinCategory] = None
    task_id: Optional[str] = None
    quests: List[Quest] = field(default_factory=list)
    completions: List[MissionCompletion] = field(default_factory=list)
    events: List[NotificationEvent] = field(default_factory=list)


class ProgressionEngine:
    """
    Orchestrates the progression rules for one hunter per call.

    Responsibilities:
    - Streak tracking on every qualifying activity
    - Experience awards for tasks, quests and missions
    - Daily wins (one-time bonus per category per day)
    - Mission unlock detection after rank-ups or finished prerequisites
    - Single persistence write per call

    Calls for different users may run concurrently; callers must serialize
    apply() calls for the same user. State is tracked per user.
    """

    def __init__(
        self,
        store: ProgressionStore,
        config: Optional[EngineConfig] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize ProgressionEngine.

        Args:
            store: Persistence collaborator
            config: Engine tunables (defaults to EngineConfig())
            clock: Calendar source (defaults to the wall clock in config.timezone)
        """
        self.store = store
        self.config = config or EngineConfig()
        self.clock = clock or SystemClock(self.config.timezone)
        self._applying: Set[str] = set()
        logger.debug("ProgressionEngine initialized")

    @property
    def state(self) -> EngineState:
        """APPLYING while any user has an event in flight"""
        return EngineState.APPLYING if self._applying else EngineState.IDLE

    def state_of(self, user_id: str) -> EngineState:
        return EngineState.APPLYING if user_id in self._applying else EngineState.IDLE

    # ==========================================
    # Event application
    # ==========================================

    async def apply(self, user_id: str, event: ProgressionEvent) -> ApplyResult:
        """
        Apply one user action.

        Args:
            user_id: Hunter id
            event: TaskCompleted | QuestCompleted | MissionCompleted | DailyWinRecorded

        Returns:
            ApplyResult with the new snapshot and ordered notifications,
            or a failed result carrying the typed error
        """
        self._applying.add(user_id)
        try:
            return await self._apply(user_id, event)
        except SoloistError as e:
            logger.info(f"Rejected {event.kind} for user {user_id}: {e.__class__.__name__}")
            return ApplyResult.failed(e)
        finally:
            self._applying.discard(user_id)

    async def _apply(self, user_id: str, event: ProgressionEvent) -> ApplyResult:
        today = self.clock.today()
        user = await self.store.load_user(user_id)
        catalog = await self.store.load_mission_catalog()
        before = missions.visible_missions(catalog, user.rank, today, user.completed_task_ids)

        # Attendance first
        streak = streak_system.touch(user, today)
        mutation = _Mutation(user=streak.user, today=today)

        if isinstance(event, TaskCompleted):
            self._collect_task(mutation, event)
        elif isinstance(event, QuestCompleted):
            await self._collect_quest(mutation, event)
        elif isinstance(event, MissionCompleted):
            await self._complete_mission(mutation, event, catalog)
        elif isinstance(event, DailyWinRecorded):
            mutation.category = event.category
            mutation.task_id = event.task_id
        else:
            raise TypeError(f"Unsupported progression event: {event!r}")

        self._record_daily_win(mutation)
        self._award(mutation)
        await self._detect_unlocks(mutation, catalog, before)

        await self.store.save_snapshot(
            ProgressSnapshot(
                user=mutation.user,
                quests=mutation.quests,
                mission_completions=mutation.completions,
            )
        )

        logger.info(
            f"Applied {event.kind} for user {user_id}: "
            f"exp={mutation.user.experience}, level={mutation.user.level}, "
            f"rank={mutation.user.rank.value}, streak={mutation.user.streak_days}, "
            f"events={len(mutation.events)}"
        )
        return ApplyResult(success=True, user=mutation.user, events=mutation.events, quests=mutation.quests)

    def _collect_task(self, mutation: _Mutation, event: TaskCompleted) -> None:
        task = event.task
        if task.id in mutation.user.completed_task_ids:
            raise AlreadyCompletedError("task", task.id, user_id=mutation.user.id, operation="complete_task")

        mutation.user = mutation.user.model_copy(
            update={"completed_task_ids": [*mutation.user.completed_task_ids, task.id]}
        )
        mutation.reward += task.exp_reward
        mutation.category = task.category
        mutation.task_id = task.id

    async def _collect_quest(self, mutation: _Mutation, event: QuestCompleted) -> None:
        quest = await self.store.load_quest(mutation.user.id, event.quest_id)
        quests.ensure_completable(quest, mutation.today, mutation.user.id)

        completed = quest.model_copy(
            update={"completed": True, "completed_at": self.clock.now()},
            deep=True,
        )
        mutation.quests.append(completed)
        mutation.user = mutation.user.model_copy(
            update={"completed_task_ids": [*mutation.user.completed_task_ids, quest.id]}
        )
        mutation.reward += quest.exp_reward
        mutation.category = quest.category
        mutation.task_id = quest.id

    async def _complete_mission(
        self,
        mutation: _Mutation,
        event: MissionCompleted,
        catalog: Sequence[PredefinedMission],
    ) -> None:
        completions = await self.store.load_mission_completions(mutation.user.id)
        mission = next((m for m in catalog if m.id == event.mission_id), None)
        exp_amount = self._scaled(mission.exp_reward, mutation.user) if mission else None

        result = missions.complete_mission(
            mutation.user,
            event.mission_id,
            catalog,
            completions,
            mutation.today,
            level_thresholds=self.config.level_thresholds,
            rank_thresholds=self.config.rank_thresholds,
            completed_at=self.clock.now(),
            exp_amount=exp_amount,
            days_active=mutation.user.days_active(mutation.today),
        )
        mutation.completions.append(result.completion)
        mutation.user = result.user
        self._emit_award(mutation, result.award)

    def _record_daily_win(self, mutation: _Mutation) -> None:
        if mutation.category is None:
            return

        outcome = daily_wins.record_win(mutation.user, mutation.category, mutation.today, mutation.task_id)
        mutation.user = outcome.user
        if outcome.newly_completed:
            bonus = self.config.daily_win_exp_reward
            mutation.reward += bonus
            mutation.events.append(DailyWinCompleted(category=outcome.category, bonus_exp=bonus))

    def _award(self, mutation: _Mutation) -> None:
        if mutation.reward <= 0:
            return

        result = xp_system.award(
            mutation.user,
            self._scaled(mutation.reward, mutation.user),
            self.config.level_thresholds,
            self.config.rank_thresholds,
            mutation.user.days_active(mutation.today),
        )
        mutation.user = result.user
        self._emit_award(mutation, result)

    def _emit_award(self, mutation: _Mutation, result: xp_system.AwardResult) -> None:
        if result.leveled_up:
            mutation.events.append(
                LeveledUp(old_level=result.old_level, new_level=result.new_level, exp_gained=result.amount)
            )
        if result.ranked_up:
            mutation.events.append(RankedUp(old_rank=result.old_rank, new_rank=result.new_rank))

    async def _detect_unlocks(
        self,
        mutation: _Mutation,
        catalog: Sequence[PredefinedMission],
        before: MissionBuckets,
    ) -> None:
        after = missions.visible_missions(
            catalog, mutation.user.rank, mutation.today, mutation.user.completed_task_ids
        )
        unlocked = missions.newly_available(before, after)
        if not unlocked:
            return

        done = {c.mission_id for c in await self.store.load_mission_completions(mutation.user.id)}
        done.update(c.mission_id for c in mutation.completions)
        for mission in unlocked:
            if mission.id in done:
                continue
            mutation.events.append(MissionUnlocked(mission_id=mission.id, title=mission.title, rank=mission.rank))
            logger.info(f"Mission {mission.id} unlocked for user {mutation.user.id}")

    def _scaled(self, amount: int, user: User) -> int:
        if not self.config.rank_exp_bonus_enabled:
            return amount
        return xp_system.apply_exp_modifier(amount, xp_system.rank_exp_bonus(user.rank))

    # ==========================================
    # Read-only queries
    # ==========================================

    async def preview_missions(self, user_id: str) -> MissionBuckets:
        """
        Mission board for a hunter today.

        Read-only: failures are logged and an empty board is returned.
        """
        try:
            user = await self.store.load_user(user_id)
            catalog = await self.store.load_mission_catalog()
        except SoloistError as e:
            logger.warning(f"Mission preview unavailable for user {user_id}: {e.message}")
            return MissionBuckets()

        return missions.visible_missions(catalog, user.rank, self.clock.today(), user.completed_task_ids)

    async def mission_stats(self, user_id: str) -> missions.MissionStats:
        """
        Mission history: completed today/total, consecutive-day streak,
        missions left in the catalog and the next release time.

        Read-only: failures are logged and empty stats are returned.
        """
        try:
            completions = await self.store.load_mission_completions(user_id)
            catalog = await self.store.load_mission_catalog()
        except SoloistError as e:
            logger.warning(f"Mission stats unavailable for user {user_id}: {e.message}")
            return missions.MissionStats()

        now = self.clock.now()
        return missions.mission_stats(completions, catalog, now.date(), now.tzinfo)

    async def daily_win_board(self, user_id: str) -> daily_wins.DailyWinBoard:
        """Today's daily wins; categories last won on an earlier day show as open"""
        try:
            user = await self.store.load_user(user_id)
        except SoloistError as e:
            logger.warning(f"Daily wins unavailable for user {user_id}: {e.message}")
            return daily_wins.DailyWinBoard.empty()

        return daily_wins.daily_win_board(user, self.clock.today())

    # ==========================================
    # Other mutations
    # ==========================================

    async def register_user(self, user_id: str, name: str = "Hunter") -> ApplyResult:
        """Create a fresh hunter at level 1 with the lowest rank"""
        progress = xp_system.calculate_progress(0, self.config.level_thresholds, self.config.rank_thresholds)
        user = User(
            id=user_id,
            name=name,
            level=progress["level"],
            rank=progress["rank"],
            experience_to_next_level=progress["experience_to_next_level"],
            created_on=self.clock.today(),
        )
        try:
            await self.store.save_user(user)
        except SoloistError as e:
            return ApplyResult.failed(e)
        logger.info(f"Registered hunter {user_id} ({name})")
        return ApplyResult(success=True, user=user)

    async def add_quest(self, user_id: str, quest: Quest) -> ApplyResult:
        """Store a new quest for a hunter (no progression side effects)"""
        return await self._write_quests(user_id, [quest], operation="add_quest")

    async def toggle_quest_task(self, user_id: str, quest_id: str, task_index: int) -> ApplyResult:
        """Flip one checklist item of a quest; checklist items carry no reward"""
        try:
            quest = await self.store.load_quest(user_id, quest_id)
            updated = quests.toggle_task(quest, task_index)
        except SoloistError as e:
            return ApplyResult.failed(e)
        return await self._write_quests(user_id, [updated], operation="toggle_quest_task")

    async def sweep_missed_quests(self, user_id: str) -> ApplyResult:
        """Mark overdue quests missed and create their recovery quests"""
        try:
            existing = await self.store.list_quests(user_id)
        except SoloistError as e:
            return ApplyResult.failed(e)

        missed, recoveries = quests.sweep_missed(
            existing,
            self.clock.today(),
            self.config.recovery_window_days,
            self.config.recovery_reward_ratio,
        )
        if not missed:
            return ApplyResult(success=True)
        return await self._write_quests(user_id, missed + recoveries, operation="sweep_missed_quests")

    async def reset_progress(self, user_id: str) -> ApplyResult:
        """Explicit reset: experience, level and rank back to the start"""
        try:
            user = await self.store.load_user(user_id)
            reset_user = xp_system.reset(user, self.config.level_thresholds, self.config.rank_thresholds)
            await self.store.save_snapshot(ProgressSnapshot(user=reset_user))
        except SoloistError as e:
            return ApplyResult.failed(e)
        return ApplyResult(success=True, user=reset_user)

    async def _write_quests(self, user_id: str, changed: List[Quest], operation: str) -> ApplyResult:
        try:
            user = await self.store.load_user(user_id)
            await self.store.save_snapshot(ProgressSnapshot(user=user, quests=changed))
        except SoloistError as e:
            return ApplyResult.failed(e)
        logger.debug(f"{operation}: wrote {len(changed)} quests for user {user_id}")
        return ApplyResult(success=True, user=user, quests=changed)
