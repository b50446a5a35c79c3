"""
Quest lifecycle

created -> tasks toggled -> completed (reward exactly once)
created -> deadline passes while incomplete -> missed -> recovery quest
"""

from datetime import date, timedelta
from typing import List, Tuple
from uuid import uuid4
import logging
import math

from soloist.exceptions import AlreadyCompletedError, LockReason, NotAvailableError, ValidationError
from soloist.models.quest import Quest

logger = logging.getLogger(__name__)


def check_missed(quest: Quest, today: date) -> bool:
    """A quest is missed once its deadline day has passed without completion"""
    return (not quest.completed) and quest.deadline is not None and today > quest.deadline


def ensure_completable(quest: Quest, today: date, user_id: str) -> None:
    """
    Validate that a quest can be completed now

    Raises:
        AlreadyCompletedError: quest was completed before
        NotAvailableError: quest is missed (deadline passed)
    """
    if quest.completed:
        raise AlreadyCompletedError("quest", quest.id, user_id=user_id, operation="complete_quest")
    if quest.missed or check_missed(quest, today):
        raise NotAvailableError(quest.id, LockReason.QUEST_MISSED, user_id=user_id, operation="complete_quest")


def toggle_task(quest: Quest, index: int) -> Quest:
    """Flip the completion flag of one checklist item (no reward)"""
    if not 0 <= index < len(quest.tasks):
        raise ValidationError(
            message=f"Quest {quest.id} has no task at index {index}",
            field="task_index",
            value=index,
        )
    updated = quest.model_copy(deep=True)
    updated.tasks[index].completed = not updated.tasks[index].completed
    return updated


def make_recovery_quest(
    quest: Quest,
    today: date,
    window_days: int = 1,
    reward_ratio: float = 0.5,
) -> Quest:
    """
    Build the recovery variant of a missed quest

    Tasks are reset, the reward is scaled down and a fresh deadline is set.
    """
    reward = max(1, math.floor(quest.exp_reward * reward_ratio))
    return Quest(
        id=str(uuid4()),
        title=f"Recovery: {quest.title}",
        description=quest.description,
        is_main_quest=quest.is_main_quest,
        is_daily=quest.is_daily,
        difficulty=quest.difficulty,
        category=quest.category,
        exp_reward=reward,
        deadline=today + timedelta(days=window_days),
        is_recovery_quest=True,
        recovers_quest_id=quest.id,
        tasks=[task.model_copy(update={"completed": False}) for task in quest.tasks],
    )


def sweep_missed(
    quests: List[Quest],
    today: date,
    window_days: int = 1,
    reward_ratio: float = 0.5,
) -> Tuple[List[Quest], List[Quest]]:
    """
    Mark overdue quests as missed and create their recovery quests

    Recovery quests are never recovered again.

    Returns:
        (quests newly marked missed, new recovery quests)
    """
    missed: List[Quest] = []
    recoveries: List[Quest] = []

    for quest in quests:
        if quest.missed or not check_missed(quest, today):
            continue
        missed.append(quest.model_copy(update={"missed": True}, deep=True))
        if not quest.is_recovery_quest:
            recoveries.append(make_recovery_quest(quest, today, window_days, reward_ratio))

    if missed:
        logger.info(f"Marked {len(missed)} quests missed, created {len(recoveries)} recovery quests")
    return missed, recoveries
