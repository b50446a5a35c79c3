"""Inbound progression events and outbound notification events"""
from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field

from soloist.models.quest import Task
from soloist.models.rank import Rank
from soloist.models.user import DailyWinCategory


# ==========================================
# Inbound (user actions)
# ==========================================

class TaskCompleted(BaseModel):
    kind: Literal["task_completed"] = "task_completed"
    task: Task


class QuestCompleted(BaseModel):
    kind: Literal["quest_completed"] = "quest_completed"
    quest_id: str


class MissionCompleted(BaseModel):
    kind: Literal["mission_completed"] = "mission_completed"
    mission_id: str


class DailyWinRecorded(BaseModel):
    kind: Literal["daily_win_recorded"] = "daily_win_recorded"
    category: DailyWinCategory
    task_id: Optional[str] = None


ProgressionEvent = Annotated[
    Union[TaskCompleted, QuestCompleted, MissionCompleted, DailyWinRecorded],
    Field(discriminator="kind"),
]


# ==========================================
# Outbound (notifications for the presentation layer)
# ==========================================

class DailyWinCompleted(BaseModel):
    kind: Literal["daily_win_completed"] = "daily_win_completed"
    category: DailyWinCategory
    bonus_exp: int = 0


class LeveledUp(BaseModel):
    kind: Literal["leveled_up"] = "leveled_up"
    old_level: int
    new_level: int
    exp_gained: int


class RankedUp(BaseModel):
    kind: Literal["ranked_up"] = "ranked_up"
    old_rank: Rank
    new_rank: Rank


class MissionUnlocked(BaseModel):
    kind: Literal["mission_unlocked"] = "mission_unlocked"
    mission_id: str
    title: str
    rank: Rank


NotificationEvent = Union[DailyWinCompleted, LeveledUp, RankedUp, MissionUnlocked]
