"""Domain models for hunter progression"""

from soloist.models.rank import Rank, RankThreshold
from soloist.models.user import User, DailyWinCategory, DailyWinProgress
from soloist.models.quest import Quest, QuestTask, Task, Difficulty, DIFFICULTY_EXP_REWARDS
from soloist.models.mission import PredefinedMission, MissionCompletion, MissionBuckets
from soloist.models.events import (
    TaskCompleted,
    QuestCompleted,
    MissionCompleted,
    DailyWinRecorded,
    ProgressionEvent,
    DailyWinCompleted,
    LeveledUp,
    RankedUp,
    MissionUnlocked,
    NotificationEvent,
)

__all__ = [
    "Rank",
    "RankThreshold",
    "User",
    "DailyWinCategory",
    "DailyWinProgress",
    "Quest",
    "QuestTask",
    "Task",
    "Difficulty",
    "DIFFICULTY_EXP_REWARDS",
    "PredefinedMission",
    "MissionCompletion",
    "MissionBuckets",
    "TaskCompleted",
    "QuestCompleted",
    "MissionCompleted",
    "DailyWinRecorded",
    "ProgressionEvent",
    "DailyWinCompleted",
    "LeveledUp",
    "RankedUp",
    "MissionUnlocked",
    "NotificationEvent",
]
