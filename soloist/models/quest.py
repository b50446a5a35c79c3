"""Quest and task models"""
from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from soloist.models.user import DailyWinCategory


class Difficulty(str, Enum):
    """Quest/task difficulty"""
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    BOSS = "boss"


# Default experience per difficulty when no explicit reward is given
DIFFICULTY_EXP_REWARDS: dict[Difficulty, int] = {
    Difficulty.EASY: 50,
    Difficulty.NORMAL: 100,
    Difficulty.HARD: 200,
    Difficulty.BOSS: 500,
}


class Task(BaseModel):
    """A standalone task; completing it awards experience and may count as a daily win"""
    id: str
    title: str
    description: str = ""
    category: Optional[DailyWinCategory] = None
    difficulty: Difficulty = Difficulty.NORMAL
    exp_reward: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _default_reward(self) -> "Task":
        if self.exp_reward is None:
            self.exp_reward = DIFFICULTY_EXP_REWARDS[self.difficulty]
        return self


class QuestTask(BaseModel):
    """Checklist item inside a quest (no reward of its own)"""
    description: str
    completed: bool = False


class Quest(BaseModel):
    """Main, side, daily or recovery quest"""
    id: str
    title: str
    description: str = ""
    is_main_quest: bool = False
    is_daily: bool = False
    difficulty: Difficulty = Difficulty.NORMAL
    category: Optional[DailyWinCategory] = None
    exp_reward: Optional[int] = Field(default=None, gt=0)
    completed: bool = False
    completed_at: Optional[datetime] = None
    deadline: Optional[date] = None
    missed: bool = False
    is_recovery_quest: bool = False
    recovers_quest_id: Optional[str] = None
    tasks: list[QuestTask] = Field(default_factory=list)

    @model_validator(mode="after")
    def _default_reward(self) -> "Quest":
        if self.exp_reward is None:
            self.exp_reward = DIFFICULTY_EXP_REWARDS[self.difficulty]
        return self

    @property
    def all_tasks_completed(self) -> bool:
        return all(task.completed for task in self.tasks)
