"""User-related Pydantic models"""
from datetime import date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from soloist.models.rank import Rank


class DailyWinCategory(str, Enum):
    """Daily win categories"""
    PHYSICAL = "physical"
    MENTAL = "mental"
    SPIRITUAL = "spiritual"
    INTELLIGENCE = "intelligence"


class DailyWinProgress(BaseModel):
    """Progress of one daily win category for one calendar day"""
    count: int = Field(default=0, ge=0)
    is_completed: bool = False
    last_updated_day: Optional[date] = None
    completed_tasks: list[str] = Field(default_factory=list)


def _empty_daily_wins() -> dict[DailyWinCategory, DailyWinProgress]:
    return {category: DailyWinProgress() for category in DailyWinCategory}


class User(BaseModel):
    """Hunter progression snapshot (one document per user)"""
    id: str
    name: str = "Hunter"
    level: int = Field(default=1, ge=1)
    experience: int = Field(default=0, ge=0)
    experience_to_next_level: int = Field(default=0, ge=0)
    rank: Rank = Rank.F
    gold: int = Field(default=0, ge=0)
    streak_days: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    daily_wins: dict[DailyWinCategory, DailyWinProgress] = Field(default_factory=_empty_daily_wins)
    last_active: Optional[date] = None
    # Set from the engine clock at registration
    created_on: date
    completed_task_ids: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_invariants(self) -> "User":
        if self.longest_streak < self.streak_days:
            raise ValueError("longest_streak must be >= streak_days")
        # Older documents may lack some categories
        for category in DailyWinCategory:
            self.daily_wins.setdefault(category, DailyWinProgress())
        return self

    def days_active(self, today: date) -> int:
        """Calendar days since the account was created, counting today"""
        return max(0, (today - self.created_on).days) + 1
