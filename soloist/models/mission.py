"""Predefined mission catalog and per-user completion models"""
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field

from soloist.models.rank import Rank


class PredefinedMission(BaseModel):
    """
    Catalog template for a rank- and day-gated mission

    The catalog is shared by every user. Completion is tracked separately
    per user in MissionCompletion records.
    """
    id: str
    title: str
    description: str = ""
    rank: Rank
    day: int = Field(ge=1)
    release_date: date
    expiry_date: Optional[date] = None
    is_hidden: bool = False
    is_special: bool = False
    required_tasks: list[str] = Field(default_factory=list)
    exp_reward: int = Field(gt=0)

    model_config = {"frozen": True}


class MissionCompletion(BaseModel):
    """Per-user completion record: (user_id, mission_id) -> completed_at"""
    user_id: str
    mission_id: str
    completed_at: datetime


class MissionBuckets(BaseModel):
    """Partition of the catalog as seen by one user on one day"""
    available: list[PredefinedMission] = Field(default_factory=list)
    locked: list[PredefinedMission] = Field(default_factory=list)
    upcoming_preview: list[PredefinedMission] = Field(default_factory=list)
    expired: list[PredefinedMission] = Field(default_factory=list)

    def available_ids(self) -> set[str]:
        return {mission.id for mission in self.available}
