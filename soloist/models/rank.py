"""Rank models for hunter progression"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class Rank(str, Enum):
    """Hunter ranks, lowest to highest. Declaration order is the rank order."""
    F = "F"
    E = "E"
    D = "D"
    C = "C"
    B = "B"
    A = "A"
    S = "S"
    SS = "SS"
    SSS = "SSS"


class RankThreshold(BaseModel):
    """Minimum cumulative experience (and optionally days active) to hold a rank"""
    rank: Rank
    min_experience: int = Field(ge=0)
    min_days: Optional[int] = Field(default=None, ge=0)

    model_config = {"frozen": True}
