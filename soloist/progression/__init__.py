"""
Progression rules for the hunter role-play

This module turns completed activity into progression:
- Rank table and level curve
- Experience ledger (levels, ranks)
- Mission availability by rank and calendar day
- Daily wins per category
- Consecutive-day streaks
"""

from soloist.progression.rank_table import rank_for_experience, rank_index, DEFAULT_RANK_THRESHOLDS
from soloist.progression.xp_system import award, calculate_progress, AwardResult
from soloist.progression.missions import visible_missions, classify_mission, complete_mission
from soloist.progression.daily_wins import record_win
from soloist.progression.streak_system import touch

__all__ = [
    "rank_for_experience",
    "rank_index",
    "DEFAULT_RANK_THRESHOLDS",
    "award",
    "calculate_progress",
    "AwardResult",
    "visible_missions",
    "classify_mission",
    "complete_mission",
    "record_win",
    "touch",
]
