"""
Experience Ledger

Converts experience awards into level and rank changes for a hunter.

Rules:
- Awards must be strictly positive (InvalidAmountError otherwise)
- Level is the highest level whose cumulative threshold <= experience
- Rank is looked up in the rank table from the same total
- Jumps across several levels/ranks resolve straight to the final values
- Every award also pays gold: 2 gold per full 5 EXP
- At the top of either table experience keeps accumulating, level/rank stay pinned

The ledger never persists anything; it returns a new snapshot.
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import logging
import math

from soloist.exceptions import InvalidAmountError
from soloist.models.quest import DIFFICULTY_EXP_REWARDS, Difficulty
from soloist.models.rank import Rank, RankThreshold
from soloist.models.user import User
from soloist.progression.level_curve import (
    build_level_thresholds,
    experience_to_next,
    level_for_experience,
)
from soloist.progression.rank_table import (
    DEFAULT_RANK_THRESHOLDS,
    rank_for_experience,
    rank_index,
)

logger = logging.getLogger(__name__)

DEFAULT_LEVEL_THRESHOLDS = build_level_thresholds()

# Gold paid per experience award: 2 gold for every full 5 EXP
GOLD_PER_EXP_STEP = 2
EXP_PER_GOLD_STEP = 5

RANK_EXP_BONUS: dict[Rank, float] = {
    Rank.F: 1.0,
    Rank.E: 1.1,
    Rank.D: 1.2,
    Rank.C: 1.3,
    Rank.B: 1.4,
    Rank.A: 1.5,
    Rank.S: 1.6,
    Rank.SS: 1.7,
    Rank.SSS: 1.8,
}


@dataclass(frozen=True)
class AwardResult:
    """Outcome of one experience award"""
    user: User
    amount: int
    old_level: int
    new_level: int
    old_rank: Rank
    new_rank: Rank
    gold_earned: int = 0

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level

    @property
    def ranked_up(self) -> bool:
        return rank_index(self.new_rank) > rank_index(self.old_rank)


def gold_for_experience(amount: int) -> int:
    """Gold earned alongside an experience award"""
    return (amount // EXP_PER_GOLD_STEP) * GOLD_PER_EXP_STEP


def calculate_progress(
    total_exp: int,
    level_thresholds: Sequence[int] = DEFAULT_LEVEL_THRESHOLDS,
    rank_thresholds: Sequence[RankThreshold] = DEFAULT_RANK_THRESHOLDS,
    days_active: Optional[int] = None,
) -> dict:
    """
    Derive level, rank and remaining experience from a total

    Returns:
        {
            'level': int,
            'rank': Rank,
            'experience_to_next_level': int
        }
    """
    level = level_for_experience(total_exp, level_thresholds)
    return {
        "level": level,
        "rank": rank_for_experience(total_exp, rank_thresholds, days_active),
        "experience_to_next_level": experience_to_next(total_exp, level, level_thresholds),
    }


def award(
    user: User,
    amount: int,
    level_thresholds: Sequence[int] = DEFAULT_LEVEL_THRESHOLDS,
    rank_thresholds: Sequence[RankThreshold] = DEFAULT_RANK_THRESHOLDS,
    days_active: Optional[int] = None,
) -> AwardResult:
    """
    Award experience to a hunter and recompute level and rank

    Args:
        user: Current snapshot (not mutated)
        amount: Experience to add, must be > 0
        level_thresholds: Cumulative level table
        rank_thresholds: Rank table
        days_active: Days since account creation, for ranks with day requirements

    Returns:
        AwardResult with the updated snapshot and level/rank transitions

    Raises:
        InvalidAmountError: amount <= 0
    """
    if amount <= 0:
        raise InvalidAmountError(amount, user_id=user.id, operation="award")

    new_total = user.experience + amount
    gold_earned = gold_for_experience(amount)
    progress = calculate_progress(new_total, level_thresholds, rank_thresholds, days_active)

    updated = user.model_copy(
        update={
            "experience": new_total,
            "level": progress["level"],
            "rank": progress["rank"],
            "experience_to_next_level": progress["experience_to_next_level"],
            "gold": user.gold + gold_earned,
        },
        deep=True,
    )

    result = AwardResult(
        user=updated,
        amount=amount,
        old_level=user.level,
        new_level=updated.level,
        old_rank=user.rank,
        new_rank=updated.rank,
        gold_earned=gold_earned,
    )

    logger.info(
        f"Awarded {amount} EXP to user {user.id}. "
        f"Total: {new_total} EXP, Level: {updated.level}, Rank: {updated.rank.value}, Gold: +{gold_earned}"
    )
    if result.leveled_up:
        logger.info(f"User {user.id} leveled up from {user.level} to {updated.level}!")
    if result.ranked_up:
        logger.info(f"User {user.id} ranked up from {user.rank.value} to {updated.rank.value}!")

    return result


def reset(
    user: User,
    level_thresholds: Sequence[int] = DEFAULT_LEVEL_THRESHOLDS,
    rank_thresholds: Sequence[RankThreshold] = DEFAULT_RANK_THRESHOLDS,
) -> User:
    """Explicit progress reset: experience back to 0, lowest level and rank (gold and streaks kept)"""
    progress = calculate_progress(0, level_thresholds, rank_thresholds)
    logger.info(f"Resetting progress for user {user.id} (was {user.experience} EXP)")
    return user.model_copy(
        update={
            "experience": 0,
            "level": progress["level"],
            "rank": progress["rank"],
            "experience_to_next_level": progress["experience_to_next_level"],
        },
        deep=True,
    )


def exp_for_difficulty(difficulty: Difficulty) -> int:
    """Default experience reward for a difficulty"""
    return DIFFICULTY_EXP_REWARDS[Difficulty(difficulty)]


def rank_exp_bonus(rank: Rank) -> float:
    """Experience multiplier granted by a rank (F has none)"""
    return RANK_EXP_BONUS.get(Rank(rank), 1.0)


def apply_exp_modifier(base_exp: int, modifier: float) -> int:
    """Apply a multiplier to an experience amount, rounding down"""
    return math.floor(base_exp * modifier)
