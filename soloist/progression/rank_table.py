"""
Rank Table

Static, ordered mapping from cumulative experience to hunter rank.

Default brackets follow the level at which each rank starts:
    F 1–30, E 31–60, D 61–90, C 91–120, B 121–150,
    A 151–180, S 181–270, SS 271–365, SSS 366+
so each rank threshold is the cumulative experience of its first level.
"""

from typing import List, Optional, Sequence

from soloist.exceptions import ConfigurationError
from soloist.models.rank import Rank, RankThreshold
from soloist.progression.level_curve import build_level_thresholds

RANK_ORDER: List[Rank] = list(Rank)

RANK_START_LEVELS = {
    Rank.F: 1,
    Rank.E: 31,
    Rank.D: 61,
    Rank.C: 91,
    Rank.B: 121,
    Rank.A: 151,
    Rank.S: 181,
    Rank.SS: 271,
    Rank.SSS: 366,
}


def rank_index(rank: Rank) -> int:
    """Position of a rank in the closed rank order (F == 0)"""
    return RANK_ORDER.index(Rank(rank))


def build_default_rank_thresholds() -> List[RankThreshold]:
    """Rank thresholds derived from the default level curve"""
    level_thresholds = build_level_thresholds(max(RANK_START_LEVELS.values()))
    return [
        RankThreshold(rank=rank, min_experience=level_thresholds[start_level - 1])
        for rank, start_level in RANK_START_LEVELS.items()
    ]


DEFAULT_RANK_THRESHOLDS: List[RankThreshold] = build_default_rank_thresholds()


def validate_rank_thresholds(thresholds: Sequence[RankThreshold]) -> None:
    """
    Check rank table invariants

    - non-empty, first entry at 0 experience
    - ranks appear in rank order
    - experience thresholds strictly increase with rank index
    """
    if not thresholds:
        raise ConfigurationError(message="Rank table is empty", config_key="rank_thresholds")
    if thresholds[0].min_experience != 0:
        raise ConfigurationError(
            message="Lowest rank threshold must be 0 experience",
            config_key="rank_thresholds"
        )
    for previous, current in zip(thresholds, thresholds[1:]):
        if rank_index(current.rank) <= rank_index(previous.rank):
            raise ConfigurationError(
                message=f"Rank {current.rank.value} listed after {previous.rank.value}",
                config_key="rank_thresholds"
            )
        if current.min_experience <= previous.min_experience:
            raise ConfigurationError(
                message=(
                    f"Rank thresholds must strictly increase "
                    f"({previous.rank.value}={previous.min_experience}, "
                    f"{current.rank.value}={current.min_experience})"
                ),
                config_key="rank_thresholds"
            )


def rank_for_experience(
    total_exp: int,
    thresholds: Sequence[RankThreshold] = DEFAULT_RANK_THRESHOLDS,
    days_active: Optional[int] = None,
) -> Rank:
    """
    Highest rank whose threshold is <= total_exp

    Day requirements (min_days) only apply when days_active is given.
    Below every threshold the lowest rank of the table is returned.
    """
    result = thresholds[0].rank
    for threshold in thresholds:
        if threshold.min_experience > total_exp:
            break
        if days_active is not None and threshold.min_days is not None and days_active < threshold.min_days:
            break
        result = threshold.rank
    return result
