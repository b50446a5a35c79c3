"""
Level Curve

Experience needed to go from level L to L+1 (hard scaling, quadratic per bracket):

    20L²                  1 ≤ L ≤ 30
    18(L−30)² + 18,000   31 ≤ L ≤ 60
    22(L−60)² + 45,000   61 ≤ L ≤ 90
    25(L−90)² + 90,000   91 ≤ L ≤ 120
    30(L−120)² + 180,000 121 ≤ L ≤ 150
    35(L−150)² + 315,000 151 ≤ L ≤ 180
    40(L−180)² + 495,000 181 ≤ L ≤ 270
    45(L−270)² + 720,000 271 ≤ L ≤ 365
    50(L−365)² + 990,000 366 ≤ L

Level thresholds are the cumulative sums: level 1 starts at 0 experience.
"""

from typing import List, Sequence

from soloist.exceptions import ConfigurationError

DEFAULT_MAX_LEVEL = 500

# (last level of bracket, coefficient, offset level, base)
_BRACKETS = [
    (30, 20, 0, 0),
    (60, 18, 30, 18_000),
    (90, 22, 60, 45_000),
    (120, 25, 90, 90_000),
    (150, 30, 120, 180_000),
    (180, 35, 150, 315_000),
    (270, 40, 180, 495_000),
    (365, 45, 270, 720_000),
]


def exp_to_next_level(level: int) -> int:
    """Experience required to advance from `level` to `level + 1`"""
    for last_level, coefficient, offset, base in _BRACKETS:
        if level <= last_level:
            return coefficient * (level - offset) ** 2 + base
    return 50 * (level - 365) ** 2 + 990_000


def build_level_thresholds(max_level: int = DEFAULT_MAX_LEVEL) -> List[int]:
    """
    Cumulative experience needed to reach each level

    Returns:
        List where index N-1 holds the threshold of level N (index 0 == 0)
    """
    if max_level < 1:
        raise ConfigurationError(
            message=f"max_level must be >= 1, got {max_level}",
            config_key="max_level"
        )

    thresholds = [0]
    for level in range(1, max_level):
        thresholds.append(thresholds[-1] + exp_to_next_level(level))
    return thresholds


def validate_level_thresholds(thresholds: Sequence[int]) -> None:
    """Level thresholds must start at 0 and strictly increase"""
    if not thresholds or thresholds[0] != 0:
        raise ConfigurationError(
            message="Level thresholds must start at 0",
            config_key="level_thresholds"
        )
    for previous, current in zip(thresholds, thresholds[1:]):
        if current <= previous:
            raise ConfigurationError(
                message=f"Level thresholds must strictly increase ({previous} -> {current})",
                config_key="level_thresholds"
            )


def level_for_experience(total_exp: int, thresholds: Sequence[int]) -> int:
    """Highest level whose threshold is <= total_exp (1-based, pinned at the table's end)"""
    level = 1
    for index, threshold in enumerate(thresholds):
        if threshold <= total_exp:
            level = index + 1
        else:
            break
    return level


def experience_to_next(total_exp: int, level: int, thresholds: Sequence[int]) -> int:
    """Remaining experience to the next level, 0 at the maximum level"""
    if level >= len(thresholds):
        return 0
    return max(0, thresholds[level] - total_exp)
