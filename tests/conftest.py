"""Global test fixtures and utilities for progression engine tests"""
import pytest
from datetime import date

from soloist.config import EngineConfig
from soloist.db.store import InMemoryStore
from soloist.models.mission import PredefinedMission
from soloist.models.rank import Rank, RankThreshold
from soloist.models.user import User
from soloist.services.progression_service import ProgressionEngine
from soloist.utils.datetime_helpers import FixedClock


# ============================================================================
# Calendar Fixtures
# ============================================================================

@pytest.fixture
def today():
    """Standard calendar day for tests"""
    return date(2025, 1, 10)


@pytest.fixture
def clock(today):
    """Clock pinned to noon of `today`"""
    return FixedClock.on(today)


# ============================================================================
# Table Fixtures
# ============================================================================

@pytest.fixture
def small_level_thresholds():
    """Three-level curve: 0, 100, 300"""
    return [0, 100, 300]


@pytest.fixture
def small_rank_thresholds():
    """Three-rank table: F at 0, E at 100, D at 300"""
    return [
        RankThreshold(rank=Rank.F, min_experience=0),
        RankThreshold(rank=Rank.E, min_experience=100),
        RankThreshold(rank=Rank.D, min_experience=300),
    ]


@pytest.fixture
def small_config(small_level_thresholds, small_rank_thresholds):
    """Engine config with the small tables and no daily win bonus"""
    return EngineConfig(
        level_thresholds=small_level_thresholds,
        rank_thresholds=small_rank_thresholds,
        daily_win_exp_reward=0,
    )


# ============================================================================
# User & Catalog Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "hunter-1"


@pytest.fixture
def fresh_user(test_user_id):
    """Level 1, rank F, no activity yet"""
    return User(id=test_user_id, name="Jin", experience_to_next_level=100, created_on=date(2025, 1, 1))


@pytest.fixture
def catalog():
    """Small mission catalog spanning ranks, release dates, expiry and prerequisites"""
    return [
        PredefinedMission(
            id="f-open", title="Open Gate", rank=Rank.F, day=1,
            release_date=date(2025, 1, 1), exp_reward=50,
        ),
        PredefinedMission(
            id="f-future", title="Tomorrow's Gate", rank=Rank.F, day=11,
            release_date=date(2025, 1, 11), exp_reward=50,
        ),
        PredefinedMission(
            id="f-prereq", title="Gate With Key", rank=Rank.F, day=2,
            release_date=date(2025, 1, 2), required_tasks=["key-task"], exp_reward=60,
        ),
        PredefinedMission(
            id="e-open", title="E-Rank Gate", rank=Rank.E, day=1,
            release_date=date(2025, 1, 1), exp_reward=80,
        ),
        PredefinedMission(
            id="a-expired", title="Closed Red Gate", rank=Rank.A, day=1,
            release_date=date(2024, 12, 1), expiry_date=date(2025, 1, 5), exp_reward=900,
        ),
    ]


@pytest.fixture
def store(catalog):
    """In-memory store preloaded with the catalog"""
    return InMemoryStore(catalog=catalog)


@pytest.fixture
def engine(store, small_config, clock):
    """Engine over the in-memory store with the small tables"""
    return ProgressionEngine(store, config=small_config, clock=clock)
