"""Unit tests for the Mission Availability Filter (soloist/progression/missions.py)"""
import pytest
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

from soloist.exceptions import (
    AlreadyCompletedError,
    LockReason,
    NotAvailableError,
    RecordNotFoundError,
)
from soloist.models.mission import MissionCompletion, PredefinedMission
from soloist.models.rank import Rank
from soloist.progression.missions import (
    classify_mission,
    complete_mission,
    has_completed_mission_on,
    mission_stats,
    mission_streak,
    newly_available,
    next_mission_release,
    visible_missions,
)


def _ids(missions):
    return [mission.id for mission in missions]


# ============================================================================
# Classification Tests
# ============================================================================

def test_classify_available(catalog, today):
    """Test a released, in-rank mission without prerequisites is available"""
    f_open = catalog[0]
    assert classify_mission(f_open, Rank.F, today) is None


def test_classify_reasons(catalog, today):
    """Test each lock reason"""
    by_id = {m.id: m for m in catalog}

    assert classify_mission(by_id["f-future"], Rank.F, today) == LockReason.NOT_RELEASED
    assert classify_mission(by_id["f-prereq"], Rank.F, today) == LockReason.PREREQUISITES_INCOMPLETE
    assert classify_mission(by_id["f-prereq"], Rank.F, today, ["key-task"]) is None
    assert classify_mission(by_id["e-open"], Rank.F, today) == LockReason.RANK_TOO_LOW
    assert classify_mission(by_id["e-open"], Rank.E, today) is None


def test_expired_takes_precedence_over_rank_lock(catalog, today):
    """Test an expired mission above the hunter's rank is expired, not locked"""
    a_expired = catalog[4]

    assert classify_mission(a_expired, Rank.F, today) == LockReason.EXPIRED
    assert classify_mission(a_expired, Rank.SSS, today) == LockReason.EXPIRED


def test_expiry_day_itself_is_still_open(today):
    """Test a mission expires only after its expiry date"""
    mission = PredefinedMission(
        id="last-day", title="Last Day", rank=Rank.F, day=1,
        release_date=date(2025, 1, 1), expiry_date=today, exp_reward=10,
    )

    assert classify_mission(mission, Rank.F, today) is None


def test_rank_lock_checked_before_release(today):
    """Test a future mission above the hunter's rank reports the rank lock"""
    mission = PredefinedMission(
        id="far", title="Far Gate", rank=Rank.C, day=30,
        release_date=date(2025, 3, 1), exp_reward=10,
    )

    assert classify_mission(mission, Rank.F, today) == LockReason.RANK_TOO_LOW


# ============================================================================
# Visibility Tests
# ============================================================================

def test_visible_missions_buckets(catalog, today):
    """Test partitioning the catalog for a rank F hunter"""
    buckets = visible_missions(catalog, Rank.F, today)

    assert _ids(buckets.available) == ["f-open"]
    assert _ids(buckets.locked) == ["f-future", "f-prereq", "e-open"]
    assert _ids(buckets.upcoming_preview) == ["e-open"]
    assert _ids(buckets.expired) == ["a-expired"]
    assert buckets.available_ids() == {"f-open"}


def test_visible_missions_prerequisites_met(catalog, today):
    """Test finishing a prerequisite task makes the mission available"""
    buckets = visible_missions(catalog, Rank.F, today, ["key-task"])

    assert _ids(buckets.available) == ["f-open", "f-prereq"]


def test_hidden_mission_still_previewed_when_rank_locked(today):
    """Test every rank-locked mission is previewed, hidden or not"""
    hidden = PredefinedMission(
        id="secret", title="Secret Gate", rank=Rank.D, day=40,
        release_date=date(2025, 2, 1), is_hidden=True, exp_reward=10,
    )
    hidden_released = hidden.model_copy(update={"id": "secret-open", "release_date": date(2025, 1, 1)})

    buckets = visible_missions([hidden, hidden_released], Rank.F, today)

    assert _ids(buckets.locked) == ["secret", "secret-open"]
    assert _ids(buckets.upcoming_preview) == ["secret", "secret-open"]


def test_newly_available(catalog, today):
    """Test the diff between two boards after a rank-up"""
    before = visible_missions(catalog, Rank.F, today)
    after = visible_missions(catalog, Rank.E, today)

    assert _ids(newly_available(before, after)) == ["e-open"]
    assert newly_available(after, after) == []


def test_has_completed_mission_on(test_user_id):
    """Test completion lookup by calendar day"""
    completions = [
        MissionCompletion(
            user_id=test_user_id, mission_id="f-open",
            completed_at=datetime(2025, 1, 9, 22, 0, tzinfo=timezone.utc),
        )
    ]

    assert has_completed_mission_on(completions, date(2025, 1, 9)) is True
    assert has_completed_mission_on(completions, date(2025, 1, 10)) is False


def _completion(user_id, mission_id, moment):
    return MissionCompletion(user_id=user_id, mission_id=mission_id, completed_at=moment)


# ============================================================================
# Mission History Tests
# ============================================================================

def test_has_completed_mission_on_uses_zone(test_user_id):
    """Test completions are placed on the calendar day of the user's zone"""
    completions = [_completion(test_user_id, "f-open", datetime(2025, 1, 9, 20, 0, tzinfo=timezone.utc))]
    seoul = ZoneInfo("Asia/Seoul")

    assert has_completed_mission_on(completions, date(2025, 1, 9)) is True
    assert has_completed_mission_on(completions, date(2025, 1, 10), seoul) is True
    assert has_completed_mission_on(completions, date(2025, 1, 9), seoul) is False


def test_mission_streak(test_user_id, today):
    """Test consecutive completion days ending today"""
    def at(day):
        return _completion(test_user_id, f"m-{day}", datetime(2025, 1, day, 9, 0, tzinfo=timezone.utc))

    assert mission_streak([at(10), at(9), at(8), at(6)], today) == 3
    assert mission_streak([at(9), at(8)], today) == 0
    assert mission_streak([], today) == 0


def test_next_mission_release(test_user_id):
    """Test the next release is 24 hours after the latest completion"""
    early = datetime(2025, 1, 8, 7, 30, tzinfo=timezone.utc)
    late = datetime(2025, 1, 9, 18, 0, tzinfo=timezone.utc)

    result = next_mission_release([_completion(test_user_id, "a", late), _completion(test_user_id, "b", early)])

    assert result == late + timedelta(hours=24)
    assert next_mission_release([]) is None


def test_mission_stats(test_user_id, catalog, today):
    """Test the history summary"""
    completions = [
        _completion(test_user_id, "f-open", datetime(2025, 1, 10, 8, 0, tzinfo=timezone.utc)),
        _completion(test_user_id, "a-expired", datetime(2025, 1, 4, 8, 0, tzinfo=timezone.utc)),
    ]

    stats = mission_stats(completions, catalog, today)

    assert stats.completed_today == 1
    assert stats.total_completed == 2
    assert stats.streak == 1
    assert stats.remaining == 3
    assert stats.next_release == datetime(2025, 1, 11, 8, 0, tzinfo=timezone.utc)


# ============================================================================
# Completion Tests
# ============================================================================

def test_complete_mission_awards_reward(fresh_user, catalog, today, small_level_thresholds, small_rank_thresholds):
    """Test completing an available mission awards its experience"""
    moment = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)

    result = complete_mission(
        fresh_user, "f-open", catalog, [], today,
        small_level_thresholds, small_rank_thresholds, completed_at=moment,
    )

    assert result.user.experience == 50
    assert result.completion.mission_id == "f-open"
    assert result.completion.user_id == fresh_user.id
    assert result.completion.completed_at == moment
    assert result.award.leveled_up is False


def test_complete_mission_exp_override(fresh_user, catalog, today, small_level_thresholds, small_rank_thresholds):
    """Test an explicit experience amount replaces the mission reward"""
    result = complete_mission(
        fresh_user, "f-open", catalog, [], today,
        small_level_thresholds, small_rank_thresholds, exp_amount=120,
    )

    assert result.user.experience == 120
    assert result.user.rank == Rank.E
    assert result.award.ranked_up is True


def test_complete_mission_unknown_id(fresh_user, catalog, today):
    """Test an unknown mission id"""
    with pytest.raises(RecordNotFoundError) as exc_info:
        complete_mission(fresh_user, "nope", catalog, [], today)

    assert exc_info.value.record_type == "Mission"


def test_complete_mission_twice(fresh_user, catalog, today, test_user_id):
    """Test a second completion is rejected"""
    completions = [
        MissionCompletion(
            user_id=test_user_id, mission_id="f-open",
            completed_at=datetime(2025, 1, 9, tzinfo=timezone.utc),
        )
    ]

    with pytest.raises(AlreadyCompletedError):
        complete_mission(fresh_user, "f-open", catalog, completions, today)


def test_complete_expired_mission_after_completion_is_already_completed(fresh_user, catalog, today, test_user_id):
    """Test an existing completion is reported before the expiry"""
    completions = [
        MissionCompletion(
            user_id=test_user_id, mission_id="a-expired",
            completed_at=datetime(2025, 1, 2, tzinfo=timezone.utc),
        )
    ]

    with pytest.raises(AlreadyCompletedError):
        complete_mission(fresh_user, "a-expired", catalog, completions, today)


@pytest.mark.parametrize(
    "mission_id, reason",
    [
        ("a-expired", LockReason.EXPIRED),
        ("e-open", LockReason.RANK_TOO_LOW),
        ("f-future", LockReason.NOT_RELEASED),
        ("f-prereq", LockReason.PREREQUISITES_INCOMPLETE),
    ],
)
def test_complete_locked_mission(fresh_user, catalog, today, mission_id, reason):
    """Test locked missions are rejected with their reason and no award"""
    with pytest.raises(NotAvailableError) as exc_info:
        complete_mission(fresh_user, mission_id, catalog, [], today)

    assert exc_info.value.reason == reason
    assert exc_info.value.record_id == mission_id
    assert fresh_user.experience == 0


def test_complete_mission_defaults_to_utc_now(fresh_user, catalog, today):
    """Test the completion timestamp falls back to the aware UTC clock"""
    moment = datetime(2025, 1, 10, 6, 0, tzinfo=timezone.utc)

    with patch("soloist.progression.missions.now_utc", return_value=moment):
        result = complete_mission(fresh_user, "f-open", catalog, [], today)

    assert result.completion.completed_at == moment
