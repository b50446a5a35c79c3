"""Unit tests for Datetime Helpers (soloist/utils/datetime_helpers.py)"""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from soloist.utils.datetime_helpers import FixedClock, SystemClock, now_utc, resolve_timezone


# ============================================================================
# UTC Time Tests
# ============================================================================

def test_now_utc_returns_aware_utc_time():
    """Test that now_utc returns an aware UTC datetime"""
    before = datetime.now(timezone.utc)
    result = now_utc()
    after = datetime.now(timezone.utc)

    assert result.utcoffset().total_seconds() == 0
    assert before <= result <= after


# ============================================================================
# Timezone Tests
# ============================================================================

def test_resolve_timezone_valid():
    """Test a valid IANA name"""
    assert resolve_timezone("Asia/Seoul") == ZoneInfo("Asia/Seoul")


def test_resolve_timezone_falls_back_to_utc():
    """Test invalid or empty names fall back to UTC"""
    assert resolve_timezone("Mars/Olympus") == ZoneInfo("UTC")
    assert resolve_timezone(None) == ZoneInfo("UTC")
    assert resolve_timezone("") == ZoneInfo("UTC")


# ============================================================================
# Clock Tests
# ============================================================================

def test_system_clock_today_is_a_date():
    """Test the wall clock returns a calendar day in its zone"""
    clock = SystemClock("Asia/Seoul")

    assert isinstance(clock.today(), date)
    assert clock.now().tzinfo == ZoneInfo("Asia/Seoul")


def test_fixed_clock_on_day():
    """Test a clock pinned to noon of a day"""
    clock = FixedClock.on(date(2025, 1, 10))

    assert clock.today() == date(2025, 1, 10)
    assert clock.now().hour == 12


def test_fixed_clock_advance():
    """Test moving a fixed clock across midnight"""
    clock = FixedClock.on(date(2025, 1, 31))

    clock.advance(hours=13)

    assert clock.today() == date(2025, 2, 1)


def test_fixed_clock_day_depends_on_zone():
    """Test the same instant is a different calendar day in another zone"""
    instant = datetime(2025, 1, 10, 20, 0, tzinfo=timezone.utc)

    assert FixedClock(instant).today() == date(2025, 1, 10)
    assert FixedClock(instant.astimezone(ZoneInfo("Asia/Seoul"))).today() == date(2025, 1, 11)


def test_fixed_clock_naive_moment_is_utc():
    """Test naive datetimes are treated as UTC"""
    clock = FixedClock(datetime(2025, 1, 10, 8, 0))

    assert clock.now().tzinfo == ZoneInfo("UTC")
