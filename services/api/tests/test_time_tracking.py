from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

from prepclock.models import ACTIVE, PAUSED, COMPLETED
from prepclock.services.time_tracking import (
    day_bounds,
    entry_duration_seconds,
    total_seconds,
)

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def _entry(status, start_offset_min, end_offset_min=None, updated_offset_min=None):
    start = NOW - timedelta(minutes=start_offset_min)
    return SimpleNamespace(
        status=status,
        start_time=start,
        end_time=NOW - timedelta(minutes=end_offset_min) if end_offset_min is not None else None,
        updated_at=NOW - timedelta(minutes=updated_offset_min) if updated_offset_min is not None else start,
    )


def test_active_entry_runs_until_now():
    assert entry_duration_seconds(_entry(ACTIVE, 90), NOW) == 90 * 60


def test_completed_entry_runs_until_end_time():
    assert entry_duration_seconds(_entry(COMPLETED, 120, end_offset_min=60), NOW) == 60 * 60


def test_paused_entry_counts_until_it_was_paused():
    entry = _entry(PAUSED, 30, updated_offset_min=20)
    assert entry_duration_seconds(entry, NOW) == 10 * 60


def test_duration_never_negative():
    # Clock skew: end recorded before start
    entry = _entry(COMPLETED, 10, end_offset_min=20)
    assert entry_duration_seconds(entry, NOW) == 0


def test_naive_datetimes_are_treated_as_utc():
    entry = SimpleNamespace(
        status=ACTIVE,
        start_time=(NOW - timedelta(seconds=45)).replace(tzinfo=None),
        end_time=None,
        updated_at=None,
    )
    assert entry_duration_seconds(entry, NOW) == 45


def test_total_seconds_sums_entries():
    entries = [
        _entry(COMPLETED, 180, end_offset_min=120),
        _entry(PAUSED, 100, updated_offset_min=90),
        _entry(ACTIVE, 30),
    ]
    assert total_seconds(entries, NOW) == (60 + 10 + 30) * 60
    assert total_seconds([], NOW) == 0


def test_day_bounds_span_one_day():
    start, end = day_bounds(date(2024, 1, 15))
    assert end - start == timedelta(days=1)
    assert start.tzinfo is not None
    assert start.astimezone().date() == date(2024, 1, 15)
