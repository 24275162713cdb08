from __future__ import annotations

from datetime import UTC, datetime

import pytest

from evw_newsletter.sched import clock
from evw_newsletter.sched.clock import days_between_et, start_of_day_et, to_et, weekday_et


def test_to_et_tracks_daylight_saving() -> None:
    summer = to_et(datetime(2026, 7, 1, 16, 0, tzinfo=UTC))
    winter = to_et(datetime(2026, 12, 1, 17, 0, tzinfo=UTC))

    assert (summer.hour, summer.utcoffset().total_seconds()) == (12, -4 * 3600)
    assert (winter.hour, winter.utcoffset().total_seconds()) == (12, -5 * 3600)


def test_naive_input_is_read_as_utc() -> None:
    assert to_et(datetime(2026, 7, 1, 16, 0)).hour == 12


def test_start_of_day_uses_et_calendar_date() -> None:
    late_evening = datetime(2026, 7, 12, 3, 30, tzinfo=UTC)  # 23:30 ET on 7/11
    midnight = start_of_day_et(late_evening)

    assert (midnight.year, midnight.month, midnight.day) == (2026, 7, 11)
    assert (midnight.hour, midnight.minute) == (0, 0)


def test_days_between_counts_civil_days_not_elapsed_hours() -> None:
    a = datetime.fromisoformat("2026-07-18T00:05:00-04:00")
    b = datetime.fromisoformat("2026-07-11T23:55:00-04:00")

    assert days_between_et(a, b) == 7
    assert days_between_et(b, a) == -7


def test_days_between_across_dst_change() -> None:
    after = datetime.fromisoformat("2026-11-02T12:00:00-05:00")
    before = datetime.fromisoformat("2026-10-26T12:00:00-04:00")

    assert days_between_et(after, before) == 7


def test_weekday_follows_et_not_utc() -> None:
    # Thursday 02:00 UTC is still Wednesday evening in New York.
    moment = datetime(2026, 9, 17, 2, 0, tzinfo=UTC)

    assert moment.weekday() == 3
    assert weekday_et(moment) == 2


@pytest.fixture
def no_zone_database(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(clock, "ET", None)


@pytest.mark.usefixtures("no_zone_database")
def test_without_zone_database_wall_clock_is_kept() -> None:
    aware = to_et(datetime(2026, 7, 1, 16, 0, tzinfo=UTC))
    naive = to_et(datetime(2026, 7, 1, 16, 0))

    assert aware == datetime(2026, 7, 1, 16, 0)
    assert aware.tzinfo is None
    assert naive == datetime(2026, 7, 1, 16, 0)


@pytest.mark.usefixtures("no_zone_database")
def test_without_zone_database_start_of_day_is_naive_midnight() -> None:
    midnight = start_of_day_et(datetime(2026, 7, 12, 3, 30, tzinfo=UTC))

    assert midnight == datetime(2026, 7, 12)
    assert midnight.tzinfo is None


@pytest.mark.usefixtures("no_zone_database")
def test_without_zone_database_days_between_mixes_naive_and_aware() -> None:
    a = datetime.fromisoformat("2026-07-18T00:05:00-04:00")
    b = datetime(2026, 7, 11, 23, 55)

    assert days_between_et(a, b) == 7
    assert days_between_et(b, a) == -7
    assert weekday_et(datetime(2026, 9, 17, 2, 0, tzinfo=UTC)) == 3
