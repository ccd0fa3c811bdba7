# tests/unit/core/test_timezone_utils.py
"""
Timezone conversion tests.

Covers DST transitions in both hemispheres, half-hour offsets and the
international date line.
"""

from datetime import date, datetime, time, timedelta

import pytest

from scheduling_core.core.exceptions import InvalidTimeError, InvalidTimezoneError
from scheduling_core.core.timezone_utils import (
    day_bounds_utc,
    get_timezone,
    to_local,
    to_utc_instant,
    utc_offset_on,
    weekday_sunday_zero,
)
from tests.helpers.factories import utc


class TestToUtcInstant:
    def test_sydney_winter_offset(self):
        assert to_utc_instant(date(2024, 6, 10), "09:00", "Australia/Sydney") == utc(2024, 6, 9, 23, 0)

    def test_sydney_summer_offset(self):
        assert to_utc_instant(date(2024, 1, 15), "09:00", "Australia/Sydney") == utc(2024, 1, 14, 22, 0)

    def test_half_hour_zone_is_exact_to_the_minute(self):
        assert to_utc_instant(date(2024, 1, 15), "09:45", "Asia/Kolkata") == utc(2024, 1, 15, 4, 15)

    def test_date_line_zone(self):
        assert to_utc_instant(date(2024, 1, 1), "09:00", "Pacific/Kiritimati") == utc(2023, 12, 31, 19, 0)

    def test_accepts_time_objects(self):
        assert to_utc_instant(date(2024, 7, 1), time(14, 30), "Europe/London") == utc(2024, 7, 1, 13, 30)

    def test_utc_zone_is_identity(self):
        assert to_utc_instant(date(2024, 7, 1), "00:00", "UTC") == utc(2024, 7, 1, 0, 0)

    def test_before_spring_forward_uses_standard_offset(self):
        # New York switches to EDT at 02:00 local on 2024-03-10
        assert to_utc_instant(date(2024, 3, 10), "01:30", "America/New_York") == utc(2024, 3, 10, 6, 30)

    def test_after_spring_forward_uses_daylight_offset(self):
        assert to_utc_instant(date(2024, 3, 10), "03:30", "America/New_York") == utc(2024, 3, 10, 7, 30)

    def test_nonexistent_time_moves_forward_by_the_gap(self):
        assert to_utc_instant(date(2024, 3, 10), "02:30", "America/New_York") == utc(2024, 3, 10, 7, 30)

    def test_ambiguous_time_resolves_to_standard_time(self):
        # 01:30 happens twice on 2024-11-03; the later (EST) one is chosen
        assert to_utc_instant(date(2024, 11, 3), "01:30", "America/New_York") == utc(2024, 11, 3, 6, 30)

    def test_before_fall_back_keeps_daylight_offset(self):
        assert to_utc_instant(date(2024, 11, 3), "00:30", "America/New_York") == utc(2024, 11, 3, 4, 30)


class TestRoundTrip:
    @pytest.mark.parametrize(
        "timezone_id,local_date",
        [
            ("America/New_York", date(2024, 3, 10)),
            ("America/New_York", date(2024, 11, 3)),
            ("Australia/Sydney", date(2024, 4, 7)),
            ("Australia/Sydney", date(2024, 10, 6)),
            ("Europe/London", date(2024, 3, 31)),
            ("Europe/London", date(2024, 10, 27)),
            ("Asia/Kolkata", date(2024, 6, 1)),
            ("Pacific/Auckland", date(2024, 9, 29)),
        ],
    )
    @pytest.mark.parametrize("wall", ["00:00", "01:30", "04:15", "09:00", "12:00", "17:45", "23:59"])
    def test_round_trip_reproduces_local_wall_clock(self, timezone_id, local_date, wall):
        instant = to_utc_instant(local_date, wall, timezone_id)
        local = to_local(instant, timezone_id)
        requested = datetime.combine(local_date, datetime.strptime(wall, "%H:%M").time())
        shift = local.replace(tzinfo=None) - requested
        if (timezone_id, local_date, wall) == ("Europe/London", date(2024, 3, 31), "01:30"):
            # 01:00-02:00 does not exist that night
            assert shift == timedelta(hours=1)
        else:
            assert shift == timedelta(0)

    def test_round_trip_on_ordinary_days(self):
        for day in range(1, 29):
            local_date = date(2024, 2, day)
            instant = to_utc_instant(local_date, "10:20", "America/Los_Angeles")
            local = to_local(instant, "America/Los_Angeles")
            assert (local.date(), local.hour, local.minute) == (local_date, 10, 20)


class TestValidation:
    @pytest.mark.parametrize("timezone_id", ["Mars/Olympus", "", "  ", "EST+5", None])
    def test_unknown_timezone_raises(self, timezone_id):
        with pytest.raises(InvalidTimezoneError) as exc:
            to_utc_instant(date(2024, 1, 1), "09:00", timezone_id)
        assert exc.value.code == "INVALID_TIMEZONE"

    @pytest.mark.parametrize("bad_time", ["24:00", "12:60", "9", "noon", "09:00:00", "-1:00", ""])
    def test_malformed_time_raises(self, bad_time):
        with pytest.raises(InvalidTimeError):
            to_utc_instant(date(2024, 1, 1), bad_time, "UTC")

    @pytest.mark.parametrize("loose_time", ["9:05", " 09:05", "09:05 "])
    def test_requires_two_digit_hour_without_padding(self, loose_time):
        with pytest.raises(InvalidTimeError):
            to_utc_instant(date(2024, 1, 1), loose_time, "UTC")

    def test_never_defaults_invalid_zone_to_utc(self):
        with pytest.raises(InvalidTimezoneError):
            get_timezone("Not/AZone")


class TestHelpers:
    def test_utc_offset_on_reflects_dst(self):
        assert utc_offset_on(date(2024, 6, 10), "Australia/Sydney") == timedelta(hours=10)
        assert utc_offset_on(date(2024, 1, 10), "Australia/Sydney") == timedelta(hours=11)
        assert utc_offset_on(date(2024, 1, 10), "America/New_York") == timedelta(hours=-5)

    def test_day_bounds_utc(self):
        start, end = day_bounds_utc(date(2024, 6, 10), "Australia/Sydney")
        assert start == utc(2024, 6, 9, 14, 0)
        assert end == utc(2024, 6, 10, 14, 0)

    def test_day_bounds_on_short_day(self):
        start, end = day_bounds_utc(date(2024, 3, 10), "America/New_York")
        assert end - start == timedelta(hours=23)

    def test_to_local_assumes_naive_is_utc(self):
        local = to_local(utc(2024, 6, 9, 23, 0).replace(tzinfo=None), "Australia/Sydney")
        assert (local.date(), local.hour) == (date(2024, 6, 10), 9)

    @pytest.mark.parametrize(
        "local_date,expected",
        [(date(2024, 6, 9), 0), (date(2024, 6, 10), 1), (date(2024, 6, 15), 6)],
    )
    def test_weekday_sunday_zero(self, local_date, expected):
        assert weekday_sunday_zero(local_date) == expected
