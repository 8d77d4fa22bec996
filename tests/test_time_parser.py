"""Tests for webhook date-time normalization."""

import pytest

from barberbook.core.errors import MalformedTimestamp, ValidationError
from barberbook.utils.time_parser import isoformat_utc, parse_datetime, to_local
from tests.helpers import utc


class TestOffsetTimestamps:

    @pytest.mark.parametrize("value", [
        "2025-03-10T16:00:00Z",
        "2025-03-10T16:00:00z",
        "2025-03-10T09:00:00-07:00",
        "2025-03-10T09:00:00-0700",
        "2025-03-10T21:30:00+05:30",
        "2025-03-10T21:30:00+0530",
        "2025-03-10T16:00:00.123456Z",
        "2025-03-10T09:00:00.5-07:00",
    ])
    def test_every_offset_form_names_the_same_instant(self, value):
        assert parse_datetime(value) == utc(2025, 3, 10, 16, 0)

    def test_result_is_utc_aware(self):
        parsed = parse_datetime("2025-03-10T09:00:00-07:00")
        assert parsed.utcoffset().total_seconds() == 0

    def test_rendered_form_parses_back_to_same_instant(self):
        parsed = parse_datetime("2025-06-01T08:15:00+02:00")
        assert isoformat_utc(parsed) == "2025-06-01T06:15:00Z"
        assert parse_datetime(isoformat_utc(parsed)) == parsed

    def test_offset_overrides_calendar_timezone(self):
        assert parse_datetime("2025-01-15T09:00:00Z", tz_name="Asia/Tokyo") == utc(2025, 1, 15, 9)


class TestNaiveTimestamps:
    """Bare local times use the offset in effect on the target date"""

    def test_winter_date_uses_standard_time(self):
        assert parse_datetime("2025-01-15T09:00:00") == utc(2025, 1, 15, 17, 0)

    def test_summer_date_uses_daylight_time(self):
        assert parse_datetime("2025-07-15T09:00:00") == utc(2025, 7, 15, 16, 0)

    def test_day_after_spring_forward(self):
        assert parse_datetime("2025-03-10T09:00:00") == utc(2025, 3, 10, 16, 0)

    def test_day_before_spring_forward(self):
        assert parse_datetime("2025-03-08T09:00:00") == utc(2025, 3, 8, 17, 0)

    def test_nonexistent_time_moves_forward(self):
        parsed = parse_datetime("2025-03-09T02:30:00")
        assert parsed == utc(2025, 3, 9, 10, 30)
        local = to_local(parsed)
        assert (local.hour, local.minute) == (3, 30)

    def test_ambiguous_time_takes_standard_time(self):
        assert parse_datetime("2025-11-02T01:30:00") == utc(2025, 11, 2, 9, 30)

    def test_explicit_timezone_name(self):
        assert parse_datetime("2025-07-15T09:00:00", tz_name="America/New_York") == utc(2025, 7, 15, 13, 0)

    def test_surrounding_whitespace_is_ignored(self):
        assert parse_datetime("  2025-07-15T09:00:00 ") == utc(2025, 7, 15, 16, 0)


class TestMalformedTimestamps:

    @pytest.mark.parametrize("value", [
        "",
        "tomorrow at 3",
        "2025-03-10",
        "2025-03-10 09:00:00",
        "2025-13-01T09:00:00",
        "2025-02-30T09:00:00",
        "2025-03-10T09:00:00+25:00",
        "2025-03-10T09:00:00 PST",
    ])
    def test_rejected(self, value):
        with pytest.raises(MalformedTimestamp):
            parse_datetime(value)

    def test_non_string_rejected(self):
        with pytest.raises(MalformedTimestamp):
            parse_datetime(None)

    def test_malformed_is_a_400_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_datetime("not a date")
        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "malformed_timestamp"
