"""Tests for intervals and free-slot search."""

from datetime import timedelta

import pytest

from barberbook.schemas.interval import TimeInterval
from barberbook.services.availability.slot_finder import find_slots, is_free
from tests.helpers import utc

HALF_HOUR = timedelta(minutes=30)


def interval(h1, m1, h2, m2) -> TimeInterval:
    return TimeInterval(utc(2025, 3, 10, h1, m1), utc(2025, 3, 10, h2, m2))


class TestTimeInterval:

    @pytest.mark.parametrize("a, b", [
        (interval(10, 0, 10, 30), interval(10, 15, 10, 45)),
        (interval(10, 0, 11, 0), interval(10, 15, 10, 45)),
        (interval(10, 0, 10, 30), interval(10, 30, 11, 0)),
        (interval(9, 0, 9, 30), interval(14, 0, 15, 0)),
        (interval(10, 0, 10, 0), interval(9, 0, 11, 0)),
    ])
    def test_overlap_is_symmetric(self, a, b):
        assert a.overlaps(b) == b.overlaps(a)

    def test_back_to_back_do_not_overlap(self):
        assert not interval(10, 0, 10, 30).overlaps(interval(10, 30, 11, 0))

    def test_partial_and_containing_overlap(self):
        assert interval(10, 0, 10, 30).overlaps(interval(10, 15, 10, 45))
        assert interval(10, 0, 11, 0).overlaps(interval(10, 15, 10, 45))

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError):
            TimeInterval(utc(2025, 3, 10, 11), utc(2025, 3, 10, 10))

    def test_shift_preserves_duration(self):
        moved = interval(9, 0, 9, 45).shift_to(utc(2025, 3, 10, 14, 0))
        assert moved == interval(14, 0, 14, 45)

    def test_from_duration(self):
        assert TimeInterval.from_duration(utc(2025, 3, 10, 9), 30) == interval(9, 0, 9, 30)


class TestFindSlots:

    def test_empty_calendar_returns_consecutive_slots(self):
        slots = find_slots([], utc(2025, 3, 10, 9), HALF_HOUR, 3)
        assert slots == [interval(9, 0, 9, 30), interval(9, 30, 10, 0), interval(10, 0, 10, 30)]

    def test_skips_busy_block(self):
        busy = [interval(9, 0, 10, 0)]
        slots = find_slots(busy, utc(2025, 3, 10, 9), HALF_HOUR, 3)
        assert [s.start for s in slots] == [utc(2025, 3, 10, 10, 0), utc(2025, 3, 10, 10, 30), utc(2025, 3, 10, 11, 0)]

    def test_unaligned_busy_interval(self):
        busy = [interval(9, 15, 9, 45)]
        slots = find_slots(busy, utc(2025, 3, 10, 9), HALF_HOUR, 1)
        assert slots == [interval(10, 0, 10, 30)]

    def test_slot_may_end_exactly_where_busy_starts(self):
        busy = [interval(9, 30, 10, 0)]
        slots = find_slots(busy, utc(2025, 3, 10, 9), HALF_HOUR, 2)
        assert slots == [interval(9, 0, 9, 30), interval(10, 0, 10, 30)]

    def test_unsorted_overlapping_busy_input(self):
        busy_sorted = [interval(9, 0, 10, 0), interval(10, 30, 11, 0)]
        busy_messy = [interval(10, 30, 11, 0), interval(9, 30, 10, 0), interval(9, 0, 9, 45)]
        start = utc(2025, 3, 10, 9)
        assert find_slots(busy_messy, start, HALF_HOUR, 3) == find_slots(busy_sorted, start, HALF_HOUR, 3)

    def test_never_returns_busy_slots(self):
        busy = [interval(9, 10, 9, 20), interval(11, 0, 12, 30), interval(13, 45, 14, 0)]
        slots = find_slots(busy, utc(2025, 3, 10, 9), timedelta(minutes=45), 6)
        assert len(slots) == 6
        for slot in slots:
            assert is_free(slot, busy)
        assert all(a.end <= b.start for a, b in zip(slots, slots[1:]))

    def test_horizon_bounds_search(self):
        slots = find_slots([], utc(2025, 3, 10, 9), HALF_HOUR, 10, search_horizon=timedelta(hours=1))
        assert slots == [interval(9, 0, 9, 30), interval(9, 30, 10, 0), interval(10, 0, 10, 30)]

    def test_slot_starting_on_horizon_is_offered(self):
        busy = [interval(9, 0, 10, 0)]
        slots = find_slots(busy, utc(2025, 3, 10, 9), HALF_HOUR, 3, search_horizon=timedelta(hours=1))
        assert slots == [interval(10, 0, 10, 30)]

    def test_fully_booked_horizon_returns_nothing(self):
        busy = [interval(9, 0, 11, 30)]
        slots = find_slots(busy, utc(2025, 3, 10, 9), HALF_HOUR, 3, search_horizon=timedelta(hours=2))
        assert slots == []

    def test_returns_every_feasible_slot_when_fewer_than_count(self):
        busy = [interval(9, 30, 10, 30)]
        slots = find_slots(busy, utc(2025, 3, 10, 9), HALF_HOUR, 5, search_horizon=timedelta(hours=2))
        assert slots == [interval(9, 0, 9, 30), interval(10, 30, 11, 0), interval(11, 0, 11, 30)]

    def test_default_horizon_is_a_week(self):
        busy = [TimeInterval(utc(2025, 3, 10), utc(2025, 3, 17, 0, 30))]
        assert find_slots(busy, utc(2025, 3, 10), HALF_HOUR, 1) == []

    def test_zero_count(self):
        assert find_slots([], utc(2025, 3, 10, 9), HALF_HOUR, 0) == []

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValueError):
            find_slots([], utc(2025, 3, 10, 9), timedelta(0), 1)
