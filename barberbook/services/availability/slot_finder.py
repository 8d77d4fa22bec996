# barberbook/services/availability/slot_finder.py
from datetime import datetime, timedelta
from itertools import islice
from typing import Iterable, Iterator, List, Optional

from barberbook.schemas.interval import TimeInterval

DEFAULT_HORIZON = timedelta(days=7)


def is_free(candidate: TimeInterval, busy: Iterable[TimeInterval]) -> bool:
    return not any(candidate.overlaps(b) for b in busy)


def iter_free_slots(
        busy: Iterable[TimeInterval],
        search_start: datetime,
        slot_duration: timedelta,
        horizon_end: datetime
) -> Iterator[TimeInterval]:
    """
    Walk a cursor forward from `search_start`, yielding free slots.

    A free candidate is yielded and the cursor jumps to its end; a busy one
    moves the cursor by one slot duration. The walk stops once the cursor
    passes `horizon_end`, so a slot may start exactly on the horizon. Every
    candidate is checked against every busy interval, so `busy` may be
    unsorted or self-overlapping.
    """
    if slot_duration <= timedelta(0):
        raise ValueError("slot_duration must be positive")

    busy = list(busy)
    cursor = search_start
    while cursor <= horizon_end:
        candidate = TimeInterval(cursor, cursor + slot_duration)
        if is_free(candidate, busy):
            yield candidate
        cursor = candidate.end


def find_slots(
        busy: Iterable[TimeInterval],
        search_start: datetime,
        slot_duration: timedelta,
        count: int,
        search_horizon: Optional[timedelta] = None
) -> List[TimeInterval]:
    """The next `count` free slots starting no later than search_start + search_horizon"""
    if count <= 0:
        return []
    horizon_end = search_start + (search_horizon or DEFAULT_HORIZON)
    return list(islice(iter_free_slots(busy, search_start, slot_duration, horizon_end), count))
