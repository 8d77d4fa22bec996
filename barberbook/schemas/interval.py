# barberbook/schemas/interval.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class TimeInterval:
    """Half-open time range [start, end)"""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Interval end {self.end} is before start {self.start}")

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> TimeInterval:
        return cls(start, start + timedelta(minutes=minutes))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: TimeInterval) -> bool:
        """Strict overlap; back-to-back intervals do not overlap"""
        return self.start < other.end and other.start < self.end

    def shift_to(self, start: datetime) -> TimeInterval:
        """Same duration, new start"""
        return TimeInterval(start, start + self.duration)

    def to_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}
