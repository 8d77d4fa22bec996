# barberbook/utils/time_parser.py
"""
Normalization of the date-time strings webhook callers send us.

Callers are inconsistent: some send an explicit offset or ``Z``, others send a
bare local time meant as wall-clock time in the shop's timezone. Bare times
are localized using the offset in effect on the *target* date, so a booking
made in January for a date in July lands on PDT, not PST.
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytz

from barberbook.config.settings import get_settings
from barberbook.core.errors import MalformedTimestamp

_FRACTION = re.compile(r"(T\d{2}:\d{2}:\d{2})\.\d+")
_OFFSET_PATTERN = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(Z|[+-]\d{2}:?\d{2})$", re.IGNORECASE
)
_NAIVE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$")
_NAIVE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _calendar_tz(tz_name: Optional[str] = None):
    return pytz.timezone(tz_name or get_settings().CALENDAR_TIMEZONE)


def _parse_offset(offset: str) -> timezone:
    if offset.upper() == "Z":
        return timezone.utc
    sign = -1 if offset[0] == "-" else 1
    digits = offset[1:].replace(":", "")
    hours, minutes = int(digits[:2]), int(digits[2:])
    if hours > 23 or minutes > 59:
        raise ValueError(f"offset out of range: {offset}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_datetime(value: str, tz_name: Optional[str] = None) -> datetime:
    """
    Parse a webhook date-time string into an aware UTC datetime.

    Args:
        value: ``YYYY-MM-DDTHH:MM:SS`` optionally followed by fractional
            seconds and an offset (``Z``, ``+HH:MM`` or ``+HHMM``)
        tz_name: civil timezone used for bare local times, defaults to
            CALENDAR_TIMEZONE

    Raises:
        MalformedTimestamp: the string matches neither accepted shape
    """
    if not isinstance(value, str):
        raise MalformedTimestamp(f"Expected a date-time string, got {type(value).__name__}")

    text = _FRACTION.sub(r"\1", value.strip())

    try:
        match = _OFFSET_PATTERN.match(text)
        if match:
            local = datetime.strptime(match.group(1), _NAIVE_FORMAT)
            return local.replace(tzinfo=_parse_offset(match.group(2))).astimezone(timezone.utc)

        if _NAIVE_PATTERN.match(text):
            tz = _calendar_tz(tz_name)
            naive = datetime.strptime(text, _NAIVE_FORMAT)
            # is_dst=False: nonexistent times move forward, ambiguous ones take standard time
            localized = tz.normalize(tz.localize(naive, is_dst=False))
            return localized.astimezone(timezone.utc)
    except ValueError as e:
        raise MalformedTimestamp(f"Invalid date-time '{value}': {e}") from e

    raise MalformedTimestamp(
        f"Invalid date-time '{value}': expected YYYY-MM-DDTHH:MM:SS with optional offset"
    )


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes (some drivers drop tzinfo) and convert aware ones"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_local(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """Convert an instant to wall-clock time in the calendar timezone"""
    return ensure_utc(dt).astimezone(_calendar_tz(tz_name))


def isoformat_utc(dt: datetime) -> str:
    """Render an instant as ``YYYY-MM-DDTHH:MM:SSZ``"""
    return ensure_utc(dt).replace(microsecond=0).strftime("%Y-%m-%dT%H:%M:%SZ")
