# ============================================================================
# barberbook/services/appointment/event_resolver.py
# ============================================================================
"""
Finding the calendar event a caller means when no event id was given.

Matching is a loose substring heuristic over event summary and description,
not an exact lookup: a name that is a substring of another client's name will
match both events, and date proximity or "soonest upcoming" then picks one.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence

from barberbook.config.settings import get_settings
from barberbook.core.errors import EventNotFoundError, ValidationError
from barberbook.schemas.calendar_events import CalendarEvent
from barberbook.services.calendar.calendar_gateway import CalendarGateway
from barberbook.utils.time_parser import ensure_utc

logger = logging.getLogger(__name__)


def normalize_terms(terms: Iterable[Optional[str]]) -> List[str]:
    """Trimmed, lower-cased, non-empty query terms"""
    return [t.strip().lower() for t in terms if t and t.strip()]


def matching_events(events: Sequence[CalendarEvent], terms: Sequence[str]) -> List[CalendarEvent]:
    return [e for e in events if any(term in e.searchable_text() for term in terms)]


def resolve_event(
        events: Sequence[CalendarEvent],
        query: Iterable[Optional[str]],
        target_date: Optional[datetime] = None,
        now: Optional[datetime] = None
) -> CalendarEvent:
    """
    Pick the single event a client identifier refers to.

    Args:
        events: candidate events, in provider order
        query: client name and/or phone; an event matches if any term is a
            substring of its summary or description
        target_date: when several events match, the one starting closest to
            this instant wins
        now: reference for "upcoming" when no target date is given

    Raises:
        ValidationError: no usable query term
        EventNotFoundError: nothing matched
    """
    terms = normalize_terms(query)
    if not terms:
        raise ValidationError("A client name or phone is required to find the appointment")

    matches = matching_events(events, terms)
    if not matches:
        raise EventNotFoundError(f"No calendar event matches {', '.join(terms)}")
    if len(matches) == 1:
        return matches[0]

    if target_date is not None:
        target = ensure_utc(target_date)
        # min() keeps the first of equally close events
        return min(matches, key=lambda e: abs(e.start - target))

    now = ensure_utc(now or datetime.now(timezone.utc))
    upcoming = [e for e in matches if e.start >= now]
    if upcoming:
        return min(upcoming, key=lambda e: e.start)
    return max(matches, key=lambda e: e.start)


class EventResolver:
    """Runs `resolve_event` over a barber's calendar in a wide search window"""

    def __init__(self, gateway: CalendarGateway, calendar_id: str):
        self.gateway = gateway
        self.calendar_id = calendar_id

    def find(
            self,
            client_name: Optional[str],
            client_phone: Optional[str],
            target_date: Optional[datetime] = None,
            now: Optional[datetime] = None
    ) -> CalendarEvent:
        settings = get_settings()
        now = ensure_utc(now or datetime.now(timezone.utc))
        time_min = now - timedelta(days=settings.EVENT_SEARCH_DAYS_BACK)
        time_max = now + timedelta(days=settings.EVENT_SEARCH_DAYS_FORWARD)

        events = self.gateway.list_events(self.calendar_id, time_min, time_max)
        event = resolve_event(events, [client_name, client_phone], target_date=target_date, now=now)
        logger.info(f"Resolved '{client_name or client_phone}' to event {event.id} at {event.start}")
        return event
