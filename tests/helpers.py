"""Test doubles and builders shared by the test modules."""
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Dict, List

from barberbook.core.errors import EventNotFoundError
from barberbook.schemas.calendar_events import CalendarEvent, EventDraft, EventPatch

BARBER_PHONE = "+15550001111"
CLIENT_PHONE = "+15551234567"


class FakeCalendarGateway:
    """In-memory CalendarGateway recording every call it receives"""

    def __init__(self):
        self.events: Dict[str, CalendarEvent] = {}
        self.calls: List[tuple] = []
        self._ids = count(1)

    def add(self, summary: str, start: datetime, end: datetime, description: str = "") -> CalendarEvent:
        event_id = f"evt{next(self._ids)}"
        event = CalendarEvent(
            id=event_id,
            summary=summary,
            description=description,
            start=start,
            end=end,
            time_zone="America/Los_Angeles",
            html_link=f"https://calendar.test/event/{event_id}",
        )
        self.events[event_id] = event
        return event

    def list_events(self, calendar_id: str, time_min: datetime, time_max: datetime) -> List[CalendarEvent]:
        self.calls.append(("list", calendar_id))
        found = [e for e in self.events.values() if e.start < time_max and time_min < e.end]
        return sorted(found, key=lambda e: e.start)

    def get_event(self, calendar_id: str, event_id: str) -> CalendarEvent:
        self.calls.append(("get", calendar_id, event_id))
        if event_id not in self.events:
            raise EventNotFoundError(f"Event not found: {event_id}")
        return self.events[event_id]

    def insert_event(self, calendar_id: str, draft: EventDraft) -> CalendarEvent:
        self.calls.append(("insert", calendar_id))
        return self.add(draft.summary, draft.start, draft.end, draft.description)

    def update_event(self, calendar_id: str, event_id: str, patch: EventPatch) -> CalendarEvent:
        self.calls.append(("update", calendar_id, event_id))
        if event_id not in self.events:
            raise EventNotFoundError(f"Event not found: {event_id}")
        changes = {k: v for k, v in {
            "start": patch.start,
            "end": patch.end,
            "summary": patch.summary,
        }.items() if v is not None}
        updated = self.events[event_id].model_copy(update=changes)
        self.events[event_id] = updated
        return updated

    def delete_event(self, calendar_id: str, event_id: str) -> None:
        self.calls.append(("delete", calendar_id, event_id))
        if event_id not in self.events:
            raise EventNotFoundError(f"Event not found: {event_id}")
        del self.events[event_id]

    def calls_named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


def utc(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def days_from_now(days: int, hour: int = 17) -> datetime:
    """A whole-hour UTC instant `days` from today"""
    today = datetime.now(timezone.utc).replace(hour=hour, minute=0, second=0, microsecond=0)
    return today + timedelta(days=days)


def make_event(event_id: str, summary: str, start: datetime, minutes: int = 30,
               description: str = "") -> CalendarEvent:
    return CalendarEvent(
        id=event_id,
        summary=summary,
        description=description,
        start=start,
        end=start + timedelta(minutes=minutes),
    )


def appointment_payload(barber=None, **fields) -> dict:
    """Helper to build a /client-appointment body with sensible defaults."""
    payload = {
        "clientPhone": CLIENT_PHONE,
        "clientName": "Jane",
        "serviceType": "Haircut",
    }
    if barber is not None:
        payload["preferredBarberId"] = str(barber.id)
    payload.update(fields)
    return {k: v for k, v in payload.items() if v is not None}
