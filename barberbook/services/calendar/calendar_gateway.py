# barberbook/services/calendar/calendar_gateway.py
"""
Calendar operations the scheduling core depends on.

Implementations raise EventNotFoundError when the provider reports an event
as missing or deleted, and UpstreamError for every other provider failure.
"""
from datetime import datetime
from typing import Callable, List, Protocol

from barberbook.models.barber import Barber
from barberbook.schemas.calendar_events import CalendarEvent, EventDraft, EventPatch


class CalendarGateway(Protocol):

    def list_events(self, calendar_id: str, time_min: datetime, time_max: datetime) -> List[CalendarEvent]:
        """Events overlapping [time_min, time_max), ordered by start"""

    def get_event(self, calendar_id: str, event_id: str) -> CalendarEvent:
        ...

    def insert_event(self, calendar_id: str, draft: EventDraft) -> CalendarEvent:
        ...

    def update_event(self, calendar_id: str, event_id: str, patch: EventPatch) -> CalendarEvent:
        ...

    def delete_event(self, calendar_id: str, event_id: str) -> None:
        ...


# Builds a gateway bound to a barber's stored credential
CalendarGatewayFactory = Callable[[Barber], CalendarGateway]
