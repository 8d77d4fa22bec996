# barberbook/schemas/__init__.py
from .interval import TimeInterval

from .calendar_events import (
    CalendarEvent,
    EventDraft,
    EventPatch
)

from .appointments import (
    OperationKind,
    WebhookModel,
    ClientAppointmentRequest,
    LegacyEventRequest,
    AppointmentResult
)

from .availability import (
    BarberLocator,
    CheckAvailabilityRequest,
    FindSlotsRequest
)

from .conversation_dto import (
    PhoneRequest,
    StoreMessageRequest,
    ProcessMessageRequest,
    BookingStateRequest
)

from .barbers import (
    RegisterBarberRequest,
    SaveCalendarRequest
)

__all__ = [
    "TimeInterval",
    "CalendarEvent",
    "EventDraft",
    "EventPatch",
    "OperationKind",
    "WebhookModel",
    "ClientAppointmentRequest",
    "LegacyEventRequest",
    "AppointmentResult",
    "BarberLocator",
    "CheckAvailabilityRequest",
    "FindSlotsRequest",
    "PhoneRequest",
    "StoreMessageRequest",
    "ProcessMessageRequest",
    "BookingStateRequest",
    "RegisterBarberRequest",
    "SaveCalendarRequest",
]
