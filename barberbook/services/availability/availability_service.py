# ===== barberbook/services/availability/availability_service.py =====
from typing import List, Optional, Tuple
from datetime import datetime, timedelta
import logging

from barberbook.config.settings import get_settings
from barberbook.core.errors import ValidationError
from barberbook.schemas.calendar_events import CalendarEvent
from barberbook.schemas.interval import TimeInterval
from barberbook.services.availability.slot_finder import find_slots
from barberbook.services.calendar.calendar_gateway import CalendarGateway

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Availability answers computed from a barber's calendar"""

    def __init__(self, gateway: CalendarGateway, calendar_id: str):
        self.gateway = gateway
        self.calendar_id = calendar_id

    def check_availability(self, start: datetime, end: datetime) -> Tuple[bool, List[CalendarEvent]]:
        """Whether [start, end) is free, and the events that make it busy"""
        if end <= start:
            raise ValidationError("endDateTime must be after startDateTime")

        requested = TimeInterval(start, end)
        events = self.gateway.list_events(self.calendar_id, start, end)
        conflicts = [e for e in events if e.interval.overlaps(requested)]

        logger.info(
            f"Availability {start.isoformat()}..{end.isoformat()} on {self.calendar_id}: "
            f"{len(conflicts)} conflict(s)"
        )
        return not conflicts, conflicts

    def get_available_slots(
            self,
            search_start: datetime,
            count: Optional[int] = None,
            duration_minutes: Optional[int] = None,
            horizon_days: Optional[int] = None
    ) -> List[TimeInterval]:
        settings = get_settings()
        count = settings.DEFAULT_SLOT_COUNT if count is None else count
        duration_minutes = duration_minutes or settings.DEFAULT_SLOT_MINUTES
        horizon = timedelta(days=horizon_days or settings.SLOT_SEARCH_HORIZON_DAYS)

        if count < 1:
            raise ValidationError("numSlots must be at least 1")
        if duration_minutes < 1:
            raise ValidationError("slotDurationMinutes must be at least 1")

        slot_duration = timedelta(minutes=duration_minutes)
        # A slot starting on the horizon may run past it
        events = self.gateway.list_events(self.calendar_id, search_start, search_start + horizon + slot_duration)
        busy = [e.interval for e in events]

        slots = find_slots(busy, search_start, slot_duration, count, horizon)
        logger.info(f"Found {len(slots)} of {count} requested slot(s) on {self.calendar_id}")
        return slots
