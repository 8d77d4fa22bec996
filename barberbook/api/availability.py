# barberbook/api/availability.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from barberbook.api.dependencies import availability_for, get_gateway_factory
from barberbook.config.database import get_db
from barberbook.core.errors import ValidationError
from barberbook.schemas.availability import CheckAvailabilityRequest, FindSlotsRequest
from barberbook.services.calendar.calendar_gateway import CalendarGatewayFactory
from barberbook.utils.time_parser import parse_datetime

router = APIRouter(tags=["Availability"])


@router.post("/check-availability")
def check_availability(
        payload: CheckAvailabilityRequest,
        db: Session = Depends(get_db),
        gateway_factory: CalendarGatewayFactory = Depends(get_gateway_factory)
):
    """Is the barber free for the whole requested range?"""
    start = parse_datetime(payload.start_date_time)
    end = parse_datetime(payload.end_date_time)
    if end <= start:
        raise ValidationError("endDateTime must be after startDateTime")

    service = availability_for(db, gateway_factory, payload)
    is_available, conflicts = service.check_availability(start, end)

    return {
        "success": True,
        "isAvailable": is_available,
        "conflictingEvents": [event.to_response() for event in conflicts],
    }


@router.post("/find-available-slots")
def find_available_slots(
        payload: FindSlotsRequest,
        db: Session = Depends(get_db),
        gateway_factory: CalendarGatewayFactory = Depends(get_gateway_factory)
):
    """Next free slots after currentTimestamp"""
    search_start = parse_datetime(payload.current_timestamp)

    service = availability_for(db, gateway_factory, payload)
    slots = service.get_available_slots(
        search_start,
        count=payload.num_slots,
        duration_minutes=payload.slot_duration_minutes,
    )

    return {
        "success": True,
        "slots": [slot.to_dict() for slot in slots],
    }
