# ============================================================================
# FILE: barberbook/api/dependencies.py
# Request-scoped dependencies shared by the webhook routes
# ============================================================================
from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from barberbook.config.database import get_db
from barberbook.config.settings import get_settings
from barberbook.core.errors import ValidationError
from barberbook.models.barber import Barber
from barberbook.schemas.availability import BarberLocator
from barberbook.services.appointment.appointment_service import AppointmentService
from barberbook.services.availability.availability_service import AvailabilityService
from barberbook.services.barber.barber_service import BarberService
from barberbook.services.calendar.calendar_gateway import CalendarGatewayFactory
from barberbook.services.calendar.google_calendar_service import GoogleCalendarService
from barberbook.utils.phone import normalize_phone


def get_gateway_factory(request: Request) -> CalendarGatewayFactory:
    """The calendar gateway factory installed on the app at startup"""
    return request.app.state.gateway_factory


def get_appointment_service(
        db: Session = Depends(get_db),
        gateway_factory: CalendarGatewayFactory = Depends(get_gateway_factory)
) -> AppointmentService:
    return AppointmentService(db, gateway_factory)


def availability_for(
        db: Session,
        gateway_factory: CalendarGatewayFactory,
        locator: BarberLocator
) -> AvailabilityService:
    """Build an AvailabilityService over the located barber's selected calendar"""
    barber: Barber = BarberService.require_authorized(
        db,
        barber_id=locator.barber_id,
        phone_number=locator.barber_phone_number,
    )
    calendar_id = barber.selected_calendar_id or get_settings().DEFAULT_CALENDAR_ID
    return AvailabilityService(gateway_factory(barber), calendar_id)


def get_google_service() -> GoogleCalendarService:
    return GoogleCalendarService()


def phone_query(phone_number: str = Query(..., alias="phoneNumber")) -> str:
    """Normalized ?phoneNumber= query parameter"""
    try:
        return normalize_phone(phone_number)
    except ValueError as e:
        raise ValidationError(str(e))
