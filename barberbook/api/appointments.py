# barberbook/api/appointments.py
"""Appointment webhooks called by the SMS automation flow"""
import logging

from fastapi import APIRouter, Depends

from barberbook.api.dependencies import get_appointment_service
from barberbook.schemas.appointments import ClientAppointmentRequest, LegacyEventRequest
from barberbook.services.appointment.appointment_service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Appointments"])


@router.post("/client-appointment")
def client_appointment(
        payload: ClientAppointmentRequest,
        service: AppointmentService = Depends(get_appointment_service)
):
    """Create, reschedule or cancel a client's appointment"""
    result = service.handle_client_request(payload)
    return result.model_dump(by_alias=True)


@router.post("/webhook/create-event")
def legacy_create_event(
        payload: LegacyEventRequest,
        service: AppointmentService = Depends(get_appointment_service)
):
    """Older single-endpoint form keyed by the barber's phone number"""
    logger.info(f"Legacy {payload.action.value} webhook for barber {payload.phone_number}")
    result = service.handle_legacy_request(payload)
    return result.model_dump(by_alias=True)
