# barberbook/api/clients.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from barberbook.api.dependencies import phone_query
from barberbook.config.database import get_db
from barberbook.schemas.conversation_dto import BookingStateRequest
from barberbook.services.client.client_service import ClientService

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get("/booking-state")
def get_booking_state(phone_number: str = Depends(phone_query), db: Session = Depends(get_db)):
    state = ClientService.get_booking_state(db, phone_number)
    return {"success": True, "phoneNumber": phone_number, "bookingState": state}


@router.post("/booking-state")
def update_booking_state(payload: BookingStateRequest, db: Session = Depends(get_db)):
    state = ClientService.update_booking_state(
        db, payload.phone_number, payload.status, payload.appointment_details
    )
    return {"success": True, "phoneNumber": payload.phone_number, "bookingState": state}
