# barberbook/api/barbers.py
"""Barber onboarding: registration, Google authorization and calendar choice"""
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from barberbook.api.dependencies import get_google_service
from barberbook.config.database import get_db
from barberbook.core.errors import ValidationError
from barberbook.schemas.barbers import RegisterBarberRequest, SaveCalendarRequest
from barberbook.services.barber.barber_service import BarberService
from barberbook.services.calendar.google_calendar_service import GoogleCalendarService
from barberbook.utils.phone import normalize_phone

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Barbers"])


def _barber_phone(value: str) -> str:
    try:
        return normalize_phone(value)
    except ValueError as e:
        raise ValidationError(str(e))


@router.post("/register")
def register_barber(payload: RegisterBarberRequest, db: Session = Depends(get_db)):
    """Pre-create a barber so they can authorize their calendar"""
    barber = BarberService.update_or_create(
        db,
        phone_number=payload.phone_number,
        name=payload.name,
        email=payload.email,
    )
    return {
        "success": True,
        "barber": barber.to_dict(),
        "authUrl": f"/auth/google?phone={barber.phone_number}",
    }


@router.get("/auth/google")
def google_auth(
        phone: str = Query(..., description="Barber phone number"),
        google: GoogleCalendarService = Depends(get_google_service)
):
    """Step 1: Send the barber to Google's consent screen"""
    phone_number = _barber_phone(phone)
    return RedirectResponse(google.generate_authorization_url(phone_number))


@router.get("/auth/google/callback")
def google_callback(
        code: str,
        state: str,  # barber phone
        db: Session = Depends(get_db),
        google: GoogleCalendarService = Depends(get_google_service)
):
    """Step 2: Google redirects here after authorization"""
    phone_number = _barber_phone(state)
    tokens = google.exchange_code(code)
    if not tokens.get("refresh_token"):
        logger.warning(f"Google returned no refresh token for {phone_number}; keeping any stored one")

    barber = BarberService.update_or_create(
        db,
        phone_number=phone_number,
        name=tokens.get("name"),
        email=tokens.get("email"),
        refresh_token=tokens.get("refresh_token"),
    )
    logger.info(f"Barber {barber.id} authorized Google Calendar")

    return {
        "success": True,
        "barberId": str(barber.id),
        "email": barber.email,
        "calendars": tokens.get("calendars", []),
    }


@router.post("/save-calendar")
def save_calendar(payload: SaveCalendarRequest, db: Session = Depends(get_db)):
    """Let the barber choose which calendar bookings go to"""
    barber = BarberService.update_calendar_id(db, payload.phone_number, payload.calendar_id)
    return {"success": True, "barber": barber.to_dict()}
