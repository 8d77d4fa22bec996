# barberbook/schemas/barbers.py
from __future__ import annotations
from pydantic import Field
from typing import Optional

from barberbook.schemas.conversation_dto import PhoneRequest


class RegisterBarberRequest(PhoneRequest):
    """POST /register"""
    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)


class SaveCalendarRequest(PhoneRequest):
    """POST /save-calendar"""
    calendar_id: str = Field(..., alias="calendarId", min_length=1)
