# barberbook/schemas/availability.py
from __future__ import annotations
from pydantic import Field, field_validator, model_validator
from typing import Optional

from barberbook.schemas.appointments import WebhookModel
from barberbook.utils.phone import normalize_phone


class BarberLocator(WebhookModel):
    """Payloads that name a barber by id or by phone"""
    barber_id: Optional[str] = Field(None, alias="barberId")
    barber_phone_number: Optional[str] = Field(None, alias="barberPhoneNumber")

    @field_validator("barber_phone_number")
    @classmethod
    def validate_barber_phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v) if v else v

    @model_validator(mode="after")
    def require_barber(self):
        if not self.barber_id and not self.barber_phone_number:
            raise ValueError("barberId or barberPhoneNumber is required")
        return self


class CheckAvailabilityRequest(BarberLocator):
    """POST /check-availability"""
    start_date_time: str = Field(..., alias="startDateTime")
    end_date_time: str = Field(..., alias="endDateTime")


class FindSlotsRequest(BarberLocator):
    """POST /find-available-slots"""
    current_timestamp: str = Field(..., alias="currentTimestamp")
    num_slots: Optional[int] = Field(None, alias="numSlots", ge=1, le=50)
    slot_duration_minutes: Optional[int] = Field(None, alias="slotDurationMinutes", ge=5, le=8 * 60)
