# barberbook/schemas/appointments.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from enum import Enum

from barberbook.core.errors import ValidationError
from barberbook.utils.phone import normalize_phone


class OperationKind(str, Enum):
    CREATE = "create"
    RESCHEDULE = "reschedule"
    CANCEL = "cancel"


class WebhookModel(BaseModel):
    """Base for automation-platform payloads: camelCase keys, blank strings mean unset"""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ClientAppointmentRequest(WebhookModel):
    """POST /client-appointment"""
    client_phone: str = Field(..., alias="clientPhone", description="Client phone number")
    client_name: Optional[str] = Field(None, alias="clientName")
    service_type: Optional[str] = Field(None, alias="serviceType")
    start_date_time: Optional[str] = Field(None, alias="startDateTime")
    new_start_date_time: Optional[str] = Field(None, alias="newStartDateTime")
    old_start_date_time: Optional[str] = Field(None, alias="oldStartDateTime")
    duration: Optional[int] = Field(None, gt=0, le=24 * 60, description="Duration in minutes")
    notes: Optional[str] = Field(None)
    preferred_barber_id: Optional[str] = Field(None, alias="preferredBarberId")
    is_cancelling: bool = Field(False, alias="isCancelling")
    is_rescheduling: bool = Field(False, alias="isRescheduling")
    event_id: Optional[str] = Field(None, alias="eventId")

    @field_validator("client_phone")
    @classmethod
    def validate_client_phone(cls, v: str) -> str:
        return normalize_phone(v)

    @field_validator("is_cancelling", "is_rescheduling", mode="before")
    @classmethod
    def none_is_false(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return False
        return v

    def operation(self) -> OperationKind:
        """Resolve the two flags into one operation kind"""
        if self.is_cancelling and self.is_rescheduling:
            raise ValidationError("isCancelling and isRescheduling cannot both be true")
        if self.is_cancelling:
            return OperationKind.CANCEL
        if self.is_rescheduling:
            return OperationKind.RESCHEDULE
        return OperationKind.CREATE

    def reschedule_times(self) -> tuple:
        """
        (new start, old start hint) for a reschedule.

        With newStartDateTime present, startDateTime (or oldStartDateTime)
        names the appointment being moved; otherwise startDateTime is the new
        time and only oldStartDateTime can hint at the old one.
        """
        if self.new_start_date_time:
            return self.new_start_date_time, self.old_start_date_time or self.start_date_time
        return self.start_date_time, self.old_start_date_time


class LegacyEventRequest(WebhookModel):
    """POST /webhook/create-event, keyed by the barber's phone"""
    action: OperationKind = Field(OperationKind.CREATE)
    phone_number: str = Field(..., alias="phoneNumber", description="Barber phone number")
    start_date_time: Optional[str] = Field(None, alias="startDateTime")
    client_name: Optional[str] = Field(None, alias="clientName")
    client_phone: Optional[str] = Field(None, alias="clientPhone")
    duration: Optional[int] = Field(None, gt=0, le=24 * 60)
    service: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    event_id: Optional[str] = Field(None, alias="eventId")

    @field_validator("action", mode="before")
    @classmethod
    def lower_action(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v: str) -> str:
        return normalize_phone(v)

    @field_validator("client_phone")
    @classmethod
    def validate_client_phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v) if v else v


class AppointmentResult(BaseModel):
    """Outcome of an appointment operation"""
    success: bool = True
    action: OperationKind
    event_id: Optional[str] = Field(None, serialization_alias="eventId")
    event_link: Optional[str] = Field(None, serialization_alias="eventLink")
    start: Optional[str] = None
    end: Optional[str] = None
    appointment_id: Optional[str] = Field(None, serialization_alias="appointmentId")
    message: str = ""
    warnings: List[str] = Field(default_factory=list)
