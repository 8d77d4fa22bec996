# barberbook/schemas/conversation_dto.py
from __future__ import annotations
from pydantic import Field, field_validator
from typing import Optional, Dict, Any

from barberbook.schemas.appointments import WebhookModel
from barberbook.services.conversation.conversation_service import MessageRole
from barberbook.services.client.client_service import BookingStatus
from barberbook.utils.phone import normalize_phone


class PhoneRequest(WebhookModel):
    phone_number: str = Field(..., alias="phoneNumber")

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v: str) -> str:
        return normalize_phone(v)


class StoreMessageRequest(PhoneRequest):
    """POST /conversation/store-message"""
    message: str = Field(..., min_length=1, description="Message content")
    role: MessageRole = Field(MessageRole.USER)
    metadata: Optional[Dict[str, Any]] = Field(None)


class ProcessMessageRequest(WebhookModel):
    """POST /conversation/process-message"""
    message_id: str = Field(..., alias="messageId")
    window_seconds: Optional[float] = Field(None, alias="windowSeconds", ge=0, le=300)


class BookingStateRequest(PhoneRequest):
    """POST /clients/booking-state"""
    status: BookingStatus
    appointment_details: Optional[Dict[str, Any]] = Field(None, alias="appointmentDetails")
