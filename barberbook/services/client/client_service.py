# ============================================================================
# barberbook/services/client/client_service.py
# ============================================================================
"""Service for managing clients and their booking state"""
import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any

from sqlalchemy.orm import Session

from barberbook.config.settings import get_settings
from barberbook.core.errors import BarberNotFoundError, ClientNotFoundError
from barberbook.models.barber import Barber
from barberbook.models.client import Client

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    BOOKED = "booked"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"


def empty_booking_state() -> Dict[str, Any]:
    return {
        "status": BookingStatus.NOT_STARTED.value,
        "appointmentDetails": None,
        "lastUpdated": None,
    }


class ClientService:
    """Handles client record operations"""

    @staticmethod
    def get_by_phone(db: Session, phone_number: str) -> Optional[Client]:
        return db.query(Client).filter(Client.phone_number == phone_number).first()

    @staticmethod
    def create_or_update(
            db: Session,
            phone_number: str,
            name: Optional[str] = None,
            email: Optional[str] = None,
            preferred_barber_id: Optional[uuid.UUID] = None
    ) -> Client:
        """Upsert by phone; blank fields keep their stored values"""
        if preferred_barber_id is not None:
            if not db.query(Barber.id).filter(Barber.id == preferred_barber_id).first():
                raise BarberNotFoundError(f"Preferred barber not found: {preferred_barber_id}")

        client = ClientService.get_by_phone(db, phone_number)

        if client:
            client.name = name or client.name
            client.email = email or client.email
            client.preferred_barber_id = preferred_barber_id or client.preferred_barber_id
            client.updated_at = datetime.now(timezone.utc)
        else:
            client = Client(
                id=uuid.uuid4(),
                phone_number=phone_number,
                name=name or "New Client",
                email=email,
                preferred_barber_id=preferred_barber_id,
                conversation_history=[],
            )
            db.add(client)
            logger.info(f"Created client for {phone_number}")

        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def append_history(db: Session, phone_number: str, role: str, content: str) -> Optional[Client]:
        """Append to the client's bounded rolling history; no-op for unknown clients"""
        client = ClientService.get_by_phone(db, phone_number)
        if not client:
            return None

        limit = get_settings().CLIENT_HISTORY_LIMIT
        history = list(client.conversation_history or [])
        history.append({
            "role": role,
            "content": content,
            "at": datetime.now(timezone.utc).isoformat(),
        })
        # Reassign so the JSON column is flagged dirty
        client.conversation_history = history[-limit:]
        db.commit()
        return client

    @staticmethod
    def get_booking_state(db: Session, phone_number: str) -> Dict[str, Any]:
        client = ClientService.get_by_phone(db, phone_number)
        if not client:
            raise ClientNotFoundError(f"Client not found: {phone_number}")
        return client.last_booking_state or empty_booking_state()

    @staticmethod
    def update_booking_state(
            db: Session,
            phone_number: str,
            status: BookingStatus,
            appointment_details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Replace the status; details are kept when none are given"""
        client = ClientService.get_by_phone(db, phone_number)
        if not client:
            raise ClientNotFoundError(f"Client not found: {phone_number}")

        current = client.last_booking_state or empty_booking_state()
        state = {
            "status": BookingStatus(status).value,
            "appointmentDetails": appointment_details or current.get("appointmentDetails"),
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        }
        client.last_booking_state = state
        client.updated_at = datetime.now(timezone.utc)
        db.commit()
        return state
