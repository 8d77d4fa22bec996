# ============================================================================
# barberbook/services/barber/barber_service.py
# ============================================================================
"""Service for managing barbers"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy.orm import Session

from barberbook.config.settings import get_settings
from barberbook.core.errors import BarberNotFoundError
from barberbook.models.barber import Barber
from barberbook.utils.encryption import encrypt_token

logger = logging.getLogger(__name__)


class BarberService:
    """Handles barber record operations"""

    @staticmethod
    def get_by_phone(db: Session, phone_number: str) -> Optional[Barber]:
        return db.query(Barber).filter(Barber.phone_number == phone_number).first()

    @staticmethod
    def get_by_id(db: Session, barber_id: Union[str, uuid.UUID]) -> Optional[Barber]:
        if isinstance(barber_id, str):
            try:
                barber_id = uuid.UUID(barber_id)
            except ValueError:
                return None
        return db.query(Barber).filter(Barber.id == barber_id).first()

    @staticmethod
    def update_or_create(
            db: Session,
            phone_number: str,
            name: Optional[str] = None,
            email: Optional[str] = None,
            refresh_token: Optional[str] = None,
            selected_calendar_id: Optional[str] = None
    ) -> Barber:
        """Upsert by phone; blank fields keep their stored values"""
        barber = BarberService.get_by_phone(db, phone_number)

        if barber:
            barber.name = name or barber.name
            barber.email = email or barber.email
            if refresh_token:
                barber.refresh_token_encrypted = encrypt_token(refresh_token)
            barber.selected_calendar_id = selected_calendar_id or barber.selected_calendar_id
            barber.updated_at = datetime.now(timezone.utc)
            logger.info(f"Updated barber {barber.id}")
        else:
            barber = Barber(
                id=uuid.uuid4(),
                phone_number=phone_number,
                name=name or "New Barber",
                email=email,
                refresh_token_encrypted=encrypt_token(refresh_token),
                selected_calendar_id=selected_calendar_id or get_settings().DEFAULT_CALENDAR_ID,
            )
            db.add(barber)
            logger.info(f"Created barber for {phone_number}")

        db.commit()
        db.refresh(barber)
        return barber

    @staticmethod
    def update_calendar_id(db: Session, phone_number: str, calendar_id: str) -> Barber:
        barber = BarberService.get_by_phone(db, phone_number)
        if not barber:
            raise BarberNotFoundError(f"Barber not found: {phone_number}")

        barber.selected_calendar_id = calendar_id
        barber.updated_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(barber)
        return barber

    @staticmethod
    def require_authorized(
            db: Session,
            barber_id: Optional[str] = None,
            phone_number: Optional[str] = None
    ) -> Barber:
        """Look up a barber by id or phone and insist on a stored credential"""
        barber = None
        if barber_id:
            barber = BarberService.get_by_id(db, barber_id)
        elif phone_number:
            barber = BarberService.get_by_phone(db, phone_number)

        if not barber or not barber.is_authorized:
            raise BarberNotFoundError("Barber not found or not authorized")
        return barber
