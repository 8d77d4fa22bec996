# ============================================================================
# barberbook/services/appointment/appointment_record_service.py
# ============================================================================
"""Local appointment rows mirroring remote calendar events"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from barberbook.models.appointment import Appointment
from barberbook.utils.time_parser import ensure_utc

logger = logging.getLogger(__name__)


class AppointmentRecordService:
    """Handles appointment row operations"""

    @staticmethod
    def create(
            db: Session,
            client_phone: str,
            barber_id: uuid.UUID,
            service_type: str,
            start_time: datetime,
            end_time: datetime,
            google_calendar_event_id: Optional[str],
            notes: str = ""
    ) -> Appointment:
        appointment = Appointment(
            id=uuid.uuid4(),
            client_phone=client_phone,
            barber_id=barber_id,
            service_type=service_type,
            start_time=start_time,
            end_time=end_time,
            google_calendar_event_id=google_calendar_event_id,
            notes=notes,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        logger.info(f"Stored appointment {appointment.id} for event {google_calendar_event_id}")
        return appointment

    @staticmethod
    def get_by_event_id(db: Session, event_id: str) -> Optional[Appointment]:
        return db.query(Appointment).filter(
            Appointment.google_calendar_event_id == event_id
        ).first()

    @staticmethod
    def update_by_event_id(
            db: Session,
            event_id: str,
            start_time: datetime,
            end_time: datetime,
            service_type: Optional[str] = None
    ) -> Optional[Appointment]:
        """Returns None when no row carries this event id"""
        appointment = AppointmentRecordService.get_by_event_id(db, event_id)
        if not appointment:
            logger.warning(f"No appointment found with event ID: {event_id}")
            return None

        appointment.start_time = start_time
        appointment.end_time = end_time
        if service_type:
            appointment.service_type = service_type
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def find_by_client_phone(
            db: Session,
            client_phone: str,
            start_after: Optional[datetime] = None,
            start_before: Optional[datetime] = None
    ) -> List[Appointment]:
        query = db.query(Appointment).filter(Appointment.client_phone == client_phone)
        if start_after is not None:
            query = query.filter(Appointment.start_time > start_after)
        if start_before is not None:
            query = query.filter(Appointment.start_time < start_before)
        return query.order_by(Appointment.start_time.asc()).all()

    @staticmethod
    def find_closest_for_client(
            db: Session,
            client_phone: str,
            around: datetime,
            window: timedelta
    ) -> Optional[Appointment]:
        """The client's appointment starting nearest to `around`, within ±window"""
        candidates = AppointmentRecordService.find_by_client_phone(
            db, client_phone, start_after=around - window, start_before=around + window
        )
        if not candidates:
            return None
        around = ensure_utc(around)
        return min(candidates, key=lambda a: abs(ensure_utc(a.start_time) - around))

    @staticmethod
    def relink(
            db: Session,
            appointment: Appointment,
            event_id: str,
            start_time: datetime,
            end_time: datetime,
            service_type: Optional[str] = None
    ) -> Appointment:
        """Point a drifted row at the live event and move it"""
        appointment.google_calendar_event_id = event_id
        appointment.start_time = start_time
        appointment.end_time = end_time
        if service_type:
            appointment.service_type = service_type
        db.commit()
        db.refresh(appointment)
        logger.info(f"Relinked appointment {appointment.id} to event {event_id}")
        return appointment

    @staticmethod
    def delete_by_event_id(db: Session, event_id: str) -> int:
        deleted = db.query(Appointment).filter(
            Appointment.google_calendar_event_id == event_id
        ).delete(synchronize_session=False)
        db.commit()
        if not deleted:
            logger.warning(f"No appointment found to delete for event ID: {event_id}")
        return deleted
