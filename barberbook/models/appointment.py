# ===== barberbook/models/appointment.py =====
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.sql import func
import uuid
from barberbook.models.base import Base


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    client_phone = Column(String(20), nullable=False, index=True)
    barber_id = Column(Uuid(as_uuid=True), ForeignKey("barbers.id"), nullable=False)

    # Appointment details
    service_type = Column(String(200), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    notes = Column(Text, nullable=True)

    # Join key back to the remote calendar event
    google_calendar_event_id = Column(String(1024), nullable=True, unique=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_appointments_end_after_start"),
    )

    def to_dict(self):
        return {
            "id": str(self.id),
            "client_phone": self.client_phone,
            "barber_id": str(self.barber_id),
            "service_type": self.service_type,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "google_calendar_event_id": self.google_calendar_event_id,
            "notes": self.notes,
        }
