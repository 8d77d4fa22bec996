# barberbook/models/client.py
from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from barberbook.models.base import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    phone_number = Column(String(20), nullable=False, unique=True, index=True)  # E.164
    name = Column(String(200), nullable=False, default="New Client")
    email = Column(String(320), nullable=True)
    preferred_barber_id = Column(Uuid(as_uuid=True), ForeignKey("barbers.id"), nullable=True)

    # Rolling list of {"role", "content", "at"} entries, newest last
    conversation_history = Column(JSON, default=list)
    # {"status", "appointmentDetails", "lastUpdated"}
    last_booking_state = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    preferred_barber = relationship("Barber", lazy="joined")

    def __repr__(self):
        return f"<Client(id={self.id}, phone={self.phone_number})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "phone_number": self.phone_number,
            "email": self.email,
            "preferred_barber_id": str(self.preferred_barber_id) if self.preferred_barber_id else None,
            "last_booking_state": self.last_booking_state,
        }
