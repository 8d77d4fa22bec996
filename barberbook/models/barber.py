# barberbook/models/barber.py
from sqlalchemy import Column, String, DateTime, LargeBinary, Uuid
from sqlalchemy.sql import func
import uuid
from barberbook.models.base import Base


class Barber(Base):
    __tablename__ = "barbers"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    phone_number = Column(String(20), nullable=False, unique=True, index=True)  # E.164
    name = Column(String(200), nullable=False, default="New Barber")
    email = Column(String(320), nullable=True)

    # OAuth refresh token, Fernet-encrypted
    refresh_token_encrypted = Column(LargeBinary, nullable=True)
    selected_calendar_id = Column(String(255), nullable=False, default="primary")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_authorized(self) -> bool:
        return self.refresh_token_encrypted is not None

    def __repr__(self):
        return f"<Barber(id={self.id}, phone={self.phone_number})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "phone_number": self.phone_number,
            "email": self.email,
            "selected_calendar_id": self.selected_calendar_id,
            "is_authorized": self.is_authorized,
        }
