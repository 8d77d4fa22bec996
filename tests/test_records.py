"""Tests for the barber, client and appointment record services."""

import uuid
from datetime import timedelta

import pytest

from barberbook.config.settings import get_settings
from barberbook.core.errors import BarberNotFoundError, ClientNotFoundError
from barberbook.services.appointment.appointment_record_service import AppointmentRecordService
from barberbook.services.barber.barber_service import BarberService
from barberbook.services.client.client_service import BookingStatus, ClientService
from barberbook.utils.encryption import decrypt_token, encrypt_token
from barberbook.utils.phone import normalize_phone
from tests.helpers import BARBER_PHONE, CLIENT_PHONE, utc


class TestPhone:

    @pytest.mark.parametrize("raw, expected", [
        ("5551234567", "+15551234567"),
        ("(555) 123-4567", "+15551234567"),
        ("+1 555 123 4567", "+15551234567"),
        ("+44 20 7946 0958", "+442079460958"),
    ])
    def test_normalize(self, raw, expected):
        assert normalize_phone(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "call me"])
    def test_rejects_numbers_without_digits(self, raw):
        with pytest.raises(ValueError):
            normalize_phone(raw)


class TestEncryption:

    def test_round_trip(self):
        encrypted = encrypt_token("refresh-abc")
        assert encrypted != b"refresh-abc"
        assert decrypt_token(encrypted) == "refresh-abc"

    def test_empty(self):
        assert encrypt_token(None) is None
        assert decrypt_token(None) is None

    def test_unreadable_token(self):
        assert decrypt_token(b"not a fernet token") is None


class TestBarberService:

    def test_update_keeps_stored_values(self, db_session, barber):
        updated = BarberService.update_or_create(db_session, BARBER_PHONE, name=None, email="new@example.com")

        assert updated.id == barber.id
        assert updated.name == "Sam"
        assert updated.email == "new@example.com"
        assert updated.is_authorized

    def test_require_authorized(self, db_session, barber, unauthorized_barber):
        assert BarberService.require_authorized(db_session, barber_id=str(barber.id)) == barber
        assert BarberService.require_authorized(db_session, phone_number=BARBER_PHONE) == barber

        with pytest.raises(BarberNotFoundError):
            BarberService.require_authorized(db_session, barber_id=str(unauthorized_barber.id))
        with pytest.raises(BarberNotFoundError):
            BarberService.require_authorized(db_session, barber_id="not-a-uuid")


class TestClientService:

    def test_preferred_barber_must_exist(self, db_session, barber):
        with pytest.raises(BarberNotFoundError):
            ClientService.create_or_update(db_session, CLIENT_PHONE, preferred_barber_id=uuid.UUID(int=1))

    def test_one_client_per_phone(self, db_session):
        first = ClientService.create_or_update(db_session, CLIENT_PHONE, name="Jane")
        second = ClientService.create_or_update(db_session, CLIENT_PHONE, email="jane@example.com")

        assert first.id == second.id
        assert second.name == "Jane"

    def test_history_is_bounded(self, db_session, monkeypatch):
        ClientService.create_or_update(db_session, CLIENT_PHONE)
        monkeypatch.setattr(get_settings(), "CLIENT_HISTORY_LIMIT", 3)

        for i in range(5):
            ClientService.append_history(db_session, CLIENT_PHONE, "user", f"message {i}")

        history = ClientService.get_by_phone(db_session, CLIENT_PHONE).conversation_history
        assert [entry["content"] for entry in history] == ["message 2", "message 3", "message 4"]

    def test_booking_state_keeps_details_when_omitted(self, db_session):
        ClientService.create_or_update(db_session, CLIENT_PHONE)
        ClientService.update_booking_state(db_session, CLIENT_PHONE, BookingStatus.BOOKED, {"eventId": "e1"})

        state = ClientService.update_booking_state(db_session, CLIENT_PHONE, BookingStatus.CANCELLED)

        assert state["status"] == "cancelled"
        assert state["appointmentDetails"] == {"eventId": "e1"}

    def test_booking_state_unknown_client(self, db_session):
        with pytest.raises(ClientNotFoundError):
            ClientService.update_booking_state(db_session, CLIENT_PHONE, BookingStatus.BOOKED)


class TestAppointmentRecordService:

    def create(self, db_session, barber, start, event_id):
        return AppointmentRecordService.create(
            db_session, CLIENT_PHONE, barber.id, "Haircut", start, start + timedelta(minutes=30), event_id
        )

    def test_closest_within_window(self, db_session, barber):
        self.create(db_session, barber, utc(2025, 3, 9, 16), "far")
        near = self.create(db_session, barber, utc(2025, 3, 10, 15), "near")
        self.create(db_session, barber, utc(2025, 3, 20, 16), "outside")

        found = AppointmentRecordService.find_closest_for_client(
            db_session, CLIENT_PHONE, utc(2025, 3, 10, 16), timedelta(hours=24)
        )

        assert found.id == near.id

    def test_nothing_within_window(self, db_session, barber):
        self.create(db_session, barber, utc(2025, 3, 20, 16), "outside")

        assert AppointmentRecordService.find_closest_for_client(
            db_session, CLIENT_PHONE, utc(2025, 3, 10, 16), timedelta(hours=24)
        ) is None

    def test_update_missing_event_returns_none(self, db_session):
        assert AppointmentRecordService.update_by_event_id(
            db_session, "missing", utc(2025, 3, 10, 16), utc(2025, 3, 10, 17)
        ) is None

    def test_delete_by_event_id(self, db_session, barber):
        self.create(db_session, barber, utc(2025, 3, 10, 16), "e1")

        assert AppointmentRecordService.delete_by_event_id(db_session, "e1") == 1
        assert AppointmentRecordService.delete_by_event_id(db_session, "e1") == 0
