# ============================================================================
# barberbook/services/appointment/appointment_service.py
# ============================================================================
"""
Create, reschedule and cancel appointments across the barber's calendar and
the local appointment table.

The calendar is what clients and barbers actually see, so each operation is
decided by the calendar mutation. Local rows are reconciled afterwards on a
best-effort basis: a store failure after a successful calendar change is
logged and reported as a `persistence_divergence` warning, never as a failed
operation. Reschedule repairs earlier divergence by falling back to the
client's nearest local row when no row carries the event id.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barberbook.config.settings import get_settings
from barberbook.core.errors import (
    PERSISTENCE_DIVERGENCE,
    BarberNotFoundError,
    EventNotFoundError,
    PersistenceDivergence,
    ValidationError,
)
from barberbook.models.barber import Barber
from barberbook.models.client import Client
from barberbook.schemas.appointments import (
    AppointmentResult,
    ClientAppointmentRequest,
    LegacyEventRequest,
    OperationKind,
)
from barberbook.schemas.calendar_events import CalendarEvent, EventDraft, EventPatch
from barberbook.schemas.interval import TimeInterval
from barberbook.services.appointment.appointment_record_service import AppointmentRecordService
from barberbook.services.appointment.event_resolver import EventResolver
from barberbook.services.barber.barber_service import BarberService
from barberbook.services.calendar.calendar_gateway import CalendarGateway, CalendarGatewayFactory
from barberbook.services.client.client_service import BookingStatus, ClientService
from barberbook.utils.time_parser import isoformat_utc, parse_datetime

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Booking via SMS"
PLACEHOLDER_CLIENT_NAME = "New Client"


@dataclass
class BookingContext:
    """The barber whose calendar an operation runs against"""
    barber: Barber
    gateway: CalendarGateway
    calendar_id: str


def build_summary(service_type: str, client_name: Optional[str]) -> str:
    return f"{service_type}: {client_name}" if client_name else service_type


def build_description(notes: Optional[str], client_phone: Optional[str]) -> str:
    description = notes or DEFAULT_DESCRIPTION
    if client_phone:
        description += f"\nClient phone: {client_phone}"
    return description


class AppointmentService:
    """Appointment state transitions over the calendar gateway and the record store"""

    def __init__(self, db: Session, gateway_factory: CalendarGatewayFactory):
        self.db = db
        self.gateway_factory = gateway_factory
        self.settings = get_settings()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def handle_client_request(self, request: ClientAppointmentRequest) -> AppointmentResult:
        """POST /client-appointment"""
        operation = request.operation()
        logger.info(f"{operation.value} requested for client {request.client_phone}")

        # Timestamps are checked before anything is written for the client
        if operation == OperationKind.CANCEL:
            hint = request.old_start_date_time or request.start_date_time
            target = parse_datetime(hint) if hint else None
        elif operation == OperationKind.RESCHEDULE:
            new_start, old_start = request.reschedule_times()
            if not new_start:
                raise ValidationError("newStartDateTime is required for rescheduling")
            new_start = parse_datetime(new_start)
            old_start = parse_datetime(old_start) if old_start else None
        else:
            if not request.start_date_time:
                raise ValidationError("startDateTime is required for creating appointments")
            start = parse_datetime(request.start_date_time)

        client = self._upsert_client(request)
        barber = self._barber_for_client(client, request.preferred_barber_id)
        context = self.context_for(barber)
        client_name = request.client_name or self._known_name(client)

        if operation == OperationKind.CANCEL:
            return self.cancel_appointment(
                context,
                client_phone=client.phone_number,
                client_name=client_name,
                event_id=request.event_id,
                target_date=target,
            )

        if operation == OperationKind.RESCHEDULE:
            return self.reschedule_appointment(
                context,
                client_phone=client.phone_number,
                client_name=client_name,
                new_start=new_start,
                event_id=request.event_id,
                old_start=old_start,
                duration_minutes=request.duration,
                service_type=request.service_type,
            )

        return self.create_appointment(
            context,
            client_phone=client.phone_number,
            client_name=client_name,
            service_type=request.service_type,
            start=start,
            duration_minutes=request.duration,
            notes=request.notes,
        )

    def handle_legacy_request(self, request: LegacyEventRequest) -> AppointmentResult:
        """POST /webhook/create-event: barber picked by phone, event ids required for changes"""
        barber = BarberService.require_authorized(self.db, phone_number=request.phone_number)
        context = self.context_for(barber)

        if request.action == OperationKind.CREATE:
            if not request.start_date_time:
                raise ValidationError("Start date-time is required for creating events")
            return self.create_appointment(
                context,
                client_phone=request.client_phone,
                client_name=request.client_name,
                service_type=request.service,
                start=parse_datetime(request.start_date_time),
                duration_minutes=request.duration,
                notes=request.notes,
            )

        if not request.event_id:
            raise ValidationError(f"Event ID is required for {request.action.value}")

        if request.action == OperationKind.CANCEL:
            return self.cancel_appointment(
                context,
                client_phone=request.client_phone,
                client_name=request.client_name,
                event_id=request.event_id,
            )

        if not request.start_date_time:
            raise ValidationError("Event ID and new start date-time are required for rescheduling")
        return self.reschedule_appointment(
            context,
            client_phone=request.client_phone,
            client_name=request.client_name,
            new_start=parse_datetime(request.start_date_time),
            event_id=request.event_id,
            duration_minutes=request.duration,
        )

    def context_for(self, barber: Barber) -> BookingContext:
        if not barber.is_authorized:
            raise BarberNotFoundError("Barber not found or not authorized")
        return BookingContext(
            barber=barber,
            gateway=self.gateway_factory(barber),
            calendar_id=barber.selected_calendar_id or self.settings.DEFAULT_CALENDAR_ID,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create_appointment(
            self,
            context: BookingContext,
            client_phone: Optional[str],
            client_name: Optional[str],
            service_type: Optional[str],
            start: datetime,
            duration_minutes: Optional[int] = None,
            notes: Optional[str] = None
    ) -> AppointmentResult:
        service_type = service_type or self.settings.DEFAULT_SERVICE_TYPE
        interval = TimeInterval.from_duration(
            start, duration_minutes or self.settings.DEFAULT_APPOINTMENT_MINUTES
        )

        event = context.gateway.insert_event(
            context.calendar_id,
            EventDraft(
                summary=build_summary(service_type, client_name),
                description=build_description(notes, client_phone),
                start=interval.start,
                end=interval.end,
                time_zone=self.settings.CALENDAR_TIMEZONE,
            ),
        )

        warnings: List[str] = []
        appointment_id = None
        try:
            appointment = AppointmentRecordService.create(
                self.db,
                client_phone=client_phone or "unknown",
                barber_id=context.barber.id,
                service_type=service_type,
                start_time=interval.start,
                end_time=interval.end,
                google_calendar_event_id=event.id,
                notes=notes or "",
            )
            appointment_id = str(appointment.id)
        except SQLAlchemyError as e:
            self._divergence(warnings, f"storing appointment for event {event.id}", e)

        self._record_booking_state(client_phone, BookingStatus.BOOKED, event, service_type, context)

        return AppointmentResult(
            action=OperationKind.CREATE,
            event_id=event.id,
            event_link=event.html_link,
            start=isoformat_utc(event.start),
            end=isoformat_utc(event.end),
            appointment_id=appointment_id,
            message="Appointment added to calendar",
            warnings=warnings,
        )

    def reschedule_appointment(
            self,
            context: BookingContext,
            client_phone: Optional[str],
            client_name: Optional[str],
            new_start: datetime,
            event_id: Optional[str] = None,
            old_start: Optional[datetime] = None,
            duration_minutes: Optional[int] = None,
            service_type: Optional[str] = None
    ) -> AppointmentResult:
        existing = self._target_event(context, client_phone, client_name, event_id, old_start)

        if duration_minutes:
            new_interval = TimeInterval.from_duration(new_start, duration_minutes)
        elif existing.interval.duration > timedelta(0):
            new_interval = existing.interval.shift_to(new_start)
        else:
            new_interval = TimeInterval.from_duration(new_start, self.settings.DEFAULT_APPOINTMENT_MINUTES)

        updated = context.gateway.update_event(
            context.calendar_id,
            existing.id,
            EventPatch(
                start=new_interval.start,
                end=new_interval.end,
                time_zone=self.settings.CALENDAR_TIMEZONE,
                summary=build_summary(service_type, client_name) if service_type else None,
            ),
        )
        logger.info(f"Moved event {existing.id} from {existing.start} to {new_interval.start}")

        warnings: List[str] = []
        appointment_id = None
        try:
            appointment_id = self._reconcile_reschedule(existing, new_interval, client_phone, service_type)
        except (SQLAlchemyError, PersistenceDivergence) as e:
            self._divergence(warnings, f"updating appointment for event {existing.id}", e)

        self._record_booking_state(client_phone, BookingStatus.RESCHEDULED, updated, service_type, context)

        return AppointmentResult(
            action=OperationKind.RESCHEDULE,
            event_id=updated.id,
            event_link=updated.html_link,
            start=isoformat_utc(updated.start),
            end=isoformat_utc(updated.end),
            appointment_id=appointment_id,
            message="Appointment successfully rescheduled",
            warnings=warnings,
        )

    def cancel_appointment(
            self,
            context: BookingContext,
            client_phone: Optional[str],
            client_name: Optional[str],
            event_id: Optional[str] = None,
            target_date: Optional[datetime] = None
    ) -> AppointmentResult:
        if event_id:
            try:
                context.gateway.delete_event(context.calendar_id, event_id)
            except EventNotFoundError:
                # Already gone remotely; drop any local leftover, then report it as not found
                self._delete_local(event_id, [])
                raise
            target_id = event_id
        else:
            event = self._target_event(context, client_phone, client_name, None, target_date)
            context.gateway.delete_event(context.calendar_id, event.id)
            target_id = event.id

        logger.info(f"Cancelled event {target_id} on {context.calendar_id}")

        warnings: List[str] = []
        self._delete_local(target_id, warnings)
        self._record_booking_state(client_phone, BookingStatus.CANCELLED, None, None, context)

        return AppointmentResult(
            action=OperationKind.CANCEL,
            event_id=target_id,
            message="Appointment successfully cancelled",
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _target_event(
            self,
            context: BookingContext,
            client_phone: Optional[str],
            client_name: Optional[str],
            event_id: Optional[str],
            target_date: Optional[datetime]
    ) -> CalendarEvent:
        if event_id:
            return context.gateway.get_event(context.calendar_id, event_id)
        if not client_name and not client_phone:
            raise ValidationError("eventId or client identity is required")
        return EventResolver(context.gateway, context.calendar_id).find(
            client_name, client_phone, target_date=target_date
        )

    def _reconcile_reschedule(
            self,
            existing: CalendarEvent,
            new_interval: TimeInterval,
            client_phone: Optional[str],
            service_type: Optional[str]
    ) -> str:
        appointment = AppointmentRecordService.update_by_event_id(
            self.db, existing.id, new_interval.start, new_interval.end, service_type
        )
        if appointment:
            return str(appointment.id)

        if client_phone:
            window = timedelta(hours=self.settings.RESCHEDULE_FALLBACK_HOURS)
            appointment = AppointmentRecordService.find_closest_for_client(
                self.db, client_phone, existing.start, window
            )
            if appointment:
                logger.info(
                    f"Appointment {appointment.id} carried stale event id "
                    f"{appointment.google_calendar_event_id}; relinking to {existing.id}"
                )
                AppointmentRecordService.relink(
                    self.db, appointment, existing.id, new_interval.start, new_interval.end, service_type
                )
                return str(appointment.id)

        raise PersistenceDivergence(f"No local appointment matches event {existing.id}")

    def _delete_local(self, event_id: str, warnings: List[str]) -> None:
        try:
            AppointmentRecordService.delete_by_event_id(self.db, event_id)
        except SQLAlchemyError as e:
            self._divergence(warnings, f"deleting appointment for event {event_id}", e)

    def _divergence(self, warnings: List[str], action: str, error: Exception) -> None:
        self.db.rollback()
        logger.error(f"Calendar updated but local store failed while {action}: {error}")
        if PERSISTENCE_DIVERGENCE not in warnings:
            warnings.append(PERSISTENCE_DIVERGENCE)

    def _record_booking_state(
            self,
            client_phone: Optional[str],
            status: BookingStatus,
            event: Optional[CalendarEvent],
            service_type: Optional[str],
            context: BookingContext
    ) -> None:
        if not client_phone or not ClientService.get_by_phone(self.db, client_phone):
            return

        details: Optional[Dict] = None
        if event is not None:
            details = {
                "eventId": event.id,
                "barberId": str(context.barber.id),
                "service": service_type,
                "start": isoformat_utc(event.start),
                "end": isoformat_utc(event.end),
            }
        try:
            ClientService.update_booking_state(self.db, client_phone, status, details)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Could not update booking state for {client_phone}: {e}")

    def _upsert_client(self, request: ClientAppointmentRequest) -> Client:
        preferred_id = None
        if request.preferred_barber_id:
            barber = BarberService.get_by_id(self.db, request.preferred_barber_id)
            if not barber:
                raise BarberNotFoundError(f"Barber not found: {request.preferred_barber_id}")
            preferred_id = barber.id
        return ClientService.create_or_update(
            self.db,
            phone_number=request.client_phone,
            name=request.client_name,
            preferred_barber_id=preferred_id,
        )

    def _barber_for_client(self, client: Client, explicit_barber_id: Optional[str]) -> Barber:
        barber_id = explicit_barber_id or client.preferred_barber_id
        if not barber_id:
            raise ValidationError("preferredBarberId is required for clients without a preferred barber")
        return BarberService.require_authorized(self.db, barber_id=str(barber_id))

    @staticmethod
    def _known_name(client: Client) -> Optional[str]:
        return client.name if client.name and client.name != PLACEHOLDER_CLIENT_NAME else None
