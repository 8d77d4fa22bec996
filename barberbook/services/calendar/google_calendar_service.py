# barberbook/services/calendar/google_calendar_service.py
from datetime import datetime
from typing import List, Dict, Optional

from barberbook.config.settings import get_settings
from barberbook.core.errors import BarberNotFoundError, EventNotFoundError, UpstreamError
from barberbook.models.barber import Barber
from barberbook.schemas.calendar_events import CalendarEvent, EventDraft, EventPatch
from barberbook.utils.encryption import decrypt_token
from barberbook.utils.time_parser import isoformat_utc
from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
import logging

settings = get_settings()

logger = logging.getLogger(__name__)

# Google answers 410 Gone for events that were already deleted
_NOT_FOUND_STATUSES = (404, 410)


def _translate_http_error(error: HttpError, action: str, event_id: Optional[str] = None):
    status = getattr(error.resp, "status", None)
    if status in _NOT_FOUND_STATUSES:
        return EventNotFoundError(f"Event not found: {event_id}" if event_id else "Event not found")
    logger.error(f"Google Calendar {action} failed with status {status}: {error}")
    return UpstreamError(f"Calendar provider error during {action} (status {status})")


class GoogleCalendarGateway:
    """CalendarGateway backed by the Google Calendar v3 API"""

    def __init__(self, credentials: Credentials, default_tz: Optional[str] = None):
        self.service = build('calendar', 'v3', credentials=credentials, cache_discovery=False)
        self.default_tz = default_tz or settings.CALENDAR_TIMEZONE

    def _execute(self, request, action: str, event_id: Optional[str] = None):
        try:
            return request.execute()
        except HttpError as e:
            raise _translate_http_error(e, action, event_id) from e
        except RefreshError as e:
            logger.error(f"Google credentials could not be refreshed during {action}: {e}")
            raise UpstreamError("Calendar credentials were rejected; the barber must re-authorize") from e

    def list_events(self, calendar_id: str, time_min: datetime, time_max: datetime) -> List[CalendarEvent]:
        events: List[CalendarEvent] = []
        page_token = None
        while True:
            result = self._execute(
                self.service.events().list(
                    calendarId=calendar_id,
                    timeMin=isoformat_utc(time_min),
                    timeMax=isoformat_utc(time_max),
                    singleEvents=True,
                    orderBy='startTime',
                    maxResults=250,
                    pageToken=page_token,
                ),
                "list",
            )
            for item in result.get('items', []):
                if item.get('status') == 'cancelled':
                    continue
                events.append(CalendarEvent.from_google(item, self.default_tz))
            page_token = result.get('nextPageToken')
            if not page_token:
                break

        logger.info(f"Retrieved {len(events)} events from calendar {calendar_id}")
        return events

    def get_event(self, calendar_id: str, event_id: str) -> CalendarEvent:
        item = self._execute(
            self.service.events().get(calendarId=calendar_id, eventId=event_id),
            "get",
            event_id,
        )
        if item.get('status') == 'cancelled':
            raise EventNotFoundError(f"Event not found: {event_id}")
        return CalendarEvent.from_google(item, self.default_tz)

    def insert_event(self, calendar_id: str, draft: EventDraft) -> CalendarEvent:
        item = self._execute(
            self.service.events().insert(calendarId=calendar_id, body=draft.to_google()),
            "insert",
        )
        logger.info(f"Created calendar event {item.get('id')} on {calendar_id}")
        return CalendarEvent.from_google(item, self.default_tz)

    def update_event(self, calendar_id: str, event_id: str, patch: EventPatch) -> CalendarEvent:
        # patch semantics leave attendees, reminders, etc. untouched
        item = self._execute(
            self.service.events().patch(
                calendarId=calendar_id,
                eventId=event_id,
                body=patch.to_google(),
                sendUpdates='all',
            ),
            "update",
            event_id,
        )
        logger.info(f"Updated calendar event {event_id} on {calendar_id}")
        return CalendarEvent.from_google(item, self.default_tz)

    def delete_event(self, calendar_id: str, event_id: str) -> None:
        self._execute(
            self.service.events().delete(calendarId=calendar_id, eventId=event_id, sendUpdates='all'),
            "delete",
            event_id,
        )
        logger.info(f"Deleted calendar event {event_id} from {calendar_id}")


class GoogleCalendarService:
    """OAuth flow and credential handling for barbers' Google calendars"""

    SCOPES = [
        'https://www.googleapis.com/auth/calendar',
        'https://www.googleapis.com/auth/calendar.events',
        'openid',
        'https://www.googleapis.com/auth/userinfo.email',
        'https://www.googleapis.com/auth/userinfo.profile',
    ]

    def __init__(self):
        redirect_uri = settings.GOOGLE_REDIRECT_URI
        if not redirect_uri:
            error_msg = "GOOGLE_REDIRECT_URI is not set! Please add it to your .env file."
            logger.error(error_msg)
            raise ValueError(error_msg)

        # OAuth credentials from Google Cloud Console
        self.client_config = {
            "web": {
                "client_id": settings.GOOGLE_CLIENT_ID,
                "client_secret": settings.GOOGLE_CLIENT_SECRET,
                "redirect_uris": [redirect_uri],
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token"
            }
        }

    def _flow(self) -> Flow:
        return Flow.from_client_config(
            self.client_config,
            scopes=self.SCOPES,
            redirect_uri=self.client_config['web']['redirect_uris'][0]
        )

    def generate_authorization_url(self, phone_number: str) -> str:
        """Step 1: Generate OAuth URL; the barber's phone travels in the state parameter"""
        authorization_url, _ = self._flow().authorization_url(
            access_type='offline',  # Gets refresh token
            include_granted_scopes='true',
            prompt='consent',  # Force consent screen to get refresh token
            state=phone_number
        )
        logger.info(f"Generated Google authorization URL for {phone_number}")
        return authorization_url

    def exchange_code(self, code: str) -> Dict:
        """Step 2: Exchange authorization code for tokens, profile and calendar list"""
        flow = self._flow()
        try:
            flow.fetch_token(code=code)
        except Exception as e:
            logger.error(f"Failed to exchange code for tokens: {e}")
            raise UpstreamError("Google authorization failed") from e

        credentials = flow.credentials
        try:
            profile = build('oauth2', 'v2', credentials=credentials, cache_discovery=False) \
                .userinfo().get().execute()
            calendar_list = build('calendar', 'v3', credentials=credentials, cache_discovery=False) \
                .calendarList().list().execute()
        except HttpError as e:
            raise _translate_http_error(e, "profile lookup") from e

        logger.info("Successfully exchanged authorization code for tokens")
        return {
            "refresh_token": credentials.refresh_token,
            "email": profile.get("email"),
            "name": profile.get("name"),
            "calendars": [
                {"id": cal["id"], "summary": cal.get("summary", "")}
                for cal in calendar_list.get("items", [])
            ],
        }

    def credentials_for(self, barber: Barber) -> Credentials:
        """Build refreshable credentials from the barber's stored refresh token"""
        refresh_token = decrypt_token(barber.refresh_token_encrypted)
        if not refresh_token:
            raise BarberNotFoundError("Barber not found or not authorized")
        return Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=self.client_config['web']['token_uri'],
            client_id=self.client_config['web']['client_id'],
            client_secret=self.client_config['web']['client_secret'],
            scopes=self.SCOPES,
        )

    def gateway_for(self, barber: Barber) -> GoogleCalendarGateway:
        """CalendarGatewayFactory implementation"""
        return GoogleCalendarGateway(self.credentials_for(barber))


def google_gateway_factory(barber: Barber) -> GoogleCalendarGateway:
    """Default CalendarGatewayFactory for the application"""
    return GoogleCalendarService().gateway_for(barber)
