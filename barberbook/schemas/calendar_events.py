# barberbook/schemas/calendar_events.py
from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any
from datetime import datetime

import pytz

from barberbook.schemas.interval import TimeInterval
from barberbook.utils.time_parser import ensure_utc, isoformat_utc


class CalendarEvent(BaseModel):
    """Calendar event as returned by the provider"""
    id: str = Field(..., description="Provider event identifier")
    summary: str = Field("", description="Event title")
    description: str = Field("", description="Event description")
    start: datetime = Field(..., description="Event start (aware)")
    end: datetime = Field(..., description="Event end (aware)")
    time_zone: Optional[str] = Field(None, description="Timezone the event was written in")
    html_link: Optional[str] = Field(None, description="Link to the event in the provider UI")
    all_day: bool = Field(False, description="Whether this is an all-day event")

    @field_validator("start", "end")
    @classmethod
    def to_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start, self.end)

    def searchable_text(self) -> str:
        return f"{self.summary}\n{self.description}".lower()

    @classmethod
    def from_google(cls, item: Dict[str, Any], default_tz: str = "UTC") -> CalendarEvent:
        """Build from a Google Calendar API event resource"""
        start_info = item.get("start", {})
        end_info = item.get("end", {})
        tz_name = start_info.get("timeZone") or default_tz

        if "dateTime" in start_info:
            start = datetime.fromisoformat(start_info["dateTime"].replace("Z", "+00:00"))
            end = datetime.fromisoformat(end_info["dateTime"].replace("Z", "+00:00"))
            all_day = False
        else:
            # All-day events block the whole civil day(s) in the calendar timezone
            tz = pytz.timezone(tz_name)
            start = tz.localize(datetime.fromisoformat(start_info["date"]))
            end = tz.localize(datetime.fromisoformat(end_info["date"]))
            all_day = True

        return cls(
            id=item["id"],
            summary=item.get("summary", ""),
            description=item.get("description", ""),
            start=start,
            end=end,
            time_zone=tz_name,
            html_link=item.get("htmlLink"),
            all_day=all_day,
        )

    def to_response(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "summary": self.summary,
            "start": isoformat_utc(self.start),
            "end": isoformat_utc(self.end),
            "htmlLink": self.html_link,
        }


class EventDraft(BaseModel):
    """New event to insert"""
    summary: str
    description: str = ""
    start: datetime
    end: datetime
    time_zone: str

    def to_google(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "description": self.description,
            "start": {"dateTime": isoformat_utc(self.start), "timeZone": self.time_zone},
            "end": {"dateTime": isoformat_utc(self.end), "timeZone": self.time_zone},
        }


class EventPatch(BaseModel):
    """Fields to change on an existing event; unset fields stay as they are"""
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    time_zone: Optional[str] = None
    summary: Optional[str] = None

    def to_google(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if self.start is not None:
            body["start"] = {"dateTime": isoformat_utc(self.start), "timeZone": self.time_zone}
        if self.end is not None:
            body["end"] = {"dateTime": isoformat_utc(self.end), "timeZone": self.time_zone}
        if self.summary is not None:
            body["summary"] = self.summary
        return body
