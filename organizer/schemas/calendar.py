from datetime import date, datetime

from pydantic import BaseModel, Field


class EventTimeField(BaseModel):
    date: str | None = None
    dateTime: str | None = None


class CalendarSummary(BaseModel):
    id: str
    summary: str
    primary: bool = False
    background_color: str | None = None


class CalendarListResponse(BaseModel):
    calendars: list[CalendarSummary] = Field(default_factory=list)


class UpstreamEvent(BaseModel):
    id: str | None = None
    summary: str
    start: EventTimeField | None = None
    end: EventTimeField | None = None
    description: str | None = None
    location: str | None = None
    calendarId: str | None = None
    calendarName: str | None = None


class CalendarEventsResponse(BaseModel):
    events: list[UpstreamEvent] = Field(default_factory=list)


class DayEvent(BaseModel):
    id: str
    title: str
    all_day: bool
    start: EventTimeField
    end: EventTimeField
    location: str | None = None
    notes: str | None = None
    source_id: str | None = None


class CalendarDay(BaseModel):
    day: date
    events: list[DayEvent] = Field(default_factory=list)


class CalendarDaysResponse(BaseModel):
    timezone: str
    first_day: date
    last_day: date
    days: list[CalendarDay] = Field(default_factory=list)


class ICalFeedRequest(BaseModel):
    feed_url: str = Field(min_length=1)
    time_min: datetime
    time_max: datetime
    timezone: str | None = None
