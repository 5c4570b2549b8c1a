from datetime import date

from pydantic import BaseModel, Field

from organizer.schemas.calendar import CalendarSummary, EventTimeField
from organizer.services.meal_tags import MealSlot


class MealEntry(BaseModel):
    event_id: str
    slot: MealSlot
    name: str
    description: str | None = None
    has_distinct_description: bool
    start: EventTimeField


class MealPlanDay(BaseModel):
    day: date
    meals: list[MealEntry] = Field(default_factory=list)


class MealPlanResponse(BaseModel):
    calendar_id: str
    timezone: str
    week_start: date
    week_end: date
    days: list[MealPlanDay] = Field(default_factory=list)


class MealPlanCalendarsResponse(BaseModel):
    calendars: list[CalendarSummary] = Field(default_factory=list)
    suggested_calendar_id: str | None = None
