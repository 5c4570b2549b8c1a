from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
import logging
from typing import Any, NoReturn
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import HTTPException, status

from organizer.core.config import Settings, get_settings
from organizer.schemas.calendar import (
    CalendarDay,
    CalendarDaysResponse,
    CalendarSummary,
    DayEvent,
    EventTimeField,
)
from organizer.schemas.meal_plan import MealEntry, MealPlanCalendarsResponse, MealPlanDay, MealPlanResponse
from organizer.services.calendar_events import CanonicalEvent, build_day_index, window_days
from organizer.services.google_api_client import GoogleApiError
from organizer.services.meal_tags import extract_meal_tag

logger = logging.getLogger(__name__)


class CalendarViewService:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def resolve_timezone(self, timezone_name: str | None) -> ZoneInfo:
        cleaned = (timezone_name or "").strip() or self.settings.calendar_view_timezone
        try:
            return ZoneInfo(cleaned)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown timezone: {cleaned}",
            ) from exc

    def resolve_window(
        self,
        time_min: datetime,
        time_max: datetime,
        view_timezone: ZoneInfo,
    ) -> tuple[datetime, datetime]:
        localized_min = _localize(time_min, view_timezone)
        localized_max = _localize(time_max, view_timezone)
        if localized_max < localized_min:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="time_max must not be earlier than time_min.",
            )
        return localized_min, localized_max

    def week_window(self, week_of: date | None, view_timezone: ZoneInfo) -> tuple[date, date]:
        reference_day = week_of or datetime.now(view_timezone).date()
        # Meal plan weeks run Sunday through Saturday.
        days_since_sunday = (reference_day.weekday() + 1) % 7
        week_start = reference_day - timedelta(days=days_since_sunday)
        return week_start, week_start + timedelta(days=6)

    def week_bounds(
        self,
        week_start: date,
        week_end: date,
        view_timezone: ZoneInfo,
    ) -> tuple[datetime, datetime]:
        return (
            datetime.combine(week_start, time.min, tzinfo=view_timezone),
            datetime.combine(week_end + timedelta(days=1), time.min, tzinfo=view_timezone),
        )

    def build_days_response(
        self,
        records: Iterable[Any],
        *,
        time_min: datetime,
        time_max: datetime,
        view_timezone: ZoneInfo,
    ) -> CalendarDaysResponse:
        first_day, last_day = window_days(time_min, time_max, view_timezone)
        index = build_day_index(
            records,
            view_timezone=view_timezone,
            window=(first_day, last_day),
            include_empty_days=True,
        )
        return CalendarDaysResponse(
            timezone=view_timezone.key,
            first_day=first_day,
            last_day=last_day,
            days=[
                CalendarDay(day=day, events=[_to_day_event(event) for event in events])
                for day, events in index.items()
            ],
        )

    def build_meal_plan(
        self,
        records: Iterable[Any],
        *,
        calendar_id: str,
        week_start: date,
        week_end: date,
        view_timezone: ZoneInfo,
    ) -> MealPlanResponse:
        index = build_day_index(
            records,
            view_timezone=view_timezone,
            window=(week_start, week_end),
            include_empty_days=True,
        )
        days: list[MealPlanDay] = []
        for day, events in index.items():
            meals: list[MealEntry] = []
            for event in events:
                tag = extract_meal_tag(event.title, event.notes)
                meals.append(
                    MealEntry(
                        event_id=event.id,
                        slot=tag.slot,
                        name=tag.name,
                        description=tag.description,
                        has_distinct_description=tag.has_distinct_description,
                        start=EventTimeField.model_validate(event.to_dict()["start"]),
                    ),
                )
            days.append(MealPlanDay(day=day, meals=meals))
        return MealPlanResponse(
            calendar_id=calendar_id,
            timezone=view_timezone.key,
            week_start=week_start,
            week_end=week_end,
            days=days,
        )

    def build_meal_plan_calendars(self, calendars: list[dict[str, Any]]) -> MealPlanCalendarsResponse:
        summaries = [CalendarSummary(**calendar) for calendar in calendars]
        return MealPlanCalendarsResponse(
            calendars=summaries,
            suggested_calendar_id=self.suggest_meal_plan_calendar(summaries),
        )

    def suggest_meal_plan_calendar(self, calendars: list[CalendarSummary]) -> str | None:
        keywords = self.settings.meal_plan_calendar_keywords
        for calendar in calendars:
            summary = calendar.summary.lower()
            if any(keyword in summary for keyword in keywords):
                return calendar.id
        return None


def raise_for_google_error(exc: GoogleApiError, *, expired_detail: str) -> NoReturn:
    logger.warning("Google upstream request failed status_code=%s message=%s", exc.status_code, exc.message)
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=expired_detail) from exc
    upstream_status = exc.status_code if 400 <= exc.status_code < 600 else status.HTTP_502_BAD_GATEWAY
    raise HTTPException(status_code=upstream_status, detail=exc.message) from exc


def _localize(value: datetime, view_timezone: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=view_timezone)
    return value


def _to_day_event(event: CanonicalEvent) -> DayEvent:
    return DayEvent.model_validate(event.to_dict())
