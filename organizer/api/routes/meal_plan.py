import logging
from datetime import date

from fastapi import APIRouter, Depends, Query

from organizer.core.config import get_settings
from organizer.schemas.auth import CurrentUserResponse
from organizer.schemas.meal_plan import MealPlanCalendarsResponse, MealPlanResponse
from organizer.services.auth_service import require_current_user, require_google_access_token
from organizer.services.calendar_view_service import CalendarViewService, raise_for_google_error
from organizer.services.google_api_client import GoogleApiError
from organizer.services.google_calendar_client import GoogleCalendarClient

router = APIRouter(prefix="/meal-plan", tags=["meal-plan"])
logger = logging.getLogger(__name__)

_EXPIRED_DETAIL = "Google Calendar access expired. Please re-authenticate."


@router.get("/calendars", response_model=MealPlanCalendarsResponse)
def list_meal_plan_calendars(
    current_user: CurrentUserResponse = Depends(require_current_user),
    google_access_token: str = Depends(require_google_access_token),
) -> MealPlanCalendarsResponse:
    client = _build_client(google_access_token)
    try:
        calendars = client.list_calendars()
    except GoogleApiError as exc:
        raise_for_google_error(exc, expired_detail=_EXPIRED_DETAIL)
    return CalendarViewService().build_meal_plan_calendars(calendars)


@router.get("", response_model=MealPlanResponse)
def get_meal_plan(
    calendar_id: str = Query(..., min_length=1),
    week_of: date | None = Query(default=None),
    timezone: str | None = Query(default=None),
    current_user: CurrentUserResponse = Depends(require_current_user),
    google_access_token: str = Depends(require_google_access_token),
) -> MealPlanResponse:
    service = CalendarViewService()
    view_timezone = service.resolve_timezone(timezone)
    week_start, week_end = service.week_window(week_of, view_timezone)
    time_min, time_max = service.week_bounds(week_start, week_end, view_timezone)

    client = _build_client(google_access_token)
    try:
        events = client.list_events(time_min=time_min, time_max=time_max, calendar_ids=[calendar_id])
    except GoogleApiError as exc:
        raise_for_google_error(exc, expired_detail=_EXPIRED_DETAIL)

    logger.info(
        "Meal plan built user_id=%s calendar_id=%s week_start=%s events=%s",
        current_user.id,
        calendar_id,
        week_start.isoformat(),
        len(events),
    )
    return service.build_meal_plan(
        events,
        calendar_id=calendar_id,
        week_start=week_start,
        week_end=week_end,
        view_timezone=view_timezone,
    )


def _build_client(google_access_token: str) -> GoogleCalendarClient:
    settings = get_settings()
    return GoogleCalendarClient(
        access_token=google_access_token,
        timeout_seconds=settings.google_api_timeout_seconds,
        api_base_url=settings.google_calendar_api_base_url,
    )
