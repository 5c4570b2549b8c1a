import logging
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query

from organizer.core.config import get_settings
from organizer.schemas.auth import CurrentUserResponse
from organizer.schemas.calendar import CalendarDaysResponse, CalendarEventsResponse, CalendarListResponse
from organizer.services.auth_service import require_current_user, require_google_access_token
from organizer.services.calendar_view_service import CalendarViewService, raise_for_google_error
from organizer.services.google_api_client import GoogleApiError
from organizer.services.google_calendar_client import GoogleCalendarClient

router = APIRouter(prefix="/calendar", tags=["calendar"])
logger = logging.getLogger(__name__)

_EXPIRED_DETAIL = "Google Calendar access expired. Please re-authenticate."


@router.get("/calendars", response_model=CalendarListResponse)
def list_calendars(
    current_user: CurrentUserResponse = Depends(require_current_user),
    google_access_token: str = Depends(require_google_access_token),
) -> CalendarListResponse:
    client = _build_client(google_access_token)
    try:
        calendars = client.list_calendars()
    except GoogleApiError as exc:
        raise_for_google_error(exc, expired_detail=_EXPIRED_DETAIL)
    logger.info("Calendar list fetched user_id=%s count=%s", current_user.id, len(calendars))
    return CalendarListResponse.model_validate({"calendars": calendars})


@router.get("/events", response_model=CalendarEventsResponse)
def list_events(
    time_min: datetime = Query(...),
    time_max: datetime = Query(...),
    calendar_ids: list[str] | None = Query(default=None),
    timezone: str | None = Query(default=None),
    current_user: CurrentUserResponse = Depends(require_current_user),
    google_access_token: str = Depends(require_google_access_token),
) -> CalendarEventsResponse:
    service = CalendarViewService()
    view_timezone = service.resolve_timezone(timezone)
    window_min, window_max = service.resolve_window(time_min, time_max, view_timezone)
    events = _fetch_events(google_access_token, window_min, window_max, calendar_ids)
    logger.info("Calendar events fetched user_id=%s count=%s", current_user.id, len(events))
    return CalendarEventsResponse.model_validate({"events": events})


@router.get("/days", response_model=CalendarDaysResponse)
def list_days(
    time_min: datetime = Query(...),
    time_max: datetime = Query(...),
    calendar_ids: list[str] | None = Query(default=None),
    timezone: str | None = Query(default=None),
    current_user: CurrentUserResponse = Depends(require_current_user),
    google_access_token: str = Depends(require_google_access_token),
) -> CalendarDaysResponse:
    service = CalendarViewService()
    view_timezone = service.resolve_timezone(timezone)
    window_min, window_max = service.resolve_window(time_min, time_max, view_timezone)
    events = _fetch_events(google_access_token, window_min, window_max, calendar_ids)
    logger.info("Calendar days built user_id=%s events=%s", current_user.id, len(events))
    return service.build_days_response(
        events,
        time_min=window_min,
        time_max=window_max,
        view_timezone=view_timezone,
    )


def _fetch_events(
    google_access_token: str,
    time_min: datetime,
    time_max: datetime,
    calendar_ids: list[str] | None,
) -> list[dict[str, Any]]:
    client = _build_client(google_access_token)
    try:
        return client.list_events(time_min=time_min, time_max=time_max, calendar_ids=calendar_ids)
    except GoogleApiError as exc:
        raise_for_google_error(exc, expired_detail=_EXPIRED_DETAIL)


def _build_client(google_access_token: str) -> GoogleCalendarClient:
    settings = get_settings()
    return GoogleCalendarClient(
        access_token=google_access_token,
        timeout_seconds=settings.google_api_timeout_seconds,
        api_base_url=settings.google_calendar_api_base_url,
    )
