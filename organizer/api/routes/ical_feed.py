import logging
from datetime import datetime
from typing import Any, NoReturn
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException

from organizer.core.config import get_settings
from organizer.schemas.auth import CurrentUserResponse
from organizer.schemas.calendar import CalendarDaysResponse, CalendarEventsResponse, ICalFeedRequest
from organizer.services.auth_service import require_current_user
from organizer.services.calendar_view_service import CalendarViewService
from organizer.services.ical_feed_client import ICalFeedClient, ICalFeedError

router = APIRouter(prefix="/ical-feed", tags=["ical-feed"])
logger = logging.getLogger(__name__)


@router.post("/events", response_model=CalendarEventsResponse)
def list_feed_events(
    payload: ICalFeedRequest,
    current_user: CurrentUserResponse = Depends(require_current_user),
) -> CalendarEventsResponse:
    service = CalendarViewService()
    view_timezone = service.resolve_timezone(payload.timezone)
    time_min, time_max = service.resolve_window(payload.time_min, payload.time_max, view_timezone)
    events = _fetch_feed_events(payload.feed_url, time_min, time_max, view_timezone)
    logger.info("iCalendar feed fetched user_id=%s events=%s", current_user.id, len(events))
    return CalendarEventsResponse.model_validate({"events": events})


@router.post("/days", response_model=CalendarDaysResponse)
def list_feed_days(
    payload: ICalFeedRequest,
    current_user: CurrentUserResponse = Depends(require_current_user),
) -> CalendarDaysResponse:
    service = CalendarViewService()
    view_timezone = service.resolve_timezone(payload.timezone)
    time_min, time_max = service.resolve_window(payload.time_min, payload.time_max, view_timezone)
    events = _fetch_feed_events(payload.feed_url, time_min, time_max, view_timezone)
    logger.info("iCalendar feed days built user_id=%s events=%s", current_user.id, len(events))
    return service.build_days_response(
        events,
        time_min=time_min,
        time_max=time_max,
        view_timezone=view_timezone,
    )


def _fetch_feed_events(
    feed_url: str,
    time_min: datetime,
    time_max: datetime,
    view_timezone: ZoneInfo,
) -> list[dict[str, Any]]:
    settings = get_settings()
    client = ICalFeedClient(
        timeout_seconds=settings.ical_feed_timeout_seconds,
        user_agent=settings.ical_feed_user_agent,
    )
    try:
        return client.fetch_events(
            feed_url=feed_url,
            time_min=time_min,
            time_max=time_max,
            view_timezone=view_timezone,
        )
    except ICalFeedError as exc:
        _raise_feed_error(exc)


def _raise_feed_error(exc: ICalFeedError) -> NoReturn:
    logger.warning("iCalendar feed request failed status_code=%s message=%s", exc.status_code, exc.message)
    raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
