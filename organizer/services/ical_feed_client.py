from datetime import UTC, date, datetime, tzinfo
import logging
from typing import Any
from urllib import error, request

from icalendar import Calendar

from organizer.services.calendar_events import window_days

logger = logging.getLogger(__name__)


class ICalFeedError(Exception):
    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ICalFeedClient:
    def __init__(
        self,
        *,
        timeout_seconds: float = 15.0,
        user_agent: str = "HouseholdOrganizer/1.0",
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

    def fetch_events(
        self,
        *,
        feed_url: str,
        time_min: datetime,
        time_max: datetime,
        view_timezone: tzinfo = UTC,
    ) -> list[dict[str, Any]]:
        raw_feed = self._download(feed_url)
        return parse_feed_events(
            raw_feed,
            time_min=time_min,
            time_max=time_max,
            view_timezone=view_timezone,
        )

    def _download(self, feed_url: str) -> bytes:
        req = request.Request(
            _normalize_feed_url(feed_url),
            method="GET",
            headers={"User-Agent": self.user_agent, "Accept": "text/calendar"},
        )
        try:
            with request.urlopen(req, timeout=self.timeout_seconds) as response:
                return response.read()
        except TimeoutError as exc:
            raise ICalFeedError("iCalendar feed request timed out.", status_code=504) from exc
        except error.HTTPError as exc:
            logger.warning("iCalendar feed HTTP error url=%s status_code=%s", feed_url, exc.code)
            raise ICalFeedError(
                f"Failed to fetch iCalendar feed: {exc.reason}",
                status_code=exc.code,
            ) from exc
        except error.URLError as exc:
            raise ICalFeedError(f"iCalendar feed connection error: {exc.reason}") from exc


def parse_feed_events(
    raw_feed: bytes | str,
    *,
    time_min: datetime,
    time_max: datetime,
    view_timezone: tzinfo = UTC,
) -> list[dict[str, Any]]:
    """Reshape the VEVENTs starting inside the window into Google-like events.

    The window is compared by day in ``view_timezone``. Floating DTSTART
    values are read as already local to that timezone and emitted without
    an offset.
    """
    try:
        calendar = Calendar.from_ical(raw_feed)
    except ValueError as exc:
        raise ICalFeedError("iCalendar feed could not be parsed.") from exc

    first_day, last_day = window_days(time_min, time_max, view_timezone)
    events: list[dict[str, Any]] = []
    for component in calendar.walk("VEVENT"):
        raw_start = component.get("DTSTART")
        if raw_start is None:
            logger.warning("Skipping VEVENT without DTSTART uid=%s", component.get("UID"))
            continue
        start_value = raw_start.dt
        start_day = _local_start_day(start_value, view_timezone)
        if start_day < first_day or start_day > last_day:
            continue

        end_value = _resolve_end_value(component, start_value)
        uid = component.get("UID")
        summary = component.get("SUMMARY")
        events.append(
            {
                "id": str(uid) if uid else _format_event_time(start_value),
                "summary": str(summary) if summary else "No Title",
                "description": str(component.get("DESCRIPTION") or ""),
                "location": str(component.get("LOCATION") or ""),
                "start": _to_event_time_payload(start_value),
                "end": _to_event_time_payload(end_value) if end_value is not None else {},
            },
        )
    return events


def _resolve_end_value(component: Any, start_value: date) -> date | None:
    raw_end = component.get("DTEND")
    if raw_end is not None:
        return raw_end.dt
    raw_duration = component.get("DURATION")
    if raw_duration is not None:
        return start_value + raw_duration.dt
    return None


def _to_event_time_payload(value: date) -> dict[str, str]:
    if isinstance(value, datetime):
        return {"dateTime": _format_event_time(value)}
    return {"date": value.isoformat()}


def _format_event_time(value: date) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.isoformat()
        return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
    return value.isoformat()


def _local_start_day(value: date, view_timezone: tzinfo) -> date:
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(view_timezone).date()


def _normalize_feed_url(feed_url: str) -> str:
    cleaned = feed_url.strip()
    if cleaned.lower().startswith("webcal://"):
        cleaned = f"https://{cleaned[len('webcal://'):]}"
    if not cleaned.lower().startswith(("http://", "https://")):
        raise ICalFeedError("feed_url must be an http(s) or webcal URL.", status_code=400)
    return cleaned
