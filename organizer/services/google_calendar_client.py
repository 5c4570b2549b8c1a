from datetime import datetime
from typing import Any
from urllib import parse

from organizer.services.google_api_client import GoogleApiClient, extract_items

DEFAULT_CALENDAR_ID = "primary"


class GoogleCalendarClient(GoogleApiClient):
    service_name = "Google Calendar API"

    def __init__(
        self,
        *,
        access_token: str,
        timeout_seconds: float = 10.0,
        api_base_url: str = "https://www.googleapis.com/calendar/v3",
    ) -> None:
        super().__init__(
            access_token=access_token,
            api_base_url=api_base_url,
            timeout_seconds=timeout_seconds,
        )

    def list_calendars(self) -> list[dict[str, Any]]:
        response_payload = self._request_json(
            "GET",
            "/users/me/calendarList",
            default_error="Failed to fetch calendar list",
        )
        calendars: list[dict[str, Any]] = []
        for raw_calendar in extract_items(response_payload):
            calendar_id = raw_calendar.get("id")
            if not isinstance(calendar_id, str) or not calendar_id.strip():
                continue
            calendars.append(
                {
                    "id": calendar_id,
                    "summary": str(raw_calendar.get("summaryOverride") or raw_calendar.get("summary") or calendar_id),
                    "primary": bool(raw_calendar.get("primary", False)),
                    "background_color": raw_calendar.get("backgroundColor"),
                },
            )
        return calendars

    def list_events(
        self,
        *,
        time_min: datetime,
        time_max: datetime,
        calendar_ids: list[str] | None = None,
    ) -> list[dict[str, Any]]:
        events: list[dict[str, Any]] = []
        for calendar_id in _normalize_calendar_ids(calendar_ids):
            endpoint_path = f"/calendars/{parse.quote(calendar_id, safe='')}/events"
            response_payload = self._request_json(
                "GET",
                endpoint_path,
                query=[
                    ("timeMin", _to_rfc3339(time_min)),
                    ("timeMax", _to_rfc3339(time_max)),
                    ("singleEvents", "true"),
                    ("orderBy", "startTime"),
                ],
                default_error="Failed to fetch calendar events",
            )
            calendar_name = response_payload.get("summary")
            if not isinstance(calendar_name, str) or not calendar_name.strip():
                calendar_name = calendar_id
            for raw_event in extract_items(response_payload):
                if raw_event.get("status") == "cancelled":
                    continue
                events.append(
                    {
                        "id": raw_event.get("id"),
                        "summary": raw_event.get("summary") or "No Title",
                        "start": raw_event.get("start"),
                        "end": raw_event.get("end"),
                        "description": raw_event.get("description"),
                        "location": raw_event.get("location"),
                        "calendarId": calendar_id,
                        "calendarName": calendar_name,
                    },
                )
        return events


def _normalize_calendar_ids(calendar_ids: list[str] | None) -> list[str]:
    normalized: list[str] = []
    seen: set[str] = set()
    for raw_id in calendar_ids or []:
        cleaned = raw_id.strip()
        if not cleaned or cleaned in seen:
            continue
        seen.add(cleaned)
        normalized.append(cleaned)
    return normalized or [DEFAULT_CALENDAR_ID]


def _to_rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        return f"{value.isoformat()}Z"
    return value.isoformat()
