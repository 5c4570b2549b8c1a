import io
import json
from datetime import UTC, datetime
from urllib import error, parse

import pytest

from organizer.services.google_api_client import GoogleApiError
from organizer.services.google_calendar_client import GoogleCalendarClient


class _MockResponse:
    def __init__(self, payload: dict[str, object]) -> None:
        self._payload = json.dumps(payload).encode("utf-8")

    def __enter__(self) -> "_MockResponse":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:  # type: ignore[no-untyped-def]
        return False

    def read(self) -> bytes:
        return self._payload


def _http_error(status_code: int, payload: dict[str, object]) -> error.HTTPError:
    return error.HTTPError(
        url="https://www.googleapis.com/calendar/v3/calendars/primary/events",
        code=status_code,
        msg="error",
        hdrs=None,
        fp=io.BytesIO(json.dumps(payload).encode("utf-8")),
    )


def test_list_calendars_reshapes_calendar_list(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = {"url": "", "auth": ""}

    def fake_urlopen(req, timeout=10):  # type: ignore[no-untyped-def]
        captured["url"] = req.full_url
        captured["auth"] = req.headers.get("Authorization", "")
        return _MockResponse(
            {
                "items": [
                    {"id": "me@example.com", "summary": "me@example.com", "primary": True},
                    {
                        "id": "meals@group.calendar.google.com",
                        "summary": "AnyList",
                        "summaryOverride": "AnyList Meal Plan",
                        "backgroundColor": "#16a765",
                    },
                    {"summary": "missing id"},
                ],
            },
        )

    monkeypatch.setattr("organizer.services.google_api_client.request.urlopen", fake_urlopen)

    client = GoogleCalendarClient(access_token="google-token")
    calendars = client.list_calendars()

    assert captured["url"].endswith("/users/me/calendarList")
    assert captured["auth"] == "Bearer google-token"
    assert calendars == [
        {"id": "me@example.com", "summary": "me@example.com", "primary": True, "background_color": None},
        {
            "id": "meals@group.calendar.google.com",
            "summary": "AnyList Meal Plan",
            "primary": False,
            "background_color": "#16a765",
        },
    ]


def test_list_events_queries_each_calendar_and_reshapes_events(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    requested_urls: list[str] = []

    def fake_urlopen(req, timeout=10):  # type: ignore[no-untyped-def]
        requested_urls.append(req.full_url)
        if "/calendars/primary/" in req.full_url:
            return _MockResponse(
                {
                    "summary": "me@example.com",
                    "items": [
                        {
                            "id": "evt-1",
                            "summary": "Soccer practice",
                            "start": {"dateTime": "2024-06-04T17:00:00Z"},
                            "end": {"dateTime": "2024-06-04T18:00:00Z"},
                            "location": "Field 3",
                        },
                        {"id": "evt-2", "status": "cancelled"},
                    ],
                },
            )
        return _MockResponse(
            {
                "summary": "School",
                "items": [
                    {
                        "id": "evt-3",
                        "start": {"date": "2024-06-05"},
                        "end": {"date": "2024-06-06"},
                    },
                ],
            },
        )

    monkeypatch.setattr("organizer.services.google_api_client.request.urlopen", fake_urlopen)

    client = GoogleCalendarClient(access_token="google-token")
    events = client.list_events(
        time_min=datetime(2024, 6, 2, tzinfo=UTC),
        time_max=datetime(2024, 6, 9, tzinfo=UTC),
        calendar_ids=["primary", "school@example.com", "primary", " "],
    )

    assert len(requested_urls) == 2
    query = parse.parse_qs(parse.urlparse(requested_urls[0]).query)
    assert query["timeMin"] == ["2024-06-02T00:00:00+00:00"]
    assert query["timeMax"] == ["2024-06-09T00:00:00+00:00"]
    assert query["singleEvents"] == ["true"]
    assert query["orderBy"] == ["startTime"]
    assert "/calendars/school%40example.com/events" in requested_urls[1]

    assert [event["id"] for event in events] == ["evt-1", "evt-3"]
    assert events[0]["calendarId"] == "primary"
    assert events[0]["calendarName"] == "me@example.com"
    assert events[0]["location"] == "Field 3"
    assert events[1]["summary"] == "No Title"
    assert events[1]["calendarName"] == "School"


def test_list_events_defaults_to_primary_calendar(monkeypatch: pytest.MonkeyPatch) -> None:
    requested_urls: list[str] = []

    def fake_urlopen(req, timeout=10):  # type: ignore[no-untyped-def]
        requested_urls.append(req.full_url)
        return _MockResponse({"items": []})

    monkeypatch.setattr("organizer.services.google_api_client.request.urlopen", fake_urlopen)

    client = GoogleCalendarClient(access_token="google-token")
    events = client.list_events(
        time_min=datetime(2024, 6, 2),
        time_max=datetime(2024, 6, 9),
    )

    assert events == []
    assert "/calendars/primary/events" in requested_urls[0]
    assert "timeMin=2024-06-02T00%3A00%3A00Z" in requested_urls[0]


def test_list_events_raises_with_upstream_status_and_message(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def fake_urlopen(req, timeout=10):  # type: ignore[no-untyped-def]
        raise _http_error(401, {"error": {"message": "Invalid Credentials"}})

    monkeypatch.setattr("organizer.services.google_api_client.request.urlopen", fake_urlopen)

    client = GoogleCalendarClient(access_token="expired-token")
    with pytest.raises(GoogleApiError, match="Invalid Credentials") as exc_info:
        client.list_events(
            time_min=datetime(2024, 6, 2, tzinfo=UTC),
            time_max=datetime(2024, 6, 9, tzinfo=UTC),
        )

    assert exc_info.value.status_code == 401


def test_connection_errors_map_to_bad_gateway(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(req, timeout=10):  # type: ignore[no-untyped-def]
        raise error.URLError("network unreachable")

    monkeypatch.setattr("organizer.services.google_api_client.request.urlopen", fake_urlopen)

    client = GoogleCalendarClient(access_token="google-token")
    with pytest.raises(GoogleApiError, match="connection error") as exc_info:
        client.list_calendars()

    assert exc_info.value.status_code == 502
