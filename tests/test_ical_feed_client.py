import io
from datetime import UTC, date, datetime
from urllib import error
from zoneinfo import ZoneInfo

import pytest

from organizer.services.calendar_view_service import CalendarViewService
from organizer.services.ical_feed_client import ICalFeedClient, ICalFeedError, parse_feed_events

_FEED = "\r\n".join(
    [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Household Organizer//Tests//EN",
        "BEGIN:VEVENT",
        "UID:evt-1",
        "DTSTART;VALUE=DATE:20240603",
        "DTEND;VALUE=DATE:20240604",
        "SUMMARY:Dinner: Lasagna",
        "DESCRIPTION:Double batch",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:evt-2",
        "DTSTART:20240604T170000Z",
        "DTEND:20240604T180000Z",
        "SUMMARY:Soccer practice",
        "LOCATION:Field 3",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:evt-3",
        "DTSTART:20240720T170000Z",
        "SUMMARY:Outside the window",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "DTSTART:20240605T090000Z",
        "DURATION:PT1H",
        "END:VEVENT",
        "END:VCALENDAR",
        "",
    ],
)
_WINDOW = {
    "time_min": datetime(2024, 6, 1, tzinfo=UTC),
    "time_max": datetime(2024, 6, 8, tzinfo=UTC),
}
_NEW_YORK = ZoneInfo("America/New_York")
_NEW_YORK_WINDOW = {
    "time_min": datetime(2024, 6, 1, tzinfo=_NEW_YORK),
    "time_max": datetime(2024, 6, 3, 23, 59, tzinfo=_NEW_YORK),
}
_BOUNDARY_FEED = "\r\n".join(
    [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Household Organizer//Tests//EN",
        "BEGIN:VEVENT",
        "UID:allday-june1",
        "DTSTART;VALUE=DATE:20240601",
        "DTEND;VALUE=DATE:20240602",
        "SUMMARY:Farmers market",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:floating-early",
        "DTSTART:20240601T013000",
        "DTEND:20240601T023000",
        "SUMMARY:Night feed",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:utc-previous-evening",
        "DTSTART:20240601T030000Z",
        "SUMMARY:Late movie",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:allday-june4",
        "DTSTART;VALUE=DATE:20240604",
        "SUMMARY:Outside the window",
        "END:VEVENT",
        "END:VCALENDAR",
        "",
    ],
)


class _MockResponse:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def __enter__(self) -> "_MockResponse":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:  # type: ignore[no-untyped-def]
        return False

    def read(self) -> bytes:
        return self._body


def test_parse_feed_events_filters_window_and_reshapes() -> None:
    events = parse_feed_events(_FEED, **_WINDOW)

    assert [event["id"] for event in events] == ["evt-1", "evt-2", "2024-06-05T09:00:00Z"]

    all_day, timed, untitled = events
    assert all_day["summary"] == "Dinner: Lasagna"
    assert all_day["description"] == "Double batch"
    assert all_day["start"] == {"date": "2024-06-03"}
    assert all_day["end"] == {"date": "2024-06-04"}

    assert timed["start"] == {"dateTime": "2024-06-04T17:00:00Z"}
    assert timed["end"] == {"dateTime": "2024-06-04T18:00:00Z"}
    assert timed["location"] == "Field 3"

    assert untitled["summary"] == "No Title"
    assert untitled["end"] == {"dateTime": "2024-06-05T10:00:00Z"}


def test_parse_feed_events_compares_window_by_day_in_view_timezone() -> None:
    events = parse_feed_events(_BOUNDARY_FEED, **_NEW_YORK_WINDOW, view_timezone=_NEW_YORK)

    assert [event["id"] for event in events] == ["allday-june1", "floating-early"]
    assert events[0]["start"] == {"date": "2024-06-01"}


def test_parse_feed_events_keeps_floating_start_local() -> None:
    events = parse_feed_events(_BOUNDARY_FEED, **_NEW_YORK_WINDOW, view_timezone=_NEW_YORK)

    floating = next(event for event in events if event["id"] == "floating-early")
    assert floating["start"] == {"dateTime": "2024-06-01T01:30:00"}
    assert floating["end"] == {"dateTime": "2024-06-01T02:30:00"}


def test_feed_all_day_event_lands_on_first_window_day() -> None:
    events = parse_feed_events(_BOUNDARY_FEED, **_NEW_YORK_WINDOW, view_timezone=_NEW_YORK)

    response = CalendarViewService().build_days_response(
        events,
        **_NEW_YORK_WINDOW,
        view_timezone=_NEW_YORK,
    )

    days = {day.day: [event.id for event in day.events] for day in response.days}
    assert days == {
        date(2024, 6, 1): ["allday-june1", "floating-early"],
        date(2024, 6, 2): [],
        date(2024, 6, 3): [],
    }


def test_fetch_events_downloads_feed_and_rewrites_webcal(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = {"url": ""}

    def fake_urlopen(req, timeout=10):  # type: ignore[no-untyped-def]
        captured["url"] = req.full_url
        return _MockResponse(_FEED.encode("utf-8"))

    monkeypatch.setattr("organizer.services.ical_feed_client.request.urlopen", fake_urlopen)

    client = ICalFeedClient()
    events = client.fetch_events(feed_url="webcal://example.com/meals.ics", **_WINDOW)

    assert captured["url"] == "https://example.com/meals.ics"
    assert len(events) == 3


def test_fetch_events_rejects_non_http_urls() -> None:
    client = ICalFeedClient()

    with pytest.raises(ICalFeedError) as exc_info:
        client.fetch_events(feed_url="file:///etc/passwd", **_WINDOW)

    assert exc_info.value.status_code == 400


def test_fetch_events_maps_http_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(req, timeout=10):  # type: ignore[no-untyped-def]
        raise error.HTTPError(
            url=req.full_url,
            code=404,
            msg="Not Found",
            hdrs=None,
            fp=io.BytesIO(b""),
        )

    monkeypatch.setattr("organizer.services.ical_feed_client.request.urlopen", fake_urlopen)

    client = ICalFeedClient()
    with pytest.raises(ICalFeedError, match="Failed to fetch iCalendar feed: Not Found") as exc_info:
        client.fetch_events(feed_url="https://example.com/missing.ics", **_WINDOW)

    assert exc_info.value.status_code == 404
