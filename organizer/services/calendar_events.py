"""Normalization and day bucketing of upstream calendar events and tasks.

Upstream records (Google Calendar events, Google Tasks, iCalendar feed
entries) are loosely typed JSON objects. They are validated once into
``CanonicalEvent`` values whose start and end are a closed ``DateOnly |
Instant`` union, spread across the days they touch, and grouped per day.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
import logging
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_EVENT_TITLE = "No Title"


@dataclass(frozen=True)
class DateOnly:
    value: date
    raw: str

    @property
    def sort_key(self) -> str:
        return self.raw


@dataclass(frozen=True)
class Instant:
    value: datetime
    raw: str

    @property
    def sort_key(self) -> str:
        return self.raw


EventTime = DateOnly | Instant


@dataclass(frozen=True)
class CanonicalEvent:
    id: str
    title: str
    start: EventTime
    end: EventTime
    location: str | None = None
    notes: str | None = None
    source_id: str | None = None

    @property
    def is_all_day(self) -> bool:
        return isinstance(self.start, DateOnly)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "all_day": self.is_all_day,
            "start": _event_time_to_dict(self.start),
            "end": _event_time_to_dict(self.end),
            "location": self.location,
            "notes": self.notes,
            "source_id": self.source_id,
        }


@dataclass(frozen=True)
class Occurrence:
    day: date
    event: CanonicalEvent


def normalize_event(record: Any) -> CanonicalEvent | None:
    """Build a CanonicalEvent from one upstream record, or None to skip it."""
    if not isinstance(record, Mapping):
        logger.warning("Skipping calendar record that is not an object type=%s", type(record).__name__)
        return None

    title = _first_text(record, "summary", "title") or DEFAULT_EVENT_TITLE
    raw_id = _first_text(record, "id")

    try:
        start = _resolve_event_time(record.get("start"))
        if start is None:
            start = _resolve_due_date(record.get("due"))
        end = _resolve_event_time(record.get("end"))
    except ValueError as exc:
        logger.warning("Skipping calendar record id=%s title=%r: %s", raw_id, title, exc)
        return None

    if start is None:
        logger.warning(
            "Skipping calendar record id=%s title=%r: no usable start date or dateTime",
            raw_id,
            title,
        )
        return None

    if end is None:
        end = start
    elif type(end) is not type(start):
        logger.warning(
            "Skipping calendar record id=%s title=%r: start is %s but end is %s",
            raw_id,
            title,
            type(start).__name__,
            type(end).__name__,
        )
        return None

    return CanonicalEvent(
        id=raw_id or f"{start.raw}:{title}",
        title=title,
        start=start,
        end=end,
        location=_first_text(record, "location"),
        notes=_first_text(record, "description", "notes"),
        source_id=_first_text(record, "calendarId", "taskListId", "task_list_id"),
    )


def normalize_events(records: Iterable[Any]) -> list[CanonicalEvent]:
    events: list[CanonicalEvent] = []
    for record in records:
        event = normalize_event(record)
        if event is not None:
            events.append(event)
    return events


def materialize(
    event: CanonicalEvent,
    *,
    view_timezone: tzinfo,
    window: tuple[date, date] | None = None,
) -> Iterator[Occurrence]:
    """Yield one Occurrence per day the event is visible on, ascending.

    All-day ends are exclusive, so the last visible day is the day before the
    upstream end date. Timed events touch every day between the local days of
    their start and end instants. An end before the start collapses to a
    single day. ``window`` limits the output to an inclusive day range.
    """
    start_day, end_day = _resolve_day_span(event, view_timezone)
    if end_day < start_day:
        end_day = start_day

    if window is not None:
        first_day, last_day = window
        start_day = max(start_day, first_day)
        end_day = min(end_day, last_day)

    current_day = start_day
    while current_day <= end_day:
        yield Occurrence(day=current_day, event=event)
        current_day += timedelta(days=1)


def bucket_occurrences(occurrences: Iterable[Occurrence]) -> dict[date, list[CanonicalEvent]]:
    buckets: dict[date, list[CanonicalEvent]] = {}
    for occurrence in occurrences:
        buckets.setdefault(occurrence.day, []).append(occurrence.event)

    # ISO strings order lexicographically; an all-day "YYYY-MM-DD" sorts
    # before every timed start of the same day. sorted() keeps ties stable.
    return {
        day: sorted(buckets[day], key=lambda event: event.start.sort_key)
        for day in sorted(buckets)
    }


def build_day_index(
    records: Iterable[Any],
    *,
    view_timezone: tzinfo,
    window: tuple[date, date] | None = None,
    include_empty_days: bool = False,
) -> dict[date, list[CanonicalEvent]]:
    events = normalize_events(records)
    occurrences = (
        occurrence
        for event in events
        for occurrence in materialize(event, view_timezone=view_timezone, window=window)
    )
    buckets = bucket_occurrences(occurrences)
    if not include_empty_days or window is None:
        return buckets

    first_day, last_day = window
    index: dict[date, list[CanonicalEvent]] = {}
    current_day = first_day
    while current_day <= last_day:
        index[current_day] = buckets.get(current_day, [])
        current_day += timedelta(days=1)
    return index


def window_days(time_min: datetime, time_max: datetime, view_timezone: tzinfo) -> tuple[date, date]:
    first_day = _local_day(time_min, view_timezone)
    last_day = _local_day(time_max, view_timezone)
    if last_day < first_day:
        last_day = first_day
    return first_day, last_day


def parse_event_time(raw_value: str, *, date_only: bool) -> EventTime:
    cleaned = raw_value.strip()
    if date_only:
        return DateOnly(value=date.fromisoformat(cleaned[:10]), raw=cleaned)
    normalized = cleaned.replace("Z", "+00:00").replace("z", "+00:00")
    return Instant(value=datetime.fromisoformat(normalized), raw=cleaned)


def _resolve_event_time(raw_time: Any) -> EventTime | None:
    if not isinstance(raw_time, Mapping):
        return None
    raw_datetime = raw_time.get("dateTime")
    if isinstance(raw_datetime, str) and raw_datetime.strip():
        try:
            return parse_event_time(raw_datetime, date_only=False)
        except ValueError as exc:
            raise ValueError(f"invalid dateTime {raw_datetime!r}") from exc
    raw_date = raw_time.get("date")
    if isinstance(raw_date, str) and raw_date.strip():
        try:
            return parse_event_time(raw_date, date_only=True)
        except ValueError as exc:
            raise ValueError(f"invalid date {raw_date!r}") from exc
    return None


def _resolve_due_date(raw_due: Any) -> DateOnly | None:
    # Google Tasks only stores the date portion of "due".
    if not isinstance(raw_due, str) or not raw_due.strip():
        return None
    cleaned = raw_due.strip()
    try:
        due_date = date.fromisoformat(cleaned[:10])
    except ValueError as exc:
        raise ValueError(f"invalid due {raw_due!r}") from exc
    return DateOnly(value=due_date, raw=due_date.isoformat())


def _resolve_day_span(event: CanonicalEvent, view_timezone: tzinfo) -> tuple[date, date]:
    start = event.start
    end = event.end
    if isinstance(start, DateOnly) and isinstance(end, DateOnly):
        if end is start:
            return start.value, start.value
        return start.value, end.value - timedelta(days=1)
    if isinstance(start, Instant) and isinstance(end, Instant):
        return _local_day(start.value, view_timezone), _local_day(end.value, view_timezone)
    raise TypeError("CanonicalEvent start and end must share the same kind.")


def _local_day(value: datetime, view_timezone: tzinfo) -> date:
    if value.tzinfo is None:
        return value.date()
    return value.astimezone(view_timezone).date()


def _first_text(record: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        raw_value = record.get(key)
        if isinstance(raw_value, str) and raw_value.strip():
            return raw_value.strip()
    return None


def _event_time_to_dict(value: EventTime) -> dict[str, str]:
    if isinstance(value, DateOnly):
        return {"date": value.value.isoformat()}
    return {"dateTime": value.raw}
