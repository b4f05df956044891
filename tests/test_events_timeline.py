from __future__ import annotations

from datetime import datetime, timezone

from core.models import Message
from core.resolver import LocationResolver
from frontend.tabs.events import default_date_inputs, timeline_rows


def _make_message(message_id: int, day: int, hour: int, locations: tuple = ()) -> Message:
    return Message(
        message_id=message_id,
        text=f"report {message_id}",
        cleaned_text=None,
        channel="news",
        date=datetime(2024, 3, day, hour, tzinfo=timezone.utc),
        locations=locations,
    )


def test_timeline_rows_put_a_header_before_each_day() -> None:
    resolver = LocationResolver({"Rafah": {"lat": 31.29, "lon": 34.25}})
    messages = [
        _make_message(1, 2, 20, ("Rafah", "Jericho")),
        _make_message(2, 2, 8),
        _make_message(0, 1, 12),
    ]

    rows = timeline_rows(messages, resolver)

    assert [key for key, _ in rows] == ["day:2024-03-02", "1", "2", "day:2024-03-01", "0"]
    header = rows[0][1]
    assert header[0].plain.endswith("2024-03-02")
    assert header[2].plain == "2 events"
    assert rows[3][1][2].plain == "1 event"
    assert rows[1][1][3] == "Rafah"


def test_timeline_rows_for_no_messages() -> None:
    assert timeline_rows([], LocationResolver({})) == []


def test_default_date_inputs_span_the_dataset() -> None:
    messages = [_make_message(0, 4, 1), _make_message(1, 1, 23), _make_message(2, 2, 0)]
    assert default_date_inputs(messages) == ("2024-03-01", "2024-03-04")
    assert default_date_inputs([]) == ("", "")
