from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qsl

import pytest
from insight_hub_mcp.core.errors import InvalidFilterError
from insight_hub_mcp.core.filters import (
    add_filter,
    add_relative_time_range,
    add_time_range,
    create_filter,
    empty,
    equals,
    iso_time,
    not_equals,
    parse_filters,
    relative_time,
    remove_denylisted_fields,
    to_query_params,
    to_query_string,
    validate_filter_keys,
)
from insight_hub_mcp.core.models import EventField, FilterValue
from pydantic import ValidationError


def _fields(*names):
    return [EventField(display_id=n) for n in names]


def test_builders():
    assert equals("test-value") == FilterValue(type="eq", value="test-value")
    assert equals(42).value == 42
    assert not_equals("x") == FilterValue(type="ne", value="x")
    assert empty(True) == FilterValue(type="empty", value="true")
    assert empty(False) == FilterValue(type="empty", value="false")
    assert relative_time(24, "h").value == "24h"
    assert relative_time(7, "d").value == "7d"


def test_relative_time_rejects_unknown_unit():
    with pytest.raises(ValueError):
        relative_time(3, "w")


def test_iso_time_is_utc_with_milliseconds():
    moment = datetime(2023, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert iso_time(moment).value == "2023-01-01T12:00:00.000Z"

    plus_two = timezone(timedelta(hours=2))
    assert (
        iso_time(datetime(2023, 1, 1, 14, 0, 0, 123456, tzinfo=plus_two)).value
        == "2023-01-01T12:00:00.123Z"
    )
    # Naive datetimes are read as UTC.
    assert iso_time(datetime(2018, 5, 20)).value == "2018-05-20T00:00:00.000Z"


def test_builder_helpers_accumulate_per_field():
    filters = create_filter()
    add_filter(filters, "error.status", equals("open"))
    add_filter(filters, "error.status", equals("in_progress"))
    add_relative_time_range(filters, 7, "d")
    add_time_range(
        filters,
        datetime(2023, 1, 1, tzinfo=timezone.utc),
        datetime(2023, 1, 2, tzinfo=timezone.utc),
    )

    assert [v.value for v in filters["error.status"]] == ["open", "in_progress"]
    assert [v.value for v in filters["event.since"]] == [
        "7d",
        "2023-01-01T00:00:00.000Z",
    ]
    assert filters["event.before"][0].value == "2023-01-02T00:00:00.000Z"


def test_parse_filters_accepts_plain_dicts():
    parsed = parse_filters({"error.status": [{"type": "eq", "value": "open"}]})
    assert parsed == {"error.status": [FilterValue(type="eq", value="open")]}
    assert parse_filters(None) == {}
    assert parse_filters({}) == {}


@pytest.mark.parametrize(
    "raw",
    [
        {"error.status": [{"type": "gt", "value": "1"}]},
        {"error.status": [{"type": "eq"}]},
        {"error.status": [{"type": "eq", "value": "open", "extra": 1}]},
        {"error.status": {"type": "eq", "value": "open"}},
    ],
)
def test_parse_filters_rejects_malformed(raw):
    with pytest.raises(ValidationError):
        parse_filters(raw)


def test_to_query_params_repeats_per_comparison():
    filters = parse_filters(
        {
            "error.status": [
                {"type": "eq", "value": "open"},
                {"type": "eq", "value": "in_progress"},
            ],
            "user.email": [{"type": "ne", "value": "test@example.com"}],
        }
    )

    assert to_query_params(filters) == [
        ("filters[error.status][][type]", "eq"),
        ("filters[error.status][][value]", "open"),
        ("filters[error.status][][type]", "eq"),
        ("filters[error.status][][value]", "in_progress"),
        ("filters[user.email][][type]", "ne"),
        ("filters[user.email][][value]", "test@example.com"),
    ]


def test_scalar_values_are_stringified():
    filters = {
        "app.in_foreground": [FilterValue(type="eq", value=True)],
        "device.memory": [FilterValue(type="eq", value=42)],
        "user.id": [empty(False)],
    }

    assert dict(to_query_params(filters)) == {
        "filters[app.in_foreground][][type]": "eq",
        "filters[app.in_foreground][][value]": "true",
        "filters[device.memory][][type]": "eq",
        "filters[device.memory][][value]": "42",
        "filters[user.id][][type]": "empty",
        "filters[user.id][][value]": "false",
    }


def test_to_query_string_round_trips_keys():
    query = to_query_string({"event.since": [relative_time(7, "d")]})
    assert parse_qsl(query) == [
        ("filters[event.since][][type]", "eq"),
        ("filters[event.since][][value]", "7d"),
    ]
    assert to_query_string({}) == ""


def test_validate_filter_keys_accepts_known_keys():
    schema = _fields("error.status", "event.since")
    validate_filter_keys({"error.status": [], "event.since": []}, schema)
    validate_filter_keys({}, schema)


def test_validate_filter_keys_reports_first_unknown_in_order():
    schema = _fields("error.status")
    with pytest.raises(InvalidFilterError) as exc:
        validate_filter_keys(
            {"error.status": [], "bogus.one": [], "bogus.two": []}, schema
        )
    assert str(exc.value) == "Invalid filter key: bogus.one"
    assert exc.value.field == "bogus.one"


def test_search_is_denylisted():
    schema = remove_denylisted_fields(_fields("search", "error.status"))
    assert [f.display_id for f in schema] == ["error.status"]

    with pytest.raises(InvalidFilterError):
        validate_filter_keys({"search": [equals("boom")]}, schema)
