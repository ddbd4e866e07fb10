"""
Filter expressions for the Insight Hub Data Access API.

A filter expression maps an event field to a list of comparisons:

    {
        "event.since": [{"type": "eq", "value": "7d"}],
        "error.status": [{"type": "eq", "value": "open"}],
    }

and is sent as repeated query parameters:

    filters[error.status][][type]=eq&filters[error.status][][value]=open
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Literal, Mapping, Optional, Tuple
from urllib.parse import urlencode

from pydantic import TypeAdapter

from .errors import InvalidFilterError
from .models import EventField, FilterExpression, FilterValue

# "search" is a fuzzy free-text field, not an equality dimension.
DENYLISTED_FIELDS = frozenset({"search"})

_FILTERS_ADAPTER: TypeAdapter[FilterExpression] = TypeAdapter(FilterExpression)


def parse_filters(raw: Optional[Mapping[str, Any]]) -> FilterExpression:
    """Validate a loosely shaped mapping into FilterValue lists (key order kept)."""
    if not raw:
        return {}
    return _FILTERS_ADAPTER.validate_python(dict(raw))


# --- Builders ---


def equals(value: str | int | float) -> FilterValue:
    return FilterValue(type="eq", value=value)


def not_equals(value: str | int | float) -> FilterValue:
    return FilterValue(type="ne", value=value)


def empty(is_empty: bool) -> FilterValue:
    """Match events where the field is (or is not) empty."""
    return FilterValue(type="empty", value=str(is_empty).lower())


def relative_time(amount: int, unit: Literal["h", "d"]) -> FilterValue:
    """Relative time for event.since / event.before, e.g. 7d or 12h."""
    if unit not in ("h", "d"):
        raise ValueError("unit must be 'h' or 'd'")
    return FilterValue(type="eq", value=f"{amount}{unit}")


def iso_time(moment: datetime) -> FilterValue:
    """
    Absolute time in UTC with millisecond precision (2018-05-20T00:00:00.000Z).
    Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    stamp = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return FilterValue(type="eq", value=stamp.replace("+00:00", "Z"))


def create_filter() -> FilterExpression:
    return {}


def add_filter(
    filters: FilterExpression, field: str, filter_value: FilterValue
) -> FilterExpression:
    filters.setdefault(field, []).append(filter_value)
    return filters


def add_time_range(
    filters: FilterExpression, since: datetime, before: datetime
) -> FilterExpression:
    add_filter(filters, "event.since", iso_time(since))
    add_filter(filters, "event.before", iso_time(before))
    return filters


def add_relative_time_range(
    filters: FilterExpression, amount: int, unit: Literal["h", "d"]
) -> FilterExpression:
    return add_filter(filters, "event.since", relative_time(amount, unit))


# --- Schema handling ---


def remove_denylisted_fields(fields: Iterable[EventField]) -> List[EventField]:
    return [f for f in fields if f.display_id not in DENYLISTED_FIELDS]


def validate_filter_keys(
    filters: Mapping[str, Any], fields: Iterable[EventField]
) -> None:
    """
    Raise InvalidFilterError for the first key (in expression order) that is
    not a display_id of the schema. Values are not inspected.
    """
    known = {f.display_id for f in fields}
    for key in filters:
        if key not in known:
            raise InvalidFilterError(f"Invalid filter key: {key}", field=key)


# --- Serialization ---


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_query_params(filters: FilterExpression) -> List[Tuple[str, str]]:
    params: List[Tuple[str, str]] = []
    for field, values in filters.items():
        for filter_value in values:
            params.append((f"filters[{field}][][type]", filter_value.type))
            params.append(
                (f"filters[{field}][][value]", _stringify(filter_value.value))
            )
    return params


def to_query_string(filters: FilterExpression) -> str:
    return urlencode(to_query_params(filters))


__all__ = [
    "DENYLISTED_FIELDS",
    "parse_filters",
    "equals",
    "not_equals",
    "empty",
    "relative_time",
    "iso_time",
    "create_filter",
    "add_filter",
    "add_time_range",
    "add_relative_time_range",
    "remove_denylisted_fields",
    "validate_filter_keys",
    "to_query_params",
    "to_query_string",
]
