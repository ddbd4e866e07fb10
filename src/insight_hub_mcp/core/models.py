from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

# --- Hierarchy models ---
#
# extra="ignore" keeps only the fields we rely on; the rest of the vendor
# payload is dropped at validation time.


class Organization(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class Project(BaseModel):
    id: str
    name: str
    slug: Optional[str] = None
    api_key: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


# --- Filter schema models ---


class FilterOptions(BaseModel):
    name: Optional[str] = None
    type: Optional[List[str]] = None

    model_config = ConfigDict(extra="ignore")


class PivotOptions(BaseModel):
    name: Optional[str] = None
    summary: Optional[bool] = None
    values: Optional[bool] = None
    cardinality: Optional[bool] = None
    average: Optional[bool] = None

    model_config = ConfigDict(extra="ignore")


class EventField(BaseModel):
    display_id: str
    custom: bool = False
    filter_options: Optional[FilterOptions] = None
    pivot_options: Optional[PivotOptions] = None

    model_config = ConfigDict(extra="ignore")


# --- Filter expressions ---

FilterType = Literal["eq", "ne", "empty"]


class FilterValue(BaseModel):
    """One comparison on a field; several entries on a field are ANDed remotely."""

    type: FilterType
    value: Union[bool, int, float, str]

    model_config = ConfigDict(extra="forbid")


FilterExpression = Dict[str, List[FilterValue]]


# --- Input Models (Tool Payloads) ---

ErrorOperation = Literal[
    "override_severity",
    "assign",
    "create_issue",
    "link_issue",
    "unlink_issue",
    "open",
    "snooze",
    "fix",
    "ignore",
    "delete",
    "discard",
    "undiscard",
]

Severity = Literal["info", "warning", "error"]


class ErrorUpdateRequest(BaseModel):
    operation: ErrorOperation
    severity: Optional[Severity] = None

    model_config = ConfigDict(extra="forbid")


__all__ = [
    "Organization",
    "Project",
    "FilterOptions",
    "PivotOptions",
    "EventField",
    "FilterType",
    "FilterValue",
    "FilterExpression",
    "ErrorOperation",
    "Severity",
    "ErrorUpdateRequest",
]
