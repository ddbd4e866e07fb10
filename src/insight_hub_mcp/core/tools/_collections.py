"""
Shared helpers for shaping list results returned by tools.
"""

from typing import Any, Dict, List


def as_list(payload: Any) -> List[Any]:
    """Normalize a decoded body to a list; None (empty body) becomes []."""
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    return [payload]


def envelope(items: List[Any]) -> Dict[str, Any]:
    return {"data": items, "count": len(items)}
