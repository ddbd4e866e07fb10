"""Per-invocation request id carried through ContextVars."""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token
from typing import Optional

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def ensure_request_id(candidate: Optional[str] = None) -> str:
    return candidate or uuid.uuid4().hex


def apply_request_id(request_id: Optional[str] = None) -> Token:
    """Set the request id for the current task; returns a token for reset()."""
    return _request_id_var.set(ensure_request_id(request_id))


def reset_request_id(token: Token) -> None:
    _request_id_var.reset(token)


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


__all__ = [
    "ensure_request_id",
    "apply_request_id",
    "reset_request_id",
    "get_request_id",
]
