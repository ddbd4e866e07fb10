from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

RESERVED_LOG_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "asctime",
    "taskName",
}

ErrorReporter = Callable[[BaseException, Dict[str, Any]], None]

_REPORTERS: List[ErrorReporter] = []


def _clean_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k not in RESERVED_LOG_KEYS}


def log_event(
    event: str,
    logger: logging.Logger | None = None,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """
    Minimal structured logging helper.
    - Uses logger.log with extra dict so formatters can include keys.
    - Drops reserved LogRecord attributes to avoid collisions.
    """
    log = logger or logging.getLogger("insight_hub_mcp.observability")
    extra = {"event": event, **_clean_fields(fields)}
    log.log(level, event, extra=extra)


def add_error_reporter(reporter: ErrorReporter) -> None:
    """Register a callable notified of every error surfaced to a caller."""
    _REPORTERS.append(reporter)


def remove_error_reporter(reporter: ErrorReporter) -> None:
    if reporter in _REPORTERS:
        _REPORTERS.remove(reporter)


def report_error(exc: BaseException, **fields: Any) -> None:
    """
    Side-channel notification for an error about to be re-raised.
    Reporter failures are logged and never replace the original error.
    """
    log_event(
        "tool_error",
        level=logging.ERROR,
        error_type=type(exc).__name__,
        error=str(exc),
        **fields,
    )
    for reporter in list(_REPORTERS):
        try:
            reporter(exc, dict(fields))
        except Exception:  # pragma: no cover - logged, not fatal
            logging.getLogger("insight_hub_mcp.observability").exception(
                "Error reporter %r failed", reporter
            )


__all__ = [
    "log_event",
    "report_error",
    "add_error_reporter",
    "remove_error_reporter",
    "ErrorReporter",
]
