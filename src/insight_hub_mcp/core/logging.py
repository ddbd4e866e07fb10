import logging
import sys
from typing import Any, Optional, TextIO

LOG_EXTRA_FIELDS = (
    "request_id",
    "tool",
    "method",
    "url",
    "status",
    "page",
    "duration_ms",
    "error_type",
    "error",
)

# These log every request at INFO; hub_call already covers them.
NOISY_LOGGERS = ("httpx", "httpcore")


class LogfmtFormatter(logging.Formatter):
    """
    logfmt line per record: level, logger, event, then whichever of
    LOG_EXTRA_FIELDS the record carries. Missing extras are skipped.
    """

    def format(self, record: logging.LogRecord) -> str:
        kv: list[str] = [
            f"level={record.levelname.lower()}",
            f"logger={record.name}",
        ]

        msg = record.getMessage()
        if msg:
            kv.append(f"event={self._fmt_val(msg)}")

        for key in LOG_EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is None:
                continue
            kv.append(f"{key}={self._fmt_val(val)}")

        if record.exc_info and record.exc_info[0] is not None:
            kv.append(f"exc_type={record.exc_info[0].__name__}")
            kv.append(f"exc={self._fmt_val(record.exc_info[1])}")

        return " ".join(kv)

    @staticmethod
    def _fmt_val(val: Any) -> str:
        if isinstance(val, bool):
            return "true" if val else "false"
        if isinstance(val, (int, float)):
            return str(val)
        s = str(val)
        if not s or any(c in s for c in ' ="\n'):
            s = s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
            s = '"' + s + '"'
        return s


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """Initialize root logging with logfmt output.

    Defaults to stderr: the stdio transport owns stdout for protocol frames.
    Safe to call more than once; earlier root handlers are replaced.
    """
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(LogfmtFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["setup_logging", "LogfmtFormatter", "LOG_EXTRA_FIELDS"]
