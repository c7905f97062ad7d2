import logging
import sys
import json
import datetime
import os
from typing import Any, Dict, Optional, Union

# Attributes passed via `extra=` that formatters should surface
CONTEXT_FIELDS = ("operation", "track_id", "key")

def _context(record: logging.LogRecord) -> Dict[str, Any]:
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if getattr(record, name, None)}

class JSONFormatter(logging.Formatter):
    """
    One JSON object per line, for log shippers.
    """
    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.datetime.fromtimestamp(record.created, tz=datetime.timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)

class ConsoleFormatter(logging.Formatter):
    """
    `2024-05-01T10:00:00 INFO tracklog.TrackStore: message [operation=scan]`
    """
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.datetime.fromtimestamp(record.created).strftime('%Y-%m-%dT%H:%M:%S')
        line = f"{ts} {record.levelname:<7} {record.name}: {record.getMessage()}"
        ctx = _context(record)
        if ctx:
            line += " [" + " ".join(f"{k}={v}" for k, v in ctx.items()) + "]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line

def setup_logging(level: Union[int, str] = logging.INFO, fmt: Optional[str] = None) -> None:
    """
    Installs a single stdout handler on the root logger.

    `fmt` is "json" or "text"; when omitted the LOG_FORMAT environment
    variable decides (default "text").
    """
    fmt = (fmt or os.getenv("LOG_FORMAT", "text")).lower()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if fmt == "json" else ConsoleFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    # uvicorn logs every request at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"tracklog.{name}")
