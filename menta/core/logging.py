import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from menta.core.config import settings

_RESERVED_ATTRS = frozenset((
    "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno",
    "funcName", "created", "msecs", "relativeCreated", "thread",
    "threadName", "processName", "process", "name", "taskName", "message",
))


def _extra_fields(record: logging.LogRecord) -> dict:
    return {
        key: value
        for key, value in record.__dict__.items()
        if not key.startswith("_") and key not in _RESERVED_ATTRS
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload.update(_extra_fields(record))
        return json.dumps(payload, ensure_ascii=False, default=str)


class KeyValueFormatter(logging.Formatter):
    """Plain text formatter that appends structured fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _extra_fields(record)
        if fields:
            line += " " + " ".join(f"{key}={value}" for key, value in fields.items())
        return line


class ContextLogger(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        reserved = {"exc_info", "stack_info", "stacklevel", "extra"}
        extra = dict(kwargs.get("extra", {}))
        for key, value in list(kwargs.items()):
            if key in reserved:
                continue
            extra[key] = value

        clean_kwargs = {key: value for key, value in kwargs.items() if key in reserved}
        clean_kwargs["extra"] = extra
        return msg, clean_kwargs


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Configure the ``menta`` logger hierarchy once per process."""
    root = logging.getLogger("menta")
    root.setLevel((level or settings.LOG_LEVEL).upper())

    use_json = settings.LOG_JSON if json_output is None else json_output
    handler = logging.StreamHandler(sys.stdout)
    if use_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(KeyValueFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root.handlers = [handler]
    root.propagate = False


def get_logger(name: str) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {})
