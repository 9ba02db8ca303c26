import json
import logging
import random
from datetime import datetime, timezone

# LogRecord attributes that are not user-supplied extras
_RESERVED = frozenset(
    (
        "msg",
        "args",
        "levelname",
        "levelno",
        "name",
        "created",
        "msecs",
        "relativeCreated",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "exc_info",
        "exc_text",
        "stack_info",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    )
)


class JsonFormatter(logging.Formatter):
    """JSON-lines formatter for production logs.

    - Merges base fields (time, level, name, message) with any attributes
      provided via ``extra`` on the log record (e.g. event, sale_id, branch_id).
    - Exceptions are rendered under ``exc_info`` as formatted text.
    - Dates are ISO-8601 UTC.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED:
                continue
            # Only include simple JSON-serializable values
            try:
                json.dumps(value)
                payload.setdefault(key, value)
            except TypeError:
                payload.setdefault(key, str(value))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


class SamplingFilter(logging.Filter):
    """Probabilistically drop logs to reduce noise while keeping signal.

    - ``rate``: float in [0.0, 1.0]; fraction of matching records to allow.
    - ``levels``: level names to which sampling applies (e.g. ["INFO"]).
    - ``allow_events``: event names that are never sampled.

    Records with a level outside ``levels`` are always allowed, as are records
    whose message or ``event`` extra is in ``allow_events``.
    """

    def __init__(self, rate: float = 1.0, levels: list[str] | None = None, allow_events: list[str] | None = None):
        super().__init__()
        try:
            self.rate = float(rate)
        except (TypeError, ValueError):
            self.rate = 1.0
        self.levels = set(levels or ["INFO"])
        self.allow_events = set(allow_events or [])

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelname not in self.levels:
            return True
        if getattr(record, "msg", "") in self.allow_events or getattr(record, "event", None) in self.allow_events:
            return True
        if self.rate >= 1.0:
            return True
        if self.rate <= 0.0:
            return False
        return random.random() < self.rate
