import json
import logging
from datetime import datetime, timezone

from textile_pos.config import Settings

# Attributes passed through ``extra=`` that are worth keeping in structured output.
CONTEXT_FIELDS = ("cart_id", "invoice_no", "session_id", "product_id", "customer_id")

# Third-party loggers that are too chatty at INFO for a shop terminal.
_QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "multipart": logging.WARNING,
    "python_multipart": logging.WARNING,
}

_PLAIN_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=True, default=str)


def build_handler(settings: Settings) -> logging.Handler:
    handler = logging.StreamHandler()
    if settings.LOG_JSON:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT, datefmt="%H:%M:%S"))
    return handler


def _resolve_level(name) -> int:
    level = logging.getLevelName((name or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(settings: Settings) -> None:
    """Route every logger through one stderr handler at ``LOG_LEVEL``."""
    root = logging.getLogger()
    root.setLevel(_resolve_level(settings.LOG_LEVEL))
    root.handlers[:] = [build_handler(settings)]
    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)
