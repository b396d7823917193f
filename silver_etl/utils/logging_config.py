"""Root logger configuration."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Union

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, including fields passed via ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    json_format: bool = False,
) -> logging.Logger:
    """Configure the root logger with a single stream handler.

    Args:
        level: Log level name or number
        json_format: Emit JSON lines instead of plain text

    Returns:
        The root logger
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Clear existing handlers to avoid duplicates when called twice
    if root.handlers:
        root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if json_format else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)

    return root
