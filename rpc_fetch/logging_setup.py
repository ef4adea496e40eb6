"""
JSON log output for rpc_fetch calls

The transport and client attach the call's ``method``, ``url`` and, for
refused redirects, ``status`` to their log records. ``JsonFormatter`` puts
those next to the message so one line describes one call event.
"""

import json
import logging
import sys
from typing import Any, Dict, IO, Optional

CALL_FIELDS = ("method", "url", "status")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with call fields when present"""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": int(record.created * 1000),
            "name": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
        }
        payload.update(
            {field: getattr(record, field) for field in CALL_FIELDS if hasattr(record, field)}
        )

        # transport failures are logged with the aiohttp error attached
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_structured_logger(level: int = logging.INFO, stream: Optional[IO[str]] = None) -> None:
    """
    Route the ``rpc_fetch`` logger tree to JSON lines.

    Replaces any handlers previously installed on ``rpc_fetch`` and stops
    propagation, so call events are not printed twice by the root logger.

    Args:
        level: Level for the ``rpc_fetch`` logger
        stream: Destination (default: sys.stdout)
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    rpc_logger = logging.getLogger("rpc_fetch")
    rpc_logger.setLevel(level)
    rpc_logger.handlers = [handler]
    rpc_logger.propagate = False
