"""
Logging setup and structured event helpers.
"""

from __future__ import annotations

import json
import logging
from typing import Any

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once for the process.
    """

    logging.basicConfig(
        level=getattr(logging, level.strip().upper(), logging.INFO),
        format=_LOG_FORMAT,
    )
    # APScheduler logs every job submission at INFO.
    logging.getLogger("apscheduler.executors").setLevel(logging.WARNING)


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
