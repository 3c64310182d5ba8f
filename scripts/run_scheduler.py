"""
Run the schedule orchestrator in the foreground until SIGINT or SIGTERM.
"""

from __future__ import annotations

import logging
import signal
import threading

from app.config import get_log_level
from app.logging_utils import configure_logging
from app.scheduler.orchestrator import get_schedule_orchestrator

logger = logging.getLogger("run_scheduler")


def main() -> int:
    configure_logging(get_log_level())
    shutdown_event = threading.Event()

    def signal_handler(signum: int, frame: object) -> None:
        logger.info("Received signal %d, initiating graceful shutdown", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    orchestrator = get_schedule_orchestrator()
    orchestrator.start()
    status = orchestrator.get_status()
    logger.info("Scheduler running with %d registered schedules", status.active_jobs)

    # Short waits keep the main thread responsive to signals.
    while not shutdown_event.wait(timeout=1.0):
        pass

    orchestrator.stop()
    logger.info("Scheduler stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
