"""
bootstrap/entrypoints.py - Process entry points

Logging setup, termination handling and the `kernelhost-echo` console
script.
"""

from __future__ import annotations
from typing import Optional
import json
import logging
import signal
import sys
import threading

logger = logging.getLogger("bootstrap.entrypoints")

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record):
        return json.dumps({
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(
    level: str = "ERROR",
    log_file: str = None,
    json_format: bool = False,
    fmt: str = DEFAULT_FORMAT,
) -> None:
    """
    Configure process logging.

    Kernel stdout belongs to the client, so the console handler writes to
    stderr. Calling this again replaces the handlers it installed before.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        json_format: Use JSON format for logs
        fmt: Format string for plain logs
    """
    log_level = getattr(logging, level.upper(), logging.ERROR)
    formatter = JSONFormatter() if json_format else logging.Formatter(fmt)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "_kernelhost", False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler._kernelhost = True
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler._kernelhost = True
        root_logger.addHandler(file_handler)

    root_logger.setLevel(log_level)

    # Reduce noise from third-party libraries
    logging.getLogger("traitlets").setLevel(logging.WARNING)


def wait_for_termination(stop_event: threading.Event, poll_interval: float = 0.5) -> None:
    """
    Block until stop_event is set or the process receives SIGINT/SIGTERM.

    Signal handlers can only be installed from the main thread; elsewhere
    the caller must set stop_event itself.
    """
    previous = {}

    def _request_stop(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        stop_event.set()

    if threading.current_thread() is threading.main_thread():
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, _request_stop)

    try:
        while not stop_event.wait(poll_interval):
            pass
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def main(argv: Optional[list] = None) -> int:
    """Run the reference echo kernel."""
    from kernelhost.kernel.echo import create_application

    return create_application().run(argv)


if __name__ == "__main__":
    sys.exit(main())
