"""Console logging setup for hosts embedding the reporter."""

import logging
from typing import TextIO

__all__ = ["configure_logs", "APP_LOGGER"]

APP_LOGGER = "vigil_reporter"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Client library loggers that are chatty at INFO
QUIET_LOGGERS = ("aiohttp", "asyncio")


def configure_logs(
    level: int = logging.INFO,
    *,
    reporter_level: int = logging.DEBUG,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Attach a console handler to the root logger.

    Client library loggers are raised to WARNING so a failing endpoint does
    not flood the host's output.

    Args:
        level: Root logger level.
        reporter_level: Level for the ``vigil_reporter`` logger tree.
        stream: Destination stream, stderr when omitted.

    Returns:
        The installed handler, so a host can detach it again.
    """
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger(APP_LOGGER).setLevel(reporter_level)

    return handler
