"""Example host: run a reporter configured from the environment."""

import asyncio
import logging

from vigil_reporter.adapters.driven.config.settings import load_settings
from vigil_reporter.adapters.driven.logging.logging_config import configure_logs
from vigil_reporter.adapters.driving.signals import make_stop_on_sigterm
from vigil_reporter.reporter import ReporterBuilder

__all__ = ["main"]

logger = logging.getLogger(__name__)


async def main() -> None:
    """Run a Vigil reporter until SIGTERM/SIGINT.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Start the reporter in the background.
    4. Wait for a termination signal, then stop the reporter.
    """
    configure_logs()
    logger.info("Starting Vigil reporter...")

    try:
        reporter = ReporterBuilder.from_settings(load_settings()).build()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check VIGIL_URL, VIGIL_TOKEN, VIGIL_PROBE_ID, VIGIL_NODE_ID, "
            "VIGIL_REPLICA_ID and VIGIL_INTERVAL_SECONDS.",
            exc,
        )
        return

    stop = make_stop_on_sigterm()
    reporter.run()

    await stop.wait()
    await reporter.stop()
    logger.info("Vigil reporter stopped.")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")
