"""Background loop that periodically reports to the Vigil endpoint."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from vigil_reporter.ports.settings import ReporterConfig

__all__ = ["INITIAL_DELAY_SEC", "interruptible_sleep", "start_reporting_loop"]

logger = logging.getLogger(__name__)

# Lets the host finish its own startup before load is sampled
INITIAL_DELAY_SEC = 10.0


async def interruptible_sleep(stop: asyncio.Event, delay_sec: float) -> bool:
    """Sleep for delay_sec unless stop is set first.

    Args:
        stop: Event signalling that the loop must exit.
        delay_sec: Maximum time to wait, in seconds.

    Returns:
        True if stop was requested, False if the full delay elapsed.
    """
    if stop.is_set():
        return True
    try:
        await asyncio.wait_for(stop.wait(), timeout=delay_sec)
    except asyncio.TimeoutError:
        return False
    return True


async def start_reporting_loop(
    config: ReporterConfig,
    stop: asyncio.Event,
    report_fn: Callable[[], Awaitable[bool]],
    initial_delay_sec: float = INITIAL_DELAY_SEC,
) -> None:
    """Run the reporting loop until stop is set.

    Cycle:
    1. Wait initial_delay_sec once.
    2. Report; on failure wait half an interval and report once more,
       whatever the retry outcome.
    3. Wait a full interval, then repeat from 2.

    Args:
        config: Reporter configuration (interval).
        stop: Event checked at every wait; setting it ends the loop.
        report_fn: Async function performing one report attempt.
        initial_delay_sec: Delay before the first report.

    Notes:
        - Attempts are strictly sequential; a report in flight is allowed
          to finish when stop is set.
        - Errors raised by report_fn count as a failed attempt and never
          escape the loop.
    """

    async def _attempt() -> bool:
        """Run one report attempt and absorb unexpected errors."""
        try:
            return await report_fn()
        except Exception as e:  # noqa: BLE001
            logger.error(f"Unexpected error in report attempt: {e}", exc_info=True)
            return False

    logger.info(
        f"Reporting loop started: first report in {initial_delay_sec}s, "
        f"then every {config.interval_sec}s to {config.report_url}"
    )

    if not await interruptible_sleep(stop, initial_delay_sec):
        while True:
            if not await _attempt():
                retry_delay = config.interval_sec / 2
                logger.debug(f"Report failed, retrying once in {retry_delay}s")
                if await interruptible_sleep(stop, retry_delay):
                    break
                await _attempt()

            if await interruptible_sleep(stop, config.interval_sec):
                break

    logger.info("Reporting loop stopped.")
