"""System load metrics backed by psutil."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import psutil

from vigil_reporter.ports.metrics import MetricsPort

__all__ = ["SystemLoadMetrics"]

logger = logging.getLogger(__name__)

# Failures a system query may raise on unsupported or restricted platforms
QUERY_ERRORS = (OSError, RuntimeError, AttributeError, psutil.Error)

MIN_CPU_DIVISOR = 1.0


class SystemLoadMetrics(MetricsPort):
    """Best-effort CPU and RAM load sampler.

    Every query degrades to 0.0 on failure so that a report is always
    produced. Query functions can be swapped for testing.
    """

    def __init__(
        self,
        *,
        load_avg_fn: Callable[[], tuple[float, float, float]] = psutil.getloadavg,
        cpu_count_fn: Callable[..., int | None] = psutil.cpu_count,
        memory_fn: Callable[[], Any] = psutil.virtual_memory,
    ) -> None:
        """Initialize the sampler.

        Args:
            load_avg_fn: Returns the (1m, 5m, 15m) load averages.
            cpu_count_fn: Returns the logical core count (called with logical=True).
            memory_fn: Returns an object with ``total`` and ``available`` bytes.
        """
        self._load_avg_fn = load_avg_fn
        self._cpu_count_fn = cpu_count_fn
        self._memory_fn = memory_fn

    def cpu_load_fraction(self) -> float:
        """Return 1-minute load average divided by logical core count.

        Returns:
            Load fraction, or 0.0 if either query fails.
        """
        try:
            load_1m = self._load_avg_fn()[0]
            cores = self._cpu_count_fn(logical=True)
        except QUERY_ERRORS as e:
            logger.debug(f"CPU load query failed: {e}")
            return 0.0

        return float(load_1m) / max(float(cores or 0), MIN_CPU_DIVISOR)

    def ram_usage_fraction(self) -> float:
        """Return 1 - available/total physical memory.

        Returns:
            Usage fraction, or 0.0 if the query fails.
        """
        try:
            memory = self._memory_fn()
        except QUERY_ERRORS as e:
            logger.debug(f"Memory query failed: {e}")
            return 0.0

        if memory.total <= 0:
            return 0.0
        return 1.0 - (memory.available / memory.total)
