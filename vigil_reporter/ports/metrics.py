"""Metrics source port definition."""

from __future__ import annotations

from typing import Protocol

__all__ = ["MetricsPort"]


class MetricsPort(Protocol):
    """Interface for sampling local system load.

    Both queries are best effort: implementations return 0.0 instead of
    raising when the underlying system query fails.
    """

    def cpu_load_fraction(self) -> float:
        """Return 1-minute load average normalized by logical core count."""
        ...

    def ram_usage_fraction(self) -> float:
        """Return the used share of physical memory, in [0, 1]."""
        ...
