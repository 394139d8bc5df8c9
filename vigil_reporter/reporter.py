"""Host-facing reporter builder and background reporter."""

import asyncio
import logging
from collections.abc import Callable
from functools import partial
from types import TracebackType
from typing import Protocol

from vigil_reporter.adapters.driven.config.settings import ReporterSettings, validate_settings
from vigil_reporter.adapters.driven.http.client import REQUEST_TIMEOUT_SEC, HttpClient
from vigil_reporter.adapters.driven.metrics.system_load import SystemLoadMetrics
from vigil_reporter.core.report import send_report
from vigil_reporter.core.scheduler import INITIAL_DELAY_SEC, start_reporting_loop
from vigil_reporter.ports.http import ReportRequest
from vigil_reporter.ports.metrics import MetricsPort
from vigil_reporter.ports.settings import ReporterConfig

__all__ = ["Reporter", "ReporterBuilder"]

logger = logging.getLogger(__name__)


class TransportPort(Protocol):
    """Async HTTP transport owned by a reporter."""

    async def __aenter__(self) -> "TransportPort": ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...

    async def send(self, req: ReportRequest) -> int | None: ...


class ReporterBuilder:
    """Fluent builder producing a validated Reporter.

    Setters only store values; validation happens in build_config().

    Example:
        reporter = (
            ReporterBuilder("http://[::1]:8080", "secret")
            .with_probe_id("relay")
            .with_node_id("socket-client")
            .with_replica_id("192.168.1.10")
            .with_interval(30)
            .build()
        )
    """

    def __init__(self, url: str, token: str) -> None:
        """Start a builder for one Vigil endpoint.

        Args:
            url: Base URL of the Vigil endpoint, without trailing slash.
            token: Reporter token, sent as basic-auth password.
        """
        self.url = url
        self.token = token
        self.probe_id: str | None = None
        self.node_id: str | None = None
        self.replica_id: str | None = None
        self.interval_sec: float | None = None

    @classmethod
    def from_settings(cls, settings: ReporterSettings) -> "ReporterBuilder":
        """Create a builder pre-populated from loaded settings."""
        return (
            cls(settings.endpoint_url, settings.token)
            .with_probe_id(settings.probe_id)
            .with_node_id(settings.node_id)
            .with_replica_id(settings.replica_id)
            .with_interval(settings.interval_sec)
        )

    def with_probe_id(self, probe_id: str) -> "ReporterBuilder":
        """Set the probe identifier (required, non-empty)."""
        self.probe_id = probe_id
        return self

    def with_node_id(self, node_id: str) -> "ReporterBuilder":
        """Set the node identifier (required, non-empty)."""
        self.node_id = node_id
        return self

    def with_replica_id(self, replica_id: str) -> "ReporterBuilder":
        """Set the replica identifier sent in every report (required, non-empty)."""
        self.replica_id = replica_id
        return self

    def with_interval(self, interval_sec: float) -> "ReporterBuilder":
        """Set seconds between reports (optional, defaults to 30).

        Args:
            interval_sec: Positive number of seconds.

        Returns:
            This builder.
        """
        self.interval_sec = interval_sec
        return self

    def build_config(self) -> ReporterConfig:
        """Validate the accumulated values.

        Returns:
            Immutable reporter configuration with the derived report URL.

        Raises:
            ConfigurationError: If an identifier is missing or empty, the
                endpoint is not an http(s) URL, or the interval is not positive.
        """
        settings = validate_settings(
            endpoint_url=self.url,
            token=self.token,
            probe_id=self.probe_id,
            node_id=self.node_id,
            replica_id=self.replica_id,
            interval_sec=self.interval_sec,
        )
        return settings.to_config()

    def build(self) -> "Reporter":
        """Validate and create a reporter with its own metrics source and HTTP clients.

        Raises:
            ConfigurationError: See build_config().
        """
        return Reporter(
            self.build_config(),
            metrics=SystemLoadMetrics(),
            http_factory=partial(HttpClient, timeout_sec=REQUEST_TIMEOUT_SEC),
        )


class Reporter:
    """Periodically reports system load to a Vigil endpoint in the background.

    The configuration is never mutated after construction. Every loop
    started by run() opens its own transport from http_factory and closes
    it when the loop exits.
    """

    initial_delay_sec: float = INITIAL_DELAY_SEC

    def __init__(
        self,
        config: ReporterConfig,
        *,
        metrics: MetricsPort | None = None,
        http_factory: Callable[[], TransportPort] = HttpClient,
    ) -> None:
        """Initialize the reporter.

        Args:
            config: Validated reporter configuration.
            metrics: Load source; defaults to psutil-backed SystemLoadMetrics.
            http_factory: Creates one transport per reporting loop.
        """
        self.config = config
        self.metrics: MetricsPort = metrics or SystemLoadMetrics()
        self.http_factory = http_factory
        self._stop = asyncio.Event()
        self._tasks: set[asyncio.Task[None]] = set()

    def run(self) -> None:
        """Start the reporting loop as a background task and return immediately.

        Must be called from a running event loop. Each call starts one more
        independent loop with its own transport, so call it once per reporter.
        """
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._manage(), name=f"vigil-reporter-{self.config.replica_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info(f"Vigil reporter started for {self.config.probe_id}/{self.config.node_id}")

    async def stop(self) -> None:
        """Signal every running loop to exit and wait for them.

        A stopped reporter cannot be run again.
        """
        self._stop.set()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _manage(self) -> None:
        async with self.http_factory() as http:
            await start_reporting_loop(
                config=self.config,
                stop=self._stop,
                report_fn=lambda: send_report(self.config, self.metrics, http.send),
                initial_delay_sec=self.initial_delay_sec,
            )
