"""Report payload construction and delivery outcome."""

import logging
from collections.abc import Awaitable, Callable

from vigil_reporter.ports.http import LoadDto, ReportPayload, ReportRequest
from vigil_reporter.ports.metrics import MetricsPort
from vigil_reporter.ports.settings import ReporterConfig

__all__ = ["HTTP_OK", "build_payload", "send_report"]

logger = logging.getLogger(__name__)

HTTP_OK = 200

SendFn = Callable[[ReportRequest], Awaitable[int | None]]


def build_payload(config: ReporterConfig, metrics: MetricsPort) -> ReportPayload:
    """Sample current load and build this cycle's payload.

    Args:
        config: Reporter configuration.
        metrics: Metrics source; its queries never raise.

    Returns:
        Fresh report payload.
    """
    return ReportPayload(
        replica=config.replica_id,
        interval=int(config.interval_sec),
        load=LoadDto(
            cpu=metrics.cpu_load_fraction(),
            ram=metrics.ram_usage_fraction(),
        ),
    )


async def send_report(config: ReporterConfig, metrics: MetricsPort, send_fn: SendFn) -> bool:
    """Sample metrics and deliver one report.

    Args:
        config: Reporter configuration.
        metrics: Metrics source.
        send_fn: Transport returning a status code, or None on transport error.

    Returns:
        True only if the endpoint answered exactly 200.
    """
    payload = build_payload(config, metrics)
    status = await send_fn(
        ReportRequest(url=config.report_url, payload=payload.to_dict(), token=config.token)
    )
    delivered = status == HTTP_OK
    logger.debug(
        f"Report for replica {config.replica_id} "
        f"{'delivered' if delivered else 'not delivered'} (status={status}, load={payload.load})"
    )
    return delivered
