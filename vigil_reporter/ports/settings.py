"""Reporter configuration port (immutable DTO)."""

from dataclasses import dataclass

__all__ = ["ReporterConfig"]


@dataclass(slots=True, frozen=True)
class ReporterConfig:
    """Validated configuration for one reporter instance.

    Produced once by the builder; the core only ever reads it.

    Attributes:
        report_url: Fully escaped URL reports are POSTed to.
        token: Secret sent as basic-auth password (username is empty).
        probe_id: Logical probe identifier.
        node_id: Node identifier under the probe.
        replica_id: Identifier of this running instance.
        interval_sec: Seconds between two report cycles.
    """

    report_url: str
    token: str
    probe_id: str
    node_id: str
    replica_id: str
    interval_sec: float
