"""Report payload and HTTP request port definitions (DTOs)."""

from dataclasses import asdict, dataclass
from typing import Any

__all__ = ["LoadDto", "ReportPayload", "ReportRequest"]


@dataclass(slots=True, frozen=True)
class LoadDto:
    """System load fractions sampled for one report cycle."""

    cpu: float
    ram: float


@dataclass(slots=True, frozen=True)
class ReportPayload:
    """Body of one report, serialized as JSON on the wire.

    Attributes:
        replica: Replica identifier of the reporting process.
        interval: Configured report interval in whole seconds.
        load: CPU and RAM load fractions.
    """

    replica: str
    interval: int
    load: LoadDto

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-serializable representation."""
        return asdict(self)


@dataclass
class ReportRequest:
    """HTTP request to be sent by the reporter.

    Decouples core delivery logic from HTTP implementation details.

    Attributes:
        url: Target report URL.
        payload: JSON-serializable dictionary to send as request body.
        token: Basic-auth password.
    """

    url: str
    payload: dict[str, Any]
    token: str
