"""Reporter configuration validation and loading from environment variables."""

import logging
import os
from typing import Any
from urllib.parse import quote_plus

from dotenv import find_dotenv, load_dotenv
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from vigil_reporter.ports.settings import ReporterConfig

__all__ = [
    "DEFAULT_INTERVAL_SEC",
    "ConfigurationError",
    "ReporterSettings",
    "build_report_url",
    "load_settings",
    "validate_settings",
]

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)

DEFAULT_INTERVAL_SEC = 30.0


class ConfigurationError(ValueError):
    """Reporter was configured incorrectly by the embedding application."""


def build_report_url(endpoint_url: str, probe_id: str, node_id: str) -> str:
    """Return the report URL for a probe/node pair.

    Identifiers are query-escaped, so ``/`` and spaces never leak into the path.
    """
    probe = quote_plus(probe_id, safe="")
    node = quote_plus(node_id, safe="")
    return f"{endpoint_url}/reporter/{probe}/{node}/"


class ReporterSettings(BaseModel):
    """Raw reporter settings as provided by the host.

    Attributes:
        endpoint_url: Base URL of the Vigil endpoint.
        token: Reporter token (basic-auth password).
        probe_id: Probe identifier (non-empty).
        node_id: Node identifier (non-empty).
        replica_id: Replica identifier (non-empty).
        interval_sec: Seconds between reports (must be positive).
    """

    model_config = ConfigDict(frozen=True)

    endpoint_url: str = Field(..., description="Base URL of the Vigil endpoint.")
    token: str = Field(default="", description="Reporter token sent as basic-auth password.")
    probe_id: str = Field(..., description="Probe identifier.")
    node_id: str = Field(..., description="Node identifier.")
    replica_id: str = Field(..., description="Replica identifier.")
    interval_sec: float = Field(
        default=DEFAULT_INTERVAL_SEC, gt=0, description="Interval between reports in seconds."
    )

    @field_validator("probe_id", "node_id", "replica_id", mode="before")
    @classmethod
    def require_identifier(cls, v: Any, info: ValidationInfo) -> Any:
        """Reject unset or empty identifiers.

        Raises:
            ValueError: If the identifier is None or empty.
        """
        if v is None or v == "":
            raise ValueError(f"missing {info.field_name}")
        return v

    @field_validator("endpoint_url")
    @classmethod
    def validate_endpoint_url(cls, v: str) -> str:
        """Validate that endpoint is a valid HTTP(S) URL.

        Args:
            v: Endpoint URL to validate.

        Returns:
            The URL, unchanged.

        Raises:
            ValueError: If URL is invalid or not http(s).
        """
        try:
            url = _http_url_adapter.validate_python(v)
        except ValidationError as e:
            raise ValueError(f"Invalid endpoint URL: {v!r}") from e
        if url.scheme not in ("http", "https"):
            raise ValueError("Only http:// and https:// endpoints allowed")
        return v

    def to_config(self) -> ReporterConfig:
        """Derive the immutable reporter configuration."""
        return ReporterConfig(
            report_url=build_report_url(self.endpoint_url, self.probe_id, self.node_id),
            token=self.token,
            probe_id=self.probe_id,
            node_id=self.node_id,
            replica_id=self.replica_id,
            interval_sec=self.interval_sec,
        )


def validate_settings(**values: Any) -> ReporterSettings:
    """Validate raw settings values.

    Unset optional values (None) fall back to their defaults.

    Returns:
        Validated settings.

    Raises:
        ConfigurationError: Naming every invalid field.
    """
    optional = ("token", "interval_sec")
    values = {k: v for k, v in values.items() if not (k in optional and v is None)}
    try:
        return ReporterSettings(**values)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid reporter configuration: {details}") from e


def load_settings() -> ReporterSettings:
    """Load and validate settings from environment.

    A `.env` file found from the working directory upward is loaded first;
    variables already set in the environment take precedence.

    Required environment variables:
    - VIGIL_URL: Base URL of the Vigil endpoint.
    - VIGIL_TOKEN: Reporter token.
    - VIGIL_PROBE_ID, VIGIL_NODE_ID, VIGIL_REPLICA_ID: Identifiers.

    Optional:
    - VIGIL_INTERVAL_SECONDS: Positive number of seconds (default 30).

    Returns:
        Validated ReporterSettings object.

    Raises:
        RuntimeError: If required env vars missing or interval malformed.
        ConfigurationError: If values are present but invalid.
    """
    load_dotenv(find_dotenv(usecwd=True))

    try:
        endpoint_url = os.environ["VIGIL_URL"]
        token = os.environ["VIGIL_TOKEN"]
        probe_id = os.environ["VIGIL_PROBE_ID"]
        node_id = os.environ["VIGIL_NODE_ID"]
        replica_id = os.environ["VIGIL_REPLICA_ID"]
    except KeyError as e:
        raise RuntimeError(f"Missing required environment variable: {e.args[0]}") from e

    interval_raw = os.getenv("VIGIL_INTERVAL_SECONDS")
    interval_sec: float | None = None
    if interval_raw:
        try:
            interval_sec = float(interval_raw)
            if interval_sec <= 0:
                raise ValueError("Must be positive")
        except ValueError as e:
            raise RuntimeError(
                f"VIGIL_INTERVAL_SECONDS must be a positive number (got: {interval_raw})"
            ) from e

    settings = validate_settings(
        endpoint_url=endpoint_url,
        token=token,
        probe_id=probe_id,
        node_id=node_id,
        replica_id=replica_id,
        interval_sec=interval_sec,
    )

    logger.info(
        f"Reporter configured: endpoint={settings.endpoint_url}, "
        f"probe={settings.probe_id}, node={settings.node_id}, "
        f"replica={settings.replica_id}, interval={settings.interval_sec}s"
    )

    return settings
