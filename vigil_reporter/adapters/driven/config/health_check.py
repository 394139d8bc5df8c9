"""Configuration check for container orchestration."""

import logging

from vigil_reporter.adapters.driven.config.settings import load_settings
from vigil_reporter.adapters.driven.logging.logging_config import configure_logs

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Check that the environment describes a valid reporter.

    Validates:
    - Required VIGIL_* environment variables are set.
    - Identifiers are non-empty, the endpoint is an http(s) URL and the
      interval is positive.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        settings = load_settings()
        settings.to_config()
    except (RuntimeError, ValueError) as exc:
        logger.error(f"Vigil reporter healthcheck FAILED: {exc}")
        return 1

    logger.info("Vigil reporter healthcheck OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
