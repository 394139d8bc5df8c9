"""HTTP client adapter delivering reports to a Vigil endpoint."""

import asyncio
import base64
import json
import logging
from types import TracebackType

import aiohttp
from aiohttp import ClientTimeout
from yarl import URL

from vigil_reporter.ports.http import ReportRequest

__all__ = ["HttpClient", "TRANSPORT_ERRORS", "basic_auth_header"]

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SEC = 10
JSON_CONTENT_TYPE = "application/json"

# Exceptions treated as a failed delivery rather than a bug
TRANSPORT_ERRORS = (
    aiohttp.ClientError,  # Connection refused, DNS failure, dropped connection
    asyncio.TimeoutError,  # Total request timeout elapsed
)


def basic_auth_header(username: str, password: str) -> str:
    """Return an Authorization header value for HTTP basic auth.

    Credentials are UTF-8 encoded; the username may be empty.
    """
    credentials = f"{username}:{password}".encode()
    return "Basic " + base64.b64encode(credentials).decode("ascii")


class HttpClient:
    """HTTP client owning one aiohttp session for the reporter lifetime.

    Features:
    - Fixed total request timeout.
    - Basic auth with an empty username and the reporter token.
    - Report URLs sent as already escaped, never re-quoted.
    - Context manager for proper resource cleanup.
    """

    def __init__(self, *, timeout_sec: float = REQUEST_TIMEOUT_SEC) -> None:
        """Initialize HTTP client.

        Args:
            timeout_sec: Total timeout applied to every request.
        """
        self.timeout_sec = timeout_sec
        self.session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        self.session = aiohttp.ClientSession(timeout=ClientTimeout(total=self.timeout_sec))
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session).

        Args:
            exc_type: Exception type if raised in context.
            exc: Exception instance if raised in context.
            tb: Traceback if raised in context.
        """
        if self.session:
            await self.session.close()
            self.session = None

    async def send(self, req: ReportRequest) -> int | None:
        """POST one report as JSON.

        Args:
            req: Report request with URL, payload and token.

        Returns:
            HTTP status code, or None if the request failed at transport level.

        Raises:
            RuntimeError: If session not initialized.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")

        headers = {
            "Accept": JSON_CONTENT_TYPE,
            "Content-Type": JSON_CONTENT_TYPE,
            "Authorization": basic_auth_header("", req.token),
        }
        try:
            resp = await self.session.post(
                URL(req.url, encoded=True),
                data=json.dumps(req.payload),
                headers=headers,
            )
            async with resp:
                status = resp.status
        except TRANSPORT_ERRORS as e:
            logger.debug(f"Report to {req.url} failed: {e!r}")
            return None

        logger.debug(f"Report to {req.url} returned status {status}")
        return status
