"""Async status-code fetching over HTTP."""

from __future__ import annotations

import logging

import httpx

from statusboard.dashboard.models import ErrorKind, Failure, StatusResult, Success, TransportError

logger = logging.getLogger(__name__)


def classify_error(exc: Exception) -> TransportError:
    """Map an httpx exception onto a transport error kind."""
    if isinstance(exc, httpx.TimeoutException):
        kind = ErrorKind.TIMED_OUT
    elif isinstance(exc, httpx.ConnectError):
        kind = ErrorKind.CANNOT_CONNECT
    elif isinstance(exc, (httpx.UnsupportedProtocol, httpx.InvalidURL)):
        kind = ErrorKind.BAD_URL
    elif isinstance(exc, httpx.TooManyRedirects):
        kind = ErrorKind.TOO_MANY_REDIRECTS
    else:
        kind = ErrorKind.NETWORK
    return TransportError(kind=kind, description=str(exc) or type(exc).__name__)


class NetworkService:
    """Performs single-shot status checks against service URLs."""

    def __init__(self, timeout: float = 10.0) -> None:
        self._timeout = timeout

    async def fetch_status_code(self, url: str) -> StatusResult:
        """GET *url* and return its HTTP status code, or the transport failure."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                resp = await client.get(url)
                return Success(resp.status_code)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("Status check for %s failed: %r", url, exc)
            return Failure(classify_error(exc))
