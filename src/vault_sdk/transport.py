"""
Single-attempt HTTP transport for the Vault SDK.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import httpx

from .exceptions import NetworkError, TransportError

logger = logging.getLogger(__name__)


def path_segment(value: str) -> str:
    """Escape a caller-supplied value so it stays a single URL path segment."""
    if value in ("", ".", ".."):
        raise ValueError(f"Invalid path segment: {value!r}")
    return quote(value, safe="")


@dataclass(frozen=True)
class RawResponse:
    """Status, headers and undecoded body of one HTTP exchange."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport:
    """
    Executes exactly one HTTP request against a base address.

    Retries are deliberately absent here; see ``RetryPolicy``.
    """

    def __init__(
        self,
        base_url: str,
        http_client: httpx.Client,
        log_requests: bool = False,
    ):
        """
        Initialize the transport.

        Args:
            base_url: Base URL of the Vault server (no trailing slash)
            http_client: Configured httpx client (timeouts, TLS, pooling)
            log_requests: Whether to log each exchange at DEBUG
        """
        self.base_url = base_url.rstrip("/")
        self._client = http_client
        self.log_requests = log_requests

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def execute(
        self,
        method: str,
        path: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Any] = None,
        timeout: Optional[float] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> RawResponse:
        """Send one request and return the raw response."""
        url = self.url_for(path)
        kwargs: Dict[str, Any] = {"headers": headers or {}}
        if body is not None:
            kwargs["json"] = body
        if params:
            kwargs["params"] = params
        if timeout is not None:
            kwargs["timeout"] = timeout

        started = time.monotonic()
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.debug(f"{method} {path} timed out: {type(e).__name__}")
            raise NetworkError(f"Request to Vault timed out: {e}") from e
        except httpx.ConnectError as e:
            logger.debug(f"{method} {path} could not connect: {e}")
            raise NetworkError(f"Failed to connect to Vault: {e}") from e
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise TransportError(f"Invalid request URL '{url}': {e}") from e
        except httpx.RequestError as e:
            logger.error(f"{method} {path} failed mid-exchange: {e}")
            raise TransportError(f"HTTP exchange with Vault failed: {e}") from e

        if self.log_requests:
            elapsed = (time.monotonic() - started) * 1000
            logger.debug(f"{method} {path} -> {response.status_code} ({elapsed:.1f} ms)")

        return RawResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )
