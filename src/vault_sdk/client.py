"""
Vault Client

Main client class for talking to a Vault server.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

import httpx

from .auth import AuthEngine
from .config import VaultConfig
from .envelope import ResponseEnvelope
from .exceptions import (
    AuthError,
    NotFoundError,
    ParseError,
    TransportError,
    VaultError,
)
from .logical import SecretOperations
from .retry import RetryPolicy
from .tokens import TokenOperations
from .transport import RawResponse, Transport

logger = logging.getLogger(__name__)

API_PREFIX = "v1"


class VaultClient:
    """
    Entry point bound to a single ``VaultConfig``.

    Operations are grouped in sub-APIs: ``auth`` (logins and the caller's own
    token), ``tokens`` (the full token backend) and ``logical`` (secret paths).
    The client keeps no state besides its configuration and connection pool,
    so one instance can be shared between threads.
    """

    def __init__(
        self,
        config: VaultConfig,
        http_client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the Vault client.

        Args:
            config: Client configuration
            http_client: Optional pre-built httpx client (tests, custom pools).
                The caller keeps ownership of a client passed in here.
            sleep: Blocking sleep used between retry attempts
        """
        self.config = config
        self._owns_http_client = http_client is None

        if http_client is None:
            http_client = httpx.Client(
                timeout=httpx.Timeout(config.read_timeout, connect=config.open_timeout),
                verify=config.ssl_config.build_verify(),
            )
        self._http = http_client
        self._sleep = sleep

        self._transport = Transport(
            f"{config.address}/{API_PREFIX}",
            self._http,
            log_requests=config.log_requests,
        )
        self._retry = RetryPolicy(
            max_retries=config.max_retries,
            retry_interval_milliseconds=config.retry_interval_milliseconds,
            sleep=sleep,
        )

        self.auth = AuthEngine(self)
        self.tokens = TokenOperations(self)
        self.logical = SecretOperations(self)

    def __repr__(self) -> str:
        return f"VaultClient(address={self.config.address!r}, authenticated={self.is_authenticated})"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            self._http.close()

    @property
    def is_authenticated(self) -> bool:
        return self.config.token is not None

    def with_token(self, token: str) -> "VaultClient":
        """
        Return a client with the same settings and a different token.

        The new client shares this client's connection pool, so it must not
        outlive it.
        """
        config = self.config.model_copy(update={"token": token})
        return VaultClient(config, http_client=self._http, sleep=self._sleep)

    def _headers(self, authenticated: bool) -> Dict[str, str]:
        headers = {"X-Vault-Request": "true"}
        if authenticated and self.config.token:
            headers["X-Vault-Token"] = self.config.token
        if self.config.namespace:
            headers["X-Vault-Namespace"] = self.config.namespace
        return headers

    def request(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        *,
        authenticated: bool = True,
        params: Optional[Dict[str, str]] = None,
    ) -> ResponseEnvelope:
        """
        Run one logical operation through retry, transport and envelope decoding.

        Args:
            method: HTTP method
            path: Path below ``/v1/``
            body: JSON body, or None for no body
            authenticated: Whether to send the configured token
            params: Optional query parameters

        Returns:
            Decoded response envelope (empty for bodiless responses)
        """
        path = path.lstrip("/")
        headers = self._headers(authenticated)
        description = f"{method} {path}"

        response = self._retry.call(
            lambda: self._transport.execute(
                method, path, headers=headers, body=body, params=params
            ),
            description=description,
        )

        if not response.ok:
            raise self._error_for(response, description)

        if response.status == 204 or not response.body.strip():
            return ResponseEnvelope.empty()
        try:
            return ResponseEnvelope.parse(response.body)
        except ParseError as e:
            e.status_code = response.status
            e.attempts = response.attempts
            raise

    def _error_for(self, response: RawResponse, description: str) -> VaultError:
        """Map a non-2xx response to the matching exception."""
        try:
            envelope: Optional[ResponseEnvelope] = ResponseEnvelope.parse(response.body)
        except ParseError:
            envelope = None

        errors = envelope.errors if envelope is not None else []
        if response.status == 404:
            return NotFoundError(
                f"{description}: not found",
                status_code=response.status,
                errors=errors,
                attempts=response.attempts,
            )

        if envelope is None or not envelope.has_errors_field:
            logger.error(f"{description} returned HTTP {response.status} with an unreadable body")
            return TransportError(
                f"{description}: unexpected response body",
                status_code=response.status,
                attempts=response.attempts,
            )

        return AuthError(
            f"{description}: rejected by Vault",
            status_code=response.status,
            errors=errors,
            attempts=response.attempts,
        )
