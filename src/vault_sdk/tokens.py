"""
Token auth backend operations.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from .exceptions import EnvelopeShapeError
from .models import AuthResult, LookupResult, TokenRequest
from .transport import path_segment

if TYPE_CHECKING:
    from .client import VaultClient

logger = logging.getLogger(__name__)

TOKEN_MOUNT = "auth/token"


def _normalize_request(token_request: Optional[TokenRequest], fields: Dict[str, Any]) -> TokenRequest:
    if token_request is not None and fields:
        raise ValueError("Pass either a TokenRequest or keyword fields, not both")
    if token_request is None:
        return TokenRequest(**fields)
    return token_request


def _increment_body(increment: Optional[int], **body: Any) -> Dict[str, Any]:
    if increment is not None:
        # Vault treats 0 as "use the default TTL"
        if increment <= 0:
            raise ValueError("increment must be > 0")
        body["increment"] = increment
    return body


def _check_increment(result: AuthResult, increment: Optional[int], description: str) -> AuthResult:
    """The granted lease must match the requested increment unless Vault says why not."""
    if increment is None or result.lease_duration == increment:
        return result
    if result.warnings:
        logger.warning(
            f"{description}: requested increment {increment}s, Vault granted "
            f"{result.lease_duration}s ({'; '.join(result.warnings)})"
        )
        return result
    raise EnvelopeShapeError(
        f"{description}: requested increment {increment}s but Vault reported "
        f"lease_duration {result.lease_duration}s without explanation"
    )


class TokenOperations:
    """Create, renew, look up and revoke tokens."""

    def __init__(self, client: "VaultClient"):
        self._client = client

    # Creation

    def create(self, token_request: Optional[TokenRequest] = None, **fields: Any) -> AuthResult:
        """
        Create a child token of the configured token.

        Args:
            token_request: Token parameters; alternatively pass the same
                fields as keyword arguments (``ttl="1h"``, ``policies=[...]``)
            **fields: TokenRequest fields, used when ``token_request`` is None

        Returns:
            AuthResult for the new token
        """
        request = _normalize_request(token_request, fields)
        path = f"{TOKEN_MOUNT}/create"
        if request.role:
            path = f"{path}/{path_segment(request.role)}"
        envelope = self._client.request("POST", path, request.to_body())
        result = AuthResult.from_envelope(envelope)
        logger.info(f"Created token (accessor {result.accessor or 'unknown'})")
        return result

    def create_orphan(self, token_request: Optional[TokenRequest] = None, **fields: Any) -> AuthResult:
        """Create a token with no parent."""
        request = _normalize_request(token_request, fields)
        envelope = self._client.request("POST", f"{TOKEN_MOUNT}/create-orphan", request.to_body())
        result = AuthResult.from_envelope(envelope)
        logger.info(f"Created orphan token (accessor {result.accessor or 'unknown'})")
        return result

    # Renewal

    def renew_self(self, increment: Optional[int] = None) -> AuthResult:
        """
        Renew the configured token.

        When ``increment`` is given, the granted lease duration must equal it.
        A shorter lease is accepted only when Vault explains it with a warning
        (for instance a max TTL cap); otherwise ``EnvelopeShapeError`` is raised.
        """
        envelope = self._client.request(
            "POST", f"{TOKEN_MOUNT}/renew-self", _increment_body(increment)
        )
        return _check_increment(AuthResult.from_envelope(envelope), increment, "renew-self")

    def renew(self, token: str, increment: Optional[int] = None) -> AuthResult:
        """Renew another token."""
        envelope = self._client.request(
            "POST", f"{TOKEN_MOUNT}/renew", _increment_body(increment, token=token)
        )
        return _check_increment(AuthResult.from_envelope(envelope), increment, "renew")

    def renew_accessor(self, accessor: str, increment: Optional[int] = None) -> AuthResult:
        """Renew a token by accessor. The result carries no client token."""
        envelope = self._client.request(
            "POST", f"{TOKEN_MOUNT}/renew-accessor", _increment_body(increment, accessor=accessor)
        )
        result = AuthResult.from_envelope(envelope, require_token=False)
        return _check_increment(result, increment, "renew-accessor")

    # Lookup

    def lookup_self(self) -> LookupResult:
        """Look up the configured token."""
        envelope = self._client.request("GET", f"{TOKEN_MOUNT}/lookup-self")
        return LookupResult.from_envelope(envelope)

    def lookup(self, token: str) -> LookupResult:
        """Look up another token."""
        envelope = self._client.request("POST", f"{TOKEN_MOUNT}/lookup", {"token": token})
        return LookupResult.from_envelope(envelope)

    def lookup_accessor(self, accessor: str) -> LookupResult:
        """Look up a token by accessor. The result's ``id`` is empty."""
        envelope = self._client.request(
            "POST", f"{TOKEN_MOUNT}/lookup-accessor", {"accessor": accessor}
        )
        return LookupResult.from_envelope(envelope)

    # Revocation

    def revoke_self(self) -> None:
        """Revoke the configured token and all its children."""
        self._client.request("POST", f"{TOKEN_MOUNT}/revoke-self")
        logger.info("Revoked own token")

    def revoke(self, token: str) -> None:
        """Revoke a token and all its children."""
        self._client.request("POST", f"{TOKEN_MOUNT}/revoke", {"token": token})

    def revoke_accessor(self, accessor: str) -> None:
        """Revoke a token by accessor."""
        self._client.request("POST", f"{TOKEN_MOUNT}/revoke-accessor", {"accessor": accessor})
        logger.info(f"Revoked token with accessor {accessor}")

    def revoke_orphan(self, token: str) -> None:
        """Revoke a token, turning its children into orphans."""
        self._client.request("POST", f"{TOKEN_MOUNT}/revoke-orphan", {"token": token})
