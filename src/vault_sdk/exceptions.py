"""
Exception classes for the Vault SDK.
"""

from typing import List, Optional


class VaultError(Exception):
    """Base exception for the Vault SDK."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[str]] = None,
        attempts: int = 1,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = list(errors or [])
        self.attempts = attempts

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.attempts > 1:
            parts.append(f"attempts={self.attempts}")
        if self.errors:
            parts.append("errors=" + "; ".join(self.errors))
        return " | ".join(parts)


class NetworkError(VaultError):
    """Connection-level failure (refused, timed out, TLS handshake). Retryable."""
    pass


class TransportError(VaultError):
    """Malformed HTTP exchange (bad URL, aborted stream, unreadable error body)."""
    pass


class ParseError(VaultError):
    """Response body is not a JSON object."""
    pass


class EnvelopeShapeError(ParseError):
    """Response is JSON but lacks a section the operation requires."""
    pass


class AuthError(VaultError):
    """The server rejected the request (credentials, permissions, bad input)."""
    pass


class NotFoundError(VaultError):
    """Resource not found (HTTP 404)."""
    pass


class ConfigurationError(VaultError, ValueError):
    """Configuration error."""
    pass
