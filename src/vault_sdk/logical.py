"""
Generic read/write access to secret paths.
"""

import logging
from typing import TYPE_CHECKING, Any, List, Mapping, Optional

from .exceptions import NotFoundError
from .models import SecretResult

if TYPE_CHECKING:
    from .client import VaultClient

logger = logging.getLogger(__name__)


def _normalize_path(path: str) -> str:
    path = path.strip().strip("/")
    if not path:
        raise ValueError("Secret path must not be empty")
    return path


class SecretOperations:
    """Read, write, list and delete secrets at arbitrary paths."""

    def __init__(self, client: "VaultClient"):
        self._client = client

    def read(self, path: str) -> SecretResult:
        """
        Read a secret.

        Raises:
            NotFoundError: Nothing is stored at ``path``
        """
        envelope = self._client.request("GET", _normalize_path(path))
        return SecretResult.from_envelope(envelope)

    def write(self, path: str, data: Optional[Mapping[str, Any]] = None) -> SecretResult:
        """
        Write a secret.

        Args:
            path: Secret path, e.g. ``secret/app/db``
            data: Key/value pairs to store

        Returns:
            SecretResult; empty unless the backend answers with data
        """
        path = _normalize_path(path)
        envelope = self._client.request("POST", path, dict(data or {}))
        logger.debug(f"Wrote {len(data or {})} key(s) to {path}")
        return SecretResult.from_envelope(envelope)

    def list(self, path: str) -> List[str]:
        """List the keys below ``path``; an empty list when there are none."""
        try:
            envelope = self._client.request("GET", _normalize_path(path), params={"list": "true"})
        except NotFoundError:
            return []
        return [str(key) for key in envelope.data.get("keys") or []]

    def delete(self, path: str) -> None:
        """Delete a secret."""
        path = _normalize_path(path)
        self._client.request("DELETE", path)
        logger.debug(f"Deleted {path}")
