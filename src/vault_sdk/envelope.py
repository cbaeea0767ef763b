"""
Decoding of the uniform Vault response envelope.

Every Vault endpoint answers with the same top-level JSON object::

    {
        "request_id": "...",
        "lease_id": "",
        "lease_duration": 0,
        "renewable": false,
        "data": {...} | null,
        "auth": {...} | null,
        "warnings": [...] | null
    }

``ResponseEnvelope`` exposes those fields with typed defaults and keeps the
full decoded body in ``raw`` for fields this SDK does not model.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import EnvelopeShapeError, ParseError


class AuthSection(BaseModel):
    """The ``auth`` object returned by login, create and renew calls."""
    model_config = ConfigDict(extra="ignore")

    client_token: str = Field("", repr=False, description="Issued token (secret)")
    accessor: str = Field("", description="Token accessor")
    policies: List[str] = Field(default_factory=list, description="Attached policies")
    token_policies: List[str] = Field(default_factory=list, description="Token-only policies")
    metadata: Dict[str, str] = Field(default_factory=dict, description="Token metadata")
    lease_duration: int = Field(0, ge=0, description="Lease duration in seconds")
    renewable: bool = Field(False, description="Whether the token is renewable")
    entity_id: str = Field("", description="Identity entity id")

    @field_validator("policies", "token_policies", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("client_token", "accessor", "entity_id", mode="before")
    @classmethod
    def _null_string(cls, value: Any) -> Any:
        return "" if value is None else value


def _as_int(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise EnvelopeShapeError(f"'{name}' is not a number")
    return int(value)


class ResponseEnvelope:
    """Typed view over one decoded Vault response body."""

    def __init__(self, raw: Dict[str, Any]):
        self.raw = raw

    @classmethod
    def parse(cls, body: bytes) -> "ResponseEnvelope":
        """
        Decode a response body.

        Raises:
            ParseError: If the body is not UTF-8 JSON or not a JSON object
        """
        try:
            decoded = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ParseError(f"Response body is not valid JSON: {e}") from e
        if not isinstance(decoded, dict):
            raise ParseError(
                f"Response body is a JSON {type(decoded).__name__}, expected an object"
            )
        return cls(decoded)

    @classmethod
    def empty(cls) -> "ResponseEnvelope":
        """Envelope for bodiless (204) responses."""
        return cls({})

    def __repr__(self) -> str:
        return f"ResponseEnvelope(keys={sorted(self.raw)})"

    # Top-level fields

    @property
    def request_id(self) -> str:
        return self.raw.get("request_id") or ""

    @property
    def lease_id(self) -> str:
        return self.raw.get("lease_id") or ""

    @property
    def lease_duration(self) -> int:
        return _as_int(self.raw.get("lease_duration"), "lease_duration")

    @property
    def renewable(self) -> bool:
        return bool(self.raw.get("renewable", False))

    @property
    def warnings(self) -> List[str]:
        return [str(w) for w in self.raw.get("warnings") or []]

    @property
    def errors(self) -> List[str]:
        return [str(e) for e in self.raw.get("errors") or []]

    @property
    def has_errors_field(self) -> bool:
        return isinstance(self.raw.get("errors"), list)

    @property
    def data(self) -> Dict[str, Any]:
        """The ``data`` object, or an empty dict when absent."""
        section = self.raw.get("data")
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise EnvelopeShapeError("'data' is not an object")
        return section

    # Auth section

    @property
    def auth(self) -> Optional[AuthSection]:
        section = self.raw.get("auth")
        if section is None:
            return None
        if not isinstance(section, dict):
            raise EnvelopeShapeError("'auth' is not an object")
        try:
            return AuthSection.model_validate(section)
        except ValidationError as e:
            raise EnvelopeShapeError(f"'auth' section is malformed: {e.error_count()} error(s)") from e

    @property
    def auth_client_token(self) -> str:
        section = self.auth
        return section.client_token if section else ""

    @property
    def auth_lease_duration(self) -> int:
        section = self.auth
        return section.lease_duration if section else 0

    @property
    def auth_renewable(self) -> bool:
        section = self.auth
        return section.renewable if section else False

    @property
    def auth_policies(self) -> List[str]:
        section = self.auth
        return list(section.policies) if section else []

    def require_auth(self) -> AuthSection:
        """Return the auth section, failing if it is missing."""
        section = self.auth
        if section is None:
            raise EnvelopeShapeError("Response has no 'auth' section")
        return section

    def require_data(self) -> Dict[str, Any]:
        """Return the data section, failing if it is missing."""
        if self.raw.get("data") is None:
            raise EnvelopeShapeError("Response has no 'data' section")
        return self.data
