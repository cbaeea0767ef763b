"""
Data models for the Vault SDK.
"""

import json
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .envelope import ResponseEnvelope
from .exceptions import AuthError, EnvelopeShapeError


class AuthResult(BaseModel):
    """Token issued by a login, create or renew call."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    client_token: str = Field(..., repr=False, description="Issued token (secret)")
    accessor: str = Field("", description="Token accessor")
    policies: List[str] = Field(default_factory=list, description="Attached policies")
    token_policies: List[str] = Field(default_factory=list, description="Token-only policies")
    metadata: Dict[str, str] = Field(default_factory=dict, description="Token metadata")
    lease_duration: int = Field(0, ge=0, description="Lease duration in seconds")
    renewable: bool = Field(False, description="Whether the token is renewable")
    entity_id: str = Field("", description="Identity entity id")
    warnings: List[str] = Field(default_factory=list, description="Server warnings")
    envelope: ResponseEnvelope = Field(
        default_factory=ResponseEnvelope.empty, repr=False, exclude=True
    )

    @classmethod
    def from_envelope(cls, envelope: ResponseEnvelope, require_token: bool = True) -> "AuthResult":
        """
        Build a result from a response carrying an ``auth`` section.

        Raises:
            EnvelopeShapeError: If the ``auth`` section is missing or malformed
            AuthError: If ``require_token`` is set and no client token was issued
        """
        section = envelope.require_auth()
        if require_token and not section.client_token.strip():
            raise AuthError("Vault returned no client token")
        return cls(
            client_token=section.client_token,
            accessor=section.accessor,
            policies=section.policies,
            token_policies=section.token_policies,
            metadata=section.metadata,
            lease_duration=section.lease_duration,
            renewable=section.renewable,
            entity_id=section.entity_id,
            warnings=envelope.warnings,
            envelope=envelope,
        )


class LookupResult(BaseModel):
    """Properties of a token as reported by a lookup call."""
    model_config = ConfigDict(
        frozen=True, arbitrary_types_allowed=True, populate_by_name=True, extra="ignore"
    )

    id: str = Field("", repr=False, description="The token itself (secret)")
    accessor: str = Field("", description="Token accessor")
    creation_ttl: int = Field(0, ge=0, description="TTL set at issuance, in seconds")
    ttl: int = Field(0, ge=0, description="Seconds remaining")
    explicit_max_ttl: int = Field(0, ge=0, description="Hard TTL ceiling, in seconds")
    policies: List[str] = Field(default_factory=list, description="Attached policies")
    metadata: Dict[str, str] = Field(
        default_factory=dict, validation_alias="meta", description="Token metadata"
    )
    display_name: str = Field("", description="Display name")
    num_uses: int = Field(0, ge=0, description="Remaining uses (0 = unlimited)")
    orphan: bool = Field(False, description="Whether the token has no parent")
    renewable: bool = Field(False, description="Whether the token is renewable")
    path: str = Field("", description="Auth path that created the token")
    entity_id: str = Field("", description="Identity entity id")
    token_type: str = Field("", validation_alias="type", description="service or batch")
    issue_time: Optional[str] = Field(None, description="Issue timestamp")
    expire_time: Optional[str] = Field(None, description="Expiry timestamp")
    envelope: ResponseEnvelope = Field(
        default_factory=ResponseEnvelope.empty, repr=False, exclude=True
    )

    @field_validator("policies", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_dict(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("id", "accessor", "display_name", "path", "entity_id", "token_type", mode="before")
    @classmethod
    def _null_string(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_envelope(cls, envelope: ResponseEnvelope) -> "LookupResult":
        data = dict(envelope.require_data())
        data["envelope"] = envelope
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise EnvelopeShapeError(
                f"Token lookup data is malformed: {e.error_count()} error(s)"
            ) from e


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


class SecretResult(BaseModel):
    """Key/value data read from or written to a secret path."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data: Dict[str, str] = Field(default_factory=dict, repr=False, description="Secret data")
    lease_id: str = Field("", description="Lease id for dynamic secrets")
    lease_duration: int = Field(0, ge=0, description="Lease duration in seconds")
    renewable: bool = Field(False, description="Whether the lease is renewable")
    warnings: List[str] = Field(default_factory=list, description="Server warnings")
    envelope: ResponseEnvelope = Field(
        default_factory=ResponseEnvelope.empty, repr=False, exclude=True
    )

    @classmethod
    def from_envelope(cls, envelope: ResponseEnvelope) -> "SecretResult":
        return cls(
            data={key: _stringify(value) for key, value in envelope.data.items()},
            lease_id=envelope.lease_id,
            lease_duration=envelope.lease_duration,
            renewable=envelope.renewable,
            warnings=envelope.warnings,
            envelope=envelope,
        )


class TokenRequest(BaseModel):
    """
    Optional parameters for token creation.

    Every field defaults to None, and None fields are left out of the request
    body entirely. ``role`` selects ``auth/token/create/<role>`` and is never
    sent in the body.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: Optional[str] = Field(None, repr=False, description="Explicit token id (root only)")
    role: Optional[str] = Field(None, description="Token role to create against")
    policies: Optional[List[str]] = Field(None, description="Policies to attach")
    meta: Optional[Dict[str, str]] = Field(None, description="Metadata to attach")
    no_parent: Optional[bool] = Field(None, description="Create an orphan token")
    no_default_policy: Optional[bool] = Field(None, description="Leave out the default policy")
    renewable: Optional[bool] = Field(None, description="Whether the token is renewable")
    ttl: Optional[Union[int, str]] = Field(None, description="TTL, seconds or duration string")
    explicit_max_ttl: Optional[Union[int, str]] = Field(None, description="Hard TTL ceiling")
    period: Optional[Union[int, str]] = Field(None, description="Periodic renewal interval")
    display_name: Optional[str] = Field(None, description="Display name")
    num_uses: Optional[int] = Field(None, ge=0, description="Maximum number of uses")
    type: Optional[str] = Field(None, description="service or batch")
    entity_alias: Optional[str] = Field(None, description="Entity alias to associate")

    def to_body(self) -> Dict[str, Any]:
        """Wire body with absent fields omitted."""
        return self.model_dump(exclude_none=True, exclude={"role"})

    def _with(self, **changes: Any) -> "TokenRequest":
        return self.model_validate({**self.model_dump(), **changes})

    def with_id(self, value: str) -> "TokenRequest":
        return self._with(id=value)

    def with_role(self, value: str) -> "TokenRequest":
        return self._with(role=value)

    def with_policies(self, value: List[str]) -> "TokenRequest":
        return self._with(policies=value)

    def with_meta(self, value: Dict[str, str]) -> "TokenRequest":
        return self._with(meta=value)

    def with_no_parent(self, value: bool = True) -> "TokenRequest":
        return self._with(no_parent=value)

    def with_no_default_policy(self, value: bool = True) -> "TokenRequest":
        return self._with(no_default_policy=value)

    def with_renewable(self, value: bool = True) -> "TokenRequest":
        return self._with(renewable=value)

    def with_ttl(self, value: Union[int, str]) -> "TokenRequest":
        return self._with(ttl=value)

    def with_explicit_max_ttl(self, value: Union[int, str]) -> "TokenRequest":
        return self._with(explicit_max_ttl=value)

    def with_period(self, value: Union[int, str]) -> "TokenRequest":
        return self._with(period=value)

    def with_display_name(self, value: str) -> "TokenRequest":
        return self._with(display_name=value)

    def with_num_uses(self, value: int) -> "TokenRequest":
        return self._with(num_uses=value)

    def with_type(self, value: str) -> "TokenRequest":
        return self._with(type=value)

    def with_entity_alias(self, value: str) -> "TokenRequest":
        return self._with(entity_alias=value)
