"""
Configuration classes for the Vault SDK.
"""

import os
import ssl
from pathlib import Path
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlsplit

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError

_FALSE_VALUES = {"0", "false", "no", "off"}


class _FrozenConfig(BaseModel):
    """Immutable model that reports validation failures as ConfigurationError."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or type(self).__name__}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid {type(self).__name__}: {details}") from e


def _read_pem(path: str, what: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise ValueError(f"cannot read {what} '{path}': {e.strerror}")


def _check_certificates(data: bytes, what: str) -> None:
    try:
        x509.load_pem_x509_certificates(data)
    except ValueError as e:
        raise ValueError(f"{what} is not valid PEM certificate material: {e}")


class SslConfig(_FrozenConfig):
    """TLS trust and client-certificate settings."""

    verify: bool = Field(True, description="Whether to verify the server certificate")
    ca_cert_file: Optional[str] = Field(None, description="Path to a PEM CA bundle")
    ca_cert_pem: Optional[str] = Field(None, description="PEM CA bundle as text")
    client_cert_file: Optional[str] = Field(None, description="Path to a PEM client certificate")
    client_key_file: Optional[str] = Field(None, description="Path to the PEM client private key")
    client_key_password: Optional[str] = Field(
        None, repr=False, description="Password for the client private key"
    )

    @model_validator(mode="after")
    def _load_material(self) -> "SslConfig":
        """Load and validate all PEM material up front."""
        if self.ca_cert_file:
            _check_certificates(_read_pem(self.ca_cert_file, "CA file"), "CA file")
        if self.ca_cert_pem:
            _check_certificates(self.ca_cert_pem.encode("utf-8"), "CA PEM")

        if bool(self.client_cert_file) != bool(self.client_key_file):
            raise ValueError("client_cert_file and client_key_file must be given together")
        if self.client_cert_file:
            _check_certificates(
                _read_pem(self.client_cert_file, "client certificate"), "client certificate"
            )
            password = self.client_key_password.encode() if self.client_key_password else None
            try:
                serialization.load_pem_private_key(
                    _read_pem(self.client_key_file, "client key"), password=password
                )
            except (ValueError, TypeError) as e:
                raise ValueError(f"client key could not be loaded: {e}")
        return self

    @property
    def has_client_certificate(self) -> bool:
        return self.client_cert_file is not None

    def build_verify(self) -> Union[bool, ssl.SSLContext]:
        """Return the value to hand to httpx as ``verify``."""
        custom_trust = self.ca_cert_file or self.ca_cert_pem
        if not custom_trust and not self.has_client_certificate:
            return self.verify

        context = ssl.create_default_context(cafile=self.ca_cert_file, cadata=self.ca_cert_pem)
        if not self.verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        if self.has_client_certificate:
            context.load_cert_chain(
                self.client_cert_file,
                self.client_key_file,
                password=self.client_key_password,
            )
        return context


class VaultConfig(_FrozenConfig):
    """Configuration for a Vault client. Immutable once built."""

    address: str = Field(..., description="Base URL of the Vault server")
    token: Optional[str] = Field(None, repr=False, description="Token sent as X-Vault-Token")
    namespace: Optional[str] = Field(None, description="Enterprise namespace (X-Vault-Namespace)")
    ssl_config: SslConfig = Field(default_factory=SslConfig, description="TLS settings")
    open_timeout: float = Field(5.0, gt=0, description="Connect timeout in seconds")
    read_timeout: float = Field(30.0, gt=0, description="Read timeout in seconds")
    max_retries: int = Field(0, ge=0, le=10, description="Retries after the first attempt")
    retry_interval_milliseconds: int = Field(
        1000, ge=0, description="Pause between attempts in milliseconds"
    )
    log_requests: bool = Field(False, description="Whether to log HTTP requests at DEBUG")

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"'{value}' is not an http(s) URL")
        return value

    @field_validator("token", "namespace")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> "VaultConfig":
        """
        Build a configuration from VAULT_* variables.

        Args:
            environ: Mapping to read from; ``os.environ`` when omitted
            **overrides: Explicit field values, taking precedence over the environment

        Returns:
            VaultConfig instance
        """
        env = os.environ if environ is None else environ
        values = {}

        simple = {
            "address": "VAULT_ADDR",
            "token": "VAULT_TOKEN",
            "namespace": "VAULT_NAMESPACE",
            "open_timeout": "VAULT_OPEN_TIMEOUT",
            "read_timeout": "VAULT_READ_TIMEOUT",
            "max_retries": "VAULT_MAX_RETRIES",
            "retry_interval_milliseconds": "VAULT_RETRY_INTERVAL_MILLISECONDS",
        }
        for field, variable in simple.items():
            if env.get(variable):
                values[field] = env[variable]

        if "ssl_config" not in overrides:
            ssl_values = {}
            if env.get("VAULT_SSL_VERIFY"):
                ssl_values["verify"] = env["VAULT_SSL_VERIFY"].strip().lower() not in _FALSE_VALUES
            if env.get("VAULT_CACERT"):
                ssl_values["ca_cert_file"] = env["VAULT_CACERT"]
            if ssl_values:
                values["ssl_config"] = SslConfig(**ssl_values)

        values.update(overrides)
        if "address" not in values:
            raise ConfigurationError("VAULT_ADDR is not set and no address was given")
        return cls(**values)
