"""
Vault Python SDK

Client library for the HashiCorp Vault HTTP API.
Provides pluggable authentication, token lifecycle management and
secret access with uniform retry and error handling.
"""

from .client import VaultClient
from .auth import (
    AuthEngine,
    AppIdLogin,
    AppRoleLogin,
    CertLogin,
    GithubLogin,
    JwtLogin,
    KubernetesLogin,
    LdapLogin,
    LoginRequest,
    UserPassLogin,
)
from .config import SslConfig, VaultConfig
from .envelope import ResponseEnvelope
from .exceptions import (
    VaultError,
    NetworkError,
    TransportError,
    ParseError,
    EnvelopeShapeError,
    AuthError,
    NotFoundError,
    ConfigurationError,
)
from .logical import SecretOperations
from .models import AuthResult, LookupResult, SecretResult, TokenRequest
from .retry import RetryPolicy
from .tokens import TokenOperations
from .transport import RawResponse, Transport

__version__ = "1.0.0"

__all__ = [
    "VaultClient",
    "AuthEngine",
    "AppIdLogin",
    "AppRoleLogin",
    "CertLogin",
    "GithubLogin",
    "JwtLogin",
    "KubernetesLogin",
    "LdapLogin",
    "LoginRequest",
    "UserPassLogin",
    "SslConfig",
    "VaultConfig",
    "ResponseEnvelope",
    "VaultError",
    "NetworkError",
    "TransportError",
    "ParseError",
    "EnvelopeShapeError",
    "AuthError",
    "NotFoundError",
    "ConfigurationError",
    "SecretOperations",
    "AuthResult",
    "LookupResult",
    "SecretResult",
    "TokenRequest",
    "RetryPolicy",
    "TokenOperations",
    "RawResponse",
    "Transport",
]
