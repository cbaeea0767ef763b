"""
Authentication backends for the Vault SDK.

Each supported backend is a small request model that knows its login path
and request body. ``AuthEngine.login`` accepts any of them; the
``login_by_*`` helpers build the model for you.
"""

import logging
from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Optional, Union

import jwt
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import AuthError, ConfigurationError
from .models import AuthResult, LookupResult, TokenRequest
from .transport import path_segment

if TYPE_CHECKING:
    from .client import VaultClient

logger = logging.getLogger(__name__)

KUBERNETES_TOKEN_PATH = "/var/run/secrets/kubernetes.io/serviceaccount/token"


def _check_jwt(token: str) -> None:
    """
    Reject malformed or expired JWTs before they reach the server.

    The signature is not verified here; that is Vault's job.
    """
    try:
        jwt.decode(token, options={"verify_signature": False, "verify_exp": True})
    except jwt.ExpiredSignatureError as e:
        raise AuthError("JWT has expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthError(f"JWT is malformed: {e}") from e


class _LoginRequest(BaseModel):
    """Base class for login requests."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    backend: ClassVar[str]

    @abstractmethod
    def endpoint(self) -> str:
        """Login path below /v1/."""

    @abstractmethod
    def payload(self) -> Dict[str, Any]:
        """JSON body of the login request."""


class AppIdLogin(_LoginRequest):
    """App-ID login. ``path`` is the full login path below ``auth/``."""

    backend: ClassVar[str] = "app-id"

    path: str = Field("app-id/login", description="Login path, e.g. app-id/login")
    app_id: str = Field(..., description="Application id")
    user_id: str = Field(..., repr=False, description="User id")

    def endpoint(self) -> str:
        return f"auth/{self.path.strip('/')}"

    def payload(self) -> Dict[str, Any]:
        return {"app_id": self.app_id, "user_id": self.user_id}


class UserPassLogin(_LoginRequest):
    """Username/password login."""

    backend: ClassVar[str] = "userpass"

    username: str
    password: str = Field(..., repr=False)
    mount: str = "userpass"

    def endpoint(self) -> str:
        return f"auth/{self.mount.strip('/')}/login/{path_segment(self.username)}"

    def payload(self) -> Dict[str, Any]:
        return {"password": self.password}


class LdapLogin(UserPassLogin):
    """LDAP login. Same wire shape as userpass on a different mount."""

    backend: ClassVar[str] = "ldap"

    mount: str = "ldap"


class AppRoleLogin(_LoginRequest):
    """AppRole login. ``path`` is the mount point, e.g. ``approle``."""

    backend: ClassVar[str] = "approle"

    path: str = "approle"
    role_id: str
    secret_id: Optional[str] = Field(None, repr=False)

    def endpoint(self) -> str:
        return f"auth/{self.path.strip('/')}/login"

    def payload(self) -> Dict[str, Any]:
        body = {"role_id": self.role_id}
        if self.secret_id is not None:
            body["secret_id"] = self.secret_id
        return body


class GithubLogin(_LoginRequest):
    """GitHub personal access token login."""

    backend: ClassVar[str] = "github"

    github_token: str = Field(..., repr=False)
    mount: str = "github"

    def endpoint(self) -> str:
        return f"auth/{self.mount.strip('/')}/login"

    def payload(self) -> Dict[str, Any]:
        return {"token": self.github_token}


class JwtLogin(_LoginRequest):
    """JWT/OIDC role login."""

    backend: ClassVar[str] = "jwt"

    role: str
    jwt: str = Field(..., repr=False)
    mount: str = "jwt"

    def endpoint(self) -> str:
        return f"auth/{self.mount.strip('/')}/login"

    def payload(self) -> Dict[str, Any]:
        _check_jwt(self.jwt)
        return {"role": self.role, "jwt": self.jwt}


class KubernetesLogin(JwtLogin):
    """Kubernetes service-account login."""

    backend: ClassVar[str] = "kubernetes"

    mount: str = "kubernetes"


class CertLogin(_LoginRequest):
    """TLS client-certificate login; the certificate comes from ``SslConfig``."""

    backend: ClassVar[str] = "cert"

    name: Optional[str] = Field(None, description="Certificate role to match against")
    mount: str = "cert"

    def endpoint(self) -> str:
        return f"auth/{self.mount.strip('/')}/login"

    def payload(self) -> Dict[str, Any]:
        return {"name": self.name} if self.name else {}


LoginRequest = Union[
    AppIdLogin,
    UserPassLogin,
    LdapLogin,
    AppRoleLogin,
    GithubLogin,
    JwtLogin,
    KubernetesLogin,
    CertLogin,
]


class AuthEngine:
    """Logins against the supported auth backends, plus the caller's own token calls."""

    def __init__(self, client: "VaultClient"):
        self._client = client

    def login(self, request: LoginRequest) -> AuthResult:
        """
        Authenticate with any supported backend.

        Login calls never send the configured token.

        Args:
            request: One of the login request models

        Returns:
            AuthResult holding the issued token

        Raises:
            AuthError: Credentials rejected, or no token issued
            EnvelopeShapeError: Successful response without an ``auth`` section
        """
        if isinstance(request, CertLogin) and not self._client.config.ssl_config.has_client_certificate:
            raise ConfigurationError("Certificate login needs ssl_config.client_cert_file")

        envelope = self._client.request(
            "POST", request.endpoint(), request.payload(), authenticated=False
        )
        result = AuthResult.from_envelope(envelope)
        logger.info(
            f"Logged in via {request.backend} (accessor {result.accessor or 'unknown'}, "
            f"policies {result.policies})"
        )
        return result

    def login_by_app_id(self, path: str, app_id: str, user_id: str) -> AuthResult:
        """
        Log in with the App-ID backend.

        Args:
            path: Login path below ``auth/``, e.g. ``app-id/login``
            app_id: Application id
            user_id: User id bound to the application

        Returns:
            AuthResult holding the issued token
        """
        return self.login(AppIdLogin(path=path, app_id=app_id, user_id=user_id))

    def login_by_userpass(self, username: str, password: str, mount: str = "userpass") -> AuthResult:
        """
        Log in with a username and password.

        Args:
            username: User name; sent as one escaped path segment
            password: Password
            mount: Auth mount point

        Returns:
            AuthResult holding the issued token
        """
        return self.login(UserPassLogin(username=username, password=password, mount=mount))

    def login_by_ldap(self, username: str, password: str, mount: str = "ldap") -> AuthResult:
        """
        Log in against the LDAP backend.

        Args:
            username: Directory user name
            password: Directory password
            mount: Auth mount point

        Returns:
            AuthResult holding the issued token
        """
        return self.login(LdapLogin(username=username, password=password, mount=mount))

    def login_by_app_role(
        self, path: str, role_id: str, secret_id: Optional[str] = None
    ) -> AuthResult:
        """
        Log in with an AppRole.

        Args:
            path: AppRole mount point, e.g. ``approle``
            role_id: Role id
            secret_id: Secret id; omit for roles with ``bind_secret_id=false``

        Returns:
            AuthResult holding the issued token
        """
        return self.login(AppRoleLogin(path=path, role_id=role_id, secret_id=secret_id))

    def login_by_github(self, github_token: str, mount: str = "github") -> AuthResult:
        """
        Log in with a GitHub personal access token.

        Args:
            github_token: GitHub token
            mount: Auth mount point

        Returns:
            AuthResult holding the issued token
        """
        return self.login(GithubLogin(github_token=github_token, mount=mount))

    def login_by_jwt(self, role: str, jwt: str, mount: str = "jwt") -> AuthResult:
        """
        Log in with a signed JWT.

        Args:
            role: Vault role to log in as
            jwt: Encoded JWT; rejected locally when malformed or expired
            mount: Auth mount point

        Returns:
            AuthResult holding the issued token
        """
        return self.login(JwtLogin(role=role, jwt=jwt, mount=mount))

    def login_by_kubernetes(
        self,
        role: str,
        jwt: Optional[str] = None,
        mount: str = "kubernetes",
        token_path: str = KUBERNETES_TOKEN_PATH,
    ) -> AuthResult:
        """
        Log in with a Kubernetes service-account token.

        Args:
            role: Vault role bound to the service account
            jwt: Service-account JWT; read from ``token_path`` when omitted
            mount: Auth mount point
            token_path: File holding the projected service-account token
        """
        if jwt is None:
            try:
                jwt = Path(token_path).read_text(encoding="utf-8").strip()
            except OSError as e:
                raise ConfigurationError(
                    f"Cannot read service-account token from {token_path}: {e.strerror}"
                ) from e
        return self.login(KubernetesLogin(role=role, jwt=jwt, mount=mount))

    def login_by_cert(self, name: Optional[str] = None, mount: str = "cert") -> AuthResult:
        """
        Log in with the TLS client certificate from ``ssl_config``.

        Args:
            name: Certificate role to match; any role when omitted
            mount: Auth mount point

        Returns:
            AuthResult holding the issued token

        Raises:
            ConfigurationError: No client certificate is configured
        """
        return self.login(CertLogin(name=name, mount=mount))

    # The caller's own token

    def create_token(self, token_request: Optional[TokenRequest] = None, **fields: Any) -> AuthResult:
        """Create a child token; see ``TokenOperations.create``."""
        return self._client.tokens.create(token_request, **fields)

    def renew_self(self, increment: Optional[int] = None) -> AuthResult:
        """Renew the configured token; see ``TokenOperations.renew_self``."""
        return self._client.tokens.renew_self(increment)

    def lookup_self(self) -> LookupResult:
        """Look up the configured token."""
        return self._client.tokens.lookup_self()
