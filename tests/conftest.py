"""
Shared fixtures: an in-memory Vault served through httpx.MockTransport.
"""

import datetime
import json
import re
import uuid
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from vault_sdk import VaultClient, VaultConfig

ADDRESS = "http://vault.test:8200"
ROOT_TOKEN = "root-token"

_DURATION = re.compile(r"^(\d+)([smh]?)$")


def parse_ttl(value: Any) -> int:
    if isinstance(value, int):
        return value
    number, unit = _DURATION.match(str(value)).groups()
    return int(number) * {"": 1, "s": 1, "m": 60, "h": 3600}[unit]


def vault_json(status: int = 200, **body: Any) -> httpx.Response:
    return httpx.Response(status, json=body)


def vault_errors(status: int, *errors: str) -> httpx.Response:
    return httpx.Response(status, json={"errors": list(errors)})


class FakeVault:
    """Just enough of the Vault API to exercise the SDK end to end."""

    def __init__(self):
        self.tokens: Dict[str, Dict[str, Any]] = {
            ROOT_TOKEN: {"creation_ttl": 0, "ttl": 0, "policies": ["root"], "accessor": "acc-root"}
        }
        self.secrets: Dict[str, Dict[str, Any]] = {}
        self.roles = {"role-123": "secret-456"}
        self.users = {"alice": "wonderland"}
        self.app_ids = {("app-1", "user-1")}
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path[len("/v1/"):]
        body = json.loads(request.content) if request.content else {}
        token = request.headers.get("X-Vault-Token")

        if path.startswith("auth/"):
            return self._auth(request.method, path[len("auth/"):], body, token)
        if token not in self.tokens:
            return vault_errors(403, "permission denied")
        return self._logical(request, path, body)

    def _issue(self, ttl: int, policies: Optional[List[str]] = None, meta=None) -> httpx.Response:
        token = f"s.{uuid.uuid4().hex}"
        accessor = f"acc-{uuid.uuid4().hex[:8]}"
        self.tokens[token] = {
            "creation_ttl": ttl,
            "ttl": ttl,
            "policies": policies or ["default"],
            "accessor": accessor,
            "meta": meta,
        }
        return vault_json(
            auth={
                "client_token": token,
                "accessor": accessor,
                "policies": policies or ["default"],
                "metadata": meta,
                "lease_duration": ttl,
                "renewable": True,
            }
        )

    def _auth(self, method: str, path: str, body: Dict[str, Any], token: Optional[str]) -> httpx.Response:
        if path == "approle/login":
            if self.roles.get(body.get("role_id")) != body.get("secret_id"):
                return vault_errors(400, "invalid secret id")
            return self._issue(1200)
        if path.startswith("userpass/login/"):
            if self.users.get(path.rsplit("/", 1)[1]) != body.get("password"):
                return vault_errors(400, "invalid username or password")
            return self._issue(2764800)
        if path == "app-id/login":
            if (body.get("app_id"), body.get("user_id")) not in self.app_ids:
                return vault_errors(400, "invalid user ID or app ID")
            return self._issue(2764800)

        if token not in self.tokens:
            return vault_errors(403, "permission denied")
        if path == "token/create":
            if "root" not in self.tokens[token]["policies"]:
                return vault_errors(403, "permission denied")
            return self._issue(parse_ttl(body.get("ttl", 2764800)), body.get("policies"), body.get("meta"))
        if path == "token/renew-self":
            record = self.tokens[token]
            granted = body.get("increment", record["creation_ttl"])
            record["ttl"] = granted
            return vault_json(
                auth={
                    "client_token": token,
                    "accessor": record["accessor"],
                    "policies": record["policies"],
                    "lease_duration": granted,
                    "renewable": True,
                }
            )
        if path == "token/lookup-self" and method == "GET":
            record = self.tokens[token]
            response = vault_json(
                data={
                    "id": token,
                    "accessor": record["accessor"],
                    "creation_ttl": record["creation_ttl"],
                    "ttl": record["ttl"],
                    "policies": record["policies"],
                    "meta": record.get("meta"),
                    "display_name": "token",
                    "num_uses": 0,
                    "orphan": False,
                    "path": "auth/token/create",
                    "type": "service",
                }
            )
            record["ttl"] = max(record["ttl"] - 1, 0)
            return response
        if path == "token/revoke-self":
            del self.tokens[token]
            return httpx.Response(204)
        return vault_errors(404)

    def _logical(self, request: httpx.Request, path: str, body: Dict[str, Any]) -> httpx.Response:
        if request.method == "GET" and request.url.params.get("list") == "true":
            prefix = path.rstrip("/") + "/"
            keys = sorted({p[len(prefix):].split("/")[0] for p in self.secrets if p.startswith(prefix)})
            if not keys:
                return vault_errors(404)
            return vault_json(data={"keys": keys})
        if request.method == "GET":
            if path not in self.secrets:
                return vault_errors(404)
            return vault_json(data=self.secrets[path], lease_duration=2764800, lease_id="")
        if request.method in ("POST", "PUT"):
            self.secrets[path] = body
            return httpx.Response(204)
        if request.method == "DELETE":
            self.secrets.pop(path, None)
            return httpx.Response(204)
        return vault_errors(405, "unsupported operation")


@pytest.fixture
def fake_vault():
    return FakeVault()


@pytest.fixture
def make_client():
    """Build clients whose HTTP traffic goes to the given handler."""
    http_clients = []

    def factory(handler: Callable[[httpx.Request], httpx.Response], **overrides: Any) -> VaultClient:
        http = httpx.Client(transport=httpx.MockTransport(handler))
        http_clients.append(http)
        values = {"address": ADDRESS, "token": ROOT_TOKEN, "retry_interval_milliseconds": 0}
        values.update(overrides)
        return VaultClient(VaultConfig(**values), http_client=http, sleep=lambda _: None)

    yield factory
    for http in http_clients:
        http.close()


@pytest.fixture
def client(make_client, fake_vault):
    return make_client(fake_vault)


@pytest.fixture
def pem_pair(tmp_path):
    """Self-signed certificate and key written to disk."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "vault-sdk-test")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=1))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    cert_path = tmp_path / "cert.pem"
    key_path = tmp_path / "key.pem"
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    key_path.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    )
    return cert_path, key_path
