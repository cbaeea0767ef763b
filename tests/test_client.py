"""
Tests for VaultClient wiring: headers, error mapping, token handling.
"""

import httpx
import pytest

from vault_sdk import (
    AuthError,
    NotFoundError,
    TransportError,
    VaultClient,
    VaultConfig,
)


def answer(status, **kwargs):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(status, **kwargs)

    handler.seen = seen
    return handler


class TestVaultClient:

    def test_headers(self, make_client):
        handler = answer(200, json={"data": {}})
        make_client(handler, namespace="ns1").logical.read("secret/x")
        headers = handler.seen[0].headers
        assert headers["X-Vault-Token"] == "root-token"
        assert headers["X-Vault-Namespace"] == "ns1"
        assert headers["X-Vault-Request"] == "true"

    def test_requests_go_below_v1(self, make_client):
        handler = answer(200, json={"data": {}})
        make_client(handler, address="http://vault.test:8200/").logical.read("secret/x")
        assert str(handler.seen[0].url) == "http://vault.test:8200/v1/secret/x"

    def test_with_token(self, make_client):
        handler = answer(200, json={"data": {}})
        base = make_client(handler, max_retries=2)
        derived = base.with_token("s.derived")
        derived.logical.read("secret/x")
        assert handler.seen[0].headers["X-Vault-Token"] == "s.derived"
        assert derived.config.max_retries == 2
        assert base.config.token == "root-token"

    def test_repr_hides_token(self, make_client):
        client = make_client(answer(204))
        assert "root-token" not in repr(client)
        assert "authenticated=True" in repr(client)

    def test_404_with_empty_errors(self, make_client):
        with pytest.raises(NotFoundError) as info:
            make_client(answer(404, json={"errors": []})).logical.read("secret/x")
        assert info.value.errors == []

    def test_404_without_body(self, make_client):
        with pytest.raises(NotFoundError):
            make_client(answer(404)).logical.read("secret/x")

    def test_4xx_carries_server_messages(self, make_client):
        handler = answer(400, json={"errors": ["missing client token", "invalid request"]})
        with pytest.raises(AuthError) as info:
            make_client(handler).logical.write("secret/x", {"a": "b"})
        assert info.value.errors == ["missing client token", "invalid request"]
        assert "missing client token; invalid request" in str(info.value)

    def test_error_json_without_errors_field(self, make_client):
        with pytest.raises(TransportError):
            make_client(answer(400, json={"message": "nope"})).logical.read("secret/x")

    def test_does_not_close_injected_http_client(self):
        http = httpx.Client(transport=httpx.MockTransport(answer(204)))
        with VaultClient(VaultConfig(address="http://vault.test:8200"), http_client=http):
            pass
        assert not http.is_closed
        http.close()

    def test_closes_own_http_client(self):
        client = VaultClient(VaultConfig(address="http://vault.test:8200"))
        client.close()
        assert client._http.is_closed

    def test_request_logging(self, make_client, caplog):
        client = make_client(answer(200, json={"data": {}}), log_requests=True)
        with caplog.at_level("DEBUG", logger="vault_sdk.transport"):
            client.logical.read("secret/x")
        assert "GET secret/x -> 200" in caplog.text
        assert "root-token" not in caplog.text

    def test_timeouts_from_config(self):
        config = VaultConfig(address="http://vault.test:8200", open_timeout=2, read_timeout=7)
        with VaultClient(config) as client:
            assert client._http.timeout == httpx.Timeout(7, connect=2)
