"""
Tests for secret read/write/list/delete.
"""

import json

import httpx
import pytest

from vault_sdk import AuthError, NotFoundError, ParseError


class TestSecretOperations:

    def test_write_then_read_round_trips(self, client):
        data = {"username": "app", "password": "hunter2", "host": "db.internal"}
        client.logical.write("secret/app/db", data)
        assert client.logical.read("secret/app/db").data == data

    def test_read_missing_path(self, client):
        with pytest.raises(NotFoundError) as info:
            client.logical.read("secret/does/not/exist")
        assert info.value.status_code == 404

    def test_not_found_is_not_an_auth_error(self):
        assert not issubclass(NotFoundError, AuthError)

    def test_read_result_lease_fields(self, client):
        client.logical.write("secret/app/api", {"key": "k"})
        result = client.logical.read("secret/app/api")
        assert result.lease_duration == 2764800
        assert result.lease_id == ""

    def test_write_returns_empty_result_on_204(self, client):
        result = client.logical.write("secret/app/db", {"a": "b"})
        assert result.data == {}

    def test_write_request_shape(self, make_client):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(204)

        make_client(handler).logical.write("/secret/app/db/", {"a": "b"})
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/v1/secret/app/db"
        assert seen[0].headers["X-Vault-Token"] == "root-token"
        assert json.loads(seen[0].content) == {"a": "b"}

    def test_write_returning_data(self, make_client):
        handler = lambda request: httpx.Response(200, json={"data": {"ciphertext": "vault:v1:abc"}})
        result = make_client(handler).logical.write("transit/encrypt/key", {"plaintext": "aGk="})
        assert result.data == {"ciphertext": "vault:v1:abc"}

    def test_list(self, client):
        client.logical.write("secret/app/db", {"a": "1"})
        client.logical.write("secret/app/api", {"a": "2"})
        client.logical.write("secret/app/nested/x", {"a": "3"})
        assert client.logical.list("secret/app") == ["api", "db", "nested"]

    def test_list_empty(self, client):
        assert client.logical.list("secret/nothing-here") == []

    def test_delete(self, client):
        client.logical.write("secret/app/db", {"a": "b"})
        client.logical.delete("secret/app/db")
        with pytest.raises(NotFoundError):
            client.logical.read("secret/app/db")

    def test_permission_denied(self, client):
        with pytest.raises(AuthError) as info:
            client.with_token("s.unknown").logical.read("secret/app/db")
        assert info.value.status_code == 403

    def test_malformed_body(self, make_client):
        client = make_client(lambda request: httpx.Response(200, content=b"<html></html>"))
        with pytest.raises(ParseError) as info:
            client.logical.read("secret/app/db")
        assert info.value.status_code == 200

    @pytest.mark.parametrize("path", ["", "/", "   "])
    def test_empty_path(self, client, path):
        with pytest.raises(ValueError):
            client.logical.read(path)

    def test_unauthenticated_client_sends_no_token(self, make_client):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {}})

        make_client(handler, token=None).logical.read("secret/app/db")
        assert "X-Vault-Token" not in seen[0].headers
