#!/usr/bin/env python3
"""
Basic usage example for the Vault Python SDK
"""

import logging

from vault_sdk import NotFoundError, TokenRequest, VaultClient, VaultConfig


def main():
    logging.basicConfig(level=logging.INFO)

    # Reads VAULT_ADDR / VAULT_TOKEN / VAULT_MAX_RETRIES ... from the environment
    config = VaultConfig.from_env(max_retries=3, retry_interval_milliseconds=500)

    with VaultClient(config) as client:
        # Issue a short-lived child token for a worker
        child = client.auth.create_token(
            TokenRequest(ttl="1h", policies=["default"], display_name="example-worker")
        )
        print(f"Created token with accessor {child.accessor}, lease {child.lease_duration}s")

        worker = client.with_token(child.client_token)
        lookup = worker.auth.lookup_self()
        print(f"Token TTL {lookup.ttl}s of {lookup.creation_ttl}s")

        renewed = worker.auth.renew_self(1800)
        print(f"Renewed, lease now {renewed.lease_duration}s")

        # Store and fetch a secret
        client.logical.write("secret/example/db", {"username": "app", "password": "change-me"})
        secret = client.logical.read("secret/example/db")
        print(f"Read keys: {sorted(secret.data)}")

        try:
            client.logical.read("secret/example/missing")
        except NotFoundError:
            print("secret/example/missing does not exist")

        worker.tokens.revoke_self()


if __name__ == "__main__":
    main()
