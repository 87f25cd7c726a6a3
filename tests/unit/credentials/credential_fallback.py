"""Unit tests for credential acquisition and fallback."""

from __future__ import annotations

import asyncio

import pytest

from relay.credentials.supplier import CredentialSupplier, fetch_ephemeral_token
from relay.errors import CredentialError

_URL = "wss://upstream.test/ws"


def _fetcher(token: str | None, calls: list[int]):
    async def _fetch() -> str | None:
        calls.append(1)
        return token

    return _fetch


def test_ephemeral_token_preferred() -> None:
    calls: list[int] = []
    supplier = CredentialSupplier(api_key="static", url=_URL, token_fetcher=_fetcher("tok", calls))

    credential = asyncio.run(supplier.acquire(prefer_ephemeral=True))

    assert credential.method == "oauth"
    assert credential.url == _URL
    assert credential.headers == {"Authorization": "Bearer tok"}
    assert calls == [1]


def test_falls_back_to_api_key_when_token_unavailable() -> None:
    calls: list[int] = []
    supplier = CredentialSupplier(api_key="static", url=_URL, token_fetcher=_fetcher(None, calls))

    credential = asyncio.run(supplier.acquire(prefer_ephemeral=True))

    assert credential.method == "api_key"
    assert credential.url == f"{_URL}?key=static"
    assert credential.headers == {}
    assert calls == [1]


def test_static_preference_skips_token_exchange() -> None:
    calls: list[int] = []
    supplier = CredentialSupplier(api_key="static", url=_URL, token_fetcher=_fetcher("tok", calls))

    credential = asyncio.run(supplier.acquire(prefer_ephemeral=False))

    assert credential.method == "api_key"
    assert calls == []


def test_no_credential_raises() -> None:
    supplier = CredentialSupplier(api_key=None, url=_URL, token_fetcher=_fetcher(None, []))
    with pytest.raises(CredentialError):
        asyncio.run(supplier.acquire(prefer_ephemeral=True))


def test_redacted_url_hides_api_key() -> None:
    supplier = CredentialSupplier(api_key="secret-key", url=_URL, token_fetcher=_fetcher(None, []))
    credential = asyncio.run(supplier.acquire(prefer_ephemeral=False))
    assert "secret-key" not in credential.redacted_url
    assert credential.redacted_url == f"{_URL}?key=***"


def test_token_exchange_failure_returns_none(tmp_path) -> None:
    missing = tmp_path / "missing-credentials.json"
    assert asyncio.run(fetch_ephemeral_token(str(missing))) is None


def test_token_exchange_with_malformed_key_file_returns_none(tmp_path) -> None:
    bad = tmp_path / "credentials.json"
    bad.write_text("{\"type\": \"service_account\"}")
    assert asyncio.run(fetch_ephemeral_token(str(bad))) is None
