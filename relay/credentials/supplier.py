"""Upstream credential acquisition.

Two credential sources exist, tried in this order when the caller prefers
an ephemeral credential:

1. OAuth access token minted from the service-account key file named by
   ``GOOGLE_APPLICATION_CREDENTIALS`` (sent as a bearer header).
2. Static API key from ``GEMINI_API_KEY`` (sent as the ``key`` query
   parameter).

Token minting failures never propagate; they are logged and the supplier
falls through to the static key. Only when neither source yields a credential
does ``acquire`` raise ``CredentialError``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from urllib.parse import urlencode

from ..config import (
    GEMINI_API_KEY,
    GOOGLE_AUTH_SCOPE,
    GOOGLE_APPLICATION_CREDENTIALS,
    UPSTREAM_URL,
)
from ..errors import CredentialError

logger = logging.getLogger(__name__)

TokenFetcher = Callable[[], Awaitable[str | None]]


@dataclass(frozen=True)
class Credential:
    """Everything the transport needs to authenticate one upstream attempt."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def redacted_url(self) -> str:
        base, _, query = self.url.partition("?")
        return f"{base}?key=***" if query else base


def _mint_access_token(credentials_path: str, scope: str) -> str | None:
    from google.auth.transport.requests import Request
    from google.oauth2 import service_account

    credentials = service_account.Credentials.from_service_account_file(
        credentials_path,
        scopes=[scope],
    )
    credentials.refresh(Request())
    return credentials.token or None


async def fetch_ephemeral_token(
    credentials_path: str = GOOGLE_APPLICATION_CREDENTIALS,
    scope: str = GOOGLE_AUTH_SCOPE,
) -> str | None:
    """Mint a short-lived OAuth access token, or return None on any failure."""
    try:
        token = await asyncio.to_thread(_mint_access_token, credentials_path, scope)
    except Exception as exc:  # noqa: BLE001
        logger.warning("ephemeral token unavailable: %s", exc)
        return None
    if not token:
        logger.warning("ephemeral token unavailable: token exchange returned no token")
    return token


class CredentialSupplier:
    """Produces a ``Credential`` per upstream connection attempt."""

    def __init__(
        self,
        *,
        api_key: str | None = GEMINI_API_KEY,
        url: str = UPSTREAM_URL,
        token_fetcher: TokenFetcher | None = None,
    ) -> None:
        self._api_key = api_key
        self._url = url
        self._token_fetcher = token_fetcher or fetch_ephemeral_token

    async def acquire(self, *, prefer_ephemeral: bool = True) -> Credential:
        """Return a credential, preferring the OAuth token when asked.

        Raises:
            CredentialError: neither the token nor the static key is available.
        """
        if prefer_ephemeral:
            token = await self._token_fetcher()
            if token:
                logger.info("upstream credential: ephemeral oauth token")
                return Credential(
                    method="oauth",
                    url=self._url,
                    headers={"Authorization": f"Bearer {token}"},
                )
            logger.info("ephemeral token unavailable; falling back to api key")

        if not self._api_key:
            raise CredentialError("no GEMINI_API_KEY and no usable service-account credentials")
        logger.info("upstream credential: static api key")
        return Credential(
            method="api_key",
            url=f"{self._url}?{urlencode({'key': self._api_key})}",
        )


__all__ = ["Credential", "CredentialSupplier", "TokenFetcher", "fetch_ephemeral_token"]
