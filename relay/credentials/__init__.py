"""Upstream credential sources."""

from .supplier import Credential, CredentialSupplier, TokenFetcher, fetch_ephemeral_token

__all__ = ["Credential", "CredentialSupplier", "TokenFetcher", "fetch_ephemeral_token"]
