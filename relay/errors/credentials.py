"""Credential acquisition errors."""


class CredentialError(Exception):
    """Raised when no upstream credential can be produced.

    The ephemeral token exchange and the static API key were both unavailable,
    so the connection attempt that asked for a credential cannot proceed. The
    caller decides whether another attempt is scheduled.
    """


__all__ = ["CredentialError"]
