"""Centralized exception classes for the relay.

Organization:
    - credentials.py: credential acquisition failures
    - session.py: work requested on a torn-down session
    - classify.py: exception-to-telemetry label mapping

Malformed client or upstream frames raise ``ValueError`` from the parsers and
are handled next to the parse call.
"""

from .classify import classify_error
from .credentials import CredentialError
from .session import SessionClosedError

__all__ = [
    "CredentialError",
    "SessionClosedError",
    "classify_error",
]
