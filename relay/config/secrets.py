"""Upstream credential configuration.

Two ways to authenticate the upstream transport:

GOOGLE_APPLICATION_CREDENTIALS:
    Path to a service-account JSON file. Exchanged for a short-lived OAuth
    access token on every connection attempt (preferred).

GEMINI_API_KEY:
    Long-lived static key, used when the token exchange is unavailable.

Neither is required at import time; a missing credential only fails the
connection attempt that needed it.
"""

import os


GOOGLE_APPLICATION_CREDENTIALS = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "credentials.json")
GOOGLE_AUTH_SCOPE = os.getenv("GOOGLE_AUTH_SCOPE", "https://www.googleapis.com/auth/cloud-platform")
GEMINI_API_KEY = (os.getenv("GEMINI_API_KEY") or "").strip() or None


__all__ = [
    "GOOGLE_APPLICATION_CREDENTIALS",
    "GOOGLE_AUTH_SCOPE",
    "GEMINI_API_KEY",
]
