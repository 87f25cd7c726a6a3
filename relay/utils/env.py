"""Environment helper utilities."""

from __future__ import annotations

import os

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str, default: bool) -> bool:
    """Return True/False for typical truthy env encodings."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def env_str(name: str, default: str) -> str:
    """Return a stripped env value, falling back when unset or blank."""
    value = (os.getenv(name) or "").strip()
    return value or default


__all__ = ["env_flag", "env_str"]
