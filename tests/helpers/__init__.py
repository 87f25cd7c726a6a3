"""Shared fakes and builders for relay tests."""

__all__ = [
    "builders",
    "fakes",
]
