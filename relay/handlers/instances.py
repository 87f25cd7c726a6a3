"""Singleton instances for handler classes.

This module is the assembly point for process-scoped singletons; instances
are not created in the same file as their class definitions.

Instances:
    session_registry: Global SessionRegistry for downstream sessions.
"""

from ..session.registry import SessionRegistry


# ============================================================================
# Session Registry
# ============================================================================

session_registry = SessionRegistry()


__all__ = [
    "session_registry",
]
