"""Downstream connection handlers.

instances.py:
    Process-scoped singletons (the session registry).

websocket/:
    Downstream WebSocket shell:
    - Client frame parsing and validation (parser.py)
    - Safe send helpers and task cancellation (helpers.py)
    - Error envelope helper (errors.py)
    - Expected-disconnect classification (disconnects.py)
    - Main connection handler (manager.py)
"""
