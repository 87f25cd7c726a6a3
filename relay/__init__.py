"""Live Relay Package.

This package bridges downstream voice clients to the Gemini Live
bidirectional streaming API and keeps each client's conversation alive across
upstream connection drops. It handles:

- WebSocket sessions for downstream clients
- Upstream connection setup with persona and conversation history
- Keepalive probing and bounded automatic reconnects
- Ephemeral OAuth credentials with static API key fallback

Architecture Overview:
    - server.py: FastAPI application entry point
    - config/: Configuration modules (environment-based)
    - credentials/: Upstream credential acquisition
    - session/: Session state, conversation log, session registry
    - upstream/: Upstream transport, protocol, keepalive, reconnect lifecycle
    - messages/: Routers for downstream and upstream frames
    - handlers/: Downstream WebSocket shell
    - logging/, telemetry/, errors/: ambient concerns

Example:
    Start the server with uvicorn:

    $ uvicorn relay.server:app --host 0.0.0.0 --port 3000

Environment Variables:
    Credentials (at least one):
        - GEMINI_API_KEY: static API key
        - GOOGLE_APPLICATION_CREDENTIALS: service-account key file for OAuth tokens

    Optional:
        - UPSTREAM_MODEL, UPSTREAM_VOICE, SYSTEM_PERSONA
        - KEEPALIVE_INTERVAL_S, KEEPALIVE_TIMEOUT_S
        - RECONNECT_DELAY_S, RECONNECT_FALLBACK_DELAY_S
        - HISTORY_MAX_ENTRIES
"""
