"""Conversation history limits."""

import os

from ..utils.env import env_flag


# Entries kept per session (~15 user/assistant turns); oldest are evicted first
HISTORY_MAX_ENTRIES = int(os.getenv("HISTORY_MAX_ENTRIES", "30"))

# Utterances are truncated to this many characters in log lines
HISTORY_LOG_PREVIEW_CHARS = int(os.getenv("HISTORY_LOG_PREVIEW_CHARS", "80"))

# Set to 0 to keep utterance text out of the logs entirely
HISTORY_LOG_UTTERANCES = env_flag("HISTORY_LOG_UTTERANCES", True)


__all__ = [
    "HISTORY_MAX_ENTRIES",
    "HISTORY_LOG_PREVIEW_CHARS",
    "HISTORY_LOG_UTTERANCES",
]
