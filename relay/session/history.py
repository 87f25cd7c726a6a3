"""Bounded conversation log and its context-priming rendering.

Each upstream connection starts with no memory of earlier turns. The log kept
here is re-injected into the system instruction of every new connection, so it
is the only thing that carries a conversation across reconnects.

Rendered format:

    === PREVIOUS CONVERSATION HISTORY ===

    [User said]: first user utterance
    [You replied]: first assistant reply

    [User said]: ...
    [You replied]: ...

    === END OF HISTORY ===
    IMPORTANT: Continue the conversation ...

An empty log renders to an empty string so the system instruction never
implies a history that does not exist.
"""

from __future__ import annotations

import time
from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Literal

from ..config import HISTORY_MAX_ENTRIES

Role = Literal["user", "assistant"]

_ROLE_TAGS: dict[str, str] = {
    "user": "\n[User said]: {text}\n",
    "assistant": "[You replied]: {text}\n",
}

HISTORY_HEADER = "\n\n=== PREVIOUS CONVERSATION HISTORY ===\n"
HISTORY_FOOTER = "\n=== END OF HISTORY ===\n"
CONTINUITY_INSTRUCTION = (
    "IMPORTANT: Continue the conversation consistently with this history. "
    "Do not repeat information already discussed unless it is relevant.\n\n"
)


@dataclass(frozen=True, slots=True)
class ConversationEntry:
    """One utterance in the running conversation.

    Attributes:
        role: "user" or "assistant".
        text: Trimmed utterance text, never empty.
        created_at: Wall-clock epoch seconds when the entry was recorded.
    """

    role: Role
    text: str
    created_at: float


class ConversationLog:
    """Ordered, capped log of user/assistant utterances.

    Insertion order is chronological order. When the cap is exceeded the
    oldest entries are dropped from the front.
    """

    def __init__(
        self,
        max_entries: int = HISTORY_MAX_ENTRIES,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._clock = clock
        self._entries: deque[ConversationEntry] = deque()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def entries(self) -> tuple[ConversationEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ConversationEntry]:
        return iter(tuple(self._entries))

    def append(self, role: Role, text: str) -> int:
        """Record an utterance and return how many old entries were evicted.

        Whitespace-only text is ignored. Stored text is trimmed.
        """
        if role not in _ROLE_TAGS:
            raise ValueError(f"unknown history role: {role!r}")
        cleaned = (text or "").strip()
        if not cleaned:
            return 0
        self._entries.append(ConversationEntry(role=role, text=cleaned, created_at=self._clock()))
        evicted = 0
        while len(self._entries) > self._max_entries:
            self._entries.popleft()
            evicted += 1
        return evicted

    def clear(self) -> None:
        self._entries.clear()

    def char_count(self) -> int:
        """Total characters across all entries."""
        return sum(len(entry.text) for entry in self._entries)

    def render(self) -> str:
        """Render the log as a context-priming block (empty when no entries)."""
        if not self._entries:
            return ""
        chunks = [HISTORY_HEADER]
        for entry in self._entries:
            chunks.append(_ROLE_TAGS[entry.role].format(text=entry.text))
        chunks.append(HISTORY_FOOTER)
        chunks.append(CONTINUITY_INSTRUCTION)
        return "".join(chunks)


__all__ = [
    "ConversationEntry",
    "ConversationLog",
    "Role",
    "HISTORY_HEADER",
    "HISTORY_FOOTER",
    "CONTINUITY_INSTRUCTION",
]
