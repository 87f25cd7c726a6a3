"""Session state and conversation history.

The registry lives in ``relay.session.registry``; it is not re-exported here
because it depends on the upstream lifecycle, which depends on this package.
"""

from .history import ConversationEntry, ConversationLog, Role
from .state import SessionPhase, SessionState, can_transition

__all__ = [
    "ConversationEntry",
    "ConversationLog",
    "Role",
    "SessionPhase",
    "SessionState",
    "can_transition",
]
