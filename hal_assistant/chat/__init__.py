"""Chat sessions, turns and response streaming."""

from .turn import Turn, ROLE_SYSTEM, ROLE_USER, ROLE_ASSISTANT
from .stream import StreamCursor, StreamOutcome, StreamState, SentenceSegmenter
from .session import ChatSession, SessionRecord, DEFAULT_MAX_HISTORY

__all__ = [
    "Turn",
    "ROLE_SYSTEM",
    "ROLE_USER",
    "ROLE_ASSISTANT",
    "StreamCursor",
    "StreamOutcome",
    "StreamState",
    "SentenceSegmenter",
    "ChatSession",
    "SessionRecord",
    "DEFAULT_MAX_HISTORY",
]
