"""Conversation turns."""

from dataclasses import dataclass
from typing import Any, Dict

from ..exceptions import StoreFormatError


ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

ROLES = (ROLE_SYSTEM, ROLE_USER, ROLE_ASSISTANT)


@dataclass(frozen=True)
class Turn:
    """One role-tagged message of a conversation."""

    role: str
    content: str

    @classmethod
    def system(cls, content: str) -> "Turn":
        return cls(ROLE_SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Turn":
        return cls(ROLE_USER, content)

    @classmethod
    def assistant(cls, content: str) -> "Turn":
        return cls(ROLE_ASSISTANT, content)

    def to_dict(self) -> Dict[str, str]:
        """Convert turn to the ``{role, content}`` message shape."""
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Turn":
        """Create turn from a ``{role, content}`` mapping."""
        if not isinstance(data, dict):
            raise StoreFormatError(f"Turn must be an object, got {type(data).__name__}")

        role = data.get("role")
        content = data.get("content", "")
        if role not in ROLES:
            raise StoreFormatError(f"Invalid turn role: {role!r}")
        if not isinstance(content, str):
            raise StoreFormatError(f"Turn content must be a string, got {type(content).__name__}")

        return cls(role, content)
