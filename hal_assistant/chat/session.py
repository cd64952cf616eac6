"""Named chat sessions with bounded history."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import structlog

from ..exceptions import StoreFormatError
from ..providers.ai.base import ChatBackend
from .stream import StreamCursor, StreamOutcome
from .turn import ROLE_ASSISTANT, ROLE_SYSTEM, ROLE_USER, Turn


logger = structlog.get_logger()


DEFAULT_MAX_HISTORY = 4
STREAM_MAX_TOKENS = 2048


@dataclass
class SessionRecord:
    """Declarative, persistable state of a chat session."""

    system: Optional[Turn] = None
    history: List[Turn] = field(default_factory=list)
    max_history: int = DEFAULT_MAX_HISTORY
    model: str = ""
    key: str = ""
    is_default: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary for serialization."""
        return {
            "system": self.system.to_dict() if self.system else None,
            "history": [turn.to_dict() for turn in self.history],
            "maxHistory": self.max_history,
            "model": self.model,
            "key": self.key,
            "default": self.is_default,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        """Create record from dictionary."""
        if not isinstance(data, dict):
            raise StoreFormatError(f"Session must be an object, got {type(data).__name__}")

        system = data.get("system")
        history = data.get("history", [])
        max_history = data.get("maxHistory", DEFAULT_MAX_HISTORY)

        if not isinstance(history, list):
            raise StoreFormatError("Session history must be a list")
        if isinstance(max_history, bool) or not isinstance(max_history, int):
            raise StoreFormatError(f"Invalid maxHistory: {max_history!r}")

        if system is not None:
            system = Turn.from_dict(system)
            if system.role != ROLE_SYSTEM:
                raise StoreFormatError(f"Persona must be a system turn, got {system.role!r}")

        turns = [Turn.from_dict(item) for item in history]
        if len(turns) % 2:
            raise StoreFormatError("Session history must hold whole (user, assistant) pairs")
        for i, turn in enumerate(turns):
            expected = ROLE_USER if i % 2 == 0 else ROLE_ASSISTANT
            if turn.role != expected:
                raise StoreFormatError(f"History turn {i} must be {expected}, got {turn.role}")

        return cls(
            system=system,
            history=turns,
            max_history=max_history,
            model=str(data.get("model", "")),
            key=str(data.get("key", "")),
            is_default=bool(data.get("default", False)),
        )


class ChatSession:
    """
    One named conversation with the remote model.

    Requests are built as ``[persona?, *history, new user turn]``. History
    holds (user, assistant) pairs; at most ``max_history`` pairs are kept and
    the oldest pairs are evicted first. ``max_history <= 0`` disables
    recording.
    """

    def __init__(
        self,
        backend: ChatBackend,
        model: str,
        key: str = "",
        max_history: int = DEFAULT_MAX_HISTORY,
        stream_max_tokens: int = STREAM_MAX_TOKENS,
    ):
        self.backend = backend
        self.model = model
        self.key = key
        self.max_history = max_history
        self.stream_max_tokens = stream_max_tokens
        self.system: Optional[Turn] = None
        self.history: List[Turn] = []
        self.is_default = False

    @classmethod
    def from_record(
        cls,
        record: SessionRecord,
        backend: ChatBackend,
        stream_max_tokens: int = STREAM_MAX_TOKENS,
    ) -> "ChatSession":
        session = cls(
            backend,
            model=record.model,
            key=record.key,
            max_history=record.max_history,
            stream_max_tokens=stream_max_tokens,
        )
        session.system = record.system
        session.history = list(record.history)
        session.is_default = record.is_default
        return session

    def to_record(self) -> SessionRecord:
        # A prompt whose stream never settled has no answer to pair with.
        paired = len(self.history) - len(self.history) % 2
        return SessionRecord(
            system=self.system,
            history=self.history[:paired],
            max_history=self.max_history,
            model=self.model,
            key=self.key,
            is_default=self.is_default,
        )

    @property
    def persona(self) -> Optional[str]:
        return self.system.content if self.system else None

    @property
    def history_enabled(self) -> bool:
        return self.max_history > 0

    def set_persona(self, text: str) -> None:
        """Replace the system turn."""
        self.system = Turn.system(text)

    def set_max_history(self, n: int) -> None:
        self.max_history = n

    def disable_history(self) -> None:
        self.max_history = 0

    def set_model(self, model: str) -> None:
        self.model = model

    def build_messages(self, text: str) -> List[Dict[str, str]]:
        """Build the request messages for a new user prompt."""
        messages = []
        if self.system is not None:
            messages.append(self.system.to_dict())

        messages.extend(turn.to_dict() for turn in self.history)
        messages.append(Turn.user(text).to_dict())
        return messages

    def prompt(self, text: str) -> Tuple[str, int]:
        """
        Send a prompt and wait for the full response.

        Returns:
            The response content and the total tokens used

        Backend errors propagate unchanged and leave history untouched.
        """
        completion = self.backend.complete(self.model, self.build_messages(text))

        if not completion.content:
            logger.error("Empty response, prompt not added to history", prompt=text)
            return completion.content, completion.total_tokens

        self._add_prompt_to_history(text)
        self._add_response_to_history(completion.content)
        return completion.content, completion.total_tokens

    def prompt_stream(self, text: str) -> StreamCursor:
        """
        Send a prompt and stream the response.

        The prompt is added to history before the request is driven. The
        returned cursor settles the session when the stream ends: the
        response is recorded on success, and the prompt is removed again
        when the stream breaks.
        """
        messages = self.build_messages(text)
        added = self._add_prompt_to_history(text)

        try:
            deltas = self.backend.stream(
                self.model, messages, max_tokens=self.stream_max_tokens
            )
        except Exception:
            if added:
                self._rollback_prompt()
            raise

        def settle(outcome: StreamOutcome) -> None:
            if outcome.ok and outcome.text:
                self._add_response_to_history(outcome.text)
            elif added:
                self._rollback_prompt()

        return StreamCursor(deltas, on_outcome=settle)

    def _add_prompt_to_history(self, text: str) -> bool:
        if not self.history_enabled:
            logger.debug("Prompt not added to history", prompt=text)
            return False

        logger.debug("Prompt added to history", prompt=text)
        self.history.append(Turn.user(text))
        return True

    def _add_response_to_history(self, text: str) -> None:
        if not self.history_enabled:
            logger.debug("Response not added to history", response=text)
            return

        logger.debug("Response added to history", response=text)
        self.history.append(Turn.assistant(text))
        self._trim_history()

    def _trim_history(self) -> None:
        excess = len(self.history) // 2 - self.max_history
        if excess <= 0:
            return

        evicted = self.history[: excess * 2]
        for prompt, response in zip(evicted[::2], evicted[1::2]):
            logger.debug(
                "Reached max history, evicting pair",
                prompt=prompt.content,
                response=response.content,
            )
        self.history = self.history[excess * 2 :]

    def _rollback_prompt(self) -> None:
        if self.history and self.history[-1].role == ROLE_USER:
            dropped = self.history.pop()
            logger.error(
                "Broken response, prompt removed from history", prompt=dropped.content
            )

    def get_status(self) -> dict:
        return {
            "model": self.model,
            "has_persona": self.system is not None,
            "history_length": len(self.history),
            "max_history": self.max_history,
            "is_default": self.is_default,
        }

    def __str__(self) -> str:
        return json.dumps(self.to_record().to_dict(), indent=1, ensure_ascii=False)
