"""Base interface for chat model backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional


@dataclass
class Completion:
    """A complete, non-streamed response from the model."""

    content: str
    total_tokens: int = 0


class ChatBackend(ABC):
    """Abstract base class for chat model backends."""

    @abstractmethod
    def complete(self, model: str, messages: List[Dict[str, str]]) -> Completion:
        """
        Request a full response for the given messages.

        Args:
            model: Model identifier
            messages: Ordered ``{role, content}`` messages

        Returns:
            The response content and the total token usage
        """
        pass

    @abstractmethod
    def stream(
        self,
        model: str,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
    ) -> Iterator[str]:
        """
        Stream a response as content deltas.

        Exhausting the iterator is the end-of-stream marker. Any exception
        raised while iterating is a broken response.
        """
        pass

    def get_status(self) -> dict:
        """Get current status of the backend."""
        return {"backend": type(self).__name__}
