"""OpenAI chat backend."""

from typing import Dict, Iterator, List, Optional
from openai import OpenAI
import structlog

from .base import ChatBackend, Completion


logger = structlog.get_logger()


class OpenAIChatBackend(ChatBackend):
    """
    Chat backend using the OpenAI Chat Completions API.

    The HTTP client is created on first use, so sessions can be restored
    from disk without touching the network.
    """

    def __init__(self, api_key: str, timeout: Optional[float] = None):
        self.api_key = api_key
        self.timeout = timeout
        self._client: Optional[OpenAI] = None

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            kwargs = {"api_key": self.api_key}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            self._client = OpenAI(**kwargs)
        return self._client

    def complete(self, model: str, messages: List[Dict[str, str]]) -> Completion:
        """Create a chat completion."""
        logger.debug("Requesting completion", model=model, messages=len(messages))

        response = self.client.chat.completions.create(model=model, messages=messages)

        content = response.choices[0].message.content or ""
        total_tokens = response.usage.total_tokens if response.usage else 0
        return Completion(content=content, total_tokens=total_tokens)

    def stream(
        self,
        model: str,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
    ) -> Iterator[str]:
        """Create a streaming chat completion and yield its content deltas."""
        params = {"model": model, "messages": messages, "stream": True}
        if max_tokens:
            params["max_tokens"] = max_tokens

        logger.debug("Requesting stream", model=model, messages=len(messages))
        response = self.client.chat.completions.create(**params)

        try:
            for chunk in response:
                if not chunk.choices:
                    continue

                text = chunk.choices[0].delta.content
                if text:
                    yield text
        finally:
            response.close()

    def get_status(self) -> dict:
        return {
            "backend": "openai",
            "client_ready": self._client is not None,
        }
