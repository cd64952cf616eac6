"""Hook interface and configuration records."""

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..exceptions import StoreFormatError


class Hook(ABC):
    """A local command bound to a keyword."""

    kind: str = ""

    def __init__(self, keyword: str):
        self.keyword = keyword

    def identify(self, utterance: str) -> bool:
        """Check whether the utterance is exactly this hook's keyword."""
        return self.keyword.lower() == utterance.strip().lower()

    @abstractmethod
    def execute(self) -> None:
        """Run the command."""
        pass


HookFactory = Callable[[str], Hook]


def hook_id(keyword: str, kind: str) -> str:
    """Content-addressed id of a (keyword, kind) pair."""
    digest = hashlib.sha1()
    digest.update(keyword.encode("utf-8"))
    digest.update(b"\t")
    digest.update(kind.encode("utf-8"))
    return digest.hexdigest()


@dataclass
class HookConfig:
    """A configured hook and the instance bound to its keyword."""

    id: str
    keyword: str
    kind: str
    enabled: bool = True
    instance: Optional[Hook] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"keyword": self.keyword, "hook": self.kind, "enable": self.enabled}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HookConfig":
        """Create config from dictionary. The id is always recomputed."""
        if not isinstance(data, dict):
            raise StoreFormatError(f"Hook config must be an object, got {type(data).__name__}")

        keyword = data.get("keyword")
        kind = data.get("hook")
        if not isinstance(keyword, str) or not isinstance(kind, str):
            raise StoreFormatError("Hook config needs string 'keyword' and 'hook'")

        return cls(
            id=hook_id(keyword, kind),
            keyword=keyword,
            kind=kind,
            enabled=bool(data.get("enable", True)),
        )
