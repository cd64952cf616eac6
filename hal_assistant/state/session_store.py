"""Registry of named chat sessions and its persistence."""

from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union
import structlog

from ..chat.session import ChatSession, SessionRecord, DEFAULT_MAX_HISTORY, STREAM_MAX_TOKENS
from ..exceptions import SessionExistsError, SessionNotFoundError, StoreFormatError
from ..providers.ai.base import ChatBackend
from ..utils.jsonfile import atomic_write_json, read_json_object


logger = structlog.get_logger()


BackendFactory = Callable[[str], ChatBackend]

DEFAULT_SESSION_NAME = "default"


class SessionStore:
    """
    Named chat sessions, keyed by lower-cased name.

    Enumeration order is unspecified. At most one session is the default.
    The store is not synchronized; callers serialize mutations.
    """

    def __init__(
        self,
        backend_factory: BackendFactory,
        max_history: int = DEFAULT_MAX_HISTORY,
        stream_max_tokens: int = STREAM_MAX_TOKENS,
    ):
        self.backend_factory = backend_factory
        self.max_history = max_history
        self.stream_max_tokens = stream_max_tokens
        self.sessions: Dict[str, ChatSession] = {}

    @staticmethod
    def normalize(name: str) -> str:
        return name.lower()

    def __contains__(self, name: str) -> bool:
        return self.normalize(name) in self.sessions

    def __len__(self) -> int:
        return len(self.sessions)

    def __iter__(self) -> Iterator[Tuple[str, ChatSession]]:
        return iter(list(self.sessions.items()))

    def get(self, name: str) -> Optional[ChatSession]:
        return self.sessions.get(self.normalize(name))

    def get_or_create(self, name: str, key: str, model: str) -> ChatSession:
        """Return the named session, creating it on first reference."""
        name = self.normalize(name)
        session = self.sessions.get(name)
        if session is not None:
            return session

        session = ChatSession(
            self.backend_factory(key),
            model=model,
            key=key,
            max_history=self.max_history,
            stream_max_tokens=self.stream_max_tokens,
        )
        self.sessions[name] = session
        logger.info("Created session", name=name, model=model)
        return session

    def new_default_session(self, key: str, model: str) -> ChatSession:
        return self.get_or_create(DEFAULT_SESSION_NAME, key, model)

    def delete(self, name: str) -> ChatSession:
        name = self.normalize(name)
        if name not in self.sessions:
            raise SessionNotFoundError(name)

        logger.info("Deleted session", name=name)
        return self.sessions.pop(name)

    def rename(self, old_name: str, new_name: str) -> ChatSession:
        old_name = self.normalize(old_name)
        new_name = self.normalize(new_name)
        if old_name not in self.sessions:
            raise SessionNotFoundError(old_name)
        if new_name == old_name:
            return self.sessions[old_name]
        if new_name in self.sessions:
            raise SessionExistsError(new_name)

        session = self.sessions.pop(old_name)
        self.sessions[new_name] = session
        logger.info("Renamed session", old_name=old_name, new_name=new_name)
        return session

    def list(self) -> List[str]:
        return list(self.sessions)

    def list_excluding(self, name: str) -> List[str]:
        name = self.normalize(name)
        return [k for k in self.sessions if k != name]

    def set_default(self, name: str) -> None:
        """Mark one session as the default and clear the flag everywhere else."""
        name = self.normalize(name)
        if name not in self.sessions:
            raise SessionNotFoundError(name)

        for current_name, session in self.sessions.items():
            session.is_default = current_name == name

        logger.debug("Default session set", name=name)

    def get_default(self) -> Tuple[str, Optional[ChatSession]]:
        for name, session in self.sessions.items():
            if session.is_default:
                return name, session

        return "", None

    def to_document(self) -> Dict[str, Any]:
        return {
            "clients": {
                name: session.to_record().to_dict()
                for name, session in self.sessions.items()
            }
        }

    def load_document(self, document: Dict[str, Any]) -> None:
        """
        Replace the store contents with the sessions of a document.

        A backend is created for every session from its stored key. Nothing
        is replaced when the document is malformed.
        """
        if not isinstance(document, dict):
            raise StoreFormatError("Session document must be an object")

        clients = document.get("clients", {})
        if not isinstance(clients, dict):
            raise StoreFormatError("'clients' must be an object")

        records = {}
        for name, data in clients.items():
            try:
                records[self.normalize(name)] = SessionRecord.from_dict(data)
            except StoreFormatError as e:
                raise StoreFormatError(f"Session {name!r}: {e}") from e

        self.sessions = {
            name: ChatSession.from_record(
                record,
                self.backend_factory(record.key),
                stream_max_tokens=self.stream_max_tokens,
            )
            for name, record in records.items()
        }

    def save(self, file_path: Union[str, Path]) -> None:
        """Save all sessions to disk."""
        try:
            atomic_write_json(file_path, self.to_document())
        except Exception as e:
            logger.error("Failed to save sessions", file=str(file_path), error=str(e))
            raise

        logger.debug("Sessions saved", file=str(file_path), count=len(self.sessions))

    def load(self, file_path: Union[str, Path]) -> None:
        """Load sessions from disk, replacing the current contents."""
        self.load_document(read_json_object(file_path))
        logger.debug("Sessions loaded", file=str(file_path), count=len(self.sessions))
