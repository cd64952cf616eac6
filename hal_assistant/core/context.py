"""Application context shared by the CLI and the voice loop."""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple
import structlog

from ..chat.session import ChatSession
from ..cli.session_console import SessionConsole
from ..config.settings import Settings
from ..hooks import HookDispatcher, HookRegistry, register_session_hooks
from ..providers.ai.base import ChatBackend
from ..providers.registry import ProviderRegistry, build_registry
from ..state.session_store import DEFAULT_SESSION_NAME, SessionStore


logger = structlog.get_logger()


@dataclass
class AppContext:
    """Everything built once at start-up: settings, sessions and hooks."""

    settings: Settings
    providers: ProviderRegistry
    store: SessionStore
    hooks: HookRegistry
    console: SessionConsole
    dispatcher: Optional[HookDispatcher] = None

    @classmethod
    def create(
        cls,
        settings: Settings,
        backend_factory: Optional[Callable[[str], ChatBackend]] = None,
        providers: Optional[ProviderRegistry] = None,
    ) -> "AppContext":
        providers = providers or build_registry(settings)
        if backend_factory is None:
            def backend_factory(key: str) -> ChatBackend:
                return providers.get_backend("openai", api_key=key)

        store = SessionStore(
            backend_factory,
            max_history=settings.chat.max_history,
            stream_max_tokens=settings.chat.stream_max_tokens,
        )
        console = SessionConsole(store, settings, settings.storage.sessions_path)
        hooks = HookRegistry()
        register_session_hooks(hooks, console)

        return cls(
            settings=settings,
            providers=providers,
            store=store,
            hooks=hooks,
            console=console,
        )

    def load(self) -> None:
        """
        Load sessions and hooks from disk.

        Missing files mean a first run: the store stays empty and the stock
        hooks are configured. Malformed files raise ``StoreFormatError``.
        """
        storage = self.settings.storage
        if storage.sessions_path.exists():
            self.store.load(storage.sessions_path)
        else:
            logger.info("No sessions file, starting empty", file=str(storage.sessions_path))

        if storage.hooks_path.exists():
            self.hooks.load(storage.hooks_path)
        else:
            self.hooks.add_defaults()

    def save(self) -> None:
        """Persist settings, sessions and hooks."""
        storage = self.settings.storage
        self.settings.save_to_file()
        self.store.save(storage.sessions_path)
        self.hooks.save(storage.hooks_path)
        logger.info("State saved", data_dir=str(storage.base_path))

    def default_session(self) -> Tuple[str, ChatSession]:
        """Return the default session, creating and marking it if needed."""
        name, session = self.store.get_default()
        if session is None:
            chat = self.settings.chat
            session = self.store.new_default_session(chat.openai_key, chat.model)
            name = DEFAULT_SESSION_NAME
            self.store.set_default(name)

        return name, session

    def build_dispatcher(self) -> HookDispatcher:
        """Create and prime the classifier session used for hook dispatch."""
        chat = self.settings.chat
        classifier = ChatSession(
            self.store.backend_factory(chat.openai_key),
            model=chat.classifier_model,
            key=chat.openai_key,
        )
        self.dispatcher = HookDispatcher(self.hooks, classifier)
        self.dispatcher.prime()
        return self.dispatcher
