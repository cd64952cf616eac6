"""Hooks that manage chat sessions."""

from functools import partial

from .base import Hook
from .registry import HookRegistry


class SessionHook(Hook):
    """Base for hooks that drive the interactive session console."""

    def __init__(self, keyword: str, console):
        super().__init__(keyword)
        self.console = console


class CreateSessionHook(SessionHook):
    kind = "CreateSession"

    def execute(self) -> None:
        self.console.create_session()


class ListSessionsHook(SessionHook):
    kind = "ListSessions"

    def execute(self) -> None:
        self.console.list_sessions()


class SelectSessionHook(SessionHook):
    kind = "SelectSession"

    def execute(self) -> None:
        self.console.select_session()


class ConfigureSessionHook(SessionHook):
    kind = "ConfigureSession"

    def execute(self) -> None:
        self.console.configure_session()


SESSION_HOOKS = (
    CreateSessionHook,
    ListSessionsHook,
    SelectSessionHook,
    ConfigureSessionHook,
)


def register_session_hooks(registry: HookRegistry, console) -> None:
    """Register all session hook kinds, bound to a console."""
    for hook_class in SESSION_HOOKS:
        registry.register(hook_class.kind, partial(hook_class, console=console))
