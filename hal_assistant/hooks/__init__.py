"""Hooks: local commands triggered by utterances."""

from .base import Hook, HookConfig, HookFactory, hook_id
from .registry import HookRegistry, DEFAULT_HOOKS
from .session_hooks import register_session_hooks
from .dispatcher import HookDispatcher, UNKNOWN_HOOK

__all__ = [
    "Hook",
    "HookConfig",
    "HookFactory",
    "hook_id",
    "HookRegistry",
    "DEFAULT_HOOKS",
    "register_session_hooks",
    "HookDispatcher",
    "UNKNOWN_HOOK",
]
