"""Registry of hook kinds and configured hooks."""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import structlog

from ..exceptions import (
    DuplicateHookError,
    HookNotFoundError,
    StoreFormatError,
    UnknownHookKindError,
)
from ..utils.jsonfile import atomic_write_json, read_json_object
from .base import HookConfig, HookFactory, hook_id


logger = structlog.get_logger()


DEFAULT_HOOKS = (
    ("create session", "CreateSession"),
    ("list session", "ListSessions"),
    ("select session", "SelectSession"),
    ("configure session", "ConfigureSession"),
)


class HookRegistry:
    """Maps hook kinds to factories and config ids to bound hooks."""

    def __init__(self):
        self._factories: Dict[str, HookFactory] = {}
        self.configs: Dict[str, HookConfig] = {}

    def register(self, kind: str, factory: HookFactory) -> bool:
        """Register a hook kind. Returns False if the kind is already known."""
        if kind in self._factories:
            return False

        self._factories[kind] = factory
        logger.debug("Registered hook kind", kind=kind)
        return True

    def kinds(self) -> List[str]:
        return list(self._factories)

    def is_registered(self, kind: str) -> bool:
        return kind in self._factories

    def resolve_kind(self, name: str) -> Optional[str]:
        """Find a registered kind by case-insensitive name."""
        name = name.lower()
        for kind in self._factories:
            if kind.lower() == name:
                return kind

        return None

    def _bind(self, config: HookConfig) -> HookConfig:
        factory = self._factories.get(config.kind)
        if factory is None:
            raise UnknownHookKindError(config.kind)

        config.instance = factory(config.keyword)
        return config

    def add(self, keyword: str, kind: str) -> HookConfig:
        """
        Configure a hook kind for a keyword.

        Raises:
            DuplicateHookError: The same keyword and kind are configured
            UnknownHookKindError: No factory is registered for the kind
        """
        config_id = hook_id(keyword, kind)
        if config_id in self.configs:
            raise DuplicateHookError(keyword, kind)

        config = self._bind(HookConfig(id=config_id, keyword=keyword, kind=kind))
        self.configs[config_id] = config
        logger.info("Added hook", id=config_id, keyword=keyword, kind=kind)
        return config

    def add_defaults(self) -> None:
        """Add the stock session hooks whose kinds are registered."""
        for keyword, kind in DEFAULT_HOOKS:
            if not self.is_registered(kind):
                continue
            try:
                self.add(keyword, kind)
            except DuplicateHookError:
                continue

    def get(self, config_id: str) -> Optional[HookConfig]:
        return self.configs.get(config_id)

    def delete(self, config_id: str) -> bool:
        if config_id not in self.configs:
            return False

        config = self.configs.pop(config_id)
        logger.info("Deleted hook", id=config_id, keyword=config.keyword, kind=config.kind)
        return True

    def enable(self, config_id: str) -> bool:
        config = self.configs.get(config_id)
        if config is None:
            return False

        config.enabled = True
        return True

    def disable(self, config_id: str) -> bool:
        config = self.configs.get(config_id)
        if config is None:
            return False

        config.enabled = False
        return True

    def enabled_configs(self) -> List[HookConfig]:
        return [config for config in self.configs.values() if config.enabled]

    def _live(self, kind: str) -> Optional[HookConfig]:
        for config in self.enabled_configs():
            if config.kind == kind and config.instance is not None:
                return config

        return None

    def is_live(self, kind: str) -> bool:
        """Check whether an enabled hook of this kind can be executed."""
        resolved = self.resolve_kind(kind)
        return resolved is not None and self._live(resolved) is not None

    def exec(self, kind: str) -> None:
        """
        Execute the live hook bound for a kind.

        Raises:
            HookNotFoundError: No enabled hook of that kind is configured
        """
        resolved = self.resolve_kind(kind)
        config = self._live(resolved) if resolved else None
        if config is None:
            raise HookNotFoundError(kind)

        logger.info("Executing hook", kind=config.kind, keyword=config.keyword)
        config.instance.execute()

    def identify(self, utterance: str) -> Optional[HookConfig]:
        """Find the enabled hook whose keyword matches the utterance exactly."""
        for config in self.enabled_configs():
            if config.instance is not None and config.instance.identify(utterance):
                return config

        return None

    def to_document(self) -> Dict[str, Any]:
        return {
            "hookConfigs": {
                config_id: config.to_dict() for config_id, config in self.configs.items()
            }
        }

    def load_document(self, document: Dict[str, Any]) -> None:
        """Replace configured hooks with those of a document."""
        if not isinstance(document, dict):
            raise StoreFormatError("Hook document must be an object")

        items = document.get("hookConfigs", {})
        if not isinstance(items, dict):
            raise StoreFormatError("'hookConfigs' must be an object")

        configs = {}
        for data in items.values():
            config = self._bind(HookConfig.from_dict(data))
            configs[config.id] = config

        self.configs = configs

    def save(self, file_path: Union[str, Path]) -> None:
        atomic_write_json(file_path, self.to_document())
        logger.debug("Hooks saved", file=str(file_path), count=len(self.configs))

    def load(self, file_path: Union[str, Path]) -> None:
        self.load_document(read_json_object(file_path))
        logger.debug("Hooks loaded", file=str(file_path), count=len(self.configs))
