"""Provider registry for dynamic provider loading."""

from typing import Dict, Type, Callable, Any
import structlog

from .stt.base import SpeechRecognizer
from .ai.base import ChatBackend
from .tts.base import SpeechSynthesizer


logger = structlog.get_logger()


class ProviderRegistry:
    """Registry for managing provider implementations."""

    def __init__(self):
        self._recognizers: Dict[str, Type[SpeechRecognizer]] = {}
        self._backends: Dict[str, Type[ChatBackend]] = {}
        self._synthesizers: Dict[str, Type[SpeechSynthesizer]] = {}
        self._provider_configs: Dict[str, Callable[[], Dict[str, Any]]] = {}

    def register_recognizer(
        self,
        name: str,
        provider_class: Type[SpeechRecognizer],
        config_getter: Callable[[], Dict[str, Any]] = None,
    ) -> None:
        """Register a speech recognizer."""
        self._recognizers[name] = provider_class
        if config_getter:
            self._provider_configs[f"stt:{name}"] = config_getter
        logger.debug(
            "Registered recognizer", name=name, class_name=provider_class.__name__
        )

    def register_backend(
        self,
        name: str,
        provider_class: Type[ChatBackend],
        config_getter: Callable[[], Dict[str, Any]] = None,
    ) -> None:
        """Register a chat backend."""
        self._backends[name] = provider_class
        if config_getter:
            self._provider_configs[f"ai:{name}"] = config_getter
        logger.debug(
            "Registered chat backend", name=name, class_name=provider_class.__name__
        )

    def register_synthesizer(
        self,
        name: str,
        provider_class: Type[SpeechSynthesizer],
        config_getter: Callable[[], Dict[str, Any]] = None,
    ) -> None:
        """Register a speech synthesizer."""
        self._synthesizers[name] = provider_class
        if config_getter:
            self._provider_configs[f"tts:{name}"] = config_getter
        logger.debug(
            "Registered synthesizer", name=name, class_name=provider_class.__name__
        )

    def _create(self, kind: str, providers: Dict[str, type], name: str, **kwargs):
        if name not in providers:
            raise ValueError(f"Unknown {kind} provider: {name}")

        config_key = f"{kind}:{name}"
        if config_key in self._provider_configs:
            config = self._provider_configs[config_key]()
            # Explicit arguments win over configured ones
            kwargs = {**config, **kwargs}

        return providers[name](**kwargs)

    def get_recognizer(self, name: str, **kwargs) -> SpeechRecognizer:
        """Get a speech recognizer instance."""
        return self._create("stt", self._recognizers, name, **kwargs)

    def get_backend(self, name: str, **kwargs) -> ChatBackend:
        """Get a chat backend instance."""
        return self._create("ai", self._backends, name, **kwargs)

    def get_synthesizer(self, name: str, **kwargs) -> SpeechSynthesizer:
        """Get a speech synthesizer instance."""
        return self._create("tts", self._synthesizers, name, **kwargs)

    def list_recognizers(self) -> list[str]:
        return list(self._recognizers.keys())

    def list_backends(self) -> list[str]:
        return list(self._backends.keys())

    def list_synthesizers(self) -> list[str]:
        return list(self._synthesizers.keys())


def build_registry(settings) -> ProviderRegistry:
    """Create a registry holding every built-in provider."""
    from . import stt, ai, tts

    registry = ProviderRegistry()
    stt.register_providers(registry, settings)
    ai.register_providers(registry, settings)
    tts.register_providers(registry, settings)
    return registry
