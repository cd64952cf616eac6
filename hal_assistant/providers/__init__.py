"""Provider interfaces and implementations for speech and chat models."""

from .registry import ProviderRegistry, build_registry

__all__ = ["ProviderRegistry", "build_registry"]
