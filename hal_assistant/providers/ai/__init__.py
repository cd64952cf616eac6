"""Chat model backends."""


def register_providers(registry, settings):
    """Register all chat backends."""
    # Import at function level to avoid circular imports
    from .openai_chat import OpenAIChatBackend

    def get_openai_config():
        return {"timeout": settings.chat.request_timeout}

    registry.register_backend("openai", OpenAIChatBackend, get_openai_config)
