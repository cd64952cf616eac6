"""Speech recognizers."""


def register_providers(registry, settings):
    """Register all speech recognizers."""
    # Import at function level to avoid circular imports
    from .console import ConsoleRecognizer

    def get_console_config():
        return {"keyword": settings.speech.keyword}

    registry.register_recognizer("console", ConsoleRecognizer, get_console_config)
