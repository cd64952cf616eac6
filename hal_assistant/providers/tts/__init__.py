"""Speech synthesizers."""


def register_providers(registry, settings):
    """Register all speech synthesizers."""
    # Import at function level to avoid circular imports
    from .silent import SilentSynthesizer

    registry.register_synthesizer("silent", SilentSynthesizer)
