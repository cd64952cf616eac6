"""Base interface for speech synthesizers."""

from abc import ABC, abstractmethod


class SpeechSynthesizer(ABC):
    """Abstract base class for text-to-speech providers."""

    @abstractmethod
    def initialize(self) -> None:
        """Initialize the synthesizer."""
        pass

    @abstractmethod
    def speak(self, text: str) -> None:
        """
        Speak the text, blocking until playback finishes.

        Args:
            text: The text to convert to speech
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the synthesizer and clean up resources."""
        pass

    @abstractmethod
    def get_status(self) -> dict:
        """Get current status of the synthesizer."""
        pass
