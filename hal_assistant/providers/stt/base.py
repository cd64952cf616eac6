"""Base interface for speech recognizers."""

from abc import ABC, abstractmethod


class SpeechRecognizer(ABC):
    """Abstract base class for speech-to-text providers."""

    @abstractmethod
    def initialize(self) -> None:
        """Initialize the recognizer."""
        pass

    @abstractmethod
    def wait_for_keyword(self) -> str:
        """
        Block until the activation keyword is heard.

        Returns:
            The keyword that was recognized
        """
        pass

    @abstractmethod
    def listen(self) -> str:
        """
        Recognize one utterance.

        Returns:
            The recognized text, ``""`` when nothing was said

        Raises:
            SpeechRecognitionTimeout: No result arrived in time
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the recognizer and clean up resources."""
        pass

    @abstractmethod
    def get_status(self) -> dict:
        """Get current status of the recognizer."""
        pass
