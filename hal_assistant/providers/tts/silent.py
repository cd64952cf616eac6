"""Synthesizers that do not produce audio."""

import structlog

from .base import SpeechSynthesizer


logger = structlog.get_logger()


class SilentSynthesizer(SpeechSynthesizer):
    """Swallows speech. Text is already echoed while it streams."""

    def __init__(self):
        self.segments = 0

    def initialize(self) -> None:
        pass

    def speak(self, text: str) -> None:
        self.segments += 1
        logger.debug("Speech skipped", chars=len(text))

    def stop(self) -> None:
        pass

    def get_status(self) -> dict:
        return {"provider": "silent", "segments": self.segments}
