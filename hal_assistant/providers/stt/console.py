"""Recognizer that reads typed utterances from the terminal."""

import click
import structlog

from .base import SpeechRecognizer


logger = structlog.get_logger()


class ConsoleRecognizer(SpeechRecognizer):
    """Stands in for a microphone: every line typed is one utterance."""

    def __init__(self, keyword: str = "", prompt: str = "You"):
        self.keyword = keyword or "hello"
        self.prompt = prompt
        self.is_running = False
        self.utterances = 0

    def initialize(self) -> None:
        self.is_running = True
        logger.debug("Console recognizer ready", keyword=self.keyword)

    def wait_for_keyword(self) -> str:
        while True:
            text = click.prompt(self.prompt, default="", show_default=False)
            if text.strip().lower().startswith(self.keyword.lower()):
                return self.keyword

    def listen(self) -> str:
        text = click.prompt(self.prompt, default="", show_default=False).strip()
        self.utterances += 1
        return text

    def stop(self) -> None:
        self.is_running = False

    def get_status(self) -> dict:
        return {
            "provider": "console",
            "is_running": self.is_running,
            "utterances": self.utterances,
        }
