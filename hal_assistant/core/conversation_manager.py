"""
The voice loop: activation keyword, utterances, hooks and spoken replies.
"""

from typing import Any, Callable, Dict, Optional
import click
import structlog

from ..chat.session import ChatSession
from ..chat.stream import SentenceSegmenter
from ..exceptions import HookError, SpeechRecognitionTimeout
from ..providers.stt.base import SpeechRecognizer
from ..providers.tts.base import SpeechSynthesizer
from .context import AppContext


logger = structlog.get_logger()


MAX_BLANK_UTTERANCES = 3


def _write(text: str) -> None:
    click.echo(text, nl=False)


class ConversationManager:
    """
    Drives one conversation at a time.

    After the activation keyword, every utterance is either the stop word,
    a hook, or a prompt to the default session. Replies are streamed,
    echoed, and spoken one sentence at a time.
    """

    def __init__(
        self,
        context: AppContext,
        recognizer: SpeechRecognizer,
        synthesizer: SpeechSynthesizer,
        silent: bool = False,
        writer: Optional[Callable[[str], None]] = None,
    ):
        self.context = context
        self.recognizer = recognizer
        self.synthesizer = synthesizer
        self.silent = silent
        self.writer = writer or _write

        self.session_name = ""
        self.session: Optional[ChatSession] = None
        self.is_running = False
        self.prompts = 0
        self.hooks_run = 0

    def start(self) -> None:
        """Initialize providers, pick the default session and prime hooks."""
        self.recognizer.initialize()
        if not self.silent:
            self.synthesizer.initialize()

        self.refresh_session()
        if self.context.dispatcher is None:
            self.context.build_dispatcher()

        self.context.store.save(self.context.settings.storage.sessions_path)
        self.is_running = True

        logger.info(
            "Conversation started",
            session=self.session_name,
            model=self.session.model,
            silent=self.silent,
        )
        click.echo(f"Session: {self.session_name}, Model: {self.session.model}")

    def refresh_session(self) -> None:
        """Follow the store's default session, which hooks may change."""
        self.session_name, self.session = self.context.default_session()

    def respond(self, text: str) -> str:
        """Stream the reply to a prompt, speaking each sentence."""
        try:
            cursor = self.session.prompt_stream(text)
        except Exception as e:
            logger.error("Prompt failed", error=str(e))
            click.echo(f"Error: {e}")
            return ""

        click.echo("Assistant:")
        segmenter = SentenceSegmenter(cursor, writer=self.writer)
        for segment in segmenter.segments(echo=True):
            if not self.silent:
                self.synthesizer.speak(segment)
        click.echo()

        if cursor.failed:
            click.echo(f"Error: {cursor.error}")
        return cursor.text

    def handle_utterance(self, text: str) -> bool:
        """
        Handle one recognized utterance.

        Returns:
            False when the stop word ends the activation
        """
        stop_word = self.context.settings.speech.stop_word
        if stop_word and text.lower().startswith(stop_word.lower()):
            click.echo("See you later :)")
            return False

        dispatcher = self.context.dispatcher
        if dispatcher is not None:
            try:
                handled = dispatcher.dispatch(text)
            except HookError as e:
                logger.error("Hook failed", error=str(e))
                click.echo(f"Error: {e}")
                return True

            if handled:
                self.hooks_run += 1
                self.refresh_session()
                return True

        click.echo(f"Prompt:\n {text}")
        self.prompts += 1
        self.respond(text)
        return True

    def run_activation(self) -> None:
        """Listen until the stop word or too many empty results."""
        blank = 0
        while blank < MAX_BLANK_UTTERANCES:
            click.echo("Please speak")
            try:
                text = self.recognizer.listen()
            except SpeechRecognitionTimeout as e:
                click.echo(str(e))
                blank += 1
                continue

            if not text:
                blank += 1
                continue

            blank = 0
            if not self.handle_utterance(text):
                return

        click.echo("Long time no speak, deactivated.")

    def run(self) -> None:
        """Wait for the activation keyword, forever."""
        self.start()
        stop_word = self.context.settings.speech.stop_word
        try:
            while self.is_running:
                click.echo(f"Say the keyword to activate and say {stop_word} to deactivate")
                keyword = self.recognizer.wait_for_keyword()
                click.echo(f"{keyword} here.")
                self.run_activation()
        finally:
            self.shutdown()

    def stop(self) -> None:
        self.is_running = False

    def shutdown(self) -> None:
        """Stop providers and persist all state."""
        self.is_running = False
        try:
            self.recognizer.stop()
            self.synthesizer.stop()
        finally:
            self.context.save()
        logger.info("Conversation stopped", prompts=self.prompts, hooks=self.hooks_run)

    def get_status(self) -> Dict[str, Any]:
        return {
            "is_running": self.is_running,
            "session": self.session_name,
            "session_status": self.session.get_status() if self.session else None,
            "prompts": self.prompts,
            "hooks_run": self.hooks_run,
            "providers_status": {
                "stt": self.recognizer.get_status(),
                "ai": self.session.backend.get_status() if self.session else None,
                "tts": self.synthesizer.get_status(),
            },
        }
