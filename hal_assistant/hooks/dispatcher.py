"""Dispatch utterances to hooks using the chat model as a classifier."""

from typing import Optional
import structlog

from ..chat.session import ChatSession
from .registry import HookRegistry


logger = structlog.get_logger()


UNKNOWN_HOOK = "unknown"

CLASSIFIER_INSTRUCTIONS = (
    "I will send you some text. Output just the value of the hook whose keyword "
    "the text corresponds to. If the text does not match any of the items, "
    f"output {UNKNOWN_HOOK}. Output only the value of the hook, nothing else."
)


class HookDispatcher:
    """
    Routes free-form utterances to hooks.

    A dedicated classifier session is primed with every enabled
    (keyword, hook) pair and then frozen, so classification requests never
    grow its context.
    """

    def __init__(self, hooks: HookRegistry, classifier: ChatSession):
        self.hooks = hooks
        self.classifier = classifier

    def build_persona(self) -> str:
        lines = ["Keep these items in mind:"]
        for config in self.hooks.enabled_configs():
            lines.append(f"keyword: {config.keyword}")
            lines.append(f"hook: {config.kind}")
        lines.append("")
        lines.append(CLASSIFIER_INSTRUCTIONS)
        return "\n".join(lines)

    def prime(self) -> None:
        """Load the hook list into the classifier and freeze its history."""
        self.classifier.set_persona(self.build_persona())
        self.classifier.disable_history()
        logger.debug("Classifier primed", hooks=len(self.hooks.enabled_configs()))

    def classify(self, utterance: str) -> Optional[str]:
        """
        Ask the classifier which hook kind the utterance names.

        Returns:
            The registered kind, or None when the utterance is conversation
        """
        response, tokens = self.classifier.prompt(utterance)
        verdict = response.strip().strip("`'\".").strip().lower()
        logger.debug("Classifier verdict", utterance=utterance, verdict=verdict, tokens=tokens)

        if not verdict or verdict == UNKNOWN_HOOK:
            return None

        kind = self.hooks.resolve_kind(verdict)
        if kind is None or not self.hooks.is_live(kind):
            logger.info("Classifier named no live hook", verdict=verdict)
            return None

        return kind

    def dispatch(self, utterance: str) -> bool:
        """
        Execute the hook an utterance asks for.

        Returns:
            True if a hook ran and the utterance needs no further handling
        """
        try:
            kind = self.classify(utterance)
        except Exception as e:
            # No retry: fall back to an exact keyword match.
            logger.warning("Hook classifier failed", error=str(e))
            config = self.hooks.identify(utterance)
            kind = config.kind if config else None

        if kind is None:
            return False

        self.hooks.exec(kind)
        return True
