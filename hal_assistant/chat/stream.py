"""Incremental consumption of streamed model responses."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional
import click
import structlog


logger = structlog.get_logger()


class StreamState(Enum):
    """Lifecycle of a stream cursor. Terminal states are sticky."""

    ACTIVE = "active"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class StreamOutcome:
    """Terminal result of a stream: ``done(text)`` or ``failed(error)``."""

    state: StreamState
    text: str = ""
    error: Optional[BaseException] = None

    @classmethod
    def done(cls, text: str) -> "StreamOutcome":
        return cls(StreamState.DONE, text=text)

    @classmethod
    def failed(cls, error: BaseException) -> "StreamOutcome":
        # A broken response carries no text.
        return cls(StreamState.FAILED, text="", error=error)

    @property
    def ok(self) -> bool:
        return self.state is StreamState.DONE


OutcomeHandler = Callable[[StreamOutcome], None]


class StreamCursor:
    """
    Pull-based consumer of a streamed response.

    ``next()`` returns one content delta per call. When the delta iterator is
    exhausted the outcome is ``done`` with the full concatenated text; when it
    raises, the outcome is ``failed`` and the exception is kept in ``error``.
    The outcome handler runs exactly once, before ``next()`` returns, so
    whoever owns the handler has settled its state before the caller sees
    the end of the stream.

    A cursor is not reentrant: only one ``next()`` may be outstanding.
    """

    def __init__(self, deltas: Iterable[str], on_outcome: Optional[OutcomeHandler] = None):
        self._deltas = iter(deltas)
        self._on_outcome = on_outcome
        self._parts: List[str] = []
        self._pulling = False
        self.state = StreamState.ACTIVE
        self.outcome: Optional[StreamOutcome] = None

    @property
    def is_terminal(self) -> bool:
        return self.state is not StreamState.ACTIVE

    @property
    def done(self) -> bool:
        return self.state is StreamState.DONE

    @property
    def failed(self) -> bool:
        return self.state is StreamState.FAILED

    @property
    def error(self) -> Optional[BaseException]:
        """The transport error that failed the stream, if any."""
        return self.outcome.error if self.outcome else None

    @property
    def text(self) -> str:
        """Everything received so far."""
        return "".join(self._parts)

    def next(self) -> str:
        """Return the next delta, or ``""`` once the stream is terminal."""
        if self.is_terminal:
            return ""
        if self._pulling:
            raise RuntimeError("StreamCursor.next() is not reentrant")

        self._pulling = True
        try:
            delta = next(self._deltas)
        except StopIteration:
            self._settle(StreamOutcome.done(self.text))
            return ""
        except Exception as e:
            logger.warning("Stream broken", error=str(e), received=len(self.text))
            self._settle(StreamOutcome.failed(e))
            return ""
        except BaseException as e:
            # Settle before an interrupt propagates.
            self._settle(StreamOutcome.failed(e))
            raise
        finally:
            self._pulling = False

        self._parts.append(delta)
        return delta

    def __iter__(self) -> Iterator[str]:
        while not self.is_terminal:
            delta = self.next()
            if delta:
                yield delta

    def _settle(self, outcome: StreamOutcome) -> None:
        self.outcome = outcome
        try:
            if self._on_outcome is not None:
                self._on_outcome(outcome)
        finally:
            self.state = outcome.state
            self._on_outcome = None


def _echo(text: str) -> None:
    click.echo(text, nl=False)


class SentenceSegmenter:
    """
    Buffers stream deltas into newline-terminated segments.

    Feeding segments to a speech synthesizer bounds the latency to one
    sentence instead of the whole response.
    """

    def __init__(self, cursor: StreamCursor, writer: Optional[Callable[[str], None]] = None):
        self.cursor = cursor
        self.writer = writer or _echo
        self._buffer: List[str] = []

    def segment(self, echo: bool = False) -> str:
        """
        Pull deltas until one contains a newline or the stream ends.

        Returns:
            The buffered text. ``""`` means there are no more segments.
        """
        while True:
            delta = self.cursor.next()
            if delta:
                self._buffer.append(delta)
                if echo:
                    self.writer(delta)
                if "\n" in delta:
                    break

            if self.cursor.is_terminal:
                break

        segment = "".join(self._buffer)
        self._buffer.clear()
        return segment

    def segments(self, echo: bool = False) -> Iterator[str]:
        """Yield segments until the stream is drained."""
        segment = self.segment(echo)
        while segment:
            yield segment
            segment = self.segment(echo)
