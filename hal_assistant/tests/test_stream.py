"""Tests for stream cursors and sentence segmentation."""

import pytest

from hal_assistant.chat.stream import (
    SentenceSegmenter,
    StreamCursor,
    StreamOutcome,
    StreamState,
)


def broken(*deltas, error=None):
    yield from deltas
    raise error or ConnectionResetError("connection reset")


class TestStreamCursor:
    """Tests for StreamCursor."""

    def setup_method(self):
        self.outcomes = []

    def test_drains_deltas_then_settles_done(self):
        cursor = StreamCursor(iter(["a", "b", "c"]), on_outcome=self.outcomes.append)

        assert [cursor.next() for _ in range(3)] == ["a", "b", "c"]
        assert cursor.state is StreamState.ACTIVE

        assert cursor.next() == ""
        assert cursor.done
        assert cursor.text == "abc"
        assert self.outcomes == [StreamOutcome.done("abc")]

    def test_terminal_state_is_sticky(self):
        cursor = StreamCursor(iter(["a"]), on_outcome=self.outcomes.append)
        list(cursor)

        for _ in range(3):
            assert cursor.next() == ""

        assert cursor.done
        assert len(self.outcomes) == 1

    def test_error_settles_failed(self):
        error = ConnectionResetError("reset")
        cursor = StreamCursor(broken("a", error=error), on_outcome=self.outcomes.append)

        assert cursor.next() == "a"
        assert cursor.next() == ""
        assert cursor.failed
        assert cursor.error is error
        assert cursor.next() == ""

        assert len(self.outcomes) == 1
        assert self.outcomes[0].state is StreamState.FAILED
        assert self.outcomes[0].text == ""
        assert not self.outcomes[0].ok

    def test_handler_runs_before_next_returns(self):
        seen = []
        cursor = StreamCursor(iter(["x"]), on_outcome=lambda outcome: seen.append(outcome.text))

        cursor.next()
        assert seen == []
        cursor.next()
        assert seen == ["x"]

    def test_iteration_skips_empty_deltas(self):
        cursor = StreamCursor(iter(["a", "", "b"]))

        assert list(cursor) == ["a", "b"]
        assert cursor.text == "ab"

    def test_without_handler(self):
        cursor = StreamCursor(broken())

        assert list(cursor) == []
        assert cursor.failed
        assert cursor.outcome.error is cursor.error

    def test_interrupt_settles_failed_and_propagates(self):
        cursor = StreamCursor(broken("Hel", error=KeyboardInterrupt()), on_outcome=self.outcomes.append)

        assert cursor.next() == "Hel"
        with pytest.raises(KeyboardInterrupt):
            cursor.next()

        assert cursor.failed
        assert isinstance(cursor.error, KeyboardInterrupt)
        assert len(self.outcomes) == 1
        assert not self.outcomes[0].ok
        assert cursor.next() == ""


class TestSentenceSegmenter:
    """Tests for SentenceSegmenter."""

    def setup_method(self):
        self.written = []

    def segmenter(self, deltas):
        return SentenceSegmenter(StreamCursor(deltas), writer=self.written.append)

    def test_splits_on_newline_deltas(self):
        segmenter = self.segmenter(iter(["Hello", " world.\n", "Second", " line"]))

        assert list(segmenter.segments()) == ["Hello world.\n", "Second line"]

    def test_newline_inside_delta_ends_segment(self):
        segmenter = self.segmenter(iter(["one\ntwo", " three"]))

        assert segmenter.segment() == "one\ntwo"
        assert segmenter.segment() == " three"
        assert segmenter.segment() == ""

    def test_echo_writes_every_delta(self):
        segmenter = self.segmenter(iter(["a", "b\n", "c"]))

        list(segmenter.segments(echo=True))

        assert self.written == ["a", "b\n", "c"]

    def test_no_echo_by_default(self):
        segmenter = self.segmenter(iter(["a\n"]))

        segmenter.segment()

        assert self.written == []

    def test_empty_stream_has_no_segments(self):
        assert list(self.segmenter(iter([])).segments()) == []

    def test_broken_stream_yields_what_arrived(self):
        cursor = StreamCursor(broken("One.\n", "Two"))
        segmenter = SentenceSegmenter(cursor, writer=self.written.append)

        assert list(segmenter.segments()) == ["One.\n", "Two"]
        assert cursor.failed
