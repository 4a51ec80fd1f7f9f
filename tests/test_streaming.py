"""
Tests for the client-side stream decoding and the flush loop.
"""

import threading
import time

import pytest

from frontend.streaming import (
    ERROR_MESSAGE,
    ChatSession,
    InvalidTransition,
    SSEDecoder,
    StreamConsumer,
    StreamingTurn,
    TurnState,
)


def delta(text: str) -> bytes:
    return ('data: {"choices":[{"delta":{"content":"%s"}}]}\n\n' % text).encode("utf-8")


class TestSSEDecoder:

    def test_concatenates_deltas_and_ignores_done(self):
        decoder = SSEDecoder()
        pieces = decoder.feed(delta("Hel") + delta("lo") + b"data: [DONE]\n\n")

        assert "".join(pieces) == "Hello"
        assert decoder.done

    def test_content_after_done_ignored(self):
        decoder = SSEDecoder()
        pieces = decoder.feed(delta("Hel") + delta("lo") + b"data: [DONE]\n\n" + delta(" EXTRA"))
        pieces += decoder.feed(delta(" more"))
        pieces += decoder.finish()

        assert "".join(pieces) == "Hello"

    def test_line_split_across_chunks(self):
        decoder = SSEDecoder()
        raw = delta("Hello world")

        first = decoder.feed(raw[:17])
        second = decoder.feed(raw[17:])

        assert first == []
        assert second == ["Hello world"]

    def test_multibyte_character_split_across_chunks(self):
        decoder = SSEDecoder()
        raw = delta("📄 café")
        cut = raw.index("📄".encode("utf-8")) + 2

        pieces = decoder.feed(raw[:cut]) + decoder.feed(raw[cut:])

        assert pieces == ["📄 café"]

    def test_malformed_json_skipped(self):
        decoder = SSEDecoder()
        pieces = decoder.feed(delta("a") + b"data: {not json\n\n" + delta("b"))

        assert pieces == ["a", "b"]

    def test_non_data_and_blank_lines_ignored(self):
        decoder = SSEDecoder()
        pieces = decoder.feed(b": keep-alive\n\nevent: ping\n" + delta("x") + b"\r\n")

        assert pieces == ["x"]

    def test_role_only_and_empty_deltas_ignored(self):
        decoder = SSEDecoder()
        raw = (
            b'data: {"choices":[{"delta":{"role":"assistant"}}]}\n'
            b'data: {"choices":[{"delta":{"content":""}}]}\n'
            b'data: {"choices":[]}\n'
        )

        assert decoder.feed(raw) == []

    def test_finish_drains_unterminated_line(self):
        decoder = SSEDecoder()
        raw = delta("tail").rstrip(b"\n")

        assert decoder.feed(raw) == []
        assert decoder.finish() == ["tail"]


class TestStreamingTurn:

    def test_happy_path(self):
        turn = StreamingTurn()
        turn.start()
        assert turn.in_flight
        turn.receive()
        turn.receive()
        turn.settle()

        assert turn.state is TurnState.SETTLED
        assert turn.settled

    @pytest.mark.parametrize("receive_first", [False, True])
    def test_error_from_any_in_flight_state(self, receive_first):
        turn = StreamingTurn()
        turn.start()
        if receive_first:
            turn.receive()
        turn.fail()

        assert turn.state is TurnState.ERROR
        assert turn.settled

    def test_cannot_restart_settled_turn(self):
        turn = StreamingTurn()
        turn.start()
        turn.settle()

        with pytest.raises(InvalidTransition):
            turn.start()


class TestStreamConsumer:

    def test_final_flush_has_full_text(self):
        flushed = []
        consumer = StreamConsumer(on_flush=flushed.append)

        result = consumer.run(iter([delta("Hel"), delta("lo"), b"data: [DONE]\n\n"]))

        assert result.text == "Hello"
        assert result.state is TurnState.SETTLED
        assert result.error is None
        assert flushed[-1] == "Hello"

    def test_flushes_are_prefixes(self):
        flushed = []
        consumer = StreamConsumer(on_flush=flushed.append, flush_interval=0)

        consumer.run(iter([delta("a"), delta("b"), delta("c")]))

        assert flushed[-1] == "abc"
        for earlier, later in zip(flushed, flushed[1:]):
            assert later.startswith(earlier)

    def test_flush_cadence_bounded(self):
        flushed = []
        consumer = StreamConsumer(on_flush=flushed.append, flush_interval=60)

        consumer.run(iter([delta(str(i)) for i in range(50)]))

        # nothing periodic within a minute, only the forced final flush
        assert flushed == ["".join(str(i) for i in range(50))]

    def test_stops_reading_at_done(self):
        flushed = []
        closed = threading.Event()
        never = threading.Event()

        def chunks():
            try:
                yield delta("Hel")
                yield delta("lo")
                yield b"data: [DONE]\n\n"
                # upstream keeps the connection open
                never.wait(5)
                yield delta(" EXTRA")
            finally:
                closed.set()

        started = time.monotonic()
        result = StreamConsumer(on_flush=flushed.append).run(chunks())

        assert time.monotonic() - started < 2
        assert result.text == "Hello"
        assert result.state is TurnState.SETTLED
        assert flushed[-1] == "Hello"
        assert closed.is_set()

    def test_reader_failure_shows_error(self):
        flushed = []

        def chunks():
            yield delta("partial")
            raise ConnectionError("connection reset")

        result = StreamConsumer(on_flush=flushed.append).run(chunks())

        assert result.state is TurnState.ERROR
        assert result.error == "connection reset"
        assert result.text == ERROR_MESSAGE
        assert flushed[-1] == ERROR_MESSAGE

    def test_empty_stream_settles_with_empty_text(self):
        flushed = []

        result = StreamConsumer(on_flush=flushed.append).run(iter([]))

        assert result.state is TurnState.SETTLED
        assert flushed == [""]


class TestChatSession:

    def test_send_payload_ends_with_user_message(self):
        session = ChatSession()

        payload, reply_id = session.send("hello")

        assert payload == [{"role": "user", "content": "hello"}]
        assert session.messages[-1].id == reply_id
        assert session.messages[-1].role == "assistant"
        assert session.messages[-1].content == ""
        assert session.newest_role == "assistant"

    def test_history_grows_and_update_fills_placeholder(self):
        session = ChatSession()
        _, first_id = session.send("hello")
        session.update(first_id, "hi there")

        payload, _ = session.send("and then?")

        assert payload == [
            {"role": "user", "content": "hello"},
            {"role": "assistant", "content": "hi there"},
            {"role": "user", "content": "and then?"},
        ]

    def test_failed_replies_not_resent(self):
        session = ChatSession()
        _, reply_id = session.send("hello")
        session.update(reply_id, ERROR_MESSAGE, error=True)

        payload, _ = session.send("retry")

        assert payload == [
            {"role": "user", "content": "hello"},
            {"role": "user", "content": "retry"},
        ]

    def test_update_unknown_id(self):
        with pytest.raises(KeyError):
            ChatSession().update("missing", "x")

    def test_message_ids_unique(self):
        session = ChatSession()
        session.send("a")
        session.send("b")

        ids = [m.id for m in session.messages]
        assert len(ids) == len(set(ids))
