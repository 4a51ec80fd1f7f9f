"""Client side of the chat stream: SSE decoding, turn state and the flush loop."""

import codecs
import json
import logging
import queue
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "Sorry, I encountered an error connecting to the AI."
FLUSH_INTERVAL_SECONDS = 0.1


# ======================
# SSE decoding
# ======================
class SSEDecoder:
    """Turns raw completion-stream bytes into content deltas.

    Bytes may be split anywhere, including inside a multi-byte character or a
    line; the undecoded tail and the unterminated last line are carried over
    to the next ``feed``.
    """

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._carry = ""
        self.done = False

    def feed(self, chunk: bytes) -> List[str]:
        text = self._carry + self._decoder.decode(chunk)
        lines = text.split("\n")
        self._carry = lines.pop()
        return self._parse_lines(lines)

    def finish(self) -> List[str]:
        """Flush the decoder and parse whatever line was left unterminated."""
        tail = self._carry + self._decoder.decode(b"", final=True)
        self._carry = ""
        return self._parse_lines([tail])

    def _parse_lines(self, lines: List[str]) -> List[str]:
        pieces = []
        for line in lines:
            piece = self._parse_line(line.rstrip("\r"))
            if piece:
                pieces.append(piece)
        return pieces

    def _parse_line(self, line: str) -> Optional[str]:
        # Nothing after [DONE] belongs to the reply
        if self.done or not line.startswith("data:"):
            return None

        data = line[len("data:"):].strip()
        if not data:
            return None
        if data == "[DONE]":
            self.done = True
            return None

        try:
            payload = json.loads(data)
        except json.JSONDecodeError:
            logger.debug(f"Skipping malformed stream line: {data[:80]}")
            return None

        try:
            content = payload["choices"][0]["delta"].get("content")
        except (KeyError, IndexError, TypeError, AttributeError):
            return None
        return content if isinstance(content, str) else None


# ======================
# Turn state
# ======================
class TurnState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    STREAMING = "streaming"
    SETTLED = "settled"
    ERROR = "error"


_TRANSITIONS: Dict[TurnState, Tuple[TurnState, ...]] = {
    TurnState.IDLE: (TurnState.AWAITING_RESPONSE,),
    TurnState.AWAITING_RESPONSE: (TurnState.STREAMING, TurnState.SETTLED, TurnState.ERROR),
    TurnState.STREAMING: (TurnState.STREAMING, TurnState.SETTLED, TurnState.ERROR),
    TurnState.SETTLED: (),
    TurnState.ERROR: (),
}


class InvalidTransition(RuntimeError):
    pass


class StreamingTurn:
    """Lifecycle of one assistant reply."""

    def __init__(self):
        self.state = TurnState.IDLE

    def _move(self, target: TurnState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {target.value}")
        self.state = target

    def start(self) -> None:
        self._move(TurnState.AWAITING_RESPONSE)

    def receive(self) -> None:
        self._move(TurnState.STREAMING)

    def settle(self) -> None:
        self._move(TurnState.SETTLED)

    def fail(self) -> None:
        self._move(TurnState.ERROR)

    @property
    def in_flight(self) -> bool:
        return self.state in (TurnState.AWAITING_RESPONSE, TurnState.STREAMING)

    @property
    def settled(self) -> bool:
        return self.state in (TurnState.SETTLED, TurnState.ERROR)


# ======================
# Reader -> consumer messages
# ======================
@dataclass(frozen=True)
class Append:
    text: str


@dataclass(frozen=True)
class End:
    pass


@dataclass(frozen=True)
class Fail:
    error: str


StreamEvent = Union[Append, End, Fail]


@dataclass
class TurnResult:
    text: str
    state: TurnState
    error: Optional[str] = None


class StreamConsumer:
    """Accumulates a reply and pushes it to the UI at a fixed cadence.

    A reader thread owns the network iterator and only posts ``Append``,
    ``End`` and ``Fail`` events to a queue. The loop in ``run`` is the sole
    owner of the text buffer: it flushes it through ``on_flush`` at most once
    per ``flush_interval`` while text arrives and once more when the stream
    ends. On failure the rendered content becomes ``ERROR_MESSAGE``.
    """

    def __init__(
        self,
        on_flush: Callable[[str], None],
        flush_interval: float = FLUSH_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.on_flush = on_flush
        self.flush_interval = flush_interval
        self.clock = clock
        self.turn = StreamingTurn()

    @staticmethod
    def _read(chunks: Iterable[bytes], inbox: "queue.Queue[StreamEvent]") -> None:
        decoder = SSEDecoder()
        try:
            for chunk in chunks:
                for piece in decoder.feed(chunk):
                    inbox.put(Append(piece))
                if decoder.done:
                    # Release the connection instead of waiting for upstream to hang up
                    close = getattr(chunks, "close", None)
                    if close is not None:
                        close()
                    break
            else:
                for piece in decoder.finish():
                    inbox.put(Append(piece))
        except Exception as e:
            inbox.put(Fail(str(e)))
            return
        inbox.put(End())

    def run(self, chunks: Iterable[bytes]) -> TurnResult:
        inbox: "queue.Queue[StreamEvent]" = queue.Queue()
        self.turn.start()

        reader = threading.Thread(target=self._read, args=(chunks, inbox), daemon=True)
        reader.start()

        buffer: List[str] = []
        pending = False
        last_flush = self.clock()

        while True:
            wait = max(0.0, self.flush_interval - (self.clock() - last_flush))
            try:
                event = inbox.get(timeout=wait if pending else None)
            except queue.Empty:
                event = None

            if isinstance(event, Append):
                if self.turn.state is TurnState.AWAITING_RESPONSE:
                    self.turn.receive()
                buffer.append(event.text)
                pending = True
            elif isinstance(event, End):
                self.turn.settle()
                text = "".join(buffer)
                self.on_flush(text)
                break
            elif isinstance(event, Fail):
                logger.error(f"Chat stream failed: {event.error}")
                self.turn.fail()
                self.on_flush(ERROR_MESSAGE)
                reader.join()
                return TurnResult(ERROR_MESSAGE, self.turn.state, event.error)

            if pending and self.clock() - last_flush >= self.flush_interval:
                self.on_flush("".join(buffer))
                last_flush = self.clock()
                pending = False

        reader.join()
        return TurnResult(text, self.turn.state)


# ======================
# Conversation history
# ======================
@dataclass
class ChatMessage:
    role: str
    content: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=datetime.now)
    error: bool = False

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class ChatSession:
    """Client-side conversation; the backend is stateless and gets it all every turn."""

    def __init__(self, messages: Optional[List[ChatMessage]] = None):
        self.messages: List[ChatMessage] = messages if messages is not None else []

    def send(self, text: str) -> Tuple[List[Dict[str, str]], str]:
        """Append the user message and an empty assistant placeholder.

        Returns:
            The request payload (history up to and including the new user
            message, without failed replies) and the placeholder id.
        """
        self.messages.append(ChatMessage(role="user", content=text))
        # Failed replies stay on screen but are never resent (DESIGN.md, "Failed replies")
        payload = [m.to_payload() for m in self.messages if not m.error]

        placeholder = ChatMessage(role="assistant", content="")
        self.messages.append(placeholder)
        return payload, placeholder.id

    def update(self, message_id: str, content: str, error: bool = False) -> None:
        for message in self.messages:
            if message.id == message_id:
                message.content = content
                message.error = error
                return
        raise KeyError(message_id)

    @property
    def newest_role(self) -> Optional[str]:
        return self.messages[-1].role if self.messages else None
