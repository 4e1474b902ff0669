"""Incremental decoder for ``text/event-stream`` bodies.

The decoder knows nothing about sockets or HTTP: feed it bytes as they
arrive and it returns every event completed by that chunk. This keeps the
parsing testable against canned byte sequences::

    events = list(iter_events([b"data: a\\n", b"\\ndata: b\\n\\n"]))
    assert [e.data for e in events] == ["a", "b"]

Field handling follows the WHATWG event-stream rules: ``data`` lines are
joined with newlines, comment lines start with ``:``, a blank line
dispatches the pending event. Unlike the browser algorithm, data still
pending when the stream ends is dispatched rather than dropped.
"""

from __future__ import annotations

import codecs
import re
from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator, Iterable, Iterator, Optional, Union

DONE_SENTINEL = "[DONE]"

_LINE_END = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class SSEEvent:
    """One dispatched server-sent event."""

    data: str
    event: Optional[str] = None
    id: Optional[str] = None
    retry: Optional[int] = None

    @property
    def is_done(self) -> bool:
        return self.data.strip() == DONE_SENTINEL


class SSEDecoder:
    """Stateful line splitter and field accumulator."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._reset_event()

    def _reset_event(self) -> None:
        self._data: list[str] = []
        self._event: Optional[str] = None
        self._id: Optional[str] = None
        self._retry: Optional[int] = None

    def feed(self, chunk: Union[bytes, str]) -> list[SSEEvent]:
        """Consume a chunk and return the events it completes."""
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk

        events: list[SSEEvent] = []
        while True:
            match = _LINE_END.search(self._buffer)
            if match is None:
                break
            # A trailing CR may be the first half of a CRLF split across chunks.
            if match.group() == "\r" and match.end() == len(self._buffer):
                break
            line = self._buffer[: match.start()]
            self._buffer = self._buffer[match.end() :]
            event = self._process_line(line)
            if event is not None:
                events.append(event)
        return events

    def flush(self) -> list[SSEEvent]:
        """Finish the stream, dispatching whatever is still pending."""
        tail = self._decoder.decode(b"", final=True)
        events = self.feed(tail) if tail else []

        if self._buffer:
            line = self._buffer.rstrip("\r")
            self._buffer = ""
            event = self._process_line(line)
            if event is not None:
                events.append(event)

        event = self._dispatch()
        if event is not None:
            events.append(event)
        return events

    def _process_line(self, line: str) -> Optional[SSEEvent]:
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None

        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if field == "data":
            self._data.append(value)
        elif field == "event":
            self._event = value
        elif field == "id":
            if "\0" not in value:
                self._id = value
        elif field == "retry":
            if value.isdigit():
                self._retry = int(value)
        return None

    def _dispatch(self) -> Optional[SSEEvent]:
        if not self._data:
            self._reset_event()
            return None
        event = SSEEvent(
            data="\n".join(self._data),
            event=self._event,
            id=self._id,
            retry=self._retry,
        )
        self._reset_event()
        return event


def iter_events(chunks: Iterable[Union[bytes, str]]) -> Iterator[SSEEvent]:
    """Lazily decode a finite sequence of chunks into events."""
    decoder = SSEDecoder()
    for chunk in chunks:
        yield from decoder.feed(chunk)
    yield from decoder.flush()


async def aiter_events(
    chunks: AsyncIterable[Union[bytes, str]],
) -> AsyncIterator[SSEEvent]:
    """Async counterpart of :func:`iter_events` for streamed HTTP bodies."""
    decoder = SSEDecoder()
    async for chunk in chunks:
        for event in decoder.feed(chunk):
            yield event
    for event in decoder.flush():
        yield event
