"""Tests for the incremental event-stream decoder."""

import pytest

from voicebot.llm.openai_client import extract_delta_text
from voicebot.llm.sse import SSEDecoder, SSEEvent, aiter_events, iter_events


def test_single_event() -> None:
    events = list(iter_events([b"data: hello\n\n"]))

    assert events == [SSEEvent(data="hello")]


def test_multiline_data_is_joined() -> None:
    events = list(iter_events([b"data: first\ndata: second\n\n"]))

    assert [e.data for e in events] == ["first\nsecond"]


def test_fields_and_comments() -> None:
    raw = b": keep-alive\nevent: delta\nid: 7\nretry: 250\ndata:no-space\n\n"

    (event,) = iter_events([raw])

    assert event == SSEEvent(data="no-space", event="delta", id="7", retry=250)


def test_events_without_data_are_not_dispatched() -> None:
    assert list(iter_events([b"event: ping\n\n: comment\n\n"])) == []


@pytest.mark.parametrize("newline", [b"\n", b"\r\n", b"\r"])
def test_line_endings(newline: bytes) -> None:
    raw = b"data: a" + newline + newline + b"data: b" + newline + newline

    assert [e.data for e in iter_events([raw])] == ["a", "b"]


def test_crlf_split_between_chunks() -> None:
    decoder = SSEDecoder()

    assert decoder.feed(b"data: a\r") == []
    assert decoder.feed(b"\n\r") == []
    assert [e.data for e in decoder.feed(b"\n")] == ["a"]


def test_utf8_split_between_chunks() -> None:
    raw = "data: café ☕\n\n".encode("utf-8")
    cut = raw.index("☕".encode("utf-8")) + 1

    events = list(iter_events([raw[:cut], raw[cut:]]))

    assert [e.data for e in events] == ["café ☕"]


def test_pending_data_is_flushed_at_end() -> None:
    events = list(iter_events([b"data: one\n\ndata: tail"]))

    assert [e.data for e in events] == ["one", "tail"]


def test_done_sentinel() -> None:
    (event,) = iter_events([b"data: [DONE]\n\n"])

    assert event.is_done
    assert not SSEEvent(data="[DONE] later").is_done


def test_iteration_is_lazy_and_restartable() -> None:
    chunks = [b"data: 1\n\n", b"data: 2\n\n"]

    first = iter_events(chunks)
    assert next(first).data == "1"

    assert [e.data for e in iter_events(chunks)] == ["1", "2"]
    assert [e.data for e in first] == ["2"]


@pytest.mark.asyncio
async def test_async_iteration() -> None:
    async def chunks():
        yield b"data: x"
        yield b"\n\ndata: y\n\n"

    assert [e.data async for e in aiter_events(chunks())] == ["x", "y"]


@pytest.mark.parametrize(
    "payload, expected",
    [
        ('{"choices":[{"delta":{"content":"Hi"}}]}', "Hi"),
        ('{"choices":[{"delta":{"role":"assistant"}}]}', None),
        ('{"choices":[{"delta":{"content":""}}]}', None),
        ('{"choices":[]}', None),
        ('{"choices":[{"delta":null}]}', None),
        ("{broken", None),
        ("[1, 2]", None),
    ],
)
def test_extract_delta_text(payload: str, expected) -> None:
    assert extract_delta_text(payload) == expected
