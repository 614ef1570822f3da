import json

import httpx
import pytest

from llm_gateway.schemas import DONE_FRAME
from llm_gateway.streaming import (
    ResponsesStreamTranscoder,
    StreamState,
    relay_responses_events,
    relay_verbatim,
)


def _event(payload: dict, event: str | None = None) -> list[str]:
    lines = [f"event: {event}"] if event else []
    lines.append(f"data: {json.dumps(payload)}")
    return lines


def _chunk(frame: bytes) -> dict:
    text = frame.decode()
    assert text.startswith("data: ") and text.endswith("\n\n")
    return json.loads(text[len("data: "):])


def test_text_delta_becomes_chat_chunk():
    transcoder = ResponsesStreamTranscoder(model="gpt-4o")

    frames = transcoder.feed(
        _event(
            {"type": "response.output_text.delta", "response_id": "resp_1", "delta": "Hel"},
            event="response.output_text.delta",
        )
    )

    assert len(frames) == 1
    chunk = _chunk(frames[0])
    assert chunk["id"] == "resp_1"
    assert chunk["object"] == "chat.completion.chunk"
    assert chunk["model"] == "gpt-4o"
    assert chunk["choices"] == [{"index": 0, "delta": {"content": "Hel"}, "finish_reason": None}]
    assert transcoder.state is StreamState.AWAITING_FRAME


def test_completed_emits_final_chunk_then_done():
    transcoder = ResponsesStreamTranscoder(model="gpt-4o")

    frames = transcoder.feed(_event({"type": "response.completed", "response_id": "resp_1"}))

    assert len(frames) == 2
    assert _chunk(frames[0])["choices"] == [{"index": 0, "delta": {}, "finish_reason": "stop"}]
    assert frames[1] == DONE_FRAME
    assert transcoder.done


def test_nothing_is_emitted_after_completion():
    transcoder = ResponsesStreamTranscoder()
    transcoder.feed(_event({"type": "response.completed"}))

    assert transcoder.feed(_event({"type": "response.output_text.delta", "delta": "late"})) == []
    assert transcoder.feed(["data: [DONE]"]) == []
    assert transcoder.finish() == []


def test_done_sentinel_closes_stream():
    transcoder = ResponsesStreamTranscoder()

    assert transcoder.feed(["data: [DONE]"]) == [DONE_FRAME]
    assert transcoder.state is StreamState.DONE


def test_unknown_events_pass_through_verbatim():
    transcoder = ResponsesStreamTranscoder()
    lines = [
        "event: response.created",
        'data: {"type": "response.created", "response": {"id": "resp_1"}}',
    ]

    assert transcoder.feed(lines) == [("\n".join(lines) + "\n\n").encode()]
    assert transcoder.state is StreamState.AWAITING_FRAME


def test_non_json_and_comment_frames_pass_through():
    transcoder = ResponsesStreamTranscoder()

    assert transcoder.feed(["data: not-json"]) == [b"data: not-json\n\n"]
    assert transcoder.feed([": keep-alive"]) == [b": keep-alive\n\n"]
    assert transcoder.feed(["data: [1, 2]"]) == [b"data: [1, 2]\n\n"]


def test_stream_without_terminal_event_still_ends_with_one_done():
    transcoder = ResponsesStreamTranscoder()
    transcoder.feed(_event({"type": "response.output_text.delta", "delta": "x"}))

    assert transcoder.finish() == [DONE_FRAME]
    assert transcoder.finish() == []


def test_chunk_ids_are_stable_without_response_id():
    transcoder = ResponsesStreamTranscoder(model="gpt-4.1")
    first = _chunk(transcoder.feed(_event({"type": "response.output_text.delta", "delta": "a"}))[0])
    second = _chunk(transcoder.feed(_event({"type": "response.output_text.delta", "delta": "b"}))[0])

    assert first["id"] == second["id"] == transcoder.stream_id
    assert first["model"] == "gpt-4.1"


def test_full_stream_has_exactly_one_done():
    transcoder = ResponsesStreamTranscoder(model="gpt-4o")
    script = [
        _event({"type": "response.created"}, event="response.created"),
        _event({"type": "response.output_text.delta", "delta": "Hi"}),
        _event({"type": "response.output_text.delta", "delta": " there"}),
        _event({"type": "response.completed"}),
        _event({"type": "response.output_text.delta", "delta": "ignored"}),
        ["data: [DONE]"],
    ]

    output = b"".join(frame for lines in script for frame in transcoder.feed(lines))
    output += b"".join(transcoder.finish())

    assert output.count(DONE_FRAME) == 1
    assert output.endswith(DONE_FRAME)
    assert b"ignored" not in output


class TrackingStream(httpx.AsyncByteStream):
    def __init__(self, chunks: list[bytes]):
        self.chunks = chunks
        self.closed = False

    async def __aiter__(self):
        for chunk in self.chunks:
            yield chunk

    async def aclose(self):
        self.closed = True


def _streaming_upstream(body: bytes) -> tuple[httpx.Response, TrackingStream]:
    stream = TrackingStream([body[:40], body[40:]])
    return httpx.Response(200, stream=stream, headers={"content-type": "text/event-stream"}), stream


@pytest.mark.asyncio
async def test_verbatim_relay_releases_upstream_on_client_disconnect():
    upstream, stream = _streaming_upstream(b'data: {"id":"c1","choices":[]}\n\n' * 4)
    relay = relay_verbatim(upstream)

    assert await relay.__anext__()
    await relay.aclose()

    assert upstream.is_closed
    assert stream.closed


@pytest.mark.asyncio
async def test_responses_relay_releases_upstream_on_client_disconnect():
    frame = 'data: {"type": "response.output_text.delta", "delta": "x"}\n\n'
    upstream, stream = _streaming_upstream((frame * 4).encode())
    relay = relay_responses_events(upstream, "gpt-4o")

    first = await relay.__anext__()
    await relay.aclose()

    assert _chunk(first)["choices"][0]["delta"] == {"content": "x"}
    assert upstream.is_closed
    assert stream.closed
