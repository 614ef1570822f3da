"""Server-Sent-Events relay between an upstream stream and the client."""

import json
import logging
from enum import Enum
from typing import AsyncIterator

import httpx

from llm_gateway.schemas import DONE_FRAME, StreamChunk, new_completion_id

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class StreamState(str, Enum):
    AWAITING_FRAME = "awaiting_frame"
    TEXT_DELTA = "text_delta"
    COMPLETION = "completion"
    PASSTHROUGH = "passthrough"
    DONE = "done"


class ResponsesStreamTranscoder:
    """Rewrites Responses API events into chat.completion.chunk frames.

    Callers push whole SSE frames (the lines between two blank lines) through
    :meth:`feed` and write whatever comes back. Frames that are not rewritten
    are returned verbatim. Once the stream is DONE every further frame is
    dropped, so exactly one ``[DONE]`` sentinel is ever produced.
    """

    def __init__(self, model: str | None = None):
        self.model = model
        self.stream_id = new_completion_id()
        self.state = StreamState.AWAITING_FRAME

    @property
    def done(self) -> bool:
        return self.state is StreamState.DONE

    def feed(self, lines: list[str]) -> list[bytes]:
        if self.done or not lines:
            return []

        data = "\n".join(line[5:].strip() for line in lines if line.startswith("data:"))
        if not data:
            return self._passthrough(lines)

        if data == "[DONE]":
            self.state = StreamState.DONE
            return [DONE_FRAME]

        try:
            event = json.loads(data)
        except json.JSONDecodeError:
            return self._passthrough(lines)
        if not isinstance(event, dict):
            return self._passthrough(lines)

        event_type = event.get("type")
        chunk_id = event.get("response_id") or self.stream_id
        model = event.get("model") or self.model

        if event_type == "response.output_text.delta":
            self.state = StreamState.TEXT_DELTA
            frame = StreamChunk.text_delta(chunk_id, model, event.get("delta") or "").to_sse()
            self.state = StreamState.AWAITING_FRAME
            return [frame]

        if event_type == "response.completed":
            self.state = StreamState.COMPLETION
            frames = [StreamChunk.final(chunk_id, model).to_sse(), DONE_FRAME]
            self.state = StreamState.DONE
            return frames

        return self._passthrough(lines)

    def finish(self) -> list[bytes]:
        """Close out a stream the upstream ended without a terminal event."""
        if self.done:
            return []
        self.state = StreamState.DONE
        return [DONE_FRAME]

    def _passthrough(self, lines: list[str]) -> list[bytes]:
        self.state = StreamState.PASSTHROUGH
        frame = ("\n".join(lines) + "\n\n").encode()
        self.state = StreamState.AWAITING_FRAME
        return [frame]


async def _aiter_frames(upstream: httpx.Response) -> AsyncIterator[list[str]]:
    frame: list[str] = []
    async for line in upstream.aiter_lines():
        if line.strip():
            frame.append(line)
        elif frame:
            yield frame
            frame = []
    if frame:
        yield frame


async def relay_verbatim(upstream: httpx.Response) -> AsyncIterator[bytes]:
    """Forward upstream bytes unchanged; the next read waits for the last write."""
    try:
        async for chunk in upstream.aiter_bytes():
            yield chunk
    finally:
        await upstream.aclose()


async def relay_responses_events(upstream: httpx.Response, model: str | None) -> AsyncIterator[bytes]:
    """Transcode a native Responses event stream into chat chunks."""
    transcoder = ResponsesStreamTranscoder(model)
    try:
        async for frame in _aiter_frames(upstream):
            for out in transcoder.feed(frame):
                yield out
            if transcoder.done:
                break
        for out in transcoder.finish():
            yield out
    finally:
        await upstream.aclose()
        logger.debug(f"Responses stream for {model} closed in state {transcoder.state.value}")


def relay_stream(upstream: httpx.Response, transcode: bool, model: str | None = None) -> AsyncIterator[bytes]:
    if transcode:
        return relay_responses_events(upstream, model)
    return relay_verbatim(upstream)
