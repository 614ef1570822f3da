"""Request and response shapes spoken by clients and upstream providers."""

import json
import time
import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict


def new_completion_id(prefix: str = "chatcmpl") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class PassthroughModel(BaseModel):
    """Base for wire shapes: unknown fields are kept and forwarded."""

    model_config = ConfigDict(extra="allow")


# Client-facing Chat shape
class ChatMessage(PassthroughModel):
    """OpenAI-style chat message."""
    role: str
    content: str | list[Any] | None = None


class ChatCompletionRequest(PassthroughModel):
    """OpenAI-compatible chat completion request."""
    model: str
    messages: list[ChatMessage] = []
    stream: bool | None = None
    max_tokens: int | None = None
    max_completion_tokens: int | None = None
    temperature: float | None = None
    tools: list[Any] | None = None
    tool_choice: Any = None
    response_format: Any = None

    @property
    def wants_stream(self) -> bool:
        return bool(self.stream)


class UsageInfo(PassthroughModel):
    """Token usage information."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletionChoice(PassthroughModel):
    """Single completion choice."""
    index: int = 0
    message: ChatMessage | None = None
    finish_reason: str | None = None


class ChatCompletionResponse(PassthroughModel):
    """OpenAI-compatible chat completion response."""
    id: str | None = None
    object: str = "chat.completion"
    created: int | None = None
    model: str | None = None
    choices: list[ChatCompletionChoice] = []
    usage: UsageInfo | None = None

    @property
    def text(self) -> str:
        if not self.choices or self.choices[0].message is None:
            return ""
        content = self.choices[0].message.content
        return content if isinstance(content, str) else ""


# Client-facing Responses shape
class StreamMode(PassthroughModel):
    mode: str = "text"


class ResponsesMetadata(PassthroughModel):
    conversation_history: list[ChatMessage] | None = None
    system_context: str | list[Any] | None = None


class ResponsesRequest(PassthroughModel):
    """Responses-style request: latest turn in `input`, prior turns in metadata."""
    model: str
    input: str | list[Any] | None = None
    modalities: list[str] | None = None
    metadata: ResponsesMetadata | None = None
    stream: bool | StreamMode | None = None
    max_output_tokens: int | None = None
    max_tokens: int | None = None
    tools: list[Any] | None = None
    tool_choice: Any = None
    response_format: Any = None

    @property
    def wants_stream(self) -> bool:
        return self.stream is True or isinstance(self.stream, StreamMode)


class ResponsesEnvelope(BaseModel):
    """Responses-shaped reply built from a provider without a native Responses API."""
    id: str
    model: str | None = None
    status: str = "completed"
    output: str
    usage: UsageInfo | None = None


ClientRequest = ChatCompletionRequest | ResponsesRequest


def parse_client_body(body: dict) -> ClientRequest:
    """Classify a client JSON body: an `input` field marks the Responses shape."""
    if "input" in body:
        return ResponsesRequest.model_validate(body)
    return ChatCompletionRequest.model_validate(body)


# Anthropic Messages API
class AnthropicMessagesRequest(BaseModel):
    """Native Anthropic request body."""
    model: str
    max_tokens: int
    messages: list[ChatMessage]
    stream: bool = False
    system: str | list[Any] | None = None
    temperature: float | None = None


class AnthropicContentBlock(PassthroughModel):
    type: str = "text"
    text: str | None = None


class AnthropicUsage(PassthroughModel):
    input_tokens: int = 0
    output_tokens: int = 0


class AnthropicMessage(PassthroughModel):
    """Native Anthropic (non-streaming) response body."""
    id: str | None = None
    model: str | None = None
    content: list[AnthropicContentBlock] = []
    stop_reason: str | None = None
    usage: AnthropicUsage | None = None


# Streaming
DONE_FRAME = b"data: [DONE]\n\n"


class StreamChunk(BaseModel):
    """Client-facing chat.completion.chunk frame."""
    id: str
    object: str = "chat.completion.chunk"
    created: int
    model: str | None = None
    choices: list[dict]

    @classmethod
    def text_delta(cls, id: str, model: str | None, text: str) -> "StreamChunk":
        return cls(
            id=id,
            created=int(time.time()),
            model=model,
            choices=[{"index": 0, "delta": {"content": text}, "finish_reason": None}],
        )

    @classmethod
    def final(cls, id: str, model: str | None, finish_reason: str = "stop") -> "StreamChunk":
        return cls(
            id=id,
            created=int(time.time()),
            model=model,
            choices=[{"index": 0, "delta": {}, "finish_reason": finish_reason}],
        )

    def to_sse(self) -> bytes:
        return f"data: {json.dumps(self.model_dump())}\n\n".encode()


# Model listing
class ModelInfo(BaseModel):
    """Model information."""
    id: str
    object: str = "model"
    created: int
    owned_by: str


class ModelsResponse(BaseModel):
    object: str = "list"
    data: list[ModelInfo]
