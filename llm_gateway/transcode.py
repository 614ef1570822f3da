"""Conversions between the client Chat/Responses shapes and provider-native bodies."""

import time
from typing import Any

from llm_gateway.schemas import (
    AnthropicMessage,
    AnthropicMessagesRequest,
    AnthropicUsage,
    ChatCompletionChoice,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    ResponsesEnvelope,
    ResponsesMetadata,
    ResponsesRequest,
    StreamMode,
    UsageInfo,
    new_completion_id,
)

ANTHROPIC_DEFAULT_MAX_TOKENS = 1024

# OpenAI rejects max_tokens for these families and wants max_completion_tokens
MAX_COMPLETION_TOKENS_PREFIXES = ("o1", "o3")
MAX_COMPLETION_TOKENS_MARKERS = ("gpt-5",)


def chat_to_anthropic(request: ChatCompletionRequest) -> AnthropicMessagesRequest:
    """Hoist the first system message into `system`; the rest become `messages`."""
    system = next((m.content for m in request.messages if m.role == "system"), None)
    messages = [m for m in request.messages if m.role != "system"]

    return AnthropicMessagesRequest(
        model=request.model,
        max_tokens=request.max_tokens or ANTHROPIC_DEFAULT_MAX_TOKENS,
        messages=messages,
        stream=bool(request.stream),
        system=system,
        temperature=request.temperature,
    )


def anthropic_finish_reason(stop_reason: str | None) -> str:
    return "stop" if stop_reason == "end_turn" else "length"


def anthropic_to_chat(data: dict, requested_model: str | None = None) -> ChatCompletionResponse:
    message = AnthropicMessage.model_validate(data)
    text = "".join(block.text or "" for block in message.content if block.type == "text")
    usage = message.usage or AnthropicUsage()
    prompt_tokens = usage.input_tokens
    completion_tokens = usage.output_tokens

    return ChatCompletionResponse(
        id=message.id or new_completion_id(),
        object="chat.completion",
        created=int(time.time()),
        model=message.model or requested_model,
        choices=[
            ChatCompletionChoice(
                index=0,
                message=ChatMessage(role="assistant", content=text),
                finish_reason=anthropic_finish_reason(message.stop_reason),
            )
        ],
        usage=UsageInfo(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
        ),
    )


def chat_to_responses(request: ChatCompletionRequest) -> ResponsesRequest:
    """Chat body -> native Responses body (latest user turn becomes `input`)."""
    last_user = next((m for m in reversed(request.messages) if m.role == "user"), None)
    system = next((m for m in request.messages if m.role == "system"), None)
    history = [m for m in request.messages if m.role != "system"]

    extra = request.model_extra or {}
    max_output_tokens = extra.get("max_output_tokens")
    if not isinstance(max_output_tokens, int):
        max_output_tokens = request.max_tokens

    return ResponsesRequest(
        model=request.model,
        input=last_user.content if last_user else "",
        modalities=["text"],
        metadata=ResponsesMetadata(
            conversation_history=history,
            system_context=system.content if system else None,
        ),
        stream=StreamMode(mode="text") if request.stream else None,
        max_output_tokens=max_output_tokens,
        response_format=request.response_format,
        tools=request.tools,
        tool_choice=request.tool_choice,
    )


def _responses_output_text(output: Any) -> str:
    if isinstance(output, dict):
        return output.get("text") or ""
    if isinstance(output, list):
        parts = []
        for item in output:
            if not isinstance(item, dict):
                continue
            for part in item.get("content") or []:
                if isinstance(part, dict) and part.get("type") == "output_text":
                    parts.append(part.get("text", ""))
        return "".join(parts)
    if output is None:
        return ""
    return str(output)


def responses_to_chat(data: dict, requested_model: str | None = None) -> ChatCompletionResponse:
    """Native Responses reply -> Chat-shaped completion."""
    usage = data.get("usage")
    return ChatCompletionResponse(
        id=data.get("id") or new_completion_id(),
        object="chat.completion",
        created=int(time.time()),
        model=data.get("model") or requested_model,
        choices=[
            ChatCompletionChoice(
                index=0,
                message=ChatMessage(role="assistant", content=_responses_output_text(data.get("output"))),
                finish_reason="stop" if data.get("status") == "completed" else "length",
            )
        ],
        usage=UsageInfo.model_validate(usage) if isinstance(usage, dict) else UsageInfo(),
    )


def _input_messages(items: list[Any]) -> list[ChatMessage]:
    return [ChatMessage.model_validate(item) for item in items if isinstance(item, dict) and "role" in item]


def responses_request_to_chat(request: ResponsesRequest) -> ChatCompletionRequest:
    """Responses body -> Chat body for providers without a native Responses API."""
    metadata = request.metadata or ResponsesMetadata()
    messages: list[ChatMessage] = []

    if metadata.system_context:
        messages.append(ChatMessage(role="system", content=metadata.system_context))

    if metadata.conversation_history:
        messages.extend(metadata.conversation_history)
    elif isinstance(request.input, list):
        messages.extend(_input_messages(request.input))
    else:
        messages.append(ChatMessage(role="user", content=request.input or ""))

    max_tokens = request.max_output_tokens if request.max_output_tokens is not None else request.max_tokens

    return ChatCompletionRequest(
        model=request.model,
        messages=messages,
        stream=True if request.wants_stream else None,
        max_tokens=max_tokens,
        response_format=request.response_format,
        tools=request.tools,
        tool_choice=request.tool_choice,
    )


def chat_to_responses_envelope(completion: ChatCompletionResponse) -> ResponsesEnvelope:
    return ResponsesEnvelope(
        id=completion.id or new_completion_id("resp"),
        model=completion.model,
        status="completed",
        output=completion.text,
        usage=completion.usage,
    )


def requires_max_completion_tokens(model: str) -> bool:
    model_lower = model.lower()
    return model_lower.startswith(MAX_COMPLETION_TOKENS_PREFIXES) or any(
        marker in model_lower for marker in MAX_COMPLETION_TOKENS_MARKERS
    )


def apply_openai_token_field(request: ChatCompletionRequest) -> ChatCompletionRequest:
    """Rename max_tokens -> max_completion_tokens for reasoning-tier OpenAI models."""
    if request.max_tokens is None or not requires_max_completion_tokens(request.model):
        return request
    return request.model_copy(
        update={"max_completion_tokens": request.max_tokens, "max_tokens": None}
    )
