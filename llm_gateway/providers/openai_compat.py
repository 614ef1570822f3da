"""Providers whose native protocol is already Chat Completions (Groq, Mistral, xAI)."""

from llm_gateway.schemas import ChatCompletionRequest, ChatCompletionResponse
from .base import BaseProvider, UpstreamCall, dump_payload


class OpenAICompatibleProvider(BaseProvider):
    """Chat Completions client; bodies and streams pass through unchanged."""

    def prepare_chat_payload(self, request: ChatCompletionRequest) -> dict:
        return dump_payload(request)

    def parse_chat(self, data: dict, call: UpstreamCall) -> dict:
        # Shape check only; the upstream body is returned as-is
        ChatCompletionResponse.model_validate(data)
        return data
