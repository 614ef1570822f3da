"""Anthropic Messages API provider."""

from llm_gateway.schemas import ChatCompletionRequest
from llm_gateway.transcode import anthropic_to_chat, chat_to_anthropic
from .base import BaseProvider, UpstreamCall, dump_payload


class AnthropicProvider(BaseProvider):
    """Anthropic Claude API client.

    Requests are rewritten to the Messages API; streams are relayed verbatim.
    """

    def prepare_chat_payload(self, request: ChatCompletionRequest) -> dict:
        return dump_payload(chat_to_anthropic(request))

    def parse_chat(self, data: dict, call: UpstreamCall) -> dict:
        return anthropic_to_chat(data, call.model).model_dump(exclude_none=True)
