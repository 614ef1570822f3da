"""OpenAI provider: Chat Completions plus the native Responses API."""

from llm_gateway.schemas import (
    ChatCompletionRequest,
    ClientRequest,
    ResponsesRequest,
)
from llm_gateway.transcode import apply_openai_token_field, chat_to_responses, responses_to_chat
from .base import ClientShape, UpstreamCall, dump_payload
from .openai_compat import OpenAICompatibleProvider


class OpenAIProvider(OpenAICompatibleProvider):
    """OpenAI API client."""

    def prepare_chat_payload(self, request: ChatCompletionRequest) -> dict:
        return dump_payload(apply_openai_token_field(request))

    def prepare_responses(self, request: ClientRequest) -> UpstreamCall:
        if not (self.descriptor.supports_native_responses and self.descriptor.responses_endpoint):
            return super().prepare_responses(request)

        if isinstance(request, ResponsesRequest):
            payload, shape = dump_payload(request), ClientShape.RESPONSES
        else:
            payload, shape = dump_payload(chat_to_responses(request)), ClientShape.CHAT

        return UpstreamCall(
            url=self.descriptor.responses_endpoint,
            payload=payload,
            model=request.model,
            stream=request.wants_stream,
            client_shape=shape,
            native_responses=True,
        )

    def finish(self, call: UpstreamCall, data: dict) -> dict:
        if not call.native_responses:
            return super().finish(call, data)
        if call.client_shape is ClientShape.RESPONSES:
            return data
        return responses_to_chat(data, call.model).model_dump(exclude_none=True)
