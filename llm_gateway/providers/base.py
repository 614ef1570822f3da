"""Base provider interface for upstream clients."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import httpx

from llm_gateway.schemas import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ClientRequest,
    ModelInfo,
    ResponsesRequest,
)
from llm_gateway.transcode import chat_to_responses_envelope, responses_request_to_chat
from .registry import ProviderDescriptor


class ClientShape(str, Enum):
    CHAT = "chat"
    RESPONSES = "responses"


@dataclass(frozen=True)
class UpstreamCall:
    """One prepared upstream request plus what the reply must be turned into."""

    url: str
    payload: dict
    model: str
    stream: bool
    client_shape: ClientShape
    # True when the call targets the provider's native Responses endpoint
    native_responses: bool = False


def dump_payload(body) -> dict:
    return body.model_dump(mode="json", exclude_none=True)


class BaseProvider(ABC):
    """Abstract base class for upstream providers."""

    def __init__(self, descriptor: ProviderDescriptor, api_key: str, client: httpx.AsyncClient, user_agent: str):
        self.descriptor = descriptor
        self.api_key = api_key
        self.client = client
        self.user_agent = user_agent

    @property
    def provider_name(self) -> str:
        return self.descriptor.name

    def _get_headers(self) -> dict:
        return self.descriptor.build_headers(self.api_key, self.user_agent)

    @abstractmethod
    def prepare_chat_payload(self, request: ChatCompletionRequest) -> dict:
        """Chat request -> provider-native body."""

    def prepare_chat(self, request: ChatCompletionRequest) -> UpstreamCall:
        """Build the upstream call for the /v1/chat/completions route."""
        return UpstreamCall(
            url=self.descriptor.chat_endpoint,
            payload=self.prepare_chat_payload(request),
            model=request.model,
            stream=request.wants_stream,
            client_shape=ClientShape.CHAT,
        )

    def prepare_responses(self, request: ClientRequest) -> UpstreamCall:
        """Build the upstream call for the /v1/responses route."""
        if isinstance(request, ResponsesRequest):
            chat_request, shape = responses_request_to_chat(request), ClientShape.RESPONSES
        else:
            chat_request, shape = request, ClientShape.CHAT

        return UpstreamCall(
            url=self.descriptor.chat_endpoint,
            payload=self.prepare_chat_payload(chat_request),
            model=request.model,
            stream=request.wants_stream,
            client_shape=shape,
        )

    @abstractmethod
    def parse_chat(self, data: dict, call: UpstreamCall) -> dict:
        """Native success body -> Chat-shaped completion dict."""

    def finish(self, call: UpstreamCall, data: dict) -> dict:
        """Turn a successful upstream body into the shape the client sent."""
        chat = self.parse_chat(data, call)
        if call.client_shape is ClientShape.RESPONSES:
            completion = ChatCompletionResponse.model_validate(chat)
            return chat_to_responses_envelope(completion).model_dump()
        return chat

    async def send(self, call: UpstreamCall) -> httpx.Response:
        request = self.client.build_request(
            "POST",
            call.url,
            headers=self._get_headers(),
            json=call.payload,
        )
        return await self.client.send(request, stream=call.stream)

    async def get_models(self) -> list[ModelInfo]:
        """Fetch the live catalog; raises on transport, status or parse failure."""
        response = await self.client.get(self.descriptor.models_endpoint, headers=self._get_headers())
        response.raise_for_status()
        data = response.json()

        if isinstance(data, dict) and isinstance(data.get("data"), list):
            entries = data["data"]
        elif isinstance(data, list):
            entries = data
        else:
            entries = []

        now = int(time.time())
        models = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            created = entry.get("created")
            models.append(
                ModelInfo(
                    id=entry.get("id") or entry.get("name") or entry.get("model") or "unknown",
                    created=created if isinstance(created, int) else now,
                    owned_by=self.provider_name,
                )
            )
        return models
