"""
AI Provider Clients

Upstream provider table, model routing and per-vendor adapters.
"""

import httpx

from llm_gateway.config import Settings
from llm_gateway.errors import ProviderNotConfiguredError
from .anthropic import AnthropicProvider
from .base import BaseProvider, ClientShape, UpstreamCall
from .openai import OpenAIProvider
from .openai_compat import OpenAICompatibleProvider
from .registry import PROVIDERS, ProviderDescriptor, ProviderRegistry, build_registry
from .routing import Resolution, resolve_provider

# Groq, Mistral and xAI speak Chat Completions natively
PROVIDER_CLASSES: dict[str, type[BaseProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}


def get_provider(descriptor: ProviderDescriptor, settings: Settings, client: httpx.AsyncClient) -> BaseProvider:
    api_key = settings.api_key_for(descriptor)
    if not api_key:
        raise ProviderNotConfiguredError(descriptor.name, descriptor.api_key_env)
    provider_cls = PROVIDER_CLASSES.get(descriptor.name, OpenAICompatibleProvider)
    return provider_cls(descriptor, api_key, client, settings.user_agent)


__all__ = [
    "AnthropicProvider",
    "BaseProvider",
    "ClientShape",
    "OpenAICompatibleProvider",
    "OpenAIProvider",
    "PROVIDERS",
    "ProviderDescriptor",
    "ProviderRegistry",
    "Resolution",
    "UpstreamCall",
    "build_registry",
    "get_provider",
    "resolve_provider",
]
