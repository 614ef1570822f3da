"""Model catalog: live /models per provider, degrading to the static lists."""

import asyncio
import logging
import time

import httpx

from llm_gateway.config import Settings
from llm_gateway.errors import BadRequestError, ProviderNotConfiguredError
from llm_gateway.providers import ProviderDescriptor, ProviderRegistry, get_provider
from llm_gateway.schemas import ModelInfo, ModelsResponse

logger = logging.getLogger(__name__)


def static_models(descriptor: ProviderDescriptor) -> list[ModelInfo]:
    created = int(time.time())
    return [
        ModelInfo(id=model_id, created=created, owned_by=descriptor.name)
        for model_id in descriptor.static_model_catalog
    ]


async def provider_models(
    descriptor: ProviderDescriptor,
    settings: Settings,
    client: httpx.AsyncClient,
) -> list[ModelInfo]:
    """Live catalog for one provider; never raises."""
    try:
        provider = get_provider(descriptor, settings, client)
    except ProviderNotConfiguredError:
        return static_models(descriptor)

    try:
        models = await provider.get_models()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Model listing for {descriptor.name} failed, using static catalog: {e}")
        return static_models(descriptor)

    if not models:
        logger.warning(f"Model listing for {descriptor.name} was empty, using static catalog")
        return static_models(descriptor)
    return models


async def list_models(
    registry: ProviderRegistry,
    settings: Settings,
    client: httpx.AsyncClient,
    provider_name: str | None = None,
    aggregate: bool = False,
) -> ModelsResponse:
    if aggregate:
        results = await asyncio.gather(
            *(provider_models(descriptor, settings, client) for descriptor in registry)
        )
        return ModelsResponse(data=[model for models in results for model in models])

    descriptor = registry.get(provider_name) if provider_name else registry.default
    if descriptor is None:
        raise BadRequestError(f"Unsupported provider: {provider_name}")
    return ModelsResponse(data=await provider_models(descriptor, settings, client))
