"""Model listing endpoint, single provider or aggregated across all of them."""

import httpx
from fastapi import APIRouter, Depends, Request

from llm_gateway.catalog import list_models
from llm_gateway.config import Settings
from llm_gateway.dependencies import get_http_client, get_registry, get_settings, requested_provider
from llm_gateway.providers import ProviderRegistry
from llm_gateway.schemas import ModelsResponse

router = APIRouter()


@router.get("/v1/models", response_model=ModelsResponse)
async def get_models(
    request: Request,
    aggregate: str | None = None,
    registry: ProviderRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    provider = requested_provider(request)
    return await list_models(
        registry,
        settings,
        client,
        provider_name=provider or None,
        aggregate=aggregate == "1" or provider == "all",
    )
