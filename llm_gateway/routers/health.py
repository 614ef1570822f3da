from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from llm_gateway import __version__
from llm_gateway.config import Settings
from llm_gateway.dependencies import get_registry, get_settings
from llm_gateway.providers import ProviderDescriptor, ProviderRegistry


router = APIRouter(tags=["health"])

_startup_time = datetime.now(timezone.utc)


class EndpointInfo(BaseModel):
    path: str
    description: str


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    endpoints: list[EndpointInfo]


class ProviderStatus(BaseModel):
    connected: bool
    status: str


ENDPOINTS = [
    EndpointInfo(path="/health", description="Gateway status and API directory"),
    EndpointInfo(path="/health/providers", description="Provider credential status"),
    EndpointInfo(path="/v1/models", description="Model catalog (?aggregate=1 for all providers)"),
    EndpointInfo(path="/v1/chat/completions", description="OpenAI-compatible chat completions"),
    EndpointInfo(path="/v1/responses", description="Responses-style completions"),
]


def _check_provider(descriptor: ProviderDescriptor, settings: Settings) -> ProviderStatus:
    if not settings.api_key_for(descriptor):
        return ProviderStatus(connected=False, status="api key not configured")
    return ProviderStatus(connected=True, status="ok")


@router.get("/health", response_model=HealthResponse)
async def health_check():
    uptime = (datetime.now(timezone.utc) - _startup_time).total_seconds()

    return HealthResponse(
        status="ok",
        version=__version__,
        uptime_seconds=round(uptime, 2),
        endpoints=ENDPOINTS,
    )


@router.get("/health/providers", response_model=dict[str, ProviderStatus])
async def get_provider_status(
    registry: ProviderRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
):
    return {descriptor.name: _check_provider(descriptor, settings) for descriptor in registry}
