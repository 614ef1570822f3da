"""FastAPI dependencies shared by the routers."""

from functools import lru_cache

import httpx
from fastapi import Request

from llm_gateway.config import Settings, settings
from llm_gateway.providers import ProviderRegistry, build_registry
from llm_gateway.providers.routing import normalize_provider_hint


def get_settings() -> Settings:
    return settings


@lru_cache(maxsize=1)
def get_registry() -> ProviderRegistry:
    return build_registry(default_provider=settings.default_provider)


def build_http_client(config: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.upstream_timeout)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared upstream client opened in the application lifespan."""
    return request.app.state.http_client


def requested_provider(request: Request) -> str:
    """x-provider header (or query parameter), lower-cased; '' when absent."""
    return normalize_provider_hint(request.headers.get("x-provider") or request.query_params.get("x-provider"))
