"""OpenAI-compatible completion endpoints: /v1/chat/completions and /v1/responses."""

import json
import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.background import BackgroundTask

from llm_gateway.config import Settings, settings as app_settings
from llm_gateway.dependencies import get_http_client, get_registry, get_settings, requested_provider
from llm_gateway.errors import (
    BadRequestError,
    GatewayError,
    InternalGatewayError,
    UpstreamUnavailableError,
    parse_upstream_error,
)
from llm_gateway.providers import (
    BaseProvider,
    ProviderRegistry,
    UpstreamCall,
    get_provider,
    resolve_provider,
)
from llm_gateway.schemas import ChatCompletionRequest, parse_client_body
from llm_gateway.streaming import SSE_HEADERS, relay_stream

logger = logging.getLogger(__name__)
router = APIRouter()

limiter = Limiter(key_func=get_remote_address, enabled=app_settings.rate_limit_enabled)


async def _read_body(request: Request) -> dict:
    raw = await request.body()
    try:
        body = json.loads(raw or b"{}")
    except ValueError as e:
        raise InternalGatewayError(f"Invalid JSON body: {e}")
    if not isinstance(body, dict):
        raise InternalGatewayError("Request body must be a JSON object")
    if not isinstance(body.get("model"), str) or not body["model"]:
        raise BadRequestError("Model parameter is required")
    return body


def _select_provider(
    request: Request,
    model: str,
    registry: ProviderRegistry,
    settings: Settings,
    client: httpx.AsyncClient,
) -> BaseProvider:
    resolution = resolve_provider(
        registry,
        model,
        requested_provider(request),
        strict=settings.strict_model_routing,
    )
    logger.info(f"Routing model {model} to {resolution.provider.name} ({resolution.matched_by})")
    return get_provider(resolution.provider, settings, client)


def _upstream_error_response(provider: BaseProvider, upstream: httpx.Response) -> Response:
    """Forward an upstream non-2xx reply with its own status."""
    logger.warning(
        f"{provider.provider_name} returned {upstream.status_code}: {parse_upstream_error(upstream.text)}"
    )
    try:
        body = upstream.json()
    except ValueError:
        body = {"error": upstream.text or upstream.reason_phrase}
    return JSONResponse(body, status_code=upstream.status_code)


async def _forward(provider: BaseProvider, call: UpstreamCall) -> Response:
    upstream = await provider.send(call)

    if upstream.is_error:
        if call.stream:
            await upstream.aread()
            await upstream.aclose()
        return _upstream_error_response(provider, upstream)

    if call.stream:
        return StreamingResponse(
            relay_stream(upstream, transcode=call.native_responses, model=call.model),
            status_code=upstream.status_code,
            media_type="text/event-stream",
            headers=SSE_HEADERS,
            background=BackgroundTask(upstream.aclose),
        )

    try:
        data = upstream.json()
    except ValueError as e:
        raise InternalGatewayError(f"Unparsable {provider.provider_name} response: {e}")
    return JSONResponse(provider.finish(call, data), status_code=upstream.status_code)


async def _handle(request: Request, registry: ProviderRegistry, settings: Settings, client: httpx.AsyncClient, route: str):
    provider_name = None
    try:
        body = await _read_body(request)
        provider = _select_provider(request, body["model"], registry, settings, client)
        provider_name = provider.provider_name

        if route == "responses":
            call = provider.prepare_responses(parse_client_body(body))
        else:
            call = provider.prepare_chat(ChatCompletionRequest.model_validate(body))

        return await _forward(provider, call)

    except GatewayError:
        raise
    except httpx.ConnectError as e:
        logger.error(f"{provider_name} unreachable: {e}")
        raise UpstreamUnavailableError(f"{provider_name} unreachable", str(e), status_code=503)
    except httpx.TimeoutException as e:
        logger.error(f"{provider_name} timed out: {e}")
        raise UpstreamUnavailableError(f"{provider_name} timed out", str(e), status_code=504)
    except httpx.HTTPError as e:
        logger.error(f"{provider_name} request failed: {e}")
        raise UpstreamUnavailableError(f"Provider error: {provider_name}", str(e))
    except Exception as e:
        logger.error(f"AI request failed: {e}")
        raise InternalGatewayError(str(e))


@router.post("/v1/chat/completions")
@limiter.limit(app_settings.rate_limit)
async def chat_completions(
    request: Request,
    registry: ProviderRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    return await _handle(request, registry, settings, client, route="chat")


@router.post("/v1/responses")
@limiter.limit(app_settings.rate_limit)
async def responses(
    request: Request,
    registry: ProviderRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    return await _handle(request, registry, settings, client, route="responses")
