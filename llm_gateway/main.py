"""LLM Gateway - FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from llm_gateway import __version__
from llm_gateway.config import settings
from llm_gateway.dependencies import build_http_client, get_registry
from llm_gateway.errors import GatewayError
from llm_gateway.routers import completions, health, models

CORS_ALLOW_METHODS = "GET, POST, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization, x-provider"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.getLogger("llm_gateway").setLevel(settings.log_level.upper())
    get_registry()
    async with build_http_client(settings) as client:
        app.state.http_client = client
        yield


app = FastAPI(
    title="LLM Gateway",
    description="One OpenAI-compatible API in front of OpenAI, Anthropic, Groq, Mistral and xAI",
    version=__version__,
    debug=settings.debug,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = completions.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    # Unknown paths and wrong methods both read as 404
    if exc.status_code in (404, 405):
        return PlainTextResponse("Not Found", status_code=404)
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


# CORS: preflight for any path, and an open origin on every response
@app.middleware("http")
async def cors(request: Request, call_next):
    if request.method == "OPTIONS":
        response = Response(status_code=200)
        response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
        response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
    else:
        response = await call_next(request)
    response.headers["Access-Control-Allow-Origin"] = settings.cors_allow_origin
    return response


app.include_router(health.router)
app.include_router(models.router, tags=["models"])
app.include_router(completions.router, tags=["completions"])
