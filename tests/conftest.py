"""Shared fixtures: a scripted upstream behind httpx.MockTransport and a gateway client."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from llm_gateway.config import Settings
from llm_gateway.dependencies import get_http_client, get_settings
from llm_gateway.main import app
from llm_gateway.routers.completions import limiter

NO_KEYS = {
    "openai_api_key": "",
    "anthropic_api_key": "",
    "groq_api_key": "",
    "mistral_api_key": "",
    "xai_api_key": "",
}


class Upstream:
    """Answers upstream calls from a URL -> handler table and records every request."""

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def on(self, url: str, handler):
        self.routes[url] = handler

    def json_reply(self, url: str, body, status_code: int = 200):
        self.on(url, lambda request: httpx.Response(status_code, json=body))

    def sse_reply(self, url: str, body: bytes):
        self.on(
            url,
            lambda request: httpx.Response(200, content=body, headers={"content-type": "text/event-stream"}),
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url).split("?")[0]
        if url not in self.routes:
            return httpx.Response(404, json={"error": {"message": f"no route for {url}"}})
        return self.routes[url](request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_json(self) -> dict:
        return json.loads(self.last.content)


@pytest.fixture(autouse=True)
def no_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def make_gateway(upstream):
    """Build a TestClient whose settings and upstream client are test doubles."""

    def factory(**overrides) -> TestClient:
        test_settings = Settings(_env_file=None, **{**NO_KEYS, **overrides})
        client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
        app.dependency_overrides[get_settings] = lambda: test_settings
        app.dependency_overrides[get_http_client] = lambda: client
        return TestClient(app)

    yield factory
    app.dependency_overrides.clear()
