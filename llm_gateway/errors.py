"""Gateway error types and upstream error-parsing helpers."""

import json


class GatewayError(Exception):
    """Base error rendered as a JSON response by the application handler."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_payload(self) -> dict:
        return {"error": self.message}


class BadRequestError(GatewayError):
    """Client input the gateway cannot act on (missing model, unknown provider)."""

    status_code = 400


class ProviderNotConfiguredError(GatewayError):
    """The resolved provider has no credential configured."""

    status_code = 500

    def __init__(self, provider: str, credential: str):
        super().__init__(f"{provider.upper()} API key not configured")
        self.provider = provider
        self.credential = credential

    def to_payload(self) -> dict:
        return {"error": self.message, "provider": self.provider, "credential": self.credential}


class UpstreamUnavailableError(GatewayError):
    """The upstream could not be reached or did not answer in time."""

    status_code = 502

    def __init__(self, message: str, details: str, status_code: int | None = None):
        super().__init__(message, status_code)
        self.details = details

    def to_payload(self) -> dict:
        return {"error": self.message, "details": self.details}


class InternalGatewayError(GatewayError):
    """Malformed request JSON or an upstream body the gateway cannot transcode."""

    status_code = 500

    def __init__(self, details: str):
        super().__init__("Internal server error")
        self.details = details

    def to_payload(self) -> dict:
        return {"error": self.message, "details": self.details}


def parse_upstream_error(response_text: str) -> str:
    """Extract a readable message from a provider error response.

    OpenAI-style APIs return {"error": {"message": "...", "type": "..."}};
    Anthropic returns {"type": "error", "error": {"type": "...", "message": "..."}}.
    Returns "type: message" when parseable, raw text otherwise.
    """
    try:
        body = json.loads(response_text)
        err = body.get("error", {})
        if isinstance(err, str):
            return err
        msg = err.get("message", "")
        kind = err.get("type", "")
        if msg:
            return f"{kind}: {msg}" if kind else msg
    except Exception:
        pass
    return response_text
