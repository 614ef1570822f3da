"""Static upstream provider table."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping


@dataclass(frozen=True)
class ProviderDescriptor:
    """Endpoints, auth shape and capabilities of one upstream provider."""

    name: str
    chat_endpoint: str
    models_endpoint: str
    api_key_env: str
    auth_header_name: str = "Authorization"
    auth_header_prefix: str = "Bearer"
    responses_endpoint: str | None = None
    supports_streaming: bool = True
    supports_native_responses: bool = False
    # Fallback when the live /models call fails or no key is configured
    static_model_catalog: tuple[str, ...] = ()
    extra_headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def auth_header_value(self, api_key: str) -> str:
        if self.auth_header_prefix:
            return f"{self.auth_header_prefix} {api_key}"
        return api_key

    def build_headers(self, api_key: str, user_agent: str) -> dict[str, str]:
        headers = {"User-Agent": user_agent, **self.extra_headers}
        headers[self.auth_header_name] = self.auth_header_value(api_key)
        return headers


PROVIDERS: tuple[ProviderDescriptor, ...] = (
    ProviderDescriptor(
        name="openai",
        chat_endpoint="https://api.openai.com/v1/chat/completions",
        responses_endpoint="https://api.openai.com/v1/responses",
        models_endpoint="https://api.openai.com/v1/models",
        api_key_env="OPENAI_API_KEY",
        supports_native_responses=True,
        static_model_catalog=(
            "gpt-4.1", "gpt-4.1-mini",
            "gpt-4o", "gpt-4o-mini", "chatgpt-4o-latest",
            "gpt-4-turbo",
            "o3", "o3-mini", "o1", "o1-mini", "o1-preview",
            "gpt-3.5-turbo",
        ),
    ),
    ProviderDescriptor(
        name="anthropic",
        chat_endpoint="https://api.anthropic.com/v1/messages",
        models_endpoint="https://api.anthropic.com/v1/models",
        api_key_env="ANTHROPIC_API_KEY",
        auth_header_name="x-api-key",
        auth_header_prefix="",
        static_model_catalog=(
            "claude-3-7-sonnet-20250219",
            "claude-3-5-sonnet-20241022",
            "claude-3-5-haiku-20241022",
            "claude-3-opus-20240229",
            "claude-3-haiku-20240307",
        ),
        extra_headers=MappingProxyType({"anthropic-version": "2023-06-01"}),
    ),
    ProviderDescriptor(
        name="groq",
        chat_endpoint="https://api.groq.com/openai/v1/chat/completions",
        models_endpoint="https://api.groq.com/openai/v1/models",
        api_key_env="GROQ_API_KEY",
        static_model_catalog=(
            "llama-3.3-70b-versatile",
            "llama-3.1-8b-instant",
            "openai/gpt-oss-120b",
            "openai/gpt-oss-20b",
            "meta-llama/llama-guard-4-12b",
            "whisper-large-v3",
            "whisper-large-v3-turbo",
        ),
    ),
    ProviderDescriptor(
        name="mistral",
        chat_endpoint="https://api.mistral.ai/v1/chat/completions",
        models_endpoint="https://api.mistral.ai/v1/models",
        api_key_env="MISTRAL_API_KEY",
        static_model_catalog=(
            "mistral-small-latest",
            "mistral-medium-latest",
            "mistral-large-latest",
        ),
    ),
    ProviderDescriptor(
        name="xai",
        chat_endpoint="https://api.x.ai/v1/chat/completions",
        models_endpoint="https://api.x.ai/v1/models",
        api_key_env="XAI_API_KEY",
        static_model_catalog=(
            "grok-4-0709",
            "grok-4",
            "grok-4-latest",
            "grok-4-fast",
            "grok-4-fast-non-reasoning-latest",
            "grok-4-fast-reasoning-latest",
            "grok-2-vision-1212",
            "grok-vision-beta",
            "grok-code-fast-1",
            "grok-3",
            "grok-3-mini",
        ),
    ),
)


@dataclass(frozen=True)
class ProviderRegistry:
    """Read-only name -> descriptor lookup with a designated default provider."""

    providers: Mapping[str, ProviderDescriptor]
    default_provider: str

    def __contains__(self, name: object) -> bool:
        return name in self.providers

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self.providers.values())

    def __len__(self) -> int:
        return len(self.providers)

    def get(self, name: str) -> ProviderDescriptor | None:
        return self.providers.get(name)

    @property
    def default(self) -> ProviderDescriptor:
        return self.providers[self.default_provider]


def build_registry(
    descriptors: tuple[ProviderDescriptor, ...] = PROVIDERS,
    default_provider: str = "openai",
) -> ProviderRegistry:
    table: dict[str, ProviderDescriptor] = {}
    for descriptor in descriptors:
        if descriptor.name in table:
            raise ValueError(f"Duplicate provider: {descriptor.name}")
        table[descriptor.name] = descriptor

    if default_provider not in table:
        raise ValueError(f"Unknown default provider: {default_provider}")

    return ProviderRegistry(providers=MappingProxyType(table), default_provider=default_provider)
