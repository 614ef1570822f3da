"""Application configuration via pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from llm_gateway import __version__


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    debug: bool = False
    log_level: str = "INFO"
    cors_allow_origin: str = "*"

    # Provider credentials (empty = not configured)
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    groq_api_key: str = ""
    mistral_api_key: str = ""
    xai_api_key: str = ""

    # Routing
    default_provider: str = "openai"
    # Reject unrecognized model names instead of sending them to default_provider
    strict_model_routing: bool = False

    # Rate limiting (per client address, completion routes only)
    rate_limit: str = "60/minute"
    rate_limit_enabled: bool = True

    # Upstream
    upstream_timeout: float = 60.0
    user_agent: str = f"llm-gateway/{__version__}"

    def api_key_for(self, descriptor) -> str:
        """Return the configured credential for a provider descriptor, or ''."""
        return getattr(self, descriptor.api_key_env.lower(), "") or ""


settings = Settings()
