"""LLM Gateway - one OpenAI-style surface over several model providers."""

__version__ = "0.1.0"
