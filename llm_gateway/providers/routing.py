"""Model-name -> provider routing.

Rules are plain data evaluated in order; the first match wins. Anything the
rules miss is looked up in the static catalogs, then sent to the registry's
default provider (or rejected when strict routing is on).
"""

from dataclasses import dataclass

from llm_gateway.errors import BadRequestError
from .registry import ProviderDescriptor, ProviderRegistry

REASONING_MODEL_PREFIXES = ("o1", "o2", "o3")
OPEN_WEIGHT_FAMILIES = ("llama", "mixtral", "gemma", "qwen", "deepseek", "gpt-oss")


@dataclass(frozen=True)
class RoutingRule:
    """Match a lower-cased model name by prefix or substring."""

    name: str
    provider: str
    prefixes: tuple[str, ...] = ()
    markers: tuple[str, ...] = ()
    # Any of these substrings disqualifies the rule
    excludes: tuple[str, ...] = ()

    def matches(self, model: str) -> bool:
        if any(token in model for token in self.excludes):
            return False
        return model.startswith(self.prefixes) or any(marker in model for marker in self.markers)


ROUTING_RULES: tuple[RoutingRule, ...] = (
    RoutingRule("xai", "xai", prefixes=("xai-",), markers=("grok",)),
    RoutingRule("anthropic", "anthropic", markers=("claude",)),
    RoutingRule("mistral", "mistral", markers=("mistral",)),
    RoutingRule("openai-chat", "openai", prefixes=("gpt-",), markers=("chatgpt",)),
    RoutingRule("openai-reasoning", "openai", prefixes=REASONING_MODEL_PREFIXES),
    # Namespaced ids ("openai/gpt-oss-20b") are left to the catalog scan
    RoutingRule("groq-open-weights", "groq", markers=OPEN_WEIGHT_FAMILIES, excludes=("/",)),
)


@dataclass(frozen=True)
class Resolution:
    provider: ProviderDescriptor
    # "override", a rule name, "catalog" or "default"
    matched_by: str


def classify_model(
    model: str,
    registry: ProviderRegistry,
    rules: tuple[RoutingRule, ...] = ROUTING_RULES,
) -> Resolution:
    model_lower = model.lower()

    for rule in rules:
        if rule.provider in registry and rule.matches(model_lower):
            return Resolution(registry.get(rule.provider), rule.name)

    for descriptor in registry:
        for known in descriptor.static_model_catalog:
            known_lower = known.lower()
            if known_lower in model_lower or model_lower in known_lower:
                return Resolution(descriptor, "catalog")

    return Resolution(registry.default, "default")


def normalize_provider_hint(hint: str | None) -> str:
    return (hint or "").strip().lower()


def resolve_provider(
    registry: ProviderRegistry,
    model: str,
    provider_hint: str | None = None,
    strict: bool = False,
) -> Resolution:
    """Pick the provider for a request.

    An explicit hint naming a registered provider always wins; a hint naming
    anything else is a client error. Without a hint the model name decides.
    """
    hint = normalize_provider_hint(provider_hint)
    if hint:
        descriptor = registry.get(hint)
        if descriptor is None:
            raise BadRequestError(f"Unsupported provider: {hint}")
        return Resolution(descriptor, "override")

    resolution = classify_model(model, registry)
    if strict and resolution.matched_by == "default":
        raise BadRequestError(f"Unable to route model: {model}")
    return resolution
