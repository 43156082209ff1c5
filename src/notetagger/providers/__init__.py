"""Provider adapters and the value types they exchange."""

from .base import (
    DEFAULT_SYSTEM_PROMPT,
    PROVIDER_DEFAULTS,
    GenerationRequest,
    ProviderAdapter,
    ProviderConfig,
    ProviderDefaults,
    ProviderKind,
    RawProviderResponse,
    RequestSpec,
)
from .adapters import (
    ADAPTERS,
    ClaudeAdapter,
    GeminiAdapter,
    OllamaAdapter,
    OpenAICompatibleAdapter,
    build_request,
    get_adapter,
    parse_response,
    register_adapter,
    resolve_provider_kind,
    split_tags,
)

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "PROVIDER_DEFAULTS",
    "GenerationRequest",
    "ProviderAdapter",
    "ProviderConfig",
    "ProviderDefaults",
    "ProviderKind",
    "RawProviderResponse",
    "RequestSpec",
    "ADAPTERS",
    "ClaudeAdapter",
    "GeminiAdapter",
    "OllamaAdapter",
    "OpenAICompatibleAdapter",
    "build_request",
    "get_adapter",
    "parse_response",
    "register_adapter",
    "resolve_provider_kind",
    "split_tags",
]
