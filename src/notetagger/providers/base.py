"""
Core value types shared by provider adapters, the executor and the service.

This module defines the provider kinds, their defaults, the immutable
configuration handed in by the host, and the adapter protocol every backend
implements.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple


# ============================================================================
# Prompt and Provider Defaults
# ============================================================================

DEFAULT_SYSTEM_PROMPT = (
    "You are a document tag generator. Based on the document content, generate "
    "at most 3 relevant tags. Return only the tags, separated by commas, without "
    "any explanation or extra text. Tags must not contain spaces."
)


class ProviderKind(str, Enum):
    """Supported text-generation backends."""
    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    GEMINI = "gemini"
    CLAUDE = "claude"
    OLLAMA = "ollama"


@dataclass(frozen=True)
class ProviderDefaults:
    base_url: str
    model: str


PROVIDER_DEFAULTS: Dict[ProviderKind, ProviderDefaults] = {
    ProviderKind.OPENAI: ProviderDefaults(
        base_url="https://api.openai.com/v1/chat/completions",
        model="gpt-4o-mini",
    ),
    ProviderKind.DEEPSEEK: ProviderDefaults(
        base_url="https://api.deepseek.com/chat/completions",
        model="deepseek-chat",
    ),
    ProviderKind.GEMINI: ProviderDefaults(
        base_url="https://generativelanguage.googleapis.com/v1beta/models",
        model="gemini-1.5-flash",
    ),
    ProviderKind.CLAUDE: ProviderDefaults(
        base_url="https://api.anthropic.com/v1/messages",
        model="claude-3-haiku-20240307",
    ),
    ProviderKind.OLLAMA: ProviderDefaults(
        base_url="http://localhost:11434/v1/chat/completions",
        model="llama3",
    ),
}


# ============================================================================
# Type Definitions
# ============================================================================

@dataclass(frozen=True)
class ProviderConfig:
    """
    Connection settings for one backend, supplied per call by the host.

    Attributes:
        kind: Explicit provider kind. If None, the kind is inferred from base_url
        api_key: Credential sent in the provider-specific auth header
        base_url: Endpoint URL (for Gemini, the models collection URL)
        model: Model identifier
        prompt_override: Replaces the default system prompt when non-blank
    """
    kind: Optional[ProviderKind] = None
    api_key: Optional[str] = None
    base_url: str = ""
    model: str = ""
    prompt_override: Optional[str] = None

    @classmethod
    def for_provider(
        cls,
        kind: ProviderKind,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        prompt_override: Optional[str] = None
    ) -> "ProviderConfig":
        """Build a config for ``kind``, filling empty URL/model from its defaults."""
        kind = ProviderKind(kind)
        defaults = PROVIDER_DEFAULTS[kind]
        return cls(
            kind=kind,
            api_key=api_key,
            base_url=base_url or defaults.base_url,
            model=model or defaults.model,
            prompt_override=prompt_override,
        )

    @property
    def system_prompt(self) -> str:
        if self.prompt_override and self.prompt_override.strip():
            return self.prompt_override.strip()
        return DEFAULT_SYSTEM_PROMPT

    def with_kind(self, kind: ProviderKind) -> "ProviderConfig":
        return replace(self, kind=kind)


@dataclass(frozen=True)
class GenerationRequest:
    """Document text (un-truncated), the caller's vocabulary and the prompt to deliver."""
    document_text: str
    existing_tags: Tuple[str, ...] = ()
    system_prompt: str = DEFAULT_SYSTEM_PROMPT


@dataclass(frozen=True)
class RequestSpec:
    """Outbound HTTP call produced by an adapter."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)
    params: Optional[Dict[str, str]] = None


@dataclass
class RawProviderResponse:
    """Decoded response of a successful attempt. Never persisted."""
    status_code: int
    body: Any
    attempts: int = 1


class ProviderAdapter(Protocol):
    """Protocol defining the per-backend wire translation."""

    kind: ProviderKind
    requires_api_key: bool

    def build_request(self, config: ProviderConfig, request: GenerationRequest) -> RequestSpec:
        ...

    def parse_response(self, body: Any) -> List[str]:
        ...
