"""
Provider adapters: translate a GenerationRequest into each backend's wire
format and turn the raw response body back into candidate tags.

Adapters are looked up in the ``ADAPTERS`` table by ProviderKind, so a new
backend only needs a table entry.
"""

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import urlparse

from ..errors import ConfigurationError, MalformedResponseError
from .base import (
    GenerationRequest,
    ProviderAdapter,
    ProviderConfig,
    ProviderKind,
    RequestSpec,
)


CLAUDE_MAX_TOKENS = 256
ANTHROPIC_VERSION = "2023-06-01"

# Host fragments used to infer the provider when the config has no explicit kind
_HOST_HINTS: List[Tuple[str, ProviderKind]] = [
    ("generativelanguage.googleapis.com", ProviderKind.GEMINI),
    ("anthropic.com", ProviderKind.CLAUDE),
    ("deepseek.com", ProviderKind.DEEPSEEK),
    ("ollama", ProviderKind.OLLAMA),
    (":11434", ProviderKind.OLLAMA),
]

_WHITESPACE = re.compile(r"\s+")


# ============================================================================
# Helper Functions
# ============================================================================

def split_tags(text: str) -> List[str]:
    """
    Split raw model output into candidate tags.

    Pieces are separated by commas, trimmed, empty pieces are dropped and any
    whitespace left inside a tag is removed.

    Example:
        >>> split_tags("machine learning, nlp, ")
        ['machinelearning', 'nlp']
    """
    return [
        _WHITESPACE.sub("", piece)
        for piece in (part.strip() for part in text.split(","))
        if piece
    ]


def _dig(data: Any, path: Sequence[Union[str, int]]) -> Optional[Any]:
    """Follow a key/index path through nested JSON, returning None on any miss."""
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or len(current) <= step:
                return None
        elif not isinstance(current, dict) or step not in current:
            return None
        current = current[step]
    return current


def _extract_text(body: Any, paths: Sequence[Sequence[Union[str, int]]], provider: str) -> str:
    for path in paths:
        value = _dig(body, path)
        if isinstance(value, str):
            return value.strip()

    expected = " or ".join(".".join(str(step) for step in path) for path in paths)
    raise MalformedResponseError(
        f"Failed to parse {provider} response: missing {expected}"
    )


def _json_headers() -> Dict[str, str]:
    return {"Content-Type": "application/json"}


# ============================================================================
# Adapter Implementations
# ============================================================================

class OpenAICompatibleAdapter:
    """Chat-completions shape shared by OpenAI, DeepSeek and most proxies."""

    requires_api_key = True
    sends_auth_header = True
    text_paths = [("choices", 0, "message", "content")]

    def __init__(self, kind: ProviderKind = ProviderKind.OPENAI):
        self.kind = kind

    def build_request(self, config: ProviderConfig, request: GenerationRequest) -> RequestSpec:
        headers = _json_headers()
        if self.sends_auth_header and config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"

        return RequestSpec(
            method="POST",
            url=config.base_url,
            headers=headers,
            body={
                "model": config.model,
                "messages": [
                    {"role": "system", "content": request.system_prompt},
                    {"role": "user", "content": request.document_text},
                ],
            },
        )

    def parse_response(self, body: Any) -> List[str]:
        return split_tags(_extract_text(body, self.text_paths, self.kind.value))


class OllamaAdapter(OpenAICompatibleAdapter):
    """Local server speaking the OpenAI shape; credentials are never sent."""

    requires_api_key = False
    sends_auth_header = False

    def __init__(self):
        super().__init__(ProviderKind.OLLAMA)


class GeminiAdapter:
    kind = ProviderKind.GEMINI
    requires_api_key = True
    text_paths = [("candidates", 0, "content", "parts", 0, "text")]

    def build_url(self, config: ProviderConfig) -> str:
        base_url = config.base_url.rstrip("/")
        # Proxies and fully-qualified endpoints are used as given
        if "gemini-proxy" in base_url or base_url.endswith(":generateContent"):
            return base_url
        return f"{base_url}/{config.model}:generateContent"

    def build_request(self, config: ProviderConfig, request: GenerationRequest) -> RequestSpec:
        headers = _json_headers()
        if config.api_key:
            headers["x-goog-api-key"] = config.api_key

        return RequestSpec(
            method="POST",
            url=self.build_url(config),
            headers=headers,
            body={
                "contents": [
                    {
                        "parts": [
                            {"text": request.system_prompt},
                            {"text": request.document_text},
                        ]
                    }
                ]
            },
        )

    def parse_response(self, body: Any) -> List[str]:
        return split_tags(_extract_text(body, self.text_paths, self.kind.value))


class ClaudeAdapter:
    kind = ProviderKind.CLAUDE
    requires_api_key = True
    text_paths = [("content", 0, "text"), ("completion",)]

    def __init__(self, max_tokens: int = CLAUDE_MAX_TOKENS):
        self.max_tokens = max_tokens

    def build_request(self, config: ProviderConfig, request: GenerationRequest) -> RequestSpec:
        headers = _json_headers()
        headers["anthropic-version"] = ANTHROPIC_VERSION
        if config.api_key:
            headers["x-api-key"] = config.api_key

        return RequestSpec(
            method="POST",
            url=config.base_url,
            headers=headers,
            body={
                "model": config.model,
                "max_tokens": self.max_tokens,
                "system": request.system_prompt,
                "messages": [
                    {"role": "user", "content": request.document_text},
                ],
            },
        )

    def parse_response(self, body: Any) -> List[str]:
        return split_tags(_extract_text(body, self.text_paths, self.kind.value))


# ============================================================================
# Adapter Table
# ============================================================================

ADAPTERS: Dict[ProviderKind, ProviderAdapter] = {
    ProviderKind.OPENAI: OpenAICompatibleAdapter(ProviderKind.OPENAI),
    ProviderKind.DEEPSEEK: OpenAICompatibleAdapter(ProviderKind.DEEPSEEK),
    ProviderKind.GEMINI: GeminiAdapter(),
    ProviderKind.CLAUDE: ClaudeAdapter(),
    ProviderKind.OLLAMA: OllamaAdapter(),
}


def register_adapter(adapter: ProviderAdapter) -> None:
    """Add or replace the adapter for ``adapter.kind``."""
    ADAPTERS[adapter.kind] = adapter


def get_adapter(kind: ProviderKind) -> ProviderAdapter:
    try:
        return ADAPTERS[ProviderKind(kind)]
    except (KeyError, ValueError):
        raise ConfigurationError(f"No adapter registered for provider '{kind}'")


def resolve_provider_kind(config: ProviderConfig) -> ProviderKind:
    """
    Return the explicit kind, or infer it from the base URL host.

    Unrecognised hosts fall back to the OpenAI-compatible shape.
    """
    if config.kind is not None:
        return ProviderKind(config.kind)

    host = urlparse(config.base_url).netloc.lower() or config.base_url.lower()
    for fragment, kind in _HOST_HINTS:
        if fragment in host:
            return kind
    return ProviderKind.OPENAI


def build_request(
    config: ProviderConfig,
    request: GenerationRequest,
    kind: Optional[ProviderKind] = None
) -> RequestSpec:
    kind = kind or resolve_provider_kind(config)
    return get_adapter(kind).build_request(config, request)


def parse_response(body: Any, kind: ProviderKind) -> List[str]:
    return get_adapter(kind).parse_response(body)
