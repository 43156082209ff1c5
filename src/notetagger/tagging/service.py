"""
Tag generation service.

This module wires the provider adapters, the request executor and the tag
reconciler into the single ``generate`` operation used by hosts:

    service = TagGenerationService()
    tags = service.generate(note_text, ["golang", "storage"], config)
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..client.executor import RequestExecutor
from ..errors import ConfigurationError, TaggerError
from ..providers.adapters import ADAPTERS, resolve_provider_kind
from ..providers.base import (
    GenerationRequest,
    ProviderAdapter,
    ProviderConfig,
    ProviderKind,
)
from .reconciler import SIMILARITY_THRESHOLD, reconcile

logger = logging.getLogger(__name__)

CONNECTIVITY_TEST_TEXT = "Hello"


@dataclass
class ConnectivityResult:
    """Outcome of a connectivity test."""
    ok: bool
    provider: Optional[ProviderKind] = None
    error: Optional[str] = None


class TagGenerationService:
    """
    Generate reconciled tags for a document through a configured provider.

    The service keeps no per-call state, so one instance can serve concurrent
    callers. Retries happen inside the executor only.

    Attributes:
        executor: RequestExecutor used for every call
        adapters: Table of adapters keyed by ProviderKind
        threshold: Similarity above which an existing tag replaces a candidate
    """

    def __init__(
        self,
        executor: Optional[RequestExecutor] = None,
        adapters: Optional[Dict[ProviderKind, ProviderAdapter]] = None,
        threshold: float = SIMILARITY_THRESHOLD
    ):
        self.executor = executor or RequestExecutor()
        self.adapters = adapters if adapters is not None else ADAPTERS
        self.threshold = threshold

    def _adapter_for(self, kind: ProviderKind) -> ProviderAdapter:
        adapter = self.adapters.get(kind)
        if adapter is None:
            raise ConfigurationError(f"No adapter registered for provider '{kind.value}'")
        return adapter

    def validate_config(self, config: ProviderConfig) -> ProviderKind:
        """
        Check that ``config`` can be sent and return its provider kind.

        Raises:
            ConfigurationError: Empty base URL or model, unknown provider, or a
                missing API key for a provider that needs one
        """
        if not config.base_url or not config.base_url.strip():
            raise ConfigurationError("API URL is not configured")
        if not config.model or not config.model.strip():
            raise ConfigurationError("Model is not configured")

        try:
            kind = resolve_provider_kind(config)
        except ValueError:
            raise ConfigurationError(f"Unknown provider: {config.kind}")

        adapter = self._adapter_for(kind)
        if adapter.requires_api_key and not (config.api_key and config.api_key.strip()):
            raise ConfigurationError(
                f"API key is required for provider '{kind.value}'. "
                "Configure it in the settings first."
            )
        return kind

    def generate(
        self,
        content: str,
        existing_tags: Sequence[str],
        config: ProviderConfig
    ) -> List[str]:
        """
        Generate tags for ``content``, preferring tags from ``existing_tags``.

        Args:
            content: Document text, passed verbatim
            existing_tags: Vocabulary already in use (may be empty)
            config: Provider settings for this call

        Returns:
            Tags in generation order, with existing-tag substitutions applied

        Raises:
            ConfigurationError, RequestTimeoutError, RemoteError,
            MalformedResponseError, TransportError
        """
        kind = self.validate_config(config)
        adapter = self._adapter_for(kind)

        request = GenerationRequest(
            document_text=content,
            existing_tags=tuple(existing_tags),
            system_prompt=config.system_prompt,
        )
        spec = adapter.build_request(config, request)

        logger.info("Generating tags with %s (model=%s, %d chars)", kind.value, config.model, len(content))
        response = self.executor.execute(spec)

        candidates = adapter.parse_response(response.body)
        logger.debug("Candidate tags: %s", candidates)

        tags = reconcile(candidates, request.existing_tags, threshold=self.threshold)
        logger.info("Generated %d tags after %d attempt(s)", len(tags), response.attempts)
        return tags

    def test_connectivity(self, config: ProviderConfig) -> ConnectivityResult:
        """
        Send a short message through the full pipeline and report success.

        Generated tags are discarded. Tagging errors are returned as a failed
        result instead of being raised.
        """
        kind = None
        try:
            kind = self.validate_config(config)
            self.generate(CONNECTIVITY_TEST_TEXT, [], config)
        except TaggerError as e:
            logger.warning("Connectivity test failed: %s", e)
            return ConnectivityResult(ok=False, provider=kind, error=f"API connection test failed: {e}")

        return ConnectivityResult(ok=True, provider=kind)


def generate_tags(
    content: str,
    existing_tags: Sequence[str],
    config: ProviderConfig,
    service: Optional[TagGenerationService] = None
) -> List[str]:
    """
    Generate tags with a default service.

    Args:
        content: Document text
        existing_tags: Vocabulary already in use
        config: Provider settings
        service: Optional service instance (defaults to TagGenerationService())

    Returns:
        Reconciled tags in generation order
    """
    if service is None:
        service = TagGenerationService()

    return service.generate(content, existing_tags, config)
