"""
notetagger: recommend tags for Markdown notes using remote LLM providers.
"""

from .config import build_config, config_from_settings, load_config_from_env
from .errors import (
    ConfigurationError,
    MalformedResponseError,
    RemoteError,
    RequestTimeoutError,
    TaggerError,
    TransportError,
)
from .providers import ProviderConfig, ProviderKind
from .tagging import (
    ConnectivityResult,
    TagGenerationService,
    generate_tags,
    reconcile,
    similarity,
)

__version__ = "0.1.0"

__all__ = [
    "build_config",
    "config_from_settings",
    "load_config_from_env",
    "ConfigurationError",
    "MalformedResponseError",
    "RemoteError",
    "RequestTimeoutError",
    "TaggerError",
    "TransportError",
    "ProviderConfig",
    "ProviderKind",
    "ConnectivityResult",
    "TagGenerationService",
    "generate_tags",
    "reconcile",
    "similarity",
]
