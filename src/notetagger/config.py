"""
Provider configuration loading.

Hosts either build a ProviderConfig directly, convert their stored settings
with ``config_from_settings``, or read the environment (and an optional
``.env`` file) with ``load_config_from_env``.

Environment variables
---------------------

    NOTETAGGER_PROVIDER   openai | deepseek | gemini | claude | ollama
                          (optional, inferred from the base URL when unset)
    NOTETAGGER_API_KEY    API key for the provider
    NOTETAGGER_BASE_URL   Endpoint URL
    NOTETAGGER_MODEL      Model identifier
    NOTETAGGER_PROMPT     Custom system prompt

Example .env:

    NOTETAGGER_PROVIDER=claude
    NOTETAGGER_API_KEY=sk-ant-...
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from dotenv import load_dotenv

from .errors import ConfigurationError
from .providers.base import ProviderConfig, ProviderKind


ENV_PROVIDER = "NOTETAGGER_PROVIDER"
ENV_API_KEY = "NOTETAGGER_API_KEY"
ENV_BASE_URL = "NOTETAGGER_BASE_URL"
ENV_MODEL = "NOTETAGGER_MODEL"
ENV_PROMPT = "NOTETAGGER_PROMPT"

# Defaults of the settings store when nothing has been configured yet
DEFAULT_SETTINGS: Dict[str, str] = {
    "apiKey": "",
    "apiUrl": "https://api.openai.com/v1/chat/completions",
    "model": "gpt-4o-mini",
    "customPrompt": "",
}


def parse_provider_kind(name: Optional[str]) -> Optional[ProviderKind]:
    """
    Convert a provider name into a ProviderKind.

    Returns None for a blank name.

    Raises:
        ConfigurationError: If the name is not a known provider
    """
    if name is None or not name.strip():
        return None
    try:
        return ProviderKind(name.strip().lower())
    except ValueError:
        choices = ", ".join(kind.value for kind in ProviderKind)
        raise ConfigurationError(f"Unknown provider '{name}'. Choose one of: {choices}")


def build_config(
    provider: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    model: Optional[str] = None,
    prompt: Optional[str] = None
) -> ProviderConfig:
    """
    Build a ProviderConfig from loose values.

    With a provider name, empty URL/model come from that provider's defaults.
    Without one, the store defaults apply and the kind is inferred from the URL.
    """
    kind = parse_provider_kind(provider)
    if kind is not None:
        return ProviderConfig.for_provider(
            kind,
            api_key=api_key or None,
            base_url=base_url or None,
            model=model or None,
            prompt_override=prompt or None,
        )

    return ProviderConfig(
        kind=None,
        api_key=api_key or None,
        base_url=base_url or DEFAULT_SETTINGS["apiUrl"],
        model=model or DEFAULT_SETTINGS["model"],
        prompt_override=prompt or None,
    )


def config_from_settings(settings: Mapping[str, Any]) -> ProviderConfig:
    """
    Convert a host settings mapping into a ProviderConfig.

    Missing keys fall back to DEFAULT_SETTINGS. The mapping may carry an
    optional "provider" entry.
    """
    merged = dict(DEFAULT_SETTINGS)
    merged.update({key: value for key, value in settings.items() if value is not None})

    return build_config(
        provider=merged.get("provider"),
        api_key=merged.get("apiKey"),
        base_url=merged.get("apiUrl"),
        model=merged.get("model"),
        prompt=merged.get("customPrompt"),
    )


def load_config_from_env(
    env: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[Union[str, Path]] = None
) -> ProviderConfig:
    """
    Read a ProviderConfig from environment variables.

    Args:
        env: Mapping to read instead of os.environ (no .env file is loaded then)
        dotenv_path: Explicit .env file. If None, python-dotenv searches for one

    Returns:
        ProviderConfig

    Raises:
        ConfigurationError: If NOTETAGGER_PROVIDER names an unknown provider
    """
    if env is None:
        load_dotenv(dotenv_path=dotenv_path)
        env = os.environ

    return build_config(
        provider=env.get(ENV_PROVIDER),
        api_key=env.get(ENV_API_KEY),
        base_url=env.get(ENV_BASE_URL),
        model=env.get(ENV_MODEL),
        prompt=env.get(ENV_PROMPT),
    )
