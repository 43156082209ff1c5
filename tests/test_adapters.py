"""
Tests for provider adapters: request building, response parsing and kind inference.
"""
import pytest

from notetagger.errors import ConfigurationError, MalformedResponseError
from notetagger.providers import (
    ADAPTERS,
    DEFAULT_SYSTEM_PROMPT,
    GenerationRequest,
    ProviderConfig,
    ProviderKind,
    build_request,
    get_adapter,
    parse_response,
    register_adapter,
    resolve_provider_kind,
    split_tags,
)
from notetagger.providers.adapters import CLAUDE_MAX_TOKENS, OpenAICompatibleAdapter


@pytest.fixture
def request_():
    return GenerationRequest(
        document_text="Notes about goroutines and channels.",
        existing_tags=("golang",),
        system_prompt="PROMPT",
    )


class TestSplitTags:
    """Tests for turning raw model text into candidate tags."""

    def test_splits_and_trims(self):
        assert split_tags("ai, tags, golang") == ["ai", "tags", "golang"]

    def test_strips_internal_whitespace(self):
        assert split_tags("machine learning, nlp") == ["machinelearning", "nlp"]

    def test_drops_empty_pieces(self):
        assert split_tags(" ,ai,, ,golang, ") == ["ai", "golang"]

    def test_empty_text(self):
        assert split_tags("") == []

    def test_tabs_and_newlines(self):
        assert split_tags("deep\tlearning,\nrust lang\n") == ["deeplearning", "rustlang"]


class TestResolveProviderKind:
    """Tests for inferring the provider from the base URL."""

    @pytest.mark.parametrize("url,kind", [
        ("https://api.openai.com/v1/chat/completions", ProviderKind.OPENAI),
        ("https://generativelanguage.googleapis.com/v1beta/models", ProviderKind.GEMINI),
        ("https://api.anthropic.com/v1/messages", ProviderKind.CLAUDE),
        ("https://api.deepseek.com/chat/completions", ProviderKind.DEEPSEEK),
        ("http://localhost:11434/v1/chat/completions", ProviderKind.OLLAMA),
        ("http://127.0.0.1:11434/v1/chat/completions", ProviderKind.OLLAMA),
        ("http://ollama.internal/v1/chat/completions", ProviderKind.OLLAMA),
        ("https://my-proxy.example.com/v1/chat/completions", ProviderKind.OPENAI),
        ("not a url", ProviderKind.OPENAI),
    ])
    def test_infers_from_host(self, url, kind):
        config = ProviderConfig(base_url=url, model="m")
        assert resolve_provider_kind(config) == kind

    def test_explicit_kind_wins(self):
        config = ProviderConfig(
            kind=ProviderKind.CLAUDE,
            base_url="https://my-proxy.example.com/v1/messages",
            model="m",
        )
        assert resolve_provider_kind(config) == ProviderKind.CLAUDE

    def test_string_kind_is_accepted(self):
        config = ProviderConfig(kind="gemini", base_url="https://x", model="m")
        assert resolve_provider_kind(config) == ProviderKind.GEMINI


class TestOpenAIAdapter:
    """Tests for the OpenAI-compatible wire format."""

    def test_build_request(self, request_):
        config = ProviderConfig.for_provider(ProviderKind.OPENAI, api_key="sk-test")
        spec = build_request(config, request_)

        assert spec.method == "POST"
        assert spec.url == "https://api.openai.com/v1/chat/completions"
        assert spec.headers["Authorization"] == "Bearer sk-test"
        assert spec.headers["Content-Type"] == "application/json"
        assert spec.body == {
            "model": "gpt-4o-mini",
            "messages": [
                {"role": "system", "content": "PROMPT"},
                {"role": "user", "content": "Notes about goroutines and channels."},
            ],
        }

    def test_no_auth_header_without_key(self, request_):
        config = ProviderConfig(base_url="https://proxy.example.com/v1", model="m")
        spec = build_request(config, request_)
        assert "Authorization" not in spec.headers

    def test_parse_response(self):
        body = {"choices": [{"message": {"content": "ai, tags, golang"}}]}
        assert parse_response(body, ProviderKind.OPENAI) == ["ai", "tags", "golang"]

    def test_deepseek_uses_same_shape(self, request_):
        config = ProviderConfig.for_provider(ProviderKind.DEEPSEEK, api_key="k")
        spec = build_request(config, request_)
        assert spec.url == "https://api.deepseek.com/chat/completions"
        assert spec.body["model"] == "deepseek-chat"
        body = {"choices": [{"message": {"content": "rust"}}]}
        assert parse_response(body, ProviderKind.DEEPSEEK) == ["rust"]

    @pytest.mark.parametrize("body", [
        {},
        {"choices": []},
        {"choices": [{"message": {}}]},
        {"choices": [{"message": {"content": None}}]},
        ["not", "an", "object"],
    ])
    def test_missing_text_is_malformed(self, body):
        with pytest.raises(MalformedResponseError):
            parse_response(body, ProviderKind.OPENAI)


class TestOllamaAdapter:
    """Tests for the local Ollama-style server."""

    def test_never_sends_auth_header(self, request_):
        config = ProviderConfig.for_provider(ProviderKind.OLLAMA, api_key="ignored")
        spec = build_request(config, request_)

        assert spec.url == "http://localhost:11434/v1/chat/completions"
        assert "Authorization" not in spec.headers
        assert spec.body["messages"][0] == {"role": "system", "content": "PROMPT"}

    def test_does_not_require_key(self):
        assert get_adapter(ProviderKind.OLLAMA).requires_api_key is False


class TestGeminiAdapter:
    """Tests for the Gemini generateContent format."""

    def test_build_request(self, request_):
        config = ProviderConfig.for_provider(ProviderKind.GEMINI, api_key="g-key")
        spec = build_request(config, request_)

        assert spec.url == (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            "gemini-1.5-flash:generateContent"
        )
        assert spec.headers["x-goog-api-key"] == "g-key"
        assert "Authorization" not in spec.headers
        assert spec.body == {
            "contents": [
                {
                    "parts": [
                        {"text": "PROMPT"},
                        {"text": "Notes about goroutines and channels."},
                    ]
                }
            ]
        }

    def test_trailing_slash_in_base_url(self, request_):
        config = ProviderConfig(
            kind=ProviderKind.GEMINI,
            api_key="k",
            base_url="https://generativelanguage.googleapis.com/v1beta/models/",
            model="gemini-pro",
        )
        spec = build_request(config, request_)
        assert spec.url.endswith("/models/gemini-pro:generateContent")

    def test_full_endpoint_is_kept(self, request_):
        url = "https://gemini-proxy.example.com/v1beta/models/gemini-pro:generateContent"
        config = ProviderConfig(kind=ProviderKind.GEMINI, api_key="k", base_url=url, model="gemini-pro")
        assert build_request(config, request_).url == url

    def test_proxy_url_is_kept(self, request_):
        url = "https://gemini-proxy.example.com/api"
        config = ProviderConfig(kind=ProviderKind.GEMINI, api_key="k", base_url=url, model="gemini-pro")
        assert build_request(config, request_).url == url

    def test_parse_response(self):
        body = {"candidates": [{"content": {"parts": [{"text": " golang, concurrency \n"}]}}]}
        assert parse_response(body, ProviderKind.GEMINI) == ["golang", "concurrency"]

    def test_missing_candidates_is_malformed(self):
        with pytest.raises(MalformedResponseError, match="candidates"):
            parse_response({"promptFeedback": {}}, ProviderKind.GEMINI)


class TestClaudeAdapter:
    """Tests for the Anthropic messages format."""

    def test_build_request(self, request_):
        config = ProviderConfig.for_provider(ProviderKind.CLAUDE, api_key="sk-ant")
        spec = build_request(config, request_)

        assert spec.url == "https://api.anthropic.com/v1/messages"
        assert spec.headers["x-api-key"] == "sk-ant"
        assert "anthropic-version" in spec.headers
        assert "Authorization" not in spec.headers
        assert spec.body["model"] == "claude-3-haiku-20240307"
        assert spec.body["system"] == "PROMPT"
        assert spec.body["messages"] == [
            {"role": "user", "content": "Notes about goroutines and channels."}
        ]
        assert 0 < spec.body["max_tokens"] <= 256
        assert spec.body["max_tokens"] == CLAUDE_MAX_TOKENS

    def test_parse_content_text(self):
        body = {"content": [{"type": "text", "text": "golang, channels"}]}
        assert parse_response(body, ProviderKind.CLAUDE) == ["golang", "channels"]

    def test_parse_completion_fallback(self):
        body = {"completion": " golang , channels"}
        assert parse_response(body, ProviderKind.CLAUDE) == ["golang", "channels"]

    def test_missing_text_is_malformed(self):
        with pytest.raises(MalformedResponseError):
            parse_response({"content": []}, ProviderKind.CLAUDE)


class TestPromptDelivery:
    """The prompt is provider-agnostic; only its field differs."""

    def test_default_prompt(self):
        config = ProviderConfig.for_provider(ProviderKind.OPENAI)
        assert config.system_prompt == DEFAULT_SYSTEM_PROMPT

    def test_blank_override_uses_default(self):
        config = ProviderConfig.for_provider(ProviderKind.OPENAI, prompt_override="   ")
        assert config.system_prompt == DEFAULT_SYSTEM_PROMPT

    def test_override_is_stripped(self):
        config = ProviderConfig.for_provider(ProviderKind.OPENAI, prompt_override="  Tag it.\n")
        assert config.system_prompt == "Tag it."

    @pytest.mark.parametrize("kind", list(ProviderKind))
    def test_same_prompt_reaches_every_provider(self, kind):
        config = ProviderConfig.for_provider(kind, api_key="k", prompt_override="CUSTOM")
        request = GenerationRequest(document_text="doc", system_prompt=config.system_prompt)
        spec = build_request(config, request)
        assert "CUSTOM" in repr(spec.body)


class TestAdapterTable:
    """Tests for adapter registration."""

    def test_every_kind_has_an_adapter(self):
        for kind in ProviderKind:
            assert get_adapter(kind).kind == kind

    def test_register_adapter_replaces_entry(self, monkeypatch):
        monkeypatch.setitem(ADAPTERS, ProviderKind.OPENAI, ADAPTERS[ProviderKind.OPENAI])

        class CustomAdapter(OpenAICompatibleAdapter):
            requires_api_key = False

        register_adapter(CustomAdapter(ProviderKind.OPENAI))
        assert isinstance(get_adapter(ProviderKind.OPENAI), CustomAdapter)

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError):
            get_adapter("mistral")
