import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest
from google.api_core import exceptions as google_exceptions

from ai_commit.config import Settings
from ai_commit.exceptions import ConfigurationError, ProviderError
from ai_commit.model_config import ModelConfigManager, ProviderConfig
from ai_commit.providers import (
    GeminiProvider,
    OllamaProvider,
    OpenAIProvider,
    XAIProvider,
    get_provider,
)


def _chat_response(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


# --- Factory Tests (get_provider) ---


@patch("ai_commit.providers.AsyncOpenAI", autospec=True)
def test_get_provider_openai(mock_openai):
    """Test creating OpenAI provider with valid settings."""
    settings = Settings(_env_file=None, openai_api_key="sk-test")
    provider = get_provider("openai", settings)

    assert isinstance(provider, OpenAIProvider)
    # The client is only created by the async context manager
    mock_openai.assert_not_called()


def test_get_provider_xai():
    settings = Settings(_env_file=None, xai_api_key="xai-test")
    provider = get_provider("xai", settings)

    assert isinstance(provider, XAIProvider)
    assert provider._base_url == "https://api.x.ai/v1"


def test_xai_endpoint_comes_from_model_config():
    config = ProviderConfig(model_name="grok-test", description="d", base_url="https://grok.local/v1")
    with patch.dict(ModelConfigManager._CONFIGS, {"xai": config}):
        provider = XAIProvider(api_key="xai-test")

    assert provider._base_url == "https://grok.local/v1"


@patch("ai_commit.providers.google_genai")
def test_get_provider_gemini(mock_genai):
    """Test creating Gemini provider with valid settings."""
    settings = Settings(_env_file=None, gemini_api_key="gemini-test")
    provider = get_provider("gemini", settings)

    assert isinstance(provider, GeminiProvider)
    mock_genai.configure.assert_called_with(api_key="gemini-test")


def test_get_provider_ollama():
    """Ollama runs locally and needs no key."""
    settings = Settings(_env_file=None, ollama_base_url="http://host:1234/v1")
    provider = get_provider("ollama", settings)

    assert isinstance(provider, OllamaProvider)
    assert provider._base_url == "http://host:1234/v1"


def test_get_provider_passes_timeout_and_base_url():
    settings = Settings(
        _env_file=None,
        openai_api_key="sk-test",
        openai_base_url="https://llm.internal/v1",
        request_timeout=12,
    )
    provider = get_provider("openai", settings)

    assert provider._base_url == "https://llm.internal/v1"
    assert provider._timeout == 12


@pytest.mark.parametrize("choice", ["openai", "xai", "gemini"])
def test_get_provider_missing_keys(choice):
    """Test that missing API keys raise ConfigurationError."""
    settings = Settings(_env_file=None)

    with pytest.raises(ConfigurationError, match=f"Missing {choice.upper()}_API_KEY"):
        get_provider(choice, settings)


def test_get_provider_unknown():
    with pytest.raises(ConfigurationError, match="not supported"):
        get_provider("mystery_ai", Settings(_env_file=None))


# --- OpenAI-compatible completion ---


def test_openai_complete_sends_parameters():
    with patch("ai_commit.providers.AsyncOpenAI") as MockClient:
        mock_instance = MockClient.return_value
        mock_instance.close = AsyncMock()
        mock_instance.chat.completions.create = AsyncMock(
            return_value=_chat_response('{"subject":"feat: add login"}')
        )

        provider = OpenAIProvider("key", base_url="https://api.openai.com/v1", timeout=5)

        async def run():
            async with provider:
                return await provider.complete("gpt-test", "the prompt", 300, 0.3)

        result = asyncio.run(run())

    assert result == '{"subject":"feat: add login"}'
    MockClient.assert_called_once_with(api_key="key", base_url="https://api.openai.com/v1", timeout=5)
    mock_instance.chat.completions.create.assert_awaited_once_with(
        model="gpt-test",
        messages=[{"role": "user", "content": "the prompt"}],
        max_tokens=300,
        temperature=0.3,
    )
    mock_instance.close.assert_awaited_once()


@pytest.mark.parametrize("content", [None, ""])
def test_openai_complete_without_content_returns_empty(content):
    with patch("ai_commit.providers.AsyncOpenAI") as MockClient:
        mock_instance = MockClient.return_value
        mock_instance.close = AsyncMock()
        mock_instance.chat.completions.create = AsyncMock(return_value=_chat_response(content))

        provider = OpenAIProvider("key")

        async def run():
            async with provider:
                return await provider.complete("gpt-test", "prompt", 300, 0.3)

        assert asyncio.run(run()) == ""


def test_openai_api_errors_become_provider_errors():
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    api_error = openai.APIConnectionError(message="Connection refused", request=request)

    with patch("ai_commit.providers.AsyncOpenAI") as MockClient:
        mock_instance = MockClient.return_value
        mock_instance.close = AsyncMock()
        mock_instance.chat.completions.create = AsyncMock(side_effect=api_error)

        provider = OllamaProvider("http://localhost:11434/v1")

        async def run():
            async with provider:
                return await provider.complete("llama3", "prompt", 300, 0.3)

        with pytest.raises(ProviderError, match="OllamaProvider request failed") as exc_info:
            asyncio.run(run())

    assert exc_info.value.__cause__ is api_error


def test_complete_outside_context_manager():
    provider = OpenAIProvider("key")

    with pytest.raises(RuntimeError, match="not properly initialized"):
        asyncio.run(provider.complete("gpt-test", "prompt", 300, 0.3))


# --- Gemini completion ---


def test_gemini_complete():
    with patch("ai_commit.providers.google_genai") as mock_genai:
        mock_model = mock_genai.GenerativeModel.return_value
        response = MagicMock()
        response.text = '{"subject":"fix: handle nulls"}'
        mock_model.generate_content_async = AsyncMock(return_value=response)

        provider = GeminiProvider("key")
        result = asyncio.run(provider.complete("gemini-pro", "prompt", 300, 0.3))

    assert result == '{"subject":"fix: handle nulls"}'
    mock_genai.GenerativeModel.assert_called_once_with("gemini-pro")
    mock_genai.GenerationConfig.assert_called_once_with(max_output_tokens=300, temperature=0.3)


def test_gemini_api_errors_become_provider_errors():
    with patch("ai_commit.providers.google_genai") as mock_genai:
        mock_model = mock_genai.GenerativeModel.return_value
        mock_model.generate_content_async = AsyncMock(
            side_effect=google_exceptions.ResourceExhausted("quota exceeded")
        )

        provider = GeminiProvider("key")

        with pytest.raises(ProviderError, match="quota exceeded"):
            asyncio.run(provider.complete("gemini-pro", "prompt", 300, 0.3))


def test_gemini_blocked_response_returns_empty():
    class BlockedResponse:
        @property
        def text(self):
            raise ValueError("response has no parts")

    with patch("ai_commit.providers.google_genai") as mock_genai:
        mock_model = mock_genai.GenerativeModel.return_value
        mock_model.generate_content_async = AsyncMock(return_value=BlockedResponse())

        provider = GeminiProvider("key")
        assert asyncio.run(provider.complete("gemini-pro", "prompt", 300, 0.3)) == ""
