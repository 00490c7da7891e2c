import logging
from abc import ABC, abstractmethod
from openai import APIError, AsyncOpenAI
import google.generativeai as google_genai
from google.api_core import exceptions as google_exceptions
from ai_commit.config import Settings
from ai_commit.exceptions import ProviderError
from ai_commit.model_config import ModelConfigManager

logger = logging.getLogger(__name__)


class LLMProvider(ABC):
    """Abstract base class for all text-generation providers."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass

    @abstractmethod
    async def complete(
        self, model: str, prompt: str, max_output_tokens: int, temperature: float
    ) -> str:
        """
        Returns the raw completion text for ``prompt``.
        Transport, auth and rate-limit failures surface as ProviderError.
        """


class OpenAICompatibleProvider(LLMProvider):
    """
    Base provider for services that are API-compatible with OpenAI,
    including OpenAI itself, XAI, and Ollama.
    """
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout
        self._client: AsyncOpenAI | None = None

    async def __aenter__(self):
        self._client = AsyncOpenAI(
            api_key=self._api_key, base_url=self._base_url, timeout=self._timeout
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._client:
            await self._client.close()
            self._client = None

    async def complete(
        self, model: str, prompt: str, max_output_tokens: int, temperature: float
    ) -> str:
        if not self._client:
            raise RuntimeError("Provider not properly initialized. Use async context manager.")

        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=max_output_tokens,
                temperature=temperature,
            )
        except APIError as e:
            raise ProviderError(f"{type(self).__name__} request failed: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

class OpenAIProvider(OpenAICompatibleProvider):
    """Provider for OpenAI's models, or any endpoint speaking its API."""
    def __init__(self, api_key: str, base_url: str | None = None, timeout: float | None = None):
        super().__init__(api_key=api_key, base_url=base_url, timeout=timeout)

class XAIProvider(OpenAICompatibleProvider):
    """Provider for XAI's Grok model."""
    def __init__(self, api_key: str, timeout: float | None = None):
        config = ModelConfigManager.get_config("xai")
        super().__init__(api_key=api_key, base_url=config.base_url, timeout=timeout)

class OllamaProvider(OpenAICompatibleProvider):
    """Provider for local Ollama models."""
    def __init__(self, base_url: str, timeout: float | None = None):
        # Ollama API key is required but not used, so we provide a placeholder.
        super().__init__(api_key="ollama", base_url=base_url, timeout=timeout)

class GeminiProvider(LLMProvider):
    """Provider for Google's Gemini models."""
    def __init__(self, api_key: str):
        self.api_key = api_key
        # Configure the client at the instance level
        google_genai.configure(api_key=self.api_key)

    async def complete(
        self, model: str, prompt: str, max_output_tokens: int, temperature: float
    ) -> str:
        generative_model = google_genai.GenerativeModel(model)
        try:
            response = await generative_model.generate_content_async(
                prompt,
                generation_config=google_genai.GenerationConfig(
                    max_output_tokens=max_output_tokens,
                    temperature=temperature,
                ),
            )
        except google_exceptions.GoogleAPIError as e:
            raise ProviderError(f"GeminiProvider request failed: {e}") from e

        try:
            return response.text
        except ValueError as e:
            # Raised by the SDK when the candidate was blocked or has no parts
            logger.warning(f"Gemini returned no text: {e}")
            return ""

# --- The Factory ---
def get_provider(choice: str, settings: Settings) -> LLMProvider:
    """
    Factory function to get an instance of the chosen provider.
    Raises ConfigurationError when the provider is unknown or lacks its key.
    """
    settings.validate_for(choice)

    if choice == "openai":
        return OpenAIProvider(
            settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.request_timeout,
        )

    if choice == "xai":
        return XAIProvider(settings.xai_api_key, timeout=settings.request_timeout)

    if choice == "gemini":
        return GeminiProvider(settings.gemini_api_key)

    if choice == "ollama":
        config = ModelConfigManager.get_config("ollama")
        base_url = settings.ollama_base_url or config.base_url
        return OllamaProvider(base_url, timeout=settings.request_timeout)

    raise ValueError(f"Unknown or unsupported provider: '{choice}'")
