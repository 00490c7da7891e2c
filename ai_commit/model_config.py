from typing import Dict, TYPE_CHECKING, Optional
from dataclasses import dataclass

if TYPE_CHECKING:
    from .config import Settings

@dataclass
class ProviderConfig:
    model_name: str
    description: str
    requires_api_key: bool = True
    base_url: Optional[str] = None

class ModelConfigManager:
    _CONFIGS: Dict[str, ProviderConfig] = {
        "openai": ProviderConfig(
            model_name="gpt-3.5-turbo",
            description="OpenAI or any OpenAI-compatible endpoint (set OPENAI_BASE_URL).",
        ),
        "xai": ProviderConfig(
            model_name="grok-4-1-fast-reasoning",
            description="XAI's Grok models.",
            base_url="https://api.x.ai/v1",
        ),
        "gemini": ProviderConfig(
            model_name="gemini-2.5-flash",
            description="Google's Gemini models."
        ),
        "ollama": ProviderConfig(
            model_name="llama3.1:8b",
            description="Local inference provider.",
            requires_api_key=False,
            base_url="http://localhost:11434/v1" # Default for local Ollama
        )
    }

    @classmethod
    def providers(cls) -> list[str]:
        return list(cls._CONFIGS)

    @classmethod
    def get_config(cls, provider_name: str) -> ProviderConfig:
        if provider_name not in cls._CONFIGS:
            raise ValueError(f"Provider '{provider_name}' not supported")
        return cls._CONFIGS[provider_name]

    @classmethod
    def get_model_name(cls, provider_name: str, settings: "Settings | None" = None) -> str:
        config = cls.get_config(provider_name)

        # Ollama keeps its own model setting for local runs
        if provider_name == "ollama" and settings and settings.ollama_model:
            return settings.ollama_model

        if settings and settings.model_name:
            return settings.model_name

        return config.model_name

    @classmethod
    def get_api_key(cls, provider_name: str, settings: "Settings") -> Optional[str]:
        return getattr(settings, f"{provider_name}_api_key", None)
