import logging
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ai_commit.exceptions import ConfigurationError
from ai_commit.model_config import ModelConfigManager

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Process-wide configuration read from the environment and .env.
    Loaded once at startup and treated as read-only afterwards.
    """
    # Keys are optional because the user might only want Local/Ollama
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    xai_api_key: str | None = None
    gemini_api_key: str | None = None

    # Ollama Defaults (Local)
    ollama_base_url: str = "http://localhost:11434/v1"
    ollama_model: str = "llama3.1:8b"

    # Pipeline defaults
    provider: str = Field("openai", validation_alias="ai_commit_provider")
    model_name: str | None = None
    prompt_version: str = "prompt_A"
    language: str | None = Field(None, validation_alias="ai_commit_language")
    max_output_tokens: int = Field(
        300, gt=0, validation_alias="ai_commit_max_output_tokens"
    )
    max_attempts: int = Field(
        3, ge=1, validation_alias="ai_commit_max_attempts"
    )
    retry_delay: float = Field(
        1.0, ge=0, validation_alias="ai_commit_retry_delay"
    )
    request_timeout: float = Field(
        60.0, gt=0, validation_alias="ai_commit_request_timeout"
    )

    # We tell Pydantic to look for a .env file
    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", protected_namespaces=()
    )

    def __init__(self, **values):
        # Field names are accepted as keyword arguments; the environment is only
        # read through the prefixed aliases (LANGUAGE belongs to gettext).
        for name, field in type(self).model_fields.items():
            alias = field.validation_alias
            if isinstance(alias, str) and name in values:
                values.setdefault(alias, values.pop(name))
        super().__init__(**values)

    def resolve_model(self, provider: str | None = None) -> str:
        return ModelConfigManager.get_model_name(provider or self.provider, self)

    def validate_for(self, provider: str | None = None) -> None:
        """Fails fast when the chosen provider cannot be used with these settings."""
        provider = provider or self.provider
        try:
            config = ModelConfigManager.get_config(provider)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        if config.requires_api_key and not ModelConfigManager.get_api_key(provider, self):
            raise ConfigurationError(
                f"Missing {provider.upper()}_API_KEY in environment or .env file."
            )


def load_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as e:
        print(f"Configuration Error: {e}")
        logger.error(f"Invalid configuration, falling back to defaults: {e}")
        return Settings.model_construct()  # Defaults, no environment
