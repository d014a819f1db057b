# agent_core/config/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import ValidationError, model_validator
from pathlib import Path
import logging
from typing import Optional

from agent_core.agent.structs import DEFAULT_MODEL, GenerationOptions
from agent_core.exceptions.config import ConfigError

logger = logging.getLogger("Settings")

VALID_PROVIDERS = {"ollama", "openrouter"}
VALID_STRATEGIES = {"single", "failover", "round_robin", "model_routed"}


class Settings(BaseSettings):
    # === Environment Variables (CLEAN NAMES) ===
    llm_provider: str = "ollama"
    ollama_host: str = "http://localhost:11434"
    ollama_api_key: Optional[str] = None
    openrouter_api_key: Optional[str] = None
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    provider_strategy: str = "single"

    # === Generation ===
    model_name: str = DEFAULT_MODEL
    temperature: float = 0.7
    max_tokens: int = 2048
    top_p: float = 0.9

    # === Loop & Context ===
    max_iterations: int = 10
    max_context_tokens: int = 8192
    # Evict old history to max_context_tokens before each provider call
    auto_truncate: bool = True
    tool_timeout: Optional[float] = None

    # === Prompt & Logging ===
    system_prompt: Optional[str] = None
    system_prompt_path: Optional[Path] = None
    log_level: str = "INFO"

    # === Pydantic V2 Configuration ===
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # NO prefix - clean names match exactly
        extra="ignore",
        case_sensitive=False,
        # model_name is a setting, not a pydantic internal
        protected_namespaces=(),
    )

    # === Model Validator ===

    @model_validator(mode="after")
    def validate_and_compute(self) -> "Settings":
        """Validate and compute derived fields."""

        # 1. Load system prompt from file when no inline prompt is set
        if self.system_prompt_path is not None and not self.system_prompt:
            if not self.system_prompt_path.exists():
                raise ConfigError(
                    f"System prompt file not found: {self.system_prompt_path}",
                    field_name="system_prompt_path",
                    invalid_value=str(self.system_prompt_path),
                )
            try:
                prompt = self.system_prompt_path.read_text(encoding="utf-8").strip()
            except OSError as e:
                raise ConfigError(f"Failed to read system prompt: {e}") from e
            if not prompt:
                raise ConfigError(
                    f"System prompt file is empty: {self.system_prompt_path}",
                    field_name="system_prompt_path",
                )
            self.system_prompt = prompt

        # 2. Validate log level
        if self.log_level.upper() not in logging.getLevelNamesMapping():
            raise ConfigError(
                f"Invalid log level: {self.log_level}",
                field_name="log_level",
                invalid_value=self.log_level,
            )
        self.log_level = self.log_level.upper()

        # 3. Validate provider selection
        normalized_provider = (self.llm_provider or "ollama").strip().lower()
        if normalized_provider not in VALID_PROVIDERS:
            raise ConfigError(
                "Invalid llm_provider value. Expected 'ollama' or 'openrouter'. "
                f"Got: {self.llm_provider}",
                field_name="llm_provider",
                invalid_value=self.llm_provider,
            )
        self.llm_provider = normalized_provider

        if self.llm_provider == "openrouter" and not self.openrouter_api_key:
            raise ConfigError(
                "OPENROUTER_API_KEY is required when LLM_PROVIDER=openrouter.",
                field_name="openrouter_api_key",
            )

        normalized_strategy = self.provider_strategy.strip().lower()
        if normalized_strategy not in VALID_STRATEGIES:
            raise ConfigError(
                f"Invalid provider_strategy: {self.provider_strategy}",
                field_name="provider_strategy",
                invalid_value=self.provider_strategy,
            )
        self.provider_strategy = normalized_strategy

        # 4. Numeric bounds
        if self.max_iterations < 1:
            raise ConfigError("max_iterations must be at least 1", field_name="max_iterations")
        if self.max_context_tokens < 1:
            raise ConfigError(
                "max_context_tokens must be positive", field_name="max_context_tokens"
            )
        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigError(
                f"temperature out of range (0-2): {self.temperature}",
                field_name="temperature",
                invalid_value=self.temperature,
            )
        if self.tool_timeout is not None and self.tool_timeout <= 0:
            raise ConfigError("tool_timeout must be positive", field_name="tool_timeout")

        return self

    def generation_options(self) -> GenerationOptions:
        return GenerationOptions(
            model=self.model_name,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            top_p=self.top_p,
        )


def load_settings(**overrides) -> Settings:
    """
    Build Settings from the environment (.env included).

    pydantic validation errors surface as ConfigError so callers only
    handle one exception type.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
