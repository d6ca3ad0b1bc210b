# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for chatplay.
Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from chatplay.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.game.resource_max_rounds)
    10
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Relational database configuration for game persistence.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        echo: Log every SQL statement.
        url_override: Full connection URL, used instead of the components
            when set (e.g. sqlite+aiosqlite for local runs).
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "chatplay"
    password: SecretStr = SecretStr("chatplay_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "chatplay"
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False
    url_override: str | None = None

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        if self.url_override:
            return self.url_override
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class LLMSettings(BaseSettings):
    """LLM provider configuration using LiteLLM.

    LiteLLM handles provider routing based on the model prefix
    (``deepseek/``, ``openai/``, ``anthropic/``, ``ollama/``).

    Attributes:
        default_model: Model used for AI participants without an explicit model.
        deepseek_api_key: DeepSeek API key.
        openai_api_key: OpenAI API key.
        anthropic_api_key: Anthropic API key.
        ollama_base_url: Base URL for an Ollama server.
        request_timeout: Request timeout in seconds.
        max_retries: Retry attempts performed by LiteLLM. Defaults to none.
        max_tokens: Token limit for move generation.
        temperature: Sampling temperature for move generation.
        stop_sequences: Sequences that end a move reply.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    default_model: str = Field(
        default="deepseek/deepseek-chat",
        validation_alias="LLM_DEFAULT_MODEL",
    )

    deepseek_api_key: SecretStr | None = Field(
        default=None,
        validation_alias="DEEPSEEK_API_KEY",
    )
    openai_api_key: SecretStr | None = Field(
        default=None,
        validation_alias="OPENAI_API_KEY",
    )
    anthropic_api_key: SecretStr | None = Field(
        default=None,
        validation_alias="ANTHROPIC_API_KEY",
    )
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        validation_alias="OLLAMA_BASE_URL",
    )

    request_timeout: float = 30.0
    max_retries: int = 0

    max_tokens: int = 150
    temperature: float = 0.7
    stop_sequences: list[str] = Field(
        default_factory=lambda: ["\n\n", "Human:", "Player:"],
    )

    def get_api_key(self, model: str) -> str | None:
        """Get the API key for the provider serving a model.

        Args:
            model: LiteLLM model identifier.

        Returns:
            The provider API key, or None when the provider needs none
            or it is not configured.
        """
        provider = model.split("/", 1)[0] if "/" in model else "openai"
        keys = {
            "deepseek": self.deepseek_api_key,
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
        }
        key = keys.get(provider)
        return key.get_secret_value() if key is not None else None

    def get_api_base(self, model: str) -> str | None:
        """Get the API base URL for self-hosted providers."""
        if model.startswith("ollama/"):
            return self.ollama_base_url
        return None


class GameSettings(BaseSettings):
    """Game engine configuration.

    Attributes:
        cache_instances: Keep reconstructed game instances in process memory.
        resource_max_rounds: Number of rounds in a Big Eater Competition.
        resource_round_turns: Eating actions allowed per round.
        recent_moves_in_prompt: Moves from the log included in AI prompts.
        max_ai_turns_per_request: Consecutive AI turns played after one
            human move before control returns to the caller.
        ai_participant_prefix: Prefix for synthetic AI participant ids.
    """

    model_config = SettingsConfigDict(
        env_prefix="GAME_",
        extra="ignore",
    )

    cache_instances: bool = True
    resource_max_rounds: int = Field(default=10, ge=1)
    resource_round_turns: int = Field(default=20, ge=1)
    max_ai_turns_per_request: int = Field(default=6, ge=1)
    recent_moves_in_prompt: int = Field(default=3, ge=0)
    ai_participant_prefix: str = "ai"


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        prefix: Route prefix for versioned endpoints.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    prefix: str = "/api/v1"


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Database settings.
        llm: LLM provider settings.
        game: Game engine settings.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    game: GameSettings = Field(default_factory=GameSettings)
    api: APISettings = Field(default_factory=APISettings)

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
