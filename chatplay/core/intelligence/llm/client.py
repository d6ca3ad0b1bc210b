# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""LLM client using LiteLLM for multi-provider support.

This module provides the text generation collaborator used for AI turns.
API keys and endpoints are passed directly to LiteLLM's acompletion()
function rather than through environment variables.

Supported providers (via model prefix):
- DeepSeek: deepseek/deepseek-chat
- OpenAI: openai/gpt-4o-mini
- Anthropic: anthropic/claude-3-5-haiku-latest
- Ollama: ollama/qwen2.5:7b
- And many more through LiteLLM

Example:
    >>> from chatplay.core.intelligence.llm import LLMClient
    >>> client = LLMClient()
    >>> text = await client.generate("You are playing Tic Tac Toe...")
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import litellm
from litellm import acompletion

from chatplay.core.config.settings import LLMSettings, get_settings

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Exception raised when a text generation call fails.

    Attributes:
        message: Error description.
        model: Model that caused the error.
        original_error: Original exception if any.
    """

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.model = model
        self.original_error = original_error
        super().__init__(self.message)


class TextGenerator(Protocol):
    """Anything that turns a prompt into free text.

    The session engine depends only on this interface, so tests and
    alternative providers can stand in for LLMClient.
    """

    async def generate(
        self,
        prompt: str,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        stop_sequences: Optional[list[str]] = None,
    ) -> str:
        ...


@dataclass
class LLMResponse:
    """Response from an LLM completion.

    Attributes:
        content: The generated text content.
        model: The model that generated the response.
        tokens_input: Number of input tokens used.
        tokens_output: Number of output tokens generated.
        finish_reason: Why generation stopped (stop, length, etc.).
        raw_response: Original response object from LiteLLM.
    """

    content: str
    model: str
    tokens_input: int = 0
    tokens_output: int = 0
    finish_reason: str = "stop"
    raw_response: Optional[object] = field(default=None, repr=False)

    @property
    def total_tokens(self) -> int:
        """Get total tokens used (input + output)."""
        return self.tokens_input + self.tokens_output


class LLMClient:
    """Client for LLM operations via LiteLLM.

    Implements TextGenerator for the session engine. Each client is bound to
    one model; the engine creates one per AI participant model.

    Attributes:
        model: Model used for completions.
        timeout: Request timeout in seconds.
        max_retries: Retry attempts delegated to LiteLLM.

    Example:
        >>> client = LLMClient(model="deepseek/deepseek-chat")
        >>> response = await client.complete(
        ...     prompt="Choose your move",
        ...     temperature=0.7,
        ... )
        >>> print(response.content)
    """

    def __init__(
        self,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        llm_settings: Optional[LLMSettings] = None,
    ):
        """Initialize the LLM client.

        Args:
            model: Model in LiteLLM format. Falls back to settings.
            timeout: Request timeout in seconds. Falls back to settings.
            max_retries: Retry attempts. Falls back to settings.
            llm_settings: LLM configuration. Uses get_settings() if None.
        """
        self._settings = llm_settings or get_settings().llm

        self._model = model or self._settings.default_model
        self._timeout = timeout or self._settings.request_timeout
        self._max_retries = (
            max_retries if max_retries is not None else self._settings.max_retries
        )

        litellm.set_verbose = False
        litellm.drop_params = True

        logger.info(
            "LLMClient initialized with model=%s, timeout=%.1fs, max_retries=%d",
            self._model,
            self._timeout,
            self._max_retries,
        )

    @property
    def model(self) -> str:
        """Get the model this client is bound to."""
        return self._model

    def _get_provider_params(self, model: str) -> dict[str, Any]:
        """Get api_key and api_base to pass directly to acompletion()."""
        params: dict[str, Any] = {}
        api_key = self._settings.get_api_key(model)
        if api_key:
            params["api_key"] = api_key
        api_base = self._settings.get_api_base(model)
        if api_base:
            params["api_base"] = api_base
        return params

    async def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 150,
        stop: Optional[list[str]] = None,
        **kwargs,
    ) -> LLMResponse:
        """Generate a completion for the given prompt.

        Args:
            prompt: User prompt text.
            model: Override the bound model for this request.
            system_prompt: Optional system prompt to set context.
            temperature: Sampling temperature (0-2).
            max_tokens: Maximum tokens to generate.
            stop: Stop sequences to end generation.
            **kwargs: Additional LiteLLM parameters.

        Returns:
            LLMResponse with generated content and metadata.

        Raises:
            GenerationError: If the provider call fails.
            ValueError: If prompt is empty.
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        use_model = model or self._model

        chat_messages: list[dict[str, str]] = []
        if system_prompt:
            chat_messages.append({"role": "system", "content": system_prompt})
        chat_messages.append({"role": "user", "content": prompt})

        provider_params = self._get_provider_params(use_model)

        try:
            response = await acompletion(
                model=use_model,
                messages=chat_messages,
                temperature=temperature,
                max_tokens=max_tokens,
                stop=stop,
                timeout=self._timeout,
                num_retries=self._max_retries,
                **provider_params,
                **kwargs,
            )
            # A reply without choices is a provider failure too
            choice = response.choices[0]
        except Exception as e:
            logger.error(
                "Completion failed: model=%s, prompt_length=%d, error=%s",
                use_model,
                len(prompt),
                str(e),
            )
            raise GenerationError(
                message=f"Completion failed: {str(e)}",
                model=use_model,
                original_error=e,
            ) from e

        content = choice.message.content or ""
        finish_reason = choice.finish_reason or "stop"

        usage = getattr(response, "usage", None)
        tokens_input = getattr(usage, "prompt_tokens", 0) or 0
        tokens_output = getattr(usage, "completion_tokens", 0) or 0

        logger.debug(
            "Completion generated: model=%s, tokens_in=%d, tokens_out=%d",
            use_model,
            tokens_input,
            tokens_output,
        )

        return LLMResponse(
            content=content,
            model=use_model,
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            finish_reason=finish_reason,
            raw_response=response,
        )

    async def generate(
        self,
        prompt: str,
        *,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        stop_sequences: Optional[list[str]] = None,
    ) -> str:
        """Generate move text with the configured game defaults.

        Args:
            prompt: Prompt built from the game context.
            max_tokens: Token limit. Defaults to settings.
            temperature: Sampling temperature. Defaults to settings.
            stop_sequences: Stop sequences. Defaults to settings.

        Returns:
            The generated text, stripped.

        Raises:
            GenerationError: If the provider call fails or returns nothing.
        """
        response = await self.complete(
            prompt=prompt,
            temperature=(
                temperature if temperature is not None else self._settings.temperature
            ),
            max_tokens=max_tokens or self._settings.max_tokens,
            stop=(
                stop_sequences
                if stop_sequences is not None
                else self._settings.stop_sequences
            ),
        )

        text = response.content.strip()
        if not text:
            raise GenerationError(
                message="Model returned an empty reply",
                model=response.model,
            )
        return text
