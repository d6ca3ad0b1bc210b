# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""LLM client module using LiteLLM.

Components:
- LLMClient: LiteLLM-backed implementation of TextGenerator
- TextGenerator: Interface consumed by the session engine
- GenerationError: Raised when a model call fails

Example:
    >>> from chatplay.core.intelligence.llm import LLMClient
    >>> client = LLMClient()
    >>> text = await client.generate("Choose your move")
"""

from chatplay.core.intelligence.llm.client import (
    GenerationError,
    LLMClient,
    LLMResponse,
    TextGenerator,
)

__all__ = [
    "GenerationError",
    "LLMClient",
    "LLMResponse",
    "TextGenerator",
]
