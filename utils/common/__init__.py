"""
utils.common - Standalone tool classes.

Modules:
    llm_tools - Anthropic Claude LLM integration
"""

from utils.common.llm_tools import (
    LLMTools,
    LLMConfig,
    BaseLLMProvider,
    AnthropicProvider,
    create_provider,
    LLMError,
    LLMProviderError,
    LLMResponseError,
    ProviderNotAvailableError,
)

__all__ = [
    "LLMTools",
    "LLMConfig",
    "BaseLLMProvider",
    "AnthropicProvider",
    "create_provider",
    "LLMError",
    "LLMProviderError",
    "LLMResponseError",
    "ProviderNotAvailableError",
]
