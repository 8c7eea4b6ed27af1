"""LLM provider factory."""

from __future__ import annotations

from newsrag.llm.base import LLMProvider
from newsrag.registry import Registry

_providers: Registry[LLMProvider] = Registry("LLM provider", [
    ("openai", "newsrag.llm.openai_provider", "OpenAILLMProvider"),
    ("anthropic", "newsrag.llm.anthropic_provider", "AnthropicLLMProvider"),
    ("ollama", "newsrag.llm.ollama_provider", "OllamaLLMProvider"),
])


def get_llm_provider(provider: str = "openai", **kwargs) -> LLMProvider:
    """Get an LLM provider by name (``openai``, ``anthropic``, ``ollama``)."""
    return _providers.create(provider, **kwargs)


def available_providers() -> list[str]:
    """Return names of registered LLM providers."""
    return _providers.available()


def clear_cache() -> None:
    """Clear singleton cache (for testing)."""
    _providers.clear()
