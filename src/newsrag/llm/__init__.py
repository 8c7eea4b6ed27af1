"""LLM providers — OpenAI, Anthropic, Ollama — with sync and streaming generation."""

from newsrag.llm.base import LLMProvider
from newsrag.llm.factory import available_providers, get_llm_provider

__all__ = ["LLMProvider", "available_providers", "get_llm_provider"]
