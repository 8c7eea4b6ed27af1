"""Abstract base class for LLM providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator


class LLMProvider(ABC):
    """Interface for LLM response generation.

    Implementations raise ``SafetyBlocked`` or ``QuotaExceeded`` for the
    two provider outcomes callers can recover from; anything else
    surfaces as ``GenerationFailure`` or the underlying exception.
    """

    @abstractmethod
    def generate(self, prompt: str, system: str | None = None) -> str:
        """Generate a response from the LLM.

        Args:
            prompt: The user prompt.
            system: Optional system prompt.

        Returns:
            Generated text response.
        """

    @abstractmethod
    def stream(self, prompt: str, system: str | None = None) -> Iterator[str]:
        """Yield response text fragments in order as the model produces them."""

    @classmethod
    def provider_name(cls) -> str:
        """Return human-readable provider name."""
        return cls.__name__
