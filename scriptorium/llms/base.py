"""
Abstract base class for Scriptorium LLM providers.

The write agent only needs plain text completion: the whole conversation
is flattened into one prompt and the model answers with a single tool call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class LLMResponse:
    """Response from an LLM call."""

    content: str
    model: str
    usage: dict[str, int] | None = None
    raw_response: Any = None

    @property
    def total_tokens(self) -> int:
        """Total tokens used in the request."""
        if self.usage:
            return self.usage.get("total_tokens", 0)
        return 0


class BaseLLM(ABC):
    """Abstract base class for LLM providers."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Return the model name being used."""
        pass

    @abstractmethod
    def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """
        Generate a completion for the given prompt.

        Args:
            prompt: The user prompt/message.
            system_prompt: Optional system prompt for context.
            max_tokens: Maximum tokens in the response.
            temperature: Sampling temperature (0.0 to 2.0).

        Returns:
            LLMResponse with the generated content.
        """
        pass
