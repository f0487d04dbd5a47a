"""
OpenAI LLM provider for Scriptorium.
"""

from __future__ import annotations

from openai import OpenAI

from scriptorium.llms.base import BaseLLM, LLMResponse


class OpenAILLM(BaseLLM):
    """OpenAI-based LLM provider using the Responses API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-5-mini",
        default_max_tokens: int = 16000,  # Reasoning models need more tokens
    ):
        """
        Initialize OpenAI LLM.

        Args:
            api_key: OpenAI API key. If None, uses OPENAI_API_KEY env var.
            model: The model to use for completions.
            default_max_tokens: Default maximum tokens for responses.
        """
        self.client = OpenAI(api_key=api_key)
        self._model = model
        self.default_max_tokens = default_max_tokens

    @property
    def model(self) -> str:
        """Return the model name being used."""
        return self._model

    def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """
        Generate a completion for the given prompt using the Responses API.

        Args:
            prompt: The user prompt/message.
            system_prompt: Optional system prompt for context.
            max_tokens: Maximum tokens in the response.
            temperature: Sampling temperature (currently unused - some models don't support it).

        Returns:
            LLMResponse with the generated content.
        """
        response = self.client.responses.create(
            model=self._model,
            instructions=system_prompt,
            input=prompt,
            max_output_tokens=max_tokens or self.default_max_tokens,
        )

        # Try output_text first, then dig into the output array
        content = response.output_text
        if not content and response.output:
            for item in response.output:
                for content_item in getattr(item, "content", None) or []:
                    if getattr(content_item, "text", None):
                        content = content_item.text
                        break
                if content:
                    break

        usage = None
        if response.usage:
            usage = {
                "input_tokens": response.usage.input_tokens,
                "output_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            content=content or "",
            model=response.model,
            usage=usage,
            raw_response=response,
        )
