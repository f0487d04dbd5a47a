"""
LangChain LLM provider for Scriptorium.

Wraps any chat model reachable through ``init_chat_model`` so that
"provider:model" strings (e.g. "anthropic:claude-sonnet-4-5",
"google_genai:gemini-2.5-flash", "ollama:llama3") can drive the agent.
"""

from __future__ import annotations

from typing import Any

from langchain.chat_models import init_chat_model
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from scriptorium.llms.base import BaseLLM, LLMResponse


def _message_text(message: BaseMessage) -> str:
    """Extract plain text from a chat message, including content-block lists."""
    content = message.content
    if isinstance(content, str):
        return content

    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class LangChainLLM(BaseLLM):
    """LLM provider backed by a LangChain chat model."""

    def __init__(
        self,
        model: str,
        default_max_tokens: int = 16000,
        **model_kwargs: Any,
    ):
        """
        Initialize the LangChain chat model.

        Args:
            model: Model string in "provider:model" form.
            default_max_tokens: Default maximum tokens for responses.
            **model_kwargs: Extra keyword arguments for init_chat_model.
        """
        self._model = model
        self.default_max_tokens = default_max_tokens
        self.chat_model = init_chat_model(model, **model_kwargs)

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
        Generate a completion for the given prompt.

        Args:
            prompt: The user prompt/message.
            system_prompt: Optional system prompt for context.
            max_tokens: Maximum tokens in the response.
            temperature: Sampling temperature (0.0 to 2.0).

        Returns:
            LLMResponse with the generated content.
        """
        messages: list[BaseMessage] = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=prompt))

        response = self.chat_model.invoke(
            messages,
            max_tokens=max_tokens or self.default_max_tokens,
            temperature=temperature,
        )

        usage = None
        usage_metadata = getattr(response, "usage_metadata", None)
        if usage_metadata:
            usage = {
                "input_tokens": usage_metadata.get("input_tokens", 0),
                "output_tokens": usage_metadata.get("output_tokens", 0),
                "total_tokens": usage_metadata.get("total_tokens", 0),
            }

        return LLMResponse(
            content=_message_text(response),
            model=self._model,
            usage=usage,
            raw_response=response,
        )
