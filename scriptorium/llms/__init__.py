"""LLM providers for the Scriptorium write agent."""

from __future__ import annotations

from scriptorium.config import LLMConfig
from scriptorium.llms.base import BaseLLM, LLMResponse
from scriptorium.llms.langchain_llm import LangChainLLM
from scriptorium.llms.openai_llm import OpenAILLM


def create_llm(config: LLMConfig | None = None) -> BaseLLM:
    """
    Create an LLM provider from configuration.

    Args:
        config: LLM configuration. Uses defaults (OpenAI) if not provided.

    Returns:
        A ready-to-use LLM provider.
    """
    config = config or LLMConfig()
    if config.provider == "openai":
        return OpenAILLM(
            api_key=config.api_key,
            model=config.model,
            default_max_tokens=config.max_tokens,
        )
    if config.provider == "langchain":
        return LangChainLLM(model=config.model, default_max_tokens=config.max_tokens)
    raise ValueError(f"Unsupported LLM provider: {config.provider}")


__all__ = ["BaseLLM", "LLMResponse", "OpenAILLM", "LangChainLLM", "create_llm"]
