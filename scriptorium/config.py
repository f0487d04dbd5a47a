"""
Configuration management for Scriptorium.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# Provider type definitions
StorageProvider = Literal["sqlite", "memory"]
LLMProvider = Literal["openai", "langchain"]
NoToolPolicyName = Literal["finish", "error"]

# Default paths
DEFAULT_SCRIPTORIUM_HOME = Path.home() / ".scriptorium"

# Storage key prefix for workspace trees (kept from the notebook-era layout)
DEFAULT_KEY_PREFIX = "notebookVFS_"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class StorageConfig:
    """Configuration for the workspace key-value store."""

    provider: StorageProvider = "sqlite"
    # SQLite
    sqlite_path: str | None = None  # None means in-memory
    # Key under which a workspace tree is stored is f"{key_prefix}{workspace_id}"
    key_prefix: str = DEFAULT_KEY_PREFIX
    # Retries for a mutation that loses a version race
    max_retries: int = 5


@dataclass
class SplitterConfig:
    """Limits for automatic splitting of oversized files."""

    max_lines: int = 500
    max_chars: int = 8000


@dataclass
class AgentConfig:
    """Configuration for the write agent loop."""

    max_iterations: int = 10
    # Fraction of non-empty lines that must look like list items
    list_item_threshold: float = 0.5
    # What to do when the model answers without calling a tool
    no_tool_policy: NoToolPolicyName = "finish"
    # None keeps the full history for the run
    max_history_entries: int | None = None


@dataclass
class LLMConfig:
    """Configuration for the text-completion provider used by the agent.

    For the ``langchain`` provider, ``model`` is a "provider:model" string
    understood by ``init_chat_model`` (e.g. "anthropic:claude-sonnet-4-20250514",
    "google_genai:gemini-2.5-pro", "ollama:llama3.1").
    """

    provider: LLMProvider = "openai"
    model: str = "gpt-5-mini"
    api_key: str | None = None
    max_tokens: int = 16000  # Reasoning models need more tokens
    temperature: float = 0.7


@dataclass
class ScriptoriumConfig:
    """Main configuration for Scriptorium."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    splitter: SplitterConfig = field(default_factory=SplitterConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)

    # Debug mode - enables verbose logging for diagnosing issues
    debug: bool = False

    def get_scriptorium_home(self) -> Path:
        """Get the Scriptorium home directory."""
        home = os.getenv("SCRIPTORIUM_HOME")
        return Path(home) if home else DEFAULT_SCRIPTORIUM_HOME

    @classmethod
    def from_env(cls) -> "ScriptoriumConfig":
        """Create configuration from environment variables."""
        config = cls.default_persistent()

        config.llm.api_key = os.getenv("OPENAI_API_KEY")
        model = os.getenv("SCRIPTORIUM_MODEL")
        if model:
            # "provider:model" strings go through LangChain
            if ":" in model:
                config.llm.provider = "langchain"
            config.llm.model = model
        config.debug = _env_flag("SCRIPTORIUM_DEBUG")

        return config

    @classmethod
    def default_local(cls) -> "ScriptoriumConfig":
        """Create a default local configuration for development (in-memory, no persistence)."""
        return cls(
            storage=StorageConfig(provider="memory"),
            llm=LLMConfig(
                provider="openai",
                api_key=os.getenv("OPENAI_API_KEY"),
            ),
        )

    @classmethod
    def default_persistent(cls) -> "ScriptoriumConfig":
        """Create a default configuration with persistence enabled.

        Uses ~/.scriptorium/scriptorium.db (or $SCRIPTORIUM_HOME) for all
        workspace trees.
        """
        config = cls()
        home = config.get_scriptorium_home()
        config.storage = StorageConfig(
            provider="sqlite",
            sqlite_path=str(home / "scriptorium.db"),
        )
        config.llm.api_key = os.getenv("OPENAI_API_KEY")
        return config
