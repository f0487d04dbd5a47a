"""Unit tests for the LLM adapters (no network access)."""

from types import SimpleNamespace

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from scriptorium.config import LLMConfig
from scriptorium.llms import LangChainLLM, OpenAILLM, create_llm
from scriptorium.llms import langchain_llm


class FakeResponses:
    def __init__(self, response):
        self.response = response
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        return self.response


class FakeChatModel:
    def __init__(self, reply):
        self.reply = reply
        self.messages = None
        self.kwargs = None

    def invoke(self, messages, **kwargs):
        self.messages = messages
        self.kwargs = kwargs
        return self.reply


class TestOpenAILLM:
    """Tests for the Responses API adapter."""

    def make_llm(self, response):
        llm = OpenAILLM(api_key="sk-test", model="gpt-5-mini", default_max_tokens=123)
        fake = FakeResponses(response)
        llm.client = SimpleNamespace(responses=fake)
        return llm, fake

    def test_complete(self):
        usage = SimpleNamespace(input_tokens=10, output_tokens=5, total_tokens=15)
        llm, fake = self.make_llm(
            SimpleNamespace(output_text="finish_writing()", output=[], usage=usage, model="gpt-5-mini")
        )

        response = llm.complete("user: task", system_prompt="system")

        assert response.content == "finish_writing()"
        assert response.total_tokens == 15
        assert fake.kwargs == {
            "model": "gpt-5-mini",
            "instructions": "system",
            "input": "user: task",
            "max_output_tokens": 123,
        }

    def test_falls_back_to_output_items(self):
        item = SimpleNamespace(content=[SimpleNamespace(text="create_folder({})")])
        reasoning = SimpleNamespace(content=None)
        llm, _ = self.make_llm(
            SimpleNamespace(output_text="", output=[reasoning, item], usage=None, model="m")
        )

        response = llm.complete("prompt")

        assert response.content == "create_folder({})"
        assert response.usage is None
        assert response.total_tokens == 0


class TestLangChainLLM:
    """Tests for the LangChain adapter."""

    def test_complete(self, monkeypatch):
        reply = AIMessage(
            content=[{"type": "text", "text": "finish_"}, {"type": "text", "text": "writing()"}],
            usage_metadata={"input_tokens": 3, "output_tokens": 2, "total_tokens": 5},
        )
        chat = FakeChatModel(reply)
        monkeypatch.setattr(langchain_llm, "init_chat_model", lambda model, **kwargs: chat)

        llm = LangChainLLM("anthropic:claude-sonnet-4-20250514", default_max_tokens=50)
        response = llm.complete("prompt", system_prompt="system", temperature=0.2)

        assert response.content == "finish_writing()"
        assert response.model == "anthropic:claude-sonnet-4-20250514"
        assert response.total_tokens == 5
        assert chat.messages == [SystemMessage(content="system"), HumanMessage(content="prompt")]
        assert chat.kwargs == {"max_tokens": 50, "temperature": 0.2}

    def test_plain_string_content(self, monkeypatch):
        chat = FakeChatModel(AIMessage(content="hello"))
        monkeypatch.setattr(langchain_llm, "init_chat_model", lambda model, **kwargs: chat)

        response = LangChainLLM("ollama:llama3").complete("prompt")

        assert response.content == "hello"
        assert chat.messages == [HumanMessage(content="prompt")]


class TestCreateLLM:
    """Tests for the provider factory."""

    def test_openai(self):
        llm = create_llm(LLMConfig(provider="openai", model="gpt-5", api_key="sk-test"))
        assert isinstance(llm, OpenAILLM)
        assert llm.model == "gpt-5"

    def test_langchain(self, monkeypatch):
        monkeypatch.setattr(langchain_llm, "init_chat_model", lambda model, **kwargs: object())
        llm = create_llm(LLMConfig(provider="langchain", model="ollama:llama3"))
        assert isinstance(llm, LangChainLLM)

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            create_llm(LLMConfig(provider="carrier-pigeon"))
