"""Tests for the WriteAgent loop, driven by a scripted LLM."""

import pytest

from conftest import ScriptedLLM
from scriptorium.agent import (
    INVALID_TODO_LIST_MESSAGE,
    NoToolPolicy,
    WriteAgent,
    is_valid_todo_list,
)
from scriptorium.prompts import NO_TOOL_REMINDER, WRITE_AGENT_SYSTEM_PROMPT
from scriptorium.tasks import TaskList
from scriptorium.types import (
    AgentOutcome,
    ContextDocument,
    ErrorUpdate,
    FileSystemChanged,
    StatusUpdate,
    TodoCompleted,
)

TODO = "- Create a.md\n- Create folder /img"


def make_agent(vfs, recorder, responses, todo=TODO, documents=(), **config_overrides):
    for key, value in config_overrides.items():
        setattr(vfs.config.agent, key, value)
    llm = ScriptedLLM(responses)
    agent = WriteAgent(
        llm=llm,
        workspace_id=vfs.workspace_id,
        initial_todo_list=todo,
        context_documents=documents,
        on_update=recorder,
        vfs=vfs,
    )
    return agent, llm


class TestTodoListValidation:
    """Tests for is_valid_todo_list()."""

    @pytest.mark.parametrize(
        "text",
        [
            "- Task",
            "* Task",
            "1. Task",
            "[ ] Task",
            "[x] Task",
            "- [ ] Task",
            "- one\nsome prose",
            "\n\n  - indented task  \n\n",
        ],
    )
    def test_valid(self, text):
        assert is_valid_todo_list(text) is True

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "   \n  ",
            "please just do something",
            "-no space",
            "- one\nprose\nmore prose",
            "[X] uppercase checkbox",
        ],
    )
    def test_invalid(self, text):
        assert is_valid_todo_list(text) is False

    def test_custom_threshold(self):
        assert is_valid_todo_list("- one\nprose\nmore prose", threshold=0.3) is True


class TestSuccessfulRun:
    """A multi-step run that ends with finish_writing."""

    RESPONSES = [
        'create_document({"path":"/a.md","content":"hi"})',
        'create_folder({"path":"/img"})',
        "finish_writing({})",
    ]

    def test_update_sequence(self, vfs, recorder):
        agent, _ = make_agent(vfs, recorder, self.RESPONSES)
        agent.start()

        assert recorder.updates == [
            StatusUpdate("Starting agent..."),
            StatusUpdate("Iteration 1/10..."),
            StatusUpdate("Executing tool: create_document..."),
            FileSystemChanged(),
            StatusUpdate("Tool create_document succeeded."),
            StatusUpdate("Iteration 2/10..."),
            StatusUpdate("Executing tool: create_folder..."),
            FileSystemChanged(),
            StatusUpdate("Tool create_folder succeeded."),
            StatusUpdate("Iteration 3/10..."),
            StatusUpdate("Agent decided to finish."),
            StatusUpdate("Agent finished."),
        ]

    def test_effects_and_result(self, vfs, recorder):
        agent, llm = make_agent(vfs, recorder, self.RESPONSES)
        result = agent.start()

        assert vfs.read("/a.md") == "hi"
        assert vfs.list("/img") == []
        assert recorder.fs_changes == 2
        assert recorder.errors == []
        assert result.outcome is AgentOutcome.FINISHED
        assert result.succeeded is True
        assert result.iterations == 3
        assert [r.tool_name for r in result.tool_results] == ["create_document", "create_folder"]
        assert len(llm.calls) == 3

    def test_prompts(self, vfs, recorder):
        documents = [ContextDocument(name="notes.txt", content="Some notes.")]
        agent, llm = make_agent(vfs, recorder, self.RESPONSES, documents=documents)
        agent.start()

        first = llm.calls[0]
        assert first["system_prompt"] == WRITE_AGENT_SYSTEM_PROMPT
        assert first["prompt"].startswith("user: You are an AI assistant")
        assert f"```markdown\n{TODO}\n```" in first["prompt"]
        assert "--- Document 1: notes.txt ---\nSome notes.\n--- End Document 1 ---" in first["prompt"]
        assert "- finish_writing(): " in first["prompt"]

        second = llm.calls[1]["prompt"]
        assert second.startswith(first["prompt"] + "\n\n")
        assert 'assistant: create_document({"path":"/a.md","content":"hi"})' in second
        assert second.endswith(
            "tool: Tool create_document executed successfully.\nResult:\n"
            "Document '/a.md' created."
        )

    def test_no_context_documents(self, vfs, recorder):
        agent, llm = make_agent(vfs, recorder, ["finish_writing()"])
        agent.start()
        assert "No context documents were provided." in llm.calls[0]["prompt"]


class TestInvalidInput:
    """Runs rejected before the loop starts."""

    def test_invalid_todo_list(self, vfs, recorder):
        agent, llm = make_agent(vfs, recorder, ["finish_writing()"], todo="please just do something")
        result = agent.start()

        assert recorder.updates == [
            StatusUpdate("Starting agent..."),
            StatusUpdate("Agent failed."),
            ErrorUpdate(INVALID_TODO_LIST_MESSAGE),
        ]
        assert llm.calls == []
        assert vfs.list("/") == []
        assert result.outcome is AgentOutcome.INVALID_INPUT
        assert result.succeeded is False

    def test_empty_todo_list(self, vfs, recorder):
        agent, llm = make_agent(vfs, recorder, [], todo="")
        assert agent.start().outcome is AgentOutcome.INVALID_INPUT
        assert llm.calls == []


class TestNoToolPolicy:
    """Responses without a usable tool call."""

    def test_finish_policy_stops_quietly(self, vfs, recorder):
        agent, llm = make_agent(vfs, recorder, ["All done, nothing else to do."])
        result = agent.start()

        assert recorder.statuses[-2:] == [
            "Agent did not call a tool. Finishing...",
            "Agent finished.",
        ]
        assert recorder.errors == []
        assert result.outcome is AgentOutcome.NO_TOOL
        assert len(llm.calls) == 1

    def test_invalid_call_counts_as_no_tool(self, vfs, recorder):
        agent, _ = make_agent(vfs, recorder, ['create_document({"path": "/a.md"})'])
        result = agent.start()

        assert result.outcome is AgentOutcome.NO_TOOL
        assert recorder.errors == []
        assert vfs.list("/") == []

    def test_error_policy_reminds_and_continues(self, vfs, recorder):
        agent, llm = make_agent(
            vfs,
            recorder,
            ["Sure, let me think.", "finish_writing()"],
            no_tool_policy="error",
        )
        assert agent.no_tool_policy is NoToolPolicy.ERROR

        result = agent.start()

        assert recorder.errors == ["Agent response did not contain a valid tool call."]
        assert llm.calls[1]["prompt"].endswith(f"user: {NO_TOOL_REMINDER}")
        assert result.outcome is AgentOutcome.FINISHED
        assert recorder.statuses[-1] == "Agent finished."


class TestToolFailures:
    """Tool failures are reported and the loop continues."""

    def test_failed_tool_is_reported_and_fed_back(self, vfs, recorder):
        vfs.mkdir("/docs")
        agent, llm = make_agent(
            vfs,
            recorder,
            ['create_document({"path": "/docs", "content": "x"})', "finish_writing()"],
        )
        result = agent.start()

        assert "Tool create_document failed." in recorder.statuses
        assert len(recorder.errors) == 1
        assert recorder.errors[0].startswith(
            "Tool create_document failed: Failed to write document '/docs'."
        )
        assert recorder.fs_changes == 0
        assert "tool: Tool create_document failed. Error: Failed to write document" in (
            llm.calls[1]["prompt"]
        )
        assert result.outcome is AgentOutcome.FINISHED
        assert result.tool_results[0].success is False


class TestTermination:
    """Bounded termination and fatal errors."""

    def test_max_iterations(self, vfs, recorder):
        responses = ['read_document({"path": "/x.md"})'] * 5
        agent, llm = make_agent(vfs, recorder, responses, max_iterations=3)
        result = agent.start()

        assert len(llm.calls) == 3
        assert recorder.statuses[-2:] == [
            "Reached maximum iterations. Stopping agent.",
            "Agent finished.",
        ]
        assert "Iteration 3/3..." in recorder.statuses
        assert len(recorder.errors) == 3
        assert result.outcome is AgentOutcome.MAX_ITERATIONS
        assert result.iterations == 3

    def test_llm_exception_is_fatal(self, vfs, recorder):
        agent, llm = make_agent(
            vfs,
            recorder,
            ['create_folder({"path": "/img"})', RuntimeError("API down"), "finish_writing()"],
        )
        result = agent.start()

        assert recorder.updates[-2:] == [StatusUpdate("Agent failed."), ErrorUpdate("API down")]
        assert "Agent finished." not in recorder.statuses
        assert len(llm.calls) == 2
        assert vfs.list("/") == ["img"]
        assert result.outcome is AgentOutcome.FAILED
        assert result.error == "API down"
        assert result.iterations == 2

    def test_empty_response_is_fatal(self, vfs, recorder):
        agent, _ = make_agent(vfs, recorder, [""])
        result = agent.start()

        assert recorder.updates[-1] == ErrorUpdate("LLM did not provide a response.")
        assert result.outcome is AgentOutcome.FAILED

    @pytest.mark.parametrize(
        "responses",
        [
            [],
            ["finish_writing()"],
            ["no tool here"],
            ['create_folder({"path": "/a"})'] * 10,
            ['create_folder({"path": "/a"})', "", "finish_writing()"],
            ['ask_clarification({"question": "?"})', 'read_document({"path": "/a"})'] * 3,
        ],
    )
    def test_exactly_one_terminal_signal(self, vfs, recorder, responses):
        agent, llm = make_agent(vfs, recorder, responses, max_iterations=4)
        agent.start()

        finished = recorder.statuses.count("Agent finished.")
        failed = recorder.statuses.count("Agent failed.")
        assert finished + failed == 1
        assert len(llm.calls) <= 4

    def test_history_resets_between_runs(self, vfs, recorder):
        agent, llm = make_agent(
            vfs,
            recorder,
            ['create_folder({"path": "/img"})', "finish_writing()", "finish_writing()"],
        )
        agent.start()
        agent.start()

        third = llm.calls[2]["prompt"]
        assert third == llm.calls[0]["prompt"]
        assert "assistant:" not in third


class TestTaskTracking:
    """todoCompleted updates drive an external task list."""

    def test_mark_todo_done_updates_task_list(self, vfs, recorder):
        tasks = TaskList.from_markdown(TODO)

        def on_update(update):
            recorder(update)
            tasks.apply_update(update)

        agent, _ = make_agent(
            vfs,
            on_update,
            [
                'create_document({"path": "/a.md", "content": "A"})',
                'mark_todo_done({"item_description": "Create a.md"})',
                "finish_writing()",
            ],
        )
        agent.start()

        assert TodoCompleted("Create a.md") in recorder.updates
        assert [item.text for item in tasks.remaining] == ["Create folder /img"]
        assert tasks.items[0].completed_by == "ai"

    def test_clarification_does_not_block(self, vfs, recorder):
        agent, llm = make_agent(
            vfs,
            recorder,
            ['ask_clarification({"question": "Which tone?"})', "finish_writing()"],
        )
        result = agent.start()

        assert "Waiting for clarification: Which tone?" in recorder.statuses
        assert len(llm.calls) == 2
        assert result.outcome is AgentOutcome.FINISHED
