"""
WriteAgent - turns a Markdown to-do list into files in a workspace VFS.

The agent runs a bounded prompt/parse/act loop. Every observable step is
reported through a synchronous update callback, in order:

    Starting agent...
    Iteration 1/10...
    Executing tool: create_document...
    Tool create_document succeeded.
    ...
    Agent finished.

Failures never escape ``start()``: they are reported as a final
"Agent failed." status followed by an error update.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from enum import Enum

from scriptorium.config import ScriptoriumConfig
from scriptorium.llms.base import BaseLLM
from scriptorium.prompts import NO_TOOL_REMINDER, WRITE_AGENT_SYSTEM_PROMPT, build_task_prompt
from scriptorium.tools.executor import ToolExecutor
from scriptorium.tools.parser import parse_tool_call
from scriptorium.types import (
    AgentOutcome,
    AgentRunResult,
    ContextDocument,
    ConversationHistory,
    ErrorUpdate,
    StatusUpdate,
    WriteAgentUpdate,
)
from scriptorium.vfs import WorkspaceVFS

logger = logging.getLogger(__name__)

# Matches '- ', '* ', '1. ', '[ ] ', '[x] '
LIST_MARKER = re.compile(r"^(?:[-*]|\d+\.|\[[ x]\])\s+")

INVALID_TODO_LIST_MESSAGE = (
    'Input does not appear to be a valid Markdown to-do list. Please use list format (e.g., "- Task 1").'
)


class AgentError(RuntimeError):
    """Raised inside the agent loop for conditions that end the run."""


class NoToolPolicy(str, Enum):
    """What the agent does when a response contains no valid tool call."""

    # Treat the response as implicit completion and stop
    FINISH = "finish"
    # Report an error, remind the model of the format and keep iterating
    ERROR = "error"


def is_valid_todo_list(text: str, threshold: float = 0.5) -> bool:
    """
    Check whether text looks like a Markdown list.

    Args:
        text: Candidate to-do list.
        threshold: Minimum fraction of non-empty lines that must start
            with a list marker.

    Returns:
        True if there is at least one non-empty line and enough of them
        are list items.
    """
    lines = [line.strip() for line in text.split("\n")]
    lines = [line for line in lines if line]
    if not lines:
        return False

    list_lines = sum(1 for line in lines if LIST_MARKER.match(line))
    return list_lines / len(lines) >= threshold


class WriteAgent:
    """
    Agent that works through a to-do list using VFS tools.

    Example:
        agent = WriteAgent(
            llm=create_llm(),
            workspace_id="thesis",
            initial_todo_list="- Write intro.md\\n- Create folder figures",
            context_documents=[ContextDocument("notes.txt", "...")],
            on_update=print,
        )
        result = agent.start()
    """

    def __init__(
        self,
        llm: BaseLLM,
        workspace_id: str,
        initial_todo_list: str,
        context_documents: Sequence[ContextDocument] = (),
        on_update: Callable[[WriteAgentUpdate], None] | None = None,
        vfs: WorkspaceVFS | None = None,
        config: ScriptoriumConfig | None = None,
    ):
        """
        Initialize the agent.

        Args:
            llm: Text-completion provider.
            workspace_id: Workspace whose VFS the agent writes to.
            initial_todo_list: Markdown list of tasks.
            context_documents: Documents inlined into the task prompt.
            on_update: Callback receiving every update in order.
            vfs: VFS to operate on. Defaults to the persistent VFS of
                workspace_id.
            config: Scriptorium configuration. Defaults to the persistent
                configuration.
        """
        self.llm = llm
        self.workspace_id = workspace_id
        self.initial_todo_list = initial_todo_list
        self.context_documents = list(context_documents)
        self.on_update = on_update or (lambda update: None)
        self.config = config or (vfs.config if vfs else ScriptoriumConfig.default_persistent())
        self.vfs = vfs or WorkspaceVFS(workspace_id, config=self.config)
        self.no_tool_policy = NoToolPolicy(self.config.agent.no_tool_policy)
        self.history = ConversationHistory(max_entries=self.config.agent.max_history_entries)
        self.executor = ToolExecutor(self.vfs, self._emit)

    @property
    def max_iterations(self) -> int:
        return self.config.agent.max_iterations

    def _debug_log(self, message: str) -> None:
        """Log a debug message if debug mode is enabled."""
        if self.config.debug:
            logger.debug("[%s] %s", self.workspace_id, message)

    def _emit(self, update: WriteAgentUpdate) -> None:
        self.on_update(update)

    def _status(self, message: str) -> None:
        self._emit(StatusUpdate(message=message))

    def _error(self, message: str) -> None:
        self._emit(ErrorUpdate(message=message))

    # =========================================================================
    # Run
    # =========================================================================

    def start(self) -> AgentRunResult:
        """
        Run the agent to completion.

        Returns:
            Summary of the run. All progress and failures are also reported
            through on_update.
        """
        self.history.clear()

        if not is_valid_todo_list(self.initial_todo_list, self.config.agent.list_item_threshold):
            self._status("Starting agent...")
            self._status("Agent failed.")
            self._error(INVALID_TODO_LIST_MESSAGE)
            logger.error("WriteAgent: invalid to-do list format provided")
            return AgentRunResult(
                outcome=AgentOutcome.INVALID_INPUT,
                error=INVALID_TODO_LIST_MESSAGE,
            )

        self._status("Starting agent...")
        self.history.append("user", build_task_prompt(self.initial_todo_list, self.context_documents))

        run = AgentRunResult(outcome=AgentOutcome.FINISHED)
        try:
            run.outcome = self._run_loop(run)
        except Exception as e:
            logger.exception("WriteAgent error in workspace %s", self.workspace_id)
            message = str(e) or "An unknown error occurred"
            self._status("Agent failed.")
            self._error(message)
            run.outcome = AgentOutcome.FAILED
            run.error = message
            return run

        self._status("Agent finished.")
        return run

    def _run_loop(self, run: AgentRunResult) -> AgentOutcome:
        for i in range(1, self.max_iterations + 1):
            run.iterations = i
            self._status(f"Iteration {i}/{self.max_iterations}...")

            response = self.llm.complete(
                self.history.to_prompt(),
                system_prompt=WRITE_AGENT_SYSTEM_PROMPT,
                temperature=self.config.llm.temperature,
            )
            if not response.content:
                raise AgentError("LLM did not provide a response.")

            self._debug_log(f"Iteration {i} response: {response.content!r}")
            self.history.append("assistant", response.content)

            tool = parse_tool_call(response.content)

            if tool is not None and tool.is_terminal:
                self._status("Agent decided to finish.")
                return AgentOutcome.FINISHED

            if tool is None:
                if self.no_tool_policy is NoToolPolicy.FINISH:
                    self._status("Agent did not call a tool. Finishing...")
                    logger.info("Assistant response without tool call: %s", response.content)
                    return AgentOutcome.NO_TOOL

                self._error("Agent response did not contain a valid tool call.")
                self.history.append("user", NO_TOOL_REMINDER)
                continue

            self._status(f"Executing tool: {tool.name}...")
            result = self.executor.execute_tool(tool)
            run.tool_results.append(result)

            self._status(f"Tool {tool.name} {'succeeded' if result.success else 'failed'}.")
            if not result.success:
                self._error(f"Tool {tool.name} failed: {result.error}")
                logger.warning("Tool %s failed. Error: %s", tool.name, result.error)

            self.history.append("tool", result.to_history_text())

        self._status("Reached maximum iterations. Stopping agent.")
        return AgentOutcome.MAX_ITERATIONS
