"""
Execution of validated tool calls against a workspace VFS.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from scriptorium.tools.schemas import (
    AgentTool,
    AskClarification,
    CreateDocument,
    CreateFolder,
    MarkTodoDone,
    ReadDocument,
    UpdateDocument,
)
from scriptorium.types import (
    FileSystemChanged,
    StatusUpdate,
    TodoCompleted,
    ToolResult,
    WriteAgentUpdate,
)
from scriptorium.vfs import WorkspaceVFS

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[WriteAgentUpdate], None]


class ToolExecutor:
    """Maps write agent tool calls onto VFS operations."""

    def __init__(self, vfs: WorkspaceVFS, on_update: UpdateCallback):
        """
        Initialize the executor.

        Args:
            vfs: The workspace VFS to operate on.
            on_update: Callback receiving side-effect notifications
                (fileSystemChanged, todoCompleted, clarification status).
        """
        self.vfs = vfs
        self.on_update = on_update
        self._pending: list[WriteAgentUpdate] = []

    def execute_tool(self, tool: AgentTool) -> ToolResult:
        """
        Execute a tool call.

        Never raises: failures, including storage errors, are returned as a
        failed ToolResult so the agent can report them and continue. A
        failing update callback is logged and does not change the result.

        Args:
            tool: A validated tool call.

        Returns:
            The result of the call.
        """
        tool_map: dict[str, Callable[[AgentTool], ToolResult]] = {
            CreateFolder.name: self._execute_create_folder,
            CreateDocument.name: self._execute_write,
            UpdateDocument.name: self._execute_write,
            ReadDocument.name: self._execute_read,
            MarkTodoDone.name: self._execute_mark_todo_done,
            AskClarification.name: self._execute_ask_clarification,
        }

        handler = tool_map.get(tool.name)
        if handler is None:
            logger.warning("Attempted to execute non-executable tool: %s", tool.name)
            return self._failure(tool, f"Tool '{tool.name}' is not executable.")

        self._pending = []
        try:
            result = handler(tool)
        except Exception as e:
            logger.exception("Error executing tool %s", tool.name)
            return self._failure(tool, str(e) or type(e).__name__)

        # Side effects are reported only once the tool has completed
        for update in self._pending:
            try:
                self.on_update(update)
            except Exception:
                logger.exception("Update callback failed for %s after tool %s", update, tool.name)
        self._pending = []
        return result

    def _success(self, tool: AgentTool, result: str) -> ToolResult:
        return ToolResult(
            tool_name=tool.name,
            tool_params=tool.params,
            success=True,
            result=result,
        )

    def _failure(self, tool: AgentTool, error: str) -> ToolResult:
        return ToolResult(
            tool_name=tool.name,
            tool_params=tool.params,
            success=False,
            error=error,
        )

    def _notify(self, update: WriteAgentUpdate) -> None:
        self._pending.append(update)

    def _execute_create_folder(self, tool: CreateFolder) -> ToolResult:
        if self.vfs.mkdir(tool.path):
            self._notify(FileSystemChanged())
            return self._success(tool, f"Folder '{tool.path}' created or already exists.")
        return self._failure(
            tool,
            f"Failed to create folder '{tool.path}'. It might be a file or path is invalid.",
        )

    def _execute_write(self, tool: CreateDocument | UpdateDocument) -> ToolResult:
        if isinstance(tool, CreateDocument):
            content, verb = tool.content, "created"
        else:
            content, verb = tool.new_content, "updated"

        outcome = self.vfs.write(tool.path, content)
        if not outcome.success:
            reason = f" {outcome.message}." if outcome.message else ""
            return self._failure(
                tool,
                f"Failed to write document '{tool.path}'. Path might be invalid or "
                f"point to a folder.{reason}",
            )

        self._notify(FileSystemChanged())
        result = f"Document '{tool.path}' {verb}."
        if outcome.message:
            result += f"\n{outcome.message}"
        return self._success(tool, result)

    def _execute_read(self, tool: ReadDocument) -> ToolResult:
        content = self.vfs.read(tool.path)
        if content is None:
            return self._failure(
                tool,
                f"Failed to read document '{tool.path}'. File not found or it's a folder.",
            )
        return self._success(tool, content)

    def _execute_mark_todo_done(self, tool: MarkTodoDone) -> ToolResult:
        logger.info("Agent marked to-do as done: %s", tool.item_description)
        self._notify(TodoCompleted(description=tool.item_description))
        return self._success(
            tool, f"Successfully requested to mark '{tool.item_description}' as done."
        )

    def _execute_ask_clarification(self, tool: AskClarification) -> ToolResult:
        logger.info("Agent asks for clarification: %s", tool.question)
        self._notify(StatusUpdate(message=f"Waiting for clarification: {tool.question}"))
        return self._success(
            tool, f'Clarification requested: "{tool.question}". Waiting for user response.'
        )
