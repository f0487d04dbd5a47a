"""
Scriptorium - an LLM write agent that turns Markdown to-do lists into documents.

Each workspace owns a small virtual file system of folders and Markdown
files. The WriteAgent works through a to-do list by calling tools against
that file system, reporting every step through an update callback.

Agent Usage:
    from scriptorium import ContextDocument, WriteAgent, create_llm

    agent = WriteAgent(
        llm=create_llm(),
        workspace_id="thesis",
        initial_todo_list="- Write chapters/intro.md\\n- Summarize notes.txt",
        context_documents=[ContextDocument("notes.txt", notes)],
        on_update=print,
    )
    result = agent.start()

Direct VFS Usage:
    from scriptorium import WorkspaceVFS

    with WorkspaceVFS.for_workspace("thesis") as vfs:
        vfs.write("/chapters/intro.md", "# Introduction")
        print(vfs.tree())
        archive = vfs.export_archive()
"""

from scriptorium.agent import NoToolPolicy, WriteAgent, is_valid_todo_list
from scriptorium.config import ScriptoriumConfig
from scriptorium.llms import BaseLLM, LLMResponse, create_llm
from scriptorium.splitter import detect_large, split_content
from scriptorium.stores import ConcurrentModificationError, StorageError
from scriptorium.tasks import TaskItem, TaskList
from scriptorium.tools import AgentTool, parse_tool_call
from scriptorium.types import (
    AgentOutcome,
    AgentRunResult,
    ContextDocument,
    ErrorUpdate,
    File,
    FileSplit,
    FileSystemChanged,
    Folder,
    StatusUpdate,
    TodoCompleted,
    ToolResult,
    WriteAgentUpdate,
    WriteResult,
)
from scriptorium.vfs import WorkspaceVFS, create_vfs

__version__ = "0.0.1"

__all__ = [
    # Core classes
    "WorkspaceVFS",
    "WriteAgent",
    "ScriptoriumConfig",
    "NoToolPolicy",
    # Factory functions
    "create_vfs",
    "create_llm",
    # Helpers
    "is_valid_todo_list",
    "parse_tool_call",
    "split_content",
    "detect_large",
    # LLM
    "BaseLLM",
    "LLMResponse",
    # Errors
    "StorageError",
    "ConcurrentModificationError",
    # Tasks
    "TaskItem",
    "TaskList",
    # Types
    "AgentTool",
    "AgentOutcome",
    "AgentRunResult",
    "ContextDocument",
    "File",
    "Folder",
    "FileSplit",
    "ToolResult",
    "WriteResult",
    "WriteAgentUpdate",
    "StatusUpdate",
    "ErrorUpdate",
    "FileSystemChanged",
    "TodoCompleted",
]
