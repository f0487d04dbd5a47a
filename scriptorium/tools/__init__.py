"""Tool protocol for the Scriptorium write agent."""

from scriptorium.tools.executor import ToolExecutor
from scriptorium.tools.parser import parse_tool_call, strip_fences
from scriptorium.tools.schemas import (
    TOOL_SCHEMAS,
    AgentTool,
    AgentToolCall,
    AskClarification,
    CreateDocument,
    CreateFolder,
    FinishWriting,
    MarkTodoDone,
    ReadDocument,
    UpdateDocument,
    tool_catalogue,
    validate_tool_call,
)

__all__ = [
    # Schemas
    "AgentTool",
    "AgentToolCall",
    "CreateFolder",
    "CreateDocument",
    "UpdateDocument",
    "ReadDocument",
    "MarkTodoDone",
    "AskClarification",
    "FinishWriting",
    "TOOL_SCHEMAS",
    "tool_catalogue",
    "validate_tool_call",
    # Parsing and execution
    "parse_tool_call",
    "strip_fences",
    "ToolExecutor",
]
