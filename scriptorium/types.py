"""
Core types for Scriptorium - the workspace file tree and the write agent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Union


# =============================================================================
# VFS Nodes
# =============================================================================


class NodeType(str, Enum):
    """Type of node in the workspace VFS."""

    FILE = "file"
    FOLDER = "folder"


@dataclass
class File:
    """A file node holding text content."""

    content: str = ""

    @property
    def node_type(self) -> NodeType:
        return NodeType.FILE


@dataclass
class Folder:
    """A folder node. Keys of ``children`` are single path segments."""

    children: dict[str, "VFSNode"] = field(default_factory=dict)

    @property
    def node_type(self) -> NodeType:
        return NodeType.FOLDER


VFSNode = Union[File, Folder]

# The persisted state of one workspace is its root folder.
VFSState = Folder


def node_to_dict(node: VFSNode) -> dict[str, Any]:
    """Convert a node to its JSON-serializable form."""
    if isinstance(node, File):
        return {"type": NodeType.FILE.value, "content": node.content}
    return {
        "type": NodeType.FOLDER.value,
        "children": {name: node_to_dict(child) for name, child in node.children.items()},
    }


def node_from_dict(data: Any) -> VFSNode:
    """Build a node from its serialized form.

    Raises:
        ValueError: If the payload is not a valid node.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Invalid node payload: expected object, got {type(data).__name__}")

    node_type = data.get("type")
    if node_type == NodeType.FILE.value:
        content = data.get("content", "")
        if content is None:
            content = ""
        if not isinstance(content, str):
            raise ValueError("Invalid file node: content must be a string")
        return File(content=content)

    if node_type == NodeType.FOLDER.value:
        children = data.get("children") or {}
        if not isinstance(children, dict):
            raise ValueError("Invalid folder node: children must be an object")
        folder = Folder()
        for name, child in children.items():
            if not name or "/" in name:
                raise ValueError(f"Invalid child name in folder: {name!r}")
            folder.children[name] = node_from_dict(child)
        return folder

    raise ValueError(f"Unknown node type: {node_type!r}")


def state_to_dict(root: VFSState) -> dict[str, Any]:
    """Serialize a workspace root in the stored ``{"/": ...}`` layout."""
    return {"/": node_to_dict(root)}


def state_from_dict(data: Any) -> VFSState:
    """Deserialize a workspace root from the stored ``{"/": ...}`` layout.

    Raises:
        ValueError: If the payload has no root or the root is not a folder.
    """
    if not isinstance(data, dict) or "/" not in data:
        raise ValueError("Invalid VFS state: missing root '/'")
    root = node_from_dict(data["/"])
    if not isinstance(root, Folder):
        raise ValueError("Invalid VFS state: root must be a folder")
    return root


# =============================================================================
# Content Splitting
# =============================================================================


@dataclass
class FileSplit:
    """One bounded part of a file produced by the content splitter."""

    path: str
    content: str
    part: int  # 1-based
    total_parts: int
    line_count: int = 0


@dataclass
class LargeFileReport:
    """Result of the cheap line-count pre-check."""

    is_large: bool
    line_count: int
    message: str = ""


@dataclass
class WriteResult:
    """Result of a VFS write."""

    success: bool
    message: str | None = None

    def __bool__(self) -> bool:
        return self.success


# =============================================================================
# Agent Results and Updates
# =============================================================================


@dataclass
class ContextDocument:
    """A named document inlined into the agent's task prompt."""

    name: str
    content: str


@dataclass
class ToolResult:
    """Outcome of one executed tool call."""

    tool_name: str
    tool_params: dict[str, Any]
    success: bool
    result: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "toolName": self.tool_name,
            "toolParams": self.tool_params,
            "success": self.success,
        }
        if self.result is not None:
            data["result"] = self.result
        if self.error is not None:
            data["error"] = self.error
        return data

    def to_history_text(self) -> str:
        """Render the result the way it is fed back to the model."""
        if self.success:
            text = f"Tool {self.tool_name} executed successfully."
            if self.result:
                text += f"\nResult:\n{self.result}"
            return text
        return f"Tool {self.tool_name} failed. Error: {self.error}"


@dataclass(frozen=True)
class StatusUpdate:
    message: str
    type: Literal["status"] = field(default="status", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "message": self.message}


@dataclass(frozen=True)
class ErrorUpdate:
    message: str
    type: Literal["error"] = field(default="error", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "message": self.message}


@dataclass(frozen=True)
class FileSystemChanged:
    type: Literal["fileSystemChanged"] = field(default="fileSystemChanged", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class TodoCompleted:
    description: str
    type: Literal["todoCompleted"] = field(default="todoCompleted", init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "description": self.description}


WriteAgentUpdate = Union[StatusUpdate, ErrorUpdate, FileSystemChanged, TodoCompleted]


class AgentOutcome(str, Enum):
    """How a write agent run ended."""

    FINISHED = "finished"
    NO_TOOL = "no_tool"
    MAX_ITERATIONS = "max_iterations"
    INVALID_INPUT = "invalid_input"
    FAILED = "failed"


@dataclass
class AgentRunResult:
    """Summary of one ``WriteAgent.start()`` call."""

    outcome: AgentOutcome
    iterations: int = 0
    tool_results: list[ToolResult] = field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome not in (AgentOutcome.INVALID_INPUT, AgentOutcome.FAILED)


# =============================================================================
# Conversation History
# =============================================================================


HistoryRole = Literal["user", "assistant", "tool"]


@dataclass
class HistoryEntry:
    role: HistoryRole
    content: str


@dataclass
class ConversationHistory:
    """Append-only conversation buffer owned by a single agent run.

    The buffer is unbounded by default. When ``max_entries`` is set, the
    first user entry (the task prompt) is pinned and the oldest entries
    after it are evicted once the limit is exceeded.
    """

    entries: list[HistoryEntry] = field(default_factory=list)
    max_entries: int | None = None

    def __len__(self) -> int:
        return len(self.entries)

    def append(self, role: HistoryRole, content: str) -> None:
        """Append an entry, evicting old entries if a limit is set."""
        self.entries.append(HistoryEntry(role=role, content=content))
        self._evict()

    def clear(self) -> None:
        self.entries.clear()

    def _evict(self) -> None:
        if self.max_entries is None or len(self.entries) <= self.max_entries:
            return
        keep_head = 1 if self.entries and self.entries[0].role == "user" else 0
        overflow = len(self.entries) - max(self.max_entries, keep_head + 1)
        if overflow > 0:
            del self.entries[keep_head : keep_head + overflow]

    def to_prompt(self) -> str:
        """Flatten the history into a single prompt string."""
        return "\n\n".join(f"{entry.role}: {entry.content}" for entry in self.entries)
