"""
Input schemas for the write agent's tools.

Each tool the model may call is a pydantic model. A parsed call is only
accepted if its arguments validate against the model for its name, so
execution never sees a malformed parameter bag.
"""

from __future__ import annotations

from typing import Any, ClassVar, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError


class AgentToolCall(BaseModel):
    """Base class for validated tool calls."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: ClassVar[str]
    summary: ClassVar[str]

    @property
    def params(self) -> dict[str, Any]:
        """The validated arguments as a plain dict."""
        return self.model_dump()

    @property
    def is_terminal(self) -> bool:
        return False

    def render(self) -> str:
        """Render the call in the name({json}) protocol form."""
        return f"{self.name}({self.model_dump_json()})"


class CreateFolder(AgentToolCall):
    """Input schema for creating a folder."""

    name: ClassVar[str] = "create_folder"
    summary: ClassVar[str] = "Creates a new folder (parent folders are created automatically)."

    path: StrictStr = Field(description="The folder path (e.g., 'chapters/images')")


class CreateDocument(AgentToolCall):
    """Input schema for creating a document."""

    name: ClassVar[str] = "create_document"
    summary: ClassVar[str] = "Creates a new Markdown file with the given content."

    path: StrictStr = Field(description="The file path (e.g., 'chapters/intro.md')")
    content: StrictStr = Field(description="The full Markdown content of the file")


class UpdateDocument(AgentToolCall):
    """Input schema for overwriting a document."""

    name: ClassVar[str] = "update_document"
    summary: ClassVar[str] = "Overwrites an existing Markdown file with new content."

    path: StrictStr = Field(description="The path of the file to overwrite")
    new_content: StrictStr = Field(description="The complete new content of the file")


class ReadDocument(AgentToolCall):
    """Input schema for reading a document."""

    name: ClassVar[str] = "read_document"
    summary: ClassVar[str] = "Reads the content of an existing Markdown file."

    path: StrictStr = Field(description="The path of the file to read")


class MarkTodoDone(AgentToolCall):
    """Input schema for marking a to-do item as completed."""

    name: ClassVar[str] = "mark_todo_done"
    summary: ClassVar[str] = (
        "Marks a specific item from the original list as completed. Use the exact description."
    )

    item_description: StrictStr = Field(
        description="The exact text of the to-do item, without the list marker"
    )


class AskClarification(AgentToolCall):
    """Input schema for asking the user a question."""

    name: ClassVar[str] = "ask_clarification"
    summary: ClassVar[str] = "Ask the user for clarification if a task is unclear."

    question: StrictStr = Field(description="The question to show to the user")


class FinishWriting(AgentToolCall):
    """Signals that every task is done. Takes no arguments."""

    name: ClassVar[str] = "finish_writing"
    summary: ClassVar[str] = "Call this tool when you believe all tasks are completed."

    @property
    def is_terminal(self) -> bool:
        return True


AgentTool = Union[
    CreateFolder,
    CreateDocument,
    UpdateDocument,
    ReadDocument,
    MarkTodoDone,
    AskClarification,
    FinishWriting,
]

TOOL_SCHEMAS: dict[str, type[AgentToolCall]] = {
    schema.name: schema
    for schema in (
        CreateFolder,
        CreateDocument,
        UpdateDocument,
        ReadDocument,
        MarkTodoDone,
        AskClarification,
        FinishWriting,
    )
}


def validate_tool_call(name: str, params: Any) -> AgentTool | None:
    """
    Validate raw arguments against the schema for a tool name.

    Returns:
        The validated tool call, or None for unknown names or invalid
        arguments.
    """
    schema = TOOL_SCHEMAS.get(name)
    if schema is None or not isinstance(params, dict):
        return None
    try:
        return schema.model_validate(params)  # type: ignore[return-value]
    except ValidationError:
        return None


def tool_catalogue() -> str:
    """Render the tool list shown to the model in the task prompt."""
    lines = []
    for name, schema in TOOL_SCHEMAS.items():
        args = ", ".join(f"{field}: string" for field in schema.model_fields)
        lines.append(f"- {name}({args}): {schema.summary}")
    return "\n".join(lines)
