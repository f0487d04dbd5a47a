"""
Prompt templates for the Scriptorium write agent.

The agent speaks a plain-text protocol: the system prompt pins the
``tool_name({json})`` response format, and the task prompt carries the
to-do list, the context documents and the tool catalogue.
"""

from __future__ import annotations

from collections.abc import Sequence

from scriptorium.tools.schemas import tool_catalogue
from scriptorium.types import ContextDocument

WRITE_AGENT_SYSTEM_PROMPT = """You are an AI assistant inside a note-taking application. Your task is to generate Markdown documents based on a user's to-do list.
You have access to a virtual file system. Use the provided tools to create folders and documents.
Respond ONLY with tool calls in the format tool_name({"param1": "value1", ...}) or call finish_writing({}) when done.
CRITICAL: The argument inside the parentheses MUST be a single, valid JSON object enclosed in curly braces {}. Keys and string values MUST use double quotes.
Do not include any other text, explanations, or markdown formatting (like ```) in your response.

Example valid response:
create_document({"path": "my_folder/report.md", "content": "This is the report content."})

Example invalid response (missing quotes):
create_document({path: "report.md", content: "Bad format"})

Example invalid response (extra text):
Okay, I will create the document: create_document({"path": "report.md", "content": "Content"})
"""


CONTEXT_USAGE_RULES = """**Context Usage Rules:**
- **PRIORITY:** Before asking for clarification, ALWAYS check if the task can be completed or understood using the information within the provided 'Context Documents' below.
- If a task in the To-Do List mentions a document name that matches one of the 'Context Documents', USE the content of that document to fulfill the task (e.g., summarizing, extracting information, answering a question implied by the task).
- Generate the required content based *on the context documents* when applicable, and use the 'create_document' or 'update_document' tool to save it.
- Only use the 'ask_clarification' tool if the task is ambiguous AND the necessary information cannot be found in the To-Do List OR the provided Context Documents."""


TOOL_USAGE_RULES = """Rules:
- Use the tools provided to interact with the file system.
- Paths are relative to the workspace root; "chapters/intro.md" and "/chapters/intro.md" name the same file.
- Parent folders are created automatically, but create empty folders explicitly when the task asks for them.
- Very long documents are split into numbered parts with an index file; read the parts when you need their content.
- **CRITICAL:** After successfully completing the work for a specific item in the To-Do List (e.g., creating a requested document), you MUST call the 'mark_todo_done' tool with the exact description of that item.
- Only call the 'finish_writing' tool AFTER you have completed ALL items in the list AND marked each one as done using 'mark_todo_done'."""


NO_TOOL_REMINDER = (
    "Your last response did not contain a valid tool call. Respond with exactly one "
    'tool call in the form tool_name({"param": "value"}), or call finish_writing({}) '
    "if every task is complete."
)


def format_context_documents(documents: Sequence[ContextDocument]) -> str:
    """
    Render context documents for inlining into the task prompt.

    Args:
        documents: Documents to inline, in order.

    Returns:
        The rendered block, or a short note when there are none.
    """
    if not documents:
        return "No context documents were provided."

    blocks = [
        "You have access to the following document(s) as context. Use their content "
        "when a task in the To-Do List refers to them by name:"
    ]
    for index, doc in enumerate(documents, start=1):
        blocks.append(
            f"--- Document {index}: {doc.name} ---\n{doc.content}\n--- End Document {index} ---"
        )
    return "\n\n".join(blocks)


def build_task_prompt(todo_list: str, documents: Sequence[ContextDocument] = ()) -> str:
    """Build the first user message of a write agent run."""
    return f"""You are an AI assistant tasked with generating Markdown documents based on a to-do list, using provided context documents when relevant.
Your primary goal is to complete the tasks in the To-Do List by creating the necessary folders and files using the available tools.

{CONTEXT_USAGE_RULES}

{format_context_documents(documents)}

Available Tools:
{tool_catalogue()}

{TOOL_USAGE_RULES}

To-Do List:
```markdown
{todo_list}
```

Start processing the tasks. Prioritize using the provided context documents to fulfill the tasks before asking for clarification."""
