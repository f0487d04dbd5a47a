"""
Task list bookkeeping for write agent runs.

The agent never edits the task list itself; it reports
``TodoCompleted(description)`` updates and the list owner ticks off the
matching item by exact text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Literal

from scriptorium.types import TodoCompleted, WriteAgentUpdate

logger = logging.getLogger(__name__)

CompletedBy = Literal["ai", "user"]

# Optional bullet or number, then an optional checkbox
_ITEM = re.compile(r"^(?:[-*]|\d+\.)?\s*(?:\[(?P<mark>[ xX])\]\s*)?(?P<text>.*)$")


@dataclass
class TaskItem:
    """One entry of a to-do list."""

    text: str
    completed: bool = False
    completed_by: CompletedBy | None = None


@dataclass
class TaskList:
    """An ordered to-do list."""

    items: list[TaskItem] = field(default_factory=list)

    @classmethod
    def from_markdown(cls, text: str) -> "TaskList":
        """
        Parse a Markdown list.

        List markers are stripped; "[x]" items start completed (by the
        user). Blank lines are skipped.
        """
        items = []
        for line in text.splitlines():
            line = line.strip()
            if not line:
                continue
            match = _ITEM.match(line)
            item_text = match.group("text").strip() if match else line
            if not item_text:
                continue
            done = bool(match and match.group("mark") in ("x", "X"))
            items.append(
                TaskItem(text=item_text, completed=done, completed_by="user" if done else None)
            )
        return cls(items=items)

    @property
    def remaining(self) -> list[TaskItem]:
        return [item for item in self.items if not item.completed]

    @property
    def is_complete(self) -> bool:
        return not self.remaining

    def to_agent_input(self) -> str:
        """Render the incomplete items as the agent's initial to-do list."""
        return "\n".join(f"- {item.text}" for item in self.remaining)

    def to_markdown(self) -> str:
        """Render every item with a checkbox."""
        return "\n".join(
            f"- [{'x' if item.completed else ' '}] {item.text}" for item in self.items
        )

    def mark_done(self, description: str, by: CompletedBy = "ai") -> bool:
        """
        Mark the first incomplete item whose text equals description.

        Returns:
            True if an item was marked.
        """
        for item in self.items:
            if item.text == description and not item.completed:
                item.completed = True
                item.completed_by = by
                return True

        logger.warning(
            "Could not find matching incomplete to-do item for description: %s", description
        )
        return False

    def apply_update(self, update: WriteAgentUpdate) -> bool:
        """
        Consume an agent update.

        Returns:
            True if the update changed the list.
        """
        if isinstance(update, TodoCompleted):
            return self.mark_done(update.description, by="ai")
        return False
