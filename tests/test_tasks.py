"""Unit tests for TaskList."""

from scriptorium.tasks import TaskItem, TaskList
from scriptorium.types import StatusUpdate, TodoCompleted


class TestFromMarkdown:
    """Tests for parsing Markdown lists."""

    def test_strips_markers(self):
        tasks = TaskList.from_markdown("- one\n* two\n3. three\n[ ] four\n- [ ] five")
        assert [item.text for item in tasks.items] == ["one", "two", "three", "four", "five"]
        assert tasks.remaining == tasks.items

    def test_checked_items_start_completed(self):
        tasks = TaskList.from_markdown("- [x] done\n- [X] also done\n- [ ] open")

        assert [item.completed for item in tasks.items] == [True, True, False]
        assert tasks.items[0].completed_by == "user"
        assert [item.text for item in tasks.remaining] == ["open"]

    def test_skips_blank_lines(self):
        tasks = TaskList.from_markdown("\n- one\n\n   \n- two\n")
        assert len(tasks.items) == 2

    def test_plain_lines_are_kept(self):
        tasks = TaskList.from_markdown("Write the intro")
        assert tasks.items == [TaskItem(text="Write the intro")]


class TestRendering:
    """Tests for rendering the list."""

    def test_to_agent_input_lists_open_items(self):
        tasks = TaskList.from_markdown("- [x] done\n- open one\n- open two")
        assert tasks.to_agent_input() == "- open one\n- open two"

    def test_to_markdown(self):
        tasks = TaskList.from_markdown("- [x] done\n- open")
        assert tasks.to_markdown() == "- [x] done\n- [ ] open"


class TestCompletion:
    """Tests for marking items done."""

    def test_mark_done_exact_match(self):
        tasks = TaskList.from_markdown("- Create a.md\n- Create b.md")

        assert tasks.mark_done("Create a.md") is True
        assert tasks.items[0].completed is True
        assert tasks.items[0].completed_by == "ai"
        assert tasks.items[1].completed is False

    def test_mark_done_requires_exact_text(self):
        tasks = TaskList.from_markdown("- Create a.md")
        assert tasks.mark_done("create a.md") is False
        assert tasks.mark_done("Create a.md ") is False
        assert tasks.is_complete is False

    def test_mark_done_first_incomplete_duplicate(self):
        tasks = TaskList.from_markdown("- Same\n- Same")

        assert tasks.mark_done("Same") is True
        assert [item.completed for item in tasks.items] == [True, False]
        assert tasks.mark_done("Same") is True
        assert tasks.mark_done("Same") is False
        assert tasks.is_complete is True

    def test_apply_update(self):
        tasks = TaskList.from_markdown("- Create a.md")

        assert tasks.apply_update(StatusUpdate("Iteration 1/10...")) is False
        assert tasks.apply_update(TodoCompleted("Create a.md")) is True
        assert tasks.is_complete is True
