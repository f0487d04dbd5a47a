"""
Scriptorium command line interface.

Usage:
    scriptorium run --tasks todo.md --context notes.txt   # Run the write agent
    scriptorium run                                       # Type the to-do list interactively
    scriptorium tree                                      # Show the workspace tree
    scriptorium cat /chapters/intro.md                    # Print a file
    scriptorium export ./out                              # Zip the workspace

Every command works on one workspace (``--workspace``, default "default")
stored in ~/.scriptorium/scriptorium.db. Set SCRIPTORIUM_MODEL to pick the
model: "gpt-5-mini" uses OpenAI directly, "provider:model" strings such as
"anthropic:claude-sonnet-4-20250514" go through LangChain.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from prompt_toolkit import PromptSession
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.keys import Keys

from scriptorium.agent import WriteAgent, is_valid_todo_list
from scriptorium.config import ScriptoriumConfig
from scriptorium.llms import create_llm
from scriptorium.stores.base import StorageError
from scriptorium.tasks import TaskList
from scriptorium.types import (
    ContextDocument,
    ErrorUpdate,
    FileSystemChanged,
    StatusUpdate,
    TodoCompleted,
    WriteAgentUpdate,
)
from scriptorium.vfs import WorkspaceVFS

DEFAULT_WORKSPACE = "default"


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"


def print_header(text: str, color: str = Colors.CYAN):
    """Print a styled header."""
    width = 70
    print(f"\n{color}{'=' * width}{Colors.RESET}")
    print(f"{color}{Colors.BOLD}  {text}{Colors.RESET}")
    print(f"{color}{'=' * width}{Colors.RESET}")


def print_info(label: str, value: str):
    print(f"  {Colors.GRAY}{label}:{Colors.RESET} {value}")


def print_success(msg: str):
    print(f"{Colors.GREEN}+ {msg}{Colors.RESET}")


def print_error(msg: str):
    print(f"{Colors.RED}x {msg}{Colors.RESET}", file=sys.stderr)


def print_warning(msg: str):
    print(f"{Colors.YELLOW}! {msg}{Colors.RESET}")


def create_multiline_prompt_session() -> PromptSession:
    """Create a prompt session that supports multi-line input.

    Enter: Insert newline
    Escape then Enter, or Ctrl+D: Submit
    """
    bindings = KeyBindings()

    @bindings.add(Keys.Enter)
    def _(event):
        event.current_buffer.insert_text("\n")

    @bindings.add(Keys.Escape, Keys.Enter)
    def _(event):
        event.current_buffer.validate_and_handle()

    @bindings.add("c-d")
    def _(event):
        event.current_buffer.validate_and_handle()

    return PromptSession(key_bindings=bindings, multiline=True)


class UpdatePrinter:
    """Prints agent updates and keeps the task list in sync."""

    def __init__(self, tasks: TaskList):
        self.tasks = tasks
        self.errors = 0

    def __call__(self, update: WriteAgentUpdate) -> None:
        if isinstance(update, StatusUpdate):
            print(f"{Colors.CYAN}> {update.message}{Colors.RESET}")
        elif isinstance(update, ErrorUpdate):
            self.errors += 1
            print_error(update.message)
        elif isinstance(update, FileSystemChanged):
            print(f"  {Colors.DIM}[workspace changed]{Colors.RESET}")
        elif isinstance(update, TodoCompleted):
            if self.tasks.apply_update(update):
                print_success(f"Done: {update.description}")
            else:
                print_warning(f"No open task matches: {update.description}")


# =============================================================================
# Commands
# =============================================================================


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def cmd_run(args: argparse.Namespace, config: ScriptoriumConfig) -> int:
    if args.model:
        config.llm.model = args.model
        config.llm.provider = "langchain" if ":" in args.model else "openai"
    if args.max_iterations:
        config.agent.max_iterations = args.max_iterations
    if args.no_tool_policy:
        config.agent.no_tool_policy = args.no_tool_policy

    if args.tasks:
        todo_text = _read_text(args.tasks)
    else:
        print(f"{Colors.DIM}Enter the to-do list (Esc+Enter or Ctrl+D to submit):{Colors.RESET}")
        try:
            todo_text = create_multiline_prompt_session().prompt("> ")
        except (EOFError, KeyboardInterrupt):
            print_warning("Cancelled.")
            return 1

    tasks = TaskList.from_markdown(todo_text)
    if tasks.items and not tasks.remaining:
        print_warning("Please add at least one open task to the list before starting the agent.")
        return 1

    # Items already ticked in a well-formed list are not handed to the agent
    if is_valid_todo_list(todo_text, config.agent.list_item_threshold):
        agent_input = tasks.to_agent_input()
    else:
        agent_input = todo_text
    documents = [
        ContextDocument(name=Path(path).name, content=_read_text(path))
        for path in args.context or []
    ]

    print_header("Scriptorium Write Agent")
    print_info("Workspace", args.workspace)
    print_info("Model", config.llm.model)
    print_info("Tasks", str(len(tasks.remaining)))
    print_info("Context documents", ", ".join(doc.name for doc in documents) or "none")

    printer = UpdatePrinter(tasks)
    with WorkspaceVFS(args.workspace, config=config) as vfs:
        agent = WriteAgent(
            llm=create_llm(config.llm),
            workspace_id=args.workspace,
            initial_todo_list=agent_input,
            context_documents=documents,
            on_update=printer,
            vfs=vfs,
            config=config,
        )
        result = agent.start()

        print_header("Result", Colors.GREEN if result.succeeded else Colors.RED)
        print_info("Outcome", result.outcome.value)
        print_info("Iterations", str(result.iterations))
        print_info("Tool calls", str(len(result.tool_results)))
        if tasks.items:
            print(f"\n{tasks.to_markdown()}")
        print(f"\n{vfs.tree()}")

    return 0 if result.succeeded else 1


def cmd_ls(args: argparse.Namespace, vfs: WorkspaceVFS) -> int:
    names = vfs.list(args.path)
    if names is None:
        print_error(f"Not a folder: {args.path}")
        return 1
    for name in names:
        print(name)
    return 0


def cmd_cat(args: argparse.Namespace, vfs: WorkspaceVFS) -> int:
    content = vfs.read(args.path)
    if content is None:
        print_error(f"File not found or it's a folder: {args.path}")
        return 1
    print(content)
    return 0


def cmd_tree(args: argparse.Namespace, vfs: WorkspaceVFS) -> int:
    print(vfs.tree(args.path))
    return 0


def cmd_write(args: argparse.Namespace, vfs: WorkspaceVFS) -> int:
    result = vfs.write(args.path, _read_text(args.file))
    if not result:
        print_error(f"Failed to write {args.path}: {result.message}")
        return 1
    print_success(f"Wrote {args.path}")
    if result.message:
        print_warning(result.message)
    return 0


def cmd_rm(args: argparse.Namespace, vfs: WorkspaceVFS) -> int:
    if not vfs.delete(args.path):
        print_error(f"File not found or it's a folder: {args.path}")
        return 1
    print_success(f"Deleted {args.path}")
    return 0


def cmd_mkdir(args: argparse.Namespace, vfs: WorkspaceVFS) -> int:
    if not vfs.mkdir(args.path):
        print_error(f"Cannot create folder {args.path}: a file is in the way")
        return 1
    print_success(f"Folder {args.path} ready")
    return 0


def cmd_export(args: argparse.Namespace, vfs: WorkspaceVFS) -> int:
    target = vfs.export_to_file(args.destination)
    print_success(f"Exported to {target}")
    return 0


def cmd_reset(args: argparse.Namespace, vfs: WorkspaceVFS) -> int:
    if not args.yes:
        print_warning(f"This deletes everything in workspace '{vfs.workspace_id}'. Re-run with --yes.")
        return 1
    vfs.delete_all()
    print_success(f"Workspace '{vfs.workspace_id}' cleared")
    return 0


def cmd_workspaces(args: argparse.Namespace, vfs: WorkspaceVFS) -> int:
    prefix = vfs.config.storage.key_prefix
    for key in sorted(vfs.store.keys(prefix)):
        print(key[len(prefix):])
    return 0


VFS_COMMANDS = {
    "ls": cmd_ls,
    "cat": cmd_cat,
    "tree": cmd_tree,
    "write": cmd_write,
    "rm": cmd_rm,
    "mkdir": cmd_mkdir,
    "export": cmd_export,
    "reset": cmd_reset,
    "workspaces": cmd_workspaces,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scriptorium",
        description="Write Markdown documents from a to-do list with an LLM agent",
    )
    parser.add_argument(
        "--workspace",
        "-w",
        default=DEFAULT_WORKSPACE,
        help=f"Workspace to operate on (default: {DEFAULT_WORKSPACE})",
    )
    parser.add_argument("--debug", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run the write agent on a to-do list")
    run.add_argument("--tasks", "-t", help="File with the Markdown to-do list ('-' for stdin)")
    run.add_argument("--context", "-c", nargs="+", help="Context documents to inline")
    run.add_argument("--model", "-m", help="Model name or provider:model string")
    run.add_argument("--max-iterations", type=int, help="Iteration limit for the agent loop")
    run.add_argument(
        "--no-tool-policy",
        choices=["finish", "error"],
        help="What to do when the model answers without a tool call",
    )

    ls = subparsers.add_parser("ls", help="List a folder")
    ls.add_argument("path", nargs="?", default="/")

    cat = subparsers.add_parser("cat", help="Print a file")
    cat.add_argument("path")

    tree = subparsers.add_parser("tree", help="Show the workspace tree")
    tree.add_argument("path", nargs="?", default="/")

    write = subparsers.add_parser("write", help="Write a local file into the workspace")
    write.add_argument("path", help="Target path in the workspace")
    write.add_argument("file", help="Local file to read ('-' for stdin)")

    rm = subparsers.add_parser("rm", help="Delete a file")
    rm.add_argument("path")

    mkdir = subparsers.add_parser("mkdir", help="Create a folder and its parents")
    mkdir.add_argument("path")

    export = subparsers.add_parser("export", help="Export the workspace as a zip archive")
    export.add_argument("destination", help="Zip file path or existing directory")

    reset = subparsers.add_parser("reset", help="Delete everything in the workspace")
    reset.add_argument("--yes", action="store_true", help="Confirm the reset")

    subparsers.add_parser("workspaces", help="List stored workspaces")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    args = build_parser().parse_args(argv)
    config = ScriptoriumConfig.from_env()
    config.debug = config.debug or args.debug

    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        if args.command == "run":
            return cmd_run(args, config)

        with WorkspaceVFS(args.workspace, config=config) as vfs:
            return VFS_COMMANDS[args.command](args, vfs)
    except KeyboardInterrupt:
        print_warning("Interrupted.")
        return 130
    except StorageError as e:
        print_error(f"Storage error: {e}")
        return 1
    except OSError as e:
        print_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
