"""
WorkspaceVFS - the per-workspace virtual file system behind Scriptorium.

Each workspace owns one tree of folders and text files. The whole tree is
stored as a single serialized payload in a key-value store; every mutating
call reads the current tree, changes it in memory and writes it back with
a version check, so interleaved writers never silently drop each other's
changes.
"""

from __future__ import annotations

import io
import json
import logging
import zipfile
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TypeVar

from scriptorium.config import ScriptoriumConfig
from scriptorium.splitter import build_index, split_content, split_notice
from scriptorium.stores.base import BaseStore, ConcurrentModificationError
from scriptorium.stores.memory_store import MemoryStore
from scriptorium.stores.sqlite_store import SQLiteStore
from scriptorium.types import (
    File,
    Folder,
    VFSNode,
    VFSState,
    WriteResult,
    state_from_dict,
    state_to_dict,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_EXPORT_FILENAME = "workspace-export.zip"


class WorkspaceVFS:
    """
    Virtual file system for one workspace.

    Paths are "/"-separated; empty segments are ignored, so "/a//b/" and
    "a/b" name the same node. The root is always a folder and can never be
    written, deleted or replaced.
    """

    def __init__(
        self,
        workspace_id: str,
        store: BaseStore | None = None,
        config: ScriptoriumConfig | None = None,
    ):
        """
        Initialize the VFS.

        Args:
            workspace_id: Identifier of the workspace (a "notebook" in the UI).
            store: Custom store implementation. Shared stores let several
                VFS instances (agents, UI actions) work on the same workspace.
            config: Scriptorium configuration. Uses in-memory defaults if not
                provided.
        """
        if not workspace_id:
            raise ValueError("workspace_id must be a non-empty string")

        self.workspace_id = workspace_id
        self.config = config or ScriptoriumConfig.default_local()
        self._owns_store = store is None
        self.store = store or self._create_store()
        self._initialized = False

    def _debug_log(self, message: str) -> None:
        """Log a debug message if debug mode is enabled."""
        if self.config.debug:
            logger.debug("[%s] %s", self.workspace_id, message)

    def _create_store(self) -> BaseStore:
        """Create store based on config."""
        if self.config.storage.provider == "sqlite":
            return SQLiteStore(db_path=self.config.storage.sqlite_path)
        if self.config.storage.provider == "memory":
            return MemoryStore()
        raise ValueError(f"Unsupported storage provider: {self.config.storage.provider}")

    def initialize(self) -> None:
        """Initialize the underlying store."""
        if self._initialized:
            return
        self.store.initialize()
        self._initialized = True

    def close(self) -> None:
        """Close the store if this instance created it."""
        if self._owns_store:
            self.store.close()
        self._initialized = False

    def __enter__(self) -> "WorkspaceVFS":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @classmethod
    def for_workspace(
        cls,
        workspace_id: str,
        config: ScriptoriumConfig | None = None,
        store: BaseStore | None = None,
    ) -> "WorkspaceVFS":
        """
        Create and initialize a VFS for a workspace.

        Uses the persistent configuration (SQLite under ~/.scriptorium) when
        no config is given.

        Example:
            with WorkspaceVFS.for_workspace("thesis") as vfs:
                vfs.write("/drafts/intro.md", "# Introduction")
        """
        vfs = cls(
            workspace_id,
            store=store,
            config=config or ScriptoriumConfig.default_persistent(),
        )
        vfs.initialize()
        return vfs

    @property
    def storage_key(self) -> str:
        """Key under which this workspace's tree is stored."""
        return f"{self.config.storage.key_prefix}{self.workspace_id}"

    # =========================================================================
    # State Persistence
    # =========================================================================

    def _load(self) -> tuple[VFSState, int]:
        """Load the tree and its version. A missing tree is an empty root."""
        self.initialize()
        stored = self.store.get(self.storage_key)
        if stored is None:
            return Folder(), 0

        try:
            return state_from_dict(json.loads(stored.data)), stored.version
        except (json.JSONDecodeError, ValueError) as e:
            # Keep the version so the next mutation replaces the bad payload
            logger.error(
                "Failed to parse stored tree for workspace %s, using empty root: %s",
                self.workspace_id,
                e,
            )
            return Folder(), stored.version

    def _serialize(self, root: VFSState) -> str:
        return json.dumps(state_to_dict(root), ensure_ascii=False)

    def _mutate(self, operation: str, apply: Callable[[VFSState], tuple[T, bool]]) -> T:
        """
        Run a read-modify-write cycle with an optimistic version check.

        Args:
            operation: Name of the operation for logging.
            apply: Function that mutates the tree in place and returns
                (result, changed). Nothing is written when changed is False.

        Returns:
            The result of apply() from the attempt that committed.

        Raises:
            ConcurrentModificationError: If every attempt lost a version race.
            StorageError: If the store fails.
        """
        attempts = max(1, self.config.storage.max_retries)
        for attempt in range(1, attempts + 1):
            root, version = self._load()
            result, changed = apply(root)
            if not changed:
                return result

            if self.store.compare_and_swap(self.storage_key, self._serialize(root), version):
                self._debug_log(f"{operation} committed (version {version} -> {version + 1})")
                return result

            logger.warning(
                "%s on workspace %s lost a version race (attempt %d/%d), retrying",
                operation,
                self.workspace_id,
                attempt,
                attempts,
            )

        raise ConcurrentModificationError(
            f"{operation} on workspace {self.workspace_id} failed after "
            f"{attempts} attempts due to concurrent modification"
        )

    # =========================================================================
    # Path Helpers
    # =========================================================================

    @staticmethod
    def _segments(path: str) -> list[str]:
        """Split a path into its non-empty segments."""
        return [segment for segment in path.split("/") if segment]

    @staticmethod
    def _is_safe(segments: list[str]) -> bool:
        """True unless a segment is "." or ".."."""
        return not any(segment in (".", "..") for segment in segments)

    @staticmethod
    def _join(segments: list[str]) -> str:
        return "/" + "/".join(segments)

    @staticmethod
    def _resolve(root: VFSState, segments: list[str]) -> VFSNode | None:
        """Find the node at segments, or None. Never traverses through a file."""
        node: VFSNode = root
        for segment in segments:
            if not isinstance(node, Folder):
                return None
            child = node.children.get(segment)
            if child is None:
                return None
            node = child
        return node

    @staticmethod
    def _ensure_folder(root: VFSState, segments: list[str]) -> tuple[Folder | None, bool]:
        """
        Walk to the folder at segments, creating missing folders.

        Returns:
            (folder, created) - folder is None if a file sits on the path.
        """
        node: Folder = root
        created = False
        for segment in segments:
            child = node.children.get(segment)
            if child is None:
                child = Folder()
                node.children[segment] = child
                created = True
            elif isinstance(child, File):
                return None, created
            node = child
        return node, created

    def _put_file(self, root: VFSState, segments: list[str], content: str) -> str | None:
        """Place a file in the tree. Returns an error message on failure."""
        path = self._join(segments)
        parent, _ = self._ensure_folder(root, segments[:-1])
        if parent is None:
            return f"Cannot create '{path}': a file exists on the parent path"

        name = segments[-1]
        if isinstance(parent.children.get(name), Folder):
            return f"Cannot overwrite folder '{path}' with a file"

        parent.children[name] = File(content=content)
        return None

    # =========================================================================
    # File Operations
    # =========================================================================

    def read(self, path: str) -> str | None:
        """
        Read a file.

        Args:
            path: Path to the file.

        Returns:
            The file content, or None if the path is missing or a folder.
        """
        root, _ = self._load()
        node = self._resolve(root, self._segments(path))
        if isinstance(node, File):
            return node.content

        logger.warning("read: file not found or not a file: %s", path)
        return None

    def write(self, path: str, content: str) -> WriteResult:
        """
        Write a file, creating parent folders and overwriting an existing file.

        Content over the splitter limits is written as numbered parts next to
        the target path, and the target itself receives an index of the parts.
        Parts and index are committed together.

        Args:
            path: Path to the file.
            content: Text content.

        Returns:
            WriteResult; message carries the large-file notice when split.

        Raises:
            StorageError: If the store fails.
        """
        segments = self._segments(path)
        if not segments:
            logger.error("write: invalid file path '%s' (root)", path)
            return WriteResult(success=False, message="Cannot write to the root folder")
        if not self._is_safe(segments):
            logger.error("write: invalid file path '%s' (dot segment)", path)
            return WriteResult(success=False, message="Path segments '.' and '..' are not allowed")

        target = self._join(segments)
        parts = split_content(
            content,
            target,
            max_lines=self.config.splitter.max_lines,
            max_chars=self.config.splitter.max_chars,
        )

        if len(parts) == 1:
            files = [(target, content)]
            notice = None
        else:
            files = [(part.path, part.content) for part in parts]
            files.append((target, build_index(target, parts)))
            notice = split_notice(content, parts, self.config.splitter.max_lines)
            logger.info("write: %s split into %d parts", target, len(parts))

        def apply(root: VFSState) -> tuple[str | None, bool]:
            for file_path, file_content in files:
                error = self._put_file(root, self._segments(file_path), file_content)
                if error:
                    return error, False
            return None, True

        error = self._mutate(f"write {target}", apply)
        if error:
            logger.error("write: %s", error)
            return WriteResult(success=False, message=error)

        return WriteResult(success=True, message=notice)

    def mkdir(self, path: str) -> bool:
        """
        Create a folder and any missing parents.

        Returns:
            True if the folder exists afterwards (including when it already
            existed), False if a file occupies the path or a parent.

        Raises:
            StorageError: If the store fails.
        """
        segments = self._segments(path)
        if not segments:
            return True
        if not self._is_safe(segments):
            logger.error("mkdir: invalid folder path '%s' (dot segment)", path)
            return False

        def apply(root: VFSState) -> tuple[bool, bool]:
            folder, created = self._ensure_folder(root, segments)
            if folder is None:
                return False, False
            return True, created

        ok = self._mutate(f"mkdir {self._join(segments)}", apply)
        if not ok:
            logger.error("mkdir: cannot create folder, a file exists on path: %s", path)
        return ok

    def list(self, path: str = "/") -> list[str] | None:
        """
        List the names in a folder.

        Returns:
            Child names, or None if the path is not a folder.
        """
        root, _ = self._load()
        node = self._resolve(root, self._segments(path))
        if isinstance(node, Folder):
            return list(node.children)

        logger.warning("list: folder not found or not a folder: %s", path)
        return None

    def delete(self, path: str) -> bool:
        """
        Delete a file. Folders are never deleted by this call.

        Returns:
            True if a file was removed.

        Raises:
            StorageError: If the store fails.
        """
        segments = self._segments(path)
        if not segments:
            logger.error("delete: cannot delete root '/'")
            return False

        def apply(root: VFSState) -> tuple[bool, bool]:
            parent = self._resolve(root, segments[:-1])
            if not isinstance(parent, Folder):
                return False, False
            node = parent.children.get(segments[-1])
            if not isinstance(node, File):
                return False, False
            del parent.children[segments[-1]]
            return True, True

        deleted = self._mutate(f"delete {self._join(segments)}", apply)
        if not deleted:
            logger.warning("delete: file not found or is a folder: %s", path)
        return deleted

    def delete_all(self) -> None:
        """Reset the workspace to an empty root. No confirmation at this layer."""
        self.initialize()
        self.store.set(self.storage_key, self._serialize(Folder()))
        logger.info("delete_all: cleared VFS for workspace %s", self.workspace_id)

    # =========================================================================
    # Tree Inspection and Export
    # =========================================================================

    def get_state(self) -> VFSState:
        """Return a snapshot of the whole tree (safe to modify)."""
        root, _ = self._load()
        return root

    def walk(self, path: str = "/") -> Iterator[tuple[str, VFSNode]]:
        """Yield (path, node) pairs in pre-order, starting below path."""
        root, _ = self._load()
        segments = self._segments(path)
        start = self._resolve(root, segments)
        if not isinstance(start, Folder):
            return
        yield from self._walk(start, segments)

    def _walk(self, folder: Folder, segments: list[str]) -> Iterator[tuple[str, VFSNode]]:
        for name, child in folder.children.items():
            child_segments = segments + [name]
            yield self._join(child_segments), child
            if isinstance(child, Folder):
                yield from self._walk(child, child_segments)

    def export_archive(self) -> bytes:
        """
        Export every file in the workspace as a zip archive.

        Entry names are VFS paths without the leading "/". Folders appear
        only implicitly through entry names.

        Returns:
            The zip file as bytes.
        """
        buffer = io.BytesIO()
        count = 0
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for node_path, node in self.walk("/"):
                if not self._is_safe(self._segments(node_path)):
                    logger.warning("export_archive: skipping unsafe path %s", node_path)
                    continue
                if isinstance(node, File):
                    zf.writestr(node_path.lstrip("/"), node.content)
                    count += 1

        self._debug_log(f"export_archive wrote {count} files")
        return buffer.getvalue()

    def export_to_file(
        self,
        destination: str | Path,
        filename: str = DEFAULT_EXPORT_FILENAME,
    ) -> Path:
        """
        Write the zip export to disk.

        Args:
            destination: Target file, or an existing directory to place
                filename in.
            filename: File name used when destination is a directory.

        Returns:
            Path of the written archive.
        """
        target = Path(destination)
        if target.is_dir():
            target = target / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.export_archive())
        logger.info("Exported workspace %s to %s", self.workspace_id, target)
        return target

    def tree(self, path: str = "/") -> str:
        """Render an indented listing of the tree below path."""
        base_depth = len(self._segments(path))
        lines = [self._join(self._segments(path))]
        for node_path, node in self.walk(path):
            depth = len(self._segments(node_path)) - base_depth
            name = node_path.rsplit("/", 1)[-1]
            suffix = "/" if isinstance(node, Folder) else ""
            lines.append(f"{'  ' * depth}{name}{suffix}")
        return "\n".join(lines)


# =========================================================================
# Factory Functions
# =========================================================================


def create_vfs(
    workspace_id: str,
    config: ScriptoriumConfig | None = None,
) -> WorkspaceVFS:
    """
    Create and initialize an ephemeral in-memory VFS (for testing/development).

    For persistent workspaces, use WorkspaceVFS.for_workspace() instead.
    """
    vfs = WorkspaceVFS(workspace_id, config=config or ScriptoriumConfig.default_local())
    vfs.initialize()
    return vfs
