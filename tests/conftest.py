"""Shared fixtures for Scriptorium tests."""

import pytest

from scriptorium.config import ScriptoriumConfig
from scriptorium.llms.base import BaseLLM, LLMResponse
from scriptorium.stores.base import StorageError
from scriptorium.stores.memory_store import MemoryStore
from scriptorium.types import ErrorUpdate, FileSystemChanged, StatusUpdate
from scriptorium.vfs import WorkspaceVFS


class ScriptedLLM(BaseLLM):
    """LLM double that replays canned responses and records every call.

    A response that is an exception instance is raised instead of returned.
    """

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    @property
    def model(self) -> str:
        return "scripted"

    def complete(self, prompt, system_prompt=None, max_tokens=None, temperature=0.7):
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt})
        if not self.responses:
            raise RuntimeError("No scripted response left")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return LLMResponse(content=item, model=self.model)


class RacingStore(MemoryStore):
    """Memory store that runs a hook right before the next compare-and-swap.

    The hook fires once, which lets a test slip a competing write in between
    another writer's read and its write-back.
    """

    def __init__(self):
        super().__init__()
        self.before_cas = None
        self.cas_calls = 0

    def compare_and_swap(self, key, data, expected_version):
        self.cas_calls += 1
        hook, self.before_cas = self.before_cas, None
        if hook is not None:
            hook()
        return super().compare_and_swap(key, data, expected_version)


class FailingStore(MemoryStore):
    """Memory store whose reads fail."""

    def get(self, key):
        raise StorageError("disk unavailable")


class UpdateRecorder:
    """Callable that collects agent updates."""

    def __init__(self):
        self.updates = []

    def __call__(self, update):
        self.updates.append(update)

    @property
    def statuses(self):
        return [u.message for u in self.updates if isinstance(u, StatusUpdate)]

    @property
    def errors(self):
        return [u.message for u in self.updates if isinstance(u, ErrorUpdate)]

    @property
    def fs_changes(self):
        return sum(1 for u in self.updates if isinstance(u, FileSystemChanged))


@pytest.fixture
def config():
    """In-memory configuration."""
    return ScriptoriumConfig.default_local()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def vfs(store, config):
    """Initialized VFS for workspace 'test-ws' on a memory store."""
    workspace = WorkspaceVFS("test-ws", store=store, config=config)
    workspace.initialize()
    return workspace


@pytest.fixture
def recorder():
    return UpdateRecorder()
