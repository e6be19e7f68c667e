from typing import BinaryIO

import pytest

from file_manager.core.infrastructure.memory.in_memory_storage import InMemoryStorage
from file_manager.core.models.errors import StorageError
from file_manager.core.models.file_descriptor import FileDescriptor
from file_manager.core.utils.streams import BinarySource


class FailingSaveStorage(InMemoryStorage):
    """Storage whose save always fails with the configured error."""

    def __init__(self, error: Exception | None = None) -> None:
        super().__init__()
        self.error = error or StorageError(message="disk full")

    async def save(self, source: BinarySource, *, file_name: str, content_type: str) -> FileDescriptor:
        raise self.error


class StubbornStorage(InMemoryStorage):
    """Storage that holds blobs but refuses to delete them."""

    async def delete(self, descriptor: FileDescriptor) -> bool:
        return False


class BrokenReadStorage(InMemoryStorage):
    """Storage that saves fine but cannot read anything back."""

    async def read_bytes(self, descriptor: FileDescriptor) -> bytes:
        raise StorageError(message="read timeout")

    async def read_stream(self, descriptor: FileDescriptor) -> BinaryIO:
        raise StorageError(message="read timeout")


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def failing_storage() -> FailingSaveStorage:
    return FailingSaveStorage()


@pytest.fixture
def stubborn_storage() -> StubbornStorage:
    return StubbornStorage()


@pytest.fixture
def broken_read_storage() -> BrokenReadStorage:
    return BrokenReadStorage()


@pytest.fixture
def recorder():
    """Collects callback invocations as ``(name, args)`` tuples."""

    class Recorder:
        def __init__(self) -> None:
            self.calls: list[tuple[str, tuple]] = []

        def sync(self, name: str):
            def _callback(*args):
                self.calls.append((name, args))

            _callback.__name__ = name
            return _callback

        def async_(self, name: str):
            async def _callback(*args):
                self.calls.append((name, args))

            _callback.__name__ = name
            return _callback

        def names(self) -> list[str]:
            return [name for name, _ in self.calls]

    return Recorder()
