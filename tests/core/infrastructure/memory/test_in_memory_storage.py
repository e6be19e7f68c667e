"""
Unit tests for core.infrastructure.memory.in_memory_storage
"""

import asyncio
import io
import threading

import pytest

from file_manager.core.infrastructure.memory.in_memory_storage import InMemoryStorage
from file_manager.core.models.errors import FileSizeError, NotFoundError
from file_manager.core.models.file_descriptor import FileDescriptor


def _descriptor(token: str | None) -> FileDescriptor:
    return FileDescriptor(file_name="a.txt", content_type="text/plain", file_size=0, storage_token=token)


class TestInMemoryStorage:
    def test_round_trip(self) -> None:
        storage = InMemoryStorage()

        descriptor = asyncio.run(storage.save(b"abc", file_name="a.txt", content_type="text/plain"))

        assert descriptor.file_size == 3
        assert descriptor.is_persisted
        assert storage.file_count == 1
        assert asyncio.run(storage.exists(descriptor)) is True
        assert asyncio.run(storage.read_bytes(descriptor)) == b"abc"
        assert asyncio.run(storage.read_stream(descriptor)).read() == b"abc"

    def test_accepts_stream_source(self) -> None:
        storage = InMemoryStorage()

        descriptor = asyncio.run(storage.save(io.BytesIO(b"xyz"), file_name="a.txt", content_type="text/plain"))

        assert asyncio.run(storage.read_bytes(descriptor)) == b"xyz"

    def test_stream_is_read_off_the_event_loop_thread(self) -> None:
        storage = InMemoryStorage()
        reader_threads = []

        class RecordingStream(io.BytesIO):
            def read(self, size=-1):
                reader_threads.append(threading.current_thread())
                return super().read(size)

        descriptor = asyncio.run(
            storage.save(RecordingStream(b"slow"), file_name="a.txt", content_type="text/plain")
        )

        assert asyncio.run(storage.read_bytes(descriptor)) == b"slow"
        assert reader_threads
        assert threading.main_thread() not in reader_threads

    def test_oversized_source_is_not_stored(self) -> None:
        storage = InMemoryStorage(max_file_size=4)

        with pytest.raises(FileSizeError):
            asyncio.run(storage.save(b"12345", file_name="a.txt", content_type="text/plain"))

        assert storage.file_count == 0

    def test_delete_then_delete_again(self) -> None:
        storage = InMemoryStorage()
        descriptor = asyncio.run(storage.save(b"abc", file_name="a.txt", content_type="text/plain"))

        assert asyncio.run(storage.delete(descriptor)) is True
        assert asyncio.run(storage.delete(descriptor)) is False
        assert asyncio.run(storage.exists(descriptor)) is False

    @pytest.mark.parametrize("token", [None, "", "../x", "0123abcd_report.txt"])
    def test_unknown_tokens(self, token) -> None:
        storage = InMemoryStorage()

        assert asyncio.run(storage.exists(_descriptor(token))) is False
        assert asyncio.run(storage.delete(_descriptor(token))) is False

        with pytest.raises(NotFoundError):
            asyncio.run(storage.read_bytes(_descriptor(token)))

    def test_instances_do_not_share_blobs(self) -> None:
        first = InMemoryStorage()
        second = InMemoryStorage()

        descriptor = asyncio.run(first.save(b"abc", file_name="a.txt", content_type="text/plain"))

        assert asyncio.run(second.exists(descriptor)) is False

    def test_clear_removes_everything(self) -> None:
        storage = InMemoryStorage()
        asyncio.run(storage.save(b"abc", file_name="a.txt", content_type="text/plain"))

        storage.clear()

        assert storage.file_count == 0

    def test_concurrent_saves(self) -> None:
        storage = InMemoryStorage()

        async def save_many() -> list[FileDescriptor]:
            return await asyncio.gather(
                *(storage.save(bytes([i]), file_name="same.txt", content_type="text/plain") for i in range(50))
            )

        descriptors = asyncio.run(save_many())

        assert storage.file_count == 50
        assert len({d.storage_token for d in descriptors}) == 50
