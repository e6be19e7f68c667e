"""In-memory implementation of StorageBackend.

Blobs live in a dictionary owned by the instance and are lost when the
process exits. Intended for tests and demos.
"""

import asyncio
import io
import threading
import uuid
from typing import BinaryIO

from aws_lambda_powertools import Logger

from file_manager.core.models.errors import NotFoundError
from file_manager.core.models.file_descriptor import FileDescriptor
from file_manager.core.repositories.storage_repository import StorageBackend
from file_manager.core.utils.constants import ERROR_CODE_FILE_NOT_FOUND, MAX_FILE_SIZE
from file_manager.core.utils.streams import BinarySource, read_limited

logger = Logger(UTC=True)


class InMemoryStorage(StorageBackend):
    """Token-keyed blob map, safe for concurrent use."""

    def __init__(self, max_file_size: int = MAX_FILE_SIZE) -> None:
        self._max_file_size = max_file_size
        self._blobs: dict[str, bytes] = {}
        self._lock = threading.Lock()

    @property
    def file_count(self) -> int:
        with self._lock:
            return len(self._blobs)

    def clear(self) -> None:
        with self._lock:
            self._blobs.clear()

    async def save(
        self,
        source: BinarySource,
        *,
        file_name: str,
        content_type: str,
    ) -> FileDescriptor:
        # Fully buffered before insertion, so an oversized source stores nothing
        data = await asyncio.to_thread(read_limited, source, self._max_file_size, file_name=file_name)
        token = str(uuid.uuid4())

        with self._lock:
            self._blobs[token] = data

        logger.debug("File stored in memory", extra={"token": token, "size": len(data)})

        return FileDescriptor(
            file_name=file_name,
            content_type=content_type,
            file_size=len(data),
            storage_token=token,
        )

    async def delete(self, descriptor: FileDescriptor) -> bool:
        token = descriptor.storage_token
        if token is None:
            return False

        with self._lock:
            removed = self._blobs.pop(token, None)

        return removed is not None

    async def read_bytes(self, descriptor: FileDescriptor) -> bytes:
        return self._get(descriptor)

    async def read_stream(self, descriptor: FileDescriptor) -> BinaryIO:
        return io.BytesIO(self._get(descriptor))

    async def exists(self, descriptor: FileDescriptor) -> bool:
        token = descriptor.storage_token
        if token is None:
            return False

        with self._lock:
            return token in self._blobs

    def _get(self, descriptor: FileDescriptor) -> bytes:
        token = descriptor.storage_token

        with self._lock:
            data = self._blobs.get(token) if token is not None else None

        if data is None:
            raise NotFoundError(
                message=f"File not found: {descriptor.file_name}",
                error_code=ERROR_CODE_FILE_NOT_FOUND,
                details={"file_name": descriptor.file_name},
            )

        return data
