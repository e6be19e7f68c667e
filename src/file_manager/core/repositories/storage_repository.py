"""Abstract contract for file blob storage."""

from abc import ABC, abstractmethod
from typing import BinaryIO

from file_manager.core.models.file_descriptor import FileDescriptor
from file_manager.core.utils.streams import BinarySource


class StorageBackend(ABC):
    """Contract for persisting, retrieving and deleting file blobs.

    Implementations could be in-memory, local disk, S3, etc.
    The upload pipeline depends on this interface, not the implementation.
    Each instance owns its blob store exclusively; the storage token in a
    descriptor is only meaningful to the backend that produced it.
    """

    @abstractmethod
    async def save(
        self,
        source: BinarySource,
        *,
        file_name: str,
        content_type: str,
    ) -> FileDescriptor:
        """Persist a blob and return its descriptor.

        Args:
            source: Bytes or a readable binary stream
            file_name: Original display name
            content_type: Declared MIME type

        Returns:
            Descriptor whose ``storage_token`` locates the blob and whose
            ``file_size`` equals the number of bytes persisted

        Raises:
            FileSizeError: If the blob exceeds the backend's maximum size;
                nothing is stored in that case
            StorageError: If persisting fails
        """

    @abstractmethod
    async def delete(self, descriptor: FileDescriptor) -> bool:
        """Delete a blob.

        Returns:
            True if a blob was removed, False if it was absent or could not
            be removed. Never raises.
        """

    @abstractmethod
    async def read_bytes(self, descriptor: FileDescriptor) -> bytes:
        """Read a blob fully.

        Raises:
            NotFoundError: If the token does not resolve to a blob
            StorageError: If reading fails
        """

    @abstractmethod
    async def read_stream(self, descriptor: FileDescriptor) -> BinaryIO:
        """Open a blob as a readable binary stream positioned at the start.

        Raises:
            NotFoundError: If the token does not resolve to a blob
            StorageError: If reading fails
        """

    @abstractmethod
    async def exists(self, descriptor: FileDescriptor) -> bool:
        """Check whether a blob exists.

        Missing, malformed or foreign tokens yield False. Never raises.
        """
