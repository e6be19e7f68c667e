"""Business logic for file deletion.

A file is removed from storage only if the backend reports that it holds
it; descriptors that were never persisted are local bookkeeping only.
"""

from aws_lambda_powertools import Logger

from file_manager.core.models.errors import DeleteFailedError
from file_manager.core.models.file_descriptor import FileDescriptor
from file_manager.core.repositories.storage_repository import StorageBackend

logger = Logger(UTC=True)


class DeleteService:
    """Application service responsible for removing stored files."""

    def __init__(self, storage: StorageBackend | None = None) -> None:
        self.storage = storage

    async def delete_file(self, descriptor: FileDescriptor) -> bool:
        """Remove a file's blob from storage if it is there.

        Args:
            descriptor: Previously returned file descriptor

        Returns:
            True if a stored blob was removed, False if there was nothing
            to remove from storage

        Raises:
            DeleteFailedError: If the backend holds the blob but failed to
                remove it
        """
        if self.storage is None:
            logger.debug("No storage configured, nothing to remove", extra={"file_id": descriptor.id})
            return False

        if not await self.storage.exists(descriptor):
            logger.debug("File not in storage, skipping backend delete", extra={"file_id": descriptor.id})
            return False

        if not await self.storage.delete(descriptor):
            logger.warning("Storage refused to delete file", extra={"file_id": descriptor.id})
            raise DeleteFailedError(
                message=f"Failed to delete file '{descriptor.file_name}' from storage.",
                details={"file_id": descriptor.id},
            )

        logger.info("File deleted from storage", extra={"file_id": descriptor.id})
        return True
