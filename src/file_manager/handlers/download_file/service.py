"""Business logic for file download."""

from aws_lambda_powertools import Logger

from file_manager.core.models.errors import NotFoundError
from file_manager.core.models.file_descriptor import FileDescriptor
from file_manager.core.repositories.storage_repository import StorageBackend
from file_manager.core.utils.constants import ERROR_CODE_FILE_NOT_FOUND

from .models import DownloadedFile

logger = Logger(UTC=True)


class DownloadService:
    """Application service responsible for retrieving file content."""

    def __init__(self, storage: StorageBackend | None = None) -> None:
        self.storage = storage

    async def download_file(self, descriptor: FileDescriptor) -> DownloadedFile:
        """Load a file's content from storage, or from its resident bytes.

        Descriptors that carry no storage token are served from ``data``.

        Raises:
            NotFoundError: If the content cannot be located
            StorageError: If the backend fails to read it
        """
        logger.debug("Downloading file", extra={"file_id": descriptor.id})

        if self.storage is not None and descriptor.is_persisted:
            data = await self.storage.read_bytes(descriptor)
        elif descriptor.data is not None:
            data = descriptor.data
        else:
            raise NotFoundError(
                message=f"File not found: {descriptor.file_name}",
                error_code=ERROR_CODE_FILE_NOT_FOUND,
                details={"file_id": descriptor.id},
            )

        return DownloadedFile(
            file_id=descriptor.id,
            file_name=descriptor.file_name,
            content_type=descriptor.content_type,
            data=data,
        )
