"""S3-backed implementation of StorageBackend."""

import asyncio
import io
from typing import BinaryIO

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from file_manager.core.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from file_manager.core.models.errors import NotFoundError, StorageError
from file_manager.core.models.file_descriptor import FileDescriptor
from file_manager.core.repositories.storage_repository import StorageBackend
from file_manager.core.utils.constants import (
    ERROR_CODE_FILE_NOT_FOUND,
    ERROR_CODE_FILE_READ_FAILED,
    ERROR_CODE_FILE_SAVE_FAILED,
    MAX_FILE_SIZE,
    S3_KEY_PREFIX,
)
from file_manager.core.utils.filenames import generate_storage_token, is_plausible_token
from file_manager.core.utils.streams import BinarySource, read_limited

logger = Logger(UTC=True)

_MISSING_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def _is_missing(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") in _MISSING_CODES


class S3FileStorage(StorageBackend):
    """File storage backed by an S3 bucket.

    The token has the same shape as the local backend's; the object key is
    ``uploads/{token}``. S3 writes are atomic, so an object is only visible
    once the full body has been accepted.
    """

    def __init__(
        self,
        adapter: S3AdapterProtocol | None = None,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        """Create storage using the provided S3 adapter."""
        self._s3: S3AdapterProtocol = adapter or S3Adapter()
        self._max_file_size = max_file_size

    async def save(
        self,
        source: BinarySource,
        *,
        file_name: str,
        content_type: str,
    ) -> FileDescriptor:
        data = await asyncio.to_thread(read_limited, source, self._max_file_size, file_name=file_name)
        token = generate_storage_token(file_name)
        key = self._key(token)

        logger.debug("Uploading file", extra={"key": key, "size": len(data)})

        try:
            await asyncio.to_thread(
                self._s3.put_object,
                key=key,
                body=data,
                content_type=content_type,
                metadata={},
            )

        except ClientError as exc:
            logger.error("S3 upload failed", extra={"key": key})
            raise StorageError(
                message=f"Failed to save file '{file_name}'",
                error_code=ERROR_CODE_FILE_SAVE_FAILED,
                details={"file_name": file_name},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error uploading file")
            raise StorageError(
                message=f"Failed to save file '{file_name}'",
                error_code=ERROR_CODE_FILE_SAVE_FAILED,
                details={"file_name": file_name},
            ) from exc

        logger.info("File uploaded successfully", extra={"key": key})

        return FileDescriptor(
            file_name=file_name,
            content_type=content_type,
            file_size=len(data),
            storage_token=token,
        )

    async def delete(self, descriptor: FileDescriptor) -> bool:
        if not await self.exists(descriptor):
            return False

        key = self._key(descriptor.storage_token)

        try:
            await asyncio.to_thread(self._s3.delete_object, key=key)
        except Exception:
            logger.exception("S3 deletion failed", extra={"key": key})
            return False

        logger.info("File deleted successfully", extra={"key": key})
        return True

    async def read_bytes(self, descriptor: FileDescriptor) -> bytes:
        if not is_plausible_token(descriptor.storage_token):
            raise self._not_found(descriptor)

        key = self._key(descriptor.storage_token)

        try:
            response = await asyncio.to_thread(self._s3.get_object, key=key)
            stream = response["Body"]
            try:
                body: bytes = await asyncio.to_thread(stream.read)
            finally:
                stream.close()
            return body

        except ClientError as exc:
            if _is_missing(exc):
                raise self._not_found(descriptor) from exc

            logger.error("S3 download failed", extra={"key": key})
            raise StorageError(
                message=f"Failed to read file '{descriptor.file_name}'",
                error_code=ERROR_CODE_FILE_READ_FAILED,
                details={"file_name": descriptor.file_name},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error downloading file")
            raise StorageError(
                message=f"Failed to read file '{descriptor.file_name}'",
                error_code=ERROR_CODE_FILE_READ_FAILED,
                details={"file_name": descriptor.file_name},
            ) from exc

    async def read_stream(self, descriptor: FileDescriptor) -> BinaryIO:
        return io.BytesIO(await self.read_bytes(descriptor))

    async def exists(self, descriptor: FileDescriptor) -> bool:
        if not is_plausible_token(descriptor.storage_token):
            return False

        key = self._key(descriptor.storage_token)

        try:
            await asyncio.to_thread(self._s3.head_object, key=key)
            return True

        except ClientError as exc:
            if not _is_missing(exc):
                logger.warning("S3 existence check failed", extra={"key": key})
            return False

        except Exception:
            logger.exception("Unexpected error checking file", extra={"key": key})
            return False

    @staticmethod
    def _key(token: str | None) -> str:
        return f"{S3_KEY_PREFIX}/{token}"

    @staticmethod
    def _not_found(descriptor: FileDescriptor) -> NotFoundError:
        return NotFoundError(
            message=f"File not found: {descriptor.file_name}",
            error_code=ERROR_CODE_FILE_NOT_FOUND,
            details={"file_name": descriptor.file_name},
        )
