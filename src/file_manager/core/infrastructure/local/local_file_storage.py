"""Local filesystem implementation of StorageBackend.

Every blob is a single file at ``{base_path}/{token}`` where the token is
``{random_hex}_{sanitized_name}``. There is no index; existence is a plain
filesystem lookup. Writes go to a hidden temporary file first and are
renamed onto the token path only when complete.
"""

import asyncio
import contextlib
import io
import os
import threading
from pathlib import Path
from typing import BinaryIO

from aws_lambda_powertools import Logger

from file_manager.core.models.errors import FileSizeError, NotFoundError, StorageError
from file_manager.core.models.file_descriptor import FileDescriptor
from file_manager.core.repositories.storage_repository import StorageBackend
from file_manager.core.utils.constants import (
    DEFAULT_UPLOAD_PATH,
    ERROR_CODE_FILE_NOT_FOUND,
    ERROR_CODE_FILE_READ_FAILED,
    ERROR_CODE_FILE_SAVE_FAILED,
    MAX_FILE_SIZE,
)
from file_manager.core.utils.filenames import generate_storage_token, is_plausible_token
from file_manager.core.utils.streams import BinarySource, iter_limited_chunks

logger = Logger(UTC=True)


class _WriteCancelled(Exception):
    """Signals the writer thread that the awaiting save was cancelled."""


class LocalFileStorage(StorageBackend):
    """File storage rooted at a base directory on the local disk."""

    def __init__(
        self,
        base_path: str | os.PathLike[str] | None = None,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        """Create storage, creating ``base_path`` if it does not exist."""
        self._base_path = Path(base_path) if base_path is not None else Path.cwd() / DEFAULT_UPLOAD_PATH
        self._max_file_size = max_file_size

        if not self._base_path.is_dir():
            self._base_path.mkdir(parents=True, exist_ok=True)
            logger.info("Created uploads directory", extra={"base_path": str(self._base_path)})

    @property
    def base_path(self) -> Path:
        return self._base_path

    async def save(
        self,
        source: BinarySource,
        *,
        file_name: str,
        content_type: str,
    ) -> FileDescriptor:
        token = generate_storage_token(file_name)
        cancelled = threading.Event()

        logger.info("Saving file", extra={"file_name": file_name, "token": token})

        try:
            size = await asyncio.to_thread(self._write_blob, source, token, file_name, cancelled)

        except asyncio.CancelledError:
            cancelled.set()
            logger.warning("File save cancelled", extra={"file_name": file_name})
            raise

        except FileSizeError:
            logger.warning(
                "File exceeds storage size limit",
                extra={"file_name": file_name, "max_file_size": self._max_file_size},
            )
            raise

        except OSError as exc:
            logger.exception("Error saving file", extra={"file_name": file_name})
            raise StorageError(
                message=f"Failed to save file '{file_name}': {exc}",
                error_code=ERROR_CODE_FILE_SAVE_FAILED,
                details={"file_name": file_name},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error saving file", extra={"file_name": file_name})
            raise StorageError(
                message=f"Failed to save file '{file_name}'",
                error_code=ERROR_CODE_FILE_SAVE_FAILED,
                details={"file_name": file_name},
            ) from exc

        logger.info("File saved successfully", extra={"token": token, "size": size})

        return FileDescriptor(
            file_name=file_name,
            content_type=content_type,
            file_size=size,
            storage_token=token,
        )

    async def delete(self, descriptor: FileDescriptor) -> bool:
        path = self._resolve(descriptor.storage_token)
        if path is None:
            return False

        try:
            await asyncio.to_thread(path.unlink)

        except FileNotFoundError:
            logger.warning("File not found for deletion", extra={"token": descriptor.storage_token})
            return False

        except OSError:
            logger.exception("Error deleting file", extra={"file_name": descriptor.file_name})
            return False

        logger.info("File deleted successfully", extra={"token": descriptor.storage_token})
        return True

    async def read_bytes(self, descriptor: FileDescriptor) -> bytes:
        path = self._resolve(descriptor.storage_token)
        if path is None:
            raise self._not_found(descriptor)

        try:
            return await asyncio.to_thread(path.read_bytes)

        except FileNotFoundError as exc:
            raise self._not_found(descriptor) from exc

        except OSError as exc:
            logger.exception("Error reading file", extra={"file_name": descriptor.file_name})
            raise StorageError(
                message=f"Failed to read file '{descriptor.file_name}': {exc}",
                error_code=ERROR_CODE_FILE_READ_FAILED,
                details={"file_name": descriptor.file_name},
            ) from exc

    async def read_stream(self, descriptor: FileDescriptor) -> BinaryIO:
        return io.BytesIO(await self.read_bytes(descriptor))

    async def exists(self, descriptor: FileDescriptor) -> bool:
        path = self._resolve(descriptor.storage_token)
        if path is None:
            logger.debug(
                "Token cannot name a stored file",
                extra={"file_name": descriptor.file_name},
            )
            return False

        try:
            return await asyncio.to_thread(path.is_file)
        except OSError:
            logger.debug("Existence check failed", extra={"file_name": descriptor.file_name})
            return False

    def _resolve(self, token: str | None) -> Path | None:
        """Map a token to its path, or None if it cannot be one of ours."""
        if not is_plausible_token(token):
            return None
        return self._base_path / token

    def _write_blob(
        self,
        source: BinarySource,
        token: str,
        file_name: str,
        cancelled: threading.Event,
    ) -> int:
        final_path = self._base_path / token
        temp_path = self._base_path / f".{token}.part"
        size = 0

        try:
            with open(temp_path, "xb") as handle:
                for chunk in iter_limited_chunks(source, self._max_file_size, file_name=file_name):
                    if cancelled.is_set():
                        raise _WriteCancelled()
                    handle.write(chunk)
                    size += len(chunk)

            if cancelled.is_set():
                raise _WriteCancelled()

            os.replace(temp_path, final_path)

            # cancellation may land while the rename is in flight
            if cancelled.is_set():
                with contextlib.suppress(OSError):
                    final_path.unlink()
                raise _WriteCancelled()

        except BaseException:
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)
            raise

        return size

    @staticmethod
    def _not_found(descriptor: FileDescriptor) -> NotFoundError:
        return NotFoundError(
            message=f"File not found: {descriptor.file_name}",
            error_code=ERROR_CODE_FILE_NOT_FOUND,
            details={"file_name": descriptor.file_name},
        )
