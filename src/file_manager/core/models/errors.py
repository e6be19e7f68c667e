"""Custom exception classes for the file manager."""

from typing import Any, ClassVar

from file_manager.core.utils.constants import (
    ERROR_CODE_FILE_DELETE_FAILED,
    ERROR_CODE_FILE_SIZE_EXCEEDED,
    ERROR_CODE_RESOURCE_NOT_FOUND,
    ERROR_CODE_STORAGE,
    ERROR_CODE_VALIDATION_FAILED,
)


class FileManagerError(Exception):
    """
    Base exception for all file manager errors.

    Subclasses declare ``default_error_code``; raising the base class
    directly requires an explicit ``error_code``. Optional contextual
    information can be supplied via `details`.
    """

    default_error_code: ClassVar[str | None] = None

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        code = error_code or self.default_error_code
        if code is None:
            raise TypeError(f"{type(self).__name__} requires an error_code")

        self.message = message
        self.error_code = code
        self.details = details or {}

        super().__init__(message)


class ValidationError(FileManagerError):
    """Raised when input validation fails (count, type, size, arguments)."""

    default_error_code = ERROR_CODE_VALIDATION_FAILED


class FileSizeError(FileManagerError):
    """Raised when a file exceeds the size a backend accepts."""

    default_error_code = ERROR_CODE_FILE_SIZE_EXCEEDED


class NotFoundError(FileManagerError):
    """Raised when a requested blob is not found."""

    default_error_code = ERROR_CODE_RESOURCE_NOT_FOUND


class StorageError(FileManagerError):
    """Raised when a storage backend operation fails."""

    default_error_code = ERROR_CODE_STORAGE


class DeleteFailedError(StorageError):
    """Raised when a stored file could not be removed."""

    default_error_code = ERROR_CODE_FILE_DELETE_FAILED
