"""
Unit tests for core.models.errors
"""

import pytest

from file_manager.core.models.errors import (
    DeleteFailedError,
    FileManagerError,
    FileSizeError,
    NotFoundError,
    StorageError,
    ValidationError,
)


class TestFileManagerError:
    def test_base_error(self) -> None:
        err = FileManagerError(
            message="Something went wrong",
            error_code="TEST_ERROR",
            details={"foo": "bar"},
        )

        assert err.message == "Something went wrong"
        assert err.error_code == "TEST_ERROR"
        assert err.details == {"foo": "bar"}
        assert str(err) == "Something went wrong"

    def test_details_default_to_empty_dict(self) -> None:
        assert FileManagerError(message="x", error_code="Y").details == {}

    def test_base_error_requires_code(self) -> None:
        with pytest.raises(TypeError):
            FileManagerError(message="no code")


class TestDefaultCodes:
    def test_validation_error(self) -> None:
        assert ValidationError(message="bad").error_code == "VALIDATION_FAILED"

    def test_file_size_error(self) -> None:
        assert FileSizeError(message="big").error_code == "FILE_SIZE_EXCEEDED"

    def test_not_found_error(self) -> None:
        assert NotFoundError(message="gone").error_code == "NOT_FOUND"

    def test_storage_error(self) -> None:
        assert StorageError(message="disk").error_code == "STORAGE_ERROR"

    def test_delete_failed_error_is_a_storage_error(self) -> None:
        err = DeleteFailedError(message="stuck")

        assert isinstance(err, StorageError)
        assert err.error_code == "DELETE_FAILED"

    def test_code_can_be_overridden(self) -> None:
        err = NotFoundError(message="gone", error_code="FILE_NOT_FOUND", details={"file_name": "a"})

        assert err.error_code == "FILE_NOT_FOUND"
        assert err.details == {"file_name": "a"}
        assert isinstance(err, FileManagerError)
