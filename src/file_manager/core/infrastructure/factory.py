"""Build a storage backend from settings or the environment."""

import os
from typing import Literal

from aws_lambda_powertools import Logger
from pydantic import BaseModel, Field

from file_manager.core.infrastructure.local.local_file_storage import LocalFileStorage
from file_manager.core.infrastructure.memory.in_memory_storage import InMemoryStorage
from file_manager.core.models.errors import ValidationError
from file_manager.core.repositories.storage_repository import StorageBackend
from file_manager.core.utils.constants import (
    ENV_S3_BUCKET_NAME,
    ENV_STORAGE_BACKEND,
    ENV_STORAGE_BASE_PATH,
    ENV_STORAGE_MAX_FILE_SIZE,
    MAX_FILE_SIZE,
    STORAGE_BACKEND_LOCAL,
    STORAGE_BACKEND_MEMORY,
    STORAGE_BACKEND_S3,
)
from file_manager.core.utils.validators import validate_model

logger = Logger(UTC=True)


class StorageSettings(BaseModel):
    """Which storage backend to build and how."""

    backend: Literal["memory", "local", "s3"] = Field(STORAGE_BACKEND_MEMORY, description="Backend kind")
    base_path: str | None = Field(None, description="Base directory for the local backend")
    max_file_size: int = Field(MAX_FILE_SIZE, gt=0, description="Largest blob the backend accepts")
    s3_bucket_name: str | None = Field(None, description="Bucket for the S3 backend")

    @classmethod
    def from_env(cls) -> "StorageSettings":
        """Load settings from ``FILE_STORAGE_*`` environment variables.

        Raises:
            ValidationError: If a variable holds an invalid value
        """
        data: dict[str, object] = {}

        if backend := os.getenv(ENV_STORAGE_BACKEND):
            data["backend"] = backend.strip().lower()
        if base_path := os.getenv(ENV_STORAGE_BASE_PATH):
            data["base_path"] = base_path
        if max_file_size := os.getenv(ENV_STORAGE_MAX_FILE_SIZE):
            data["max_file_size"] = max_file_size
        if bucket := os.getenv(ENV_S3_BUCKET_NAME):
            data["s3_bucket_name"] = bucket

        return validate_model(cls, data)


def create_storage_backend(settings: StorageSettings | None = None) -> StorageBackend:
    """Create the backend named by ``settings`` (environment when omitted)."""
    settings = settings or StorageSettings.from_env()

    logger.info("Creating storage backend", extra={"backend": settings.backend})

    if settings.backend == STORAGE_BACKEND_MEMORY:
        return InMemoryStorage(max_file_size=settings.max_file_size)

    if settings.backend == STORAGE_BACKEND_LOCAL:
        return LocalFileStorage(settings.base_path, max_file_size=settings.max_file_size)

    if settings.backend == STORAGE_BACKEND_S3:
        # boto3 is only needed once an S3 backend is requested
        from file_manager.core.infrastructure.adapters.s3_adapter import S3Adapter
        from file_manager.core.infrastructure.aws.s3_file_storage import S3FileStorage

        if not settings.s3_bucket_name and not os.getenv(ENV_S3_BUCKET_NAME):
            raise ValidationError(
                message="An S3 bucket name is required for the s3 backend",
                details={"env": ENV_S3_BUCKET_NAME},
            )

        return S3FileStorage(
            S3Adapter(bucket_name=settings.s3_bucket_name),
            max_file_size=settings.max_file_size,
        )

    raise ValidationError(
        message=f"Unknown storage backend '{settings.backend}'",
        details={"backend": settings.backend},
    )
