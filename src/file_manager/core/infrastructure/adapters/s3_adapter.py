"""Bucket-bound wrapper around the boto3 S3 client."""

import os
from collections.abc import Mapping
from typing import Any, Protocol

import boto3

from file_manager.core.utils.constants import (
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    ENV_S3_BUCKET_NAME,
)


class _Boto3S3Client(Protocol):
    """The subset of the boto3 S3 client used here."""

    def put_object(self, **kwargs: Any) -> Any: ...

    def get_object(self, **kwargs: Any) -> Mapping[str, Any]: ...

    def head_object(self, **kwargs: Any) -> Mapping[str, Any]: ...

    def delete_object(self, **kwargs: Any) -> Any: ...


class S3AdapterProtocol(Protocol):
    """Object operations the S3 storage backend relies on."""

    def put_object(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        metadata: Mapping[str, str] | None = None,
    ) -> None: ...

    def get_object(self, *, key: str) -> Mapping[str, Any]: ...

    def head_object(self, *, key: str) -> Mapping[str, Any]: ...

    def delete_object(self, *, key: str) -> None: ...


class S3Adapter:
    """Runs single-object calls against one bucket.

    No error translation happens here: ``botocore`` exceptions reach the
    storage backend, which maps them to domain errors.
    """

    def __init__(self, bucket_name: str | None = None, client: _Boto3S3Client | None = None) -> None:
        """Bind to ``bucket_name``, falling back to ``FILE_STORAGE_S3_BUCKET_NAME``.

        Raises:
            RuntimeError: If no bucket is configured
        """
        bucket = bucket_name or os.getenv(ENV_S3_BUCKET_NAME)
        if not bucket:
            raise RuntimeError(f"{ENV_S3_BUCKET_NAME} environment variable is not set")

        self._bucket = bucket
        self._client: _Boto3S3Client = client or boto3.client(
            "s3",
            endpoint_url=os.getenv(ENV_AWS_ENDPOINT_URL),
            region_name=os.getenv(ENV_AWS_REGION),
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    def put_object(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        metadata: Mapping[str, str] | None = None,
    ) -> None:
        self._client.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            Metadata=dict(metadata or {}),
        )

    def get_object(self, *, key: str) -> Mapping[str, Any]:
        """Return the raw response; the caller reads and closes ``Body``."""
        return self._client.get_object(Bucket=self._bucket, Key=key)

    def head_object(self, *, key: str) -> Mapping[str, Any]:
        return self._client.head_object(Bucket=self._bucket, Key=key)

    def delete_object(self, *, key: str) -> None:
        self._client.delete_object(Bucket=self._bucket, Key=key)
