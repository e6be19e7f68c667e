"""
Pytest configuration and fixtures for file manager tests.
Provides AWS mocking, S3 fixtures with proper cleanup, and generated images.
"""

import io
import os
import random
from collections.abc import Callable

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws
from PIL import Image

TEST_BUCKET = "file-manager-test-bucket"


@pytest.fixture(autouse=True)
def aws_env(monkeypatch):
    """Fake AWS configuration so no test ever reaches a real account."""
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("FILE_STORAGE_S3_BUCKET_NAME", TEST_BUCKET)
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


def _cleanup_s3_objects(s3_client, bucket_name):
    """Helper to delete all objects from S3 bucket efficiently."""
    try:
        paginator = s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket_name):
            objects = page.get("Contents", [])
            if objects:
                delete_keys = [{"Key": obj["Key"]} for obj in objects]
                s3_client.delete_objects(Bucket=bucket_name, Delete={"Objects": delete_keys})
    except ClientError as e:
        if e.response["Error"]["Code"] != "NoSuchBucket":
            raise


@pytest.fixture(scope="function")
def s3_bucket(s3_client):
    """
    Create and manage S3 bucket for testing.

    Cleanup Strategy:
    - Objects are deleted after each test (teardown)
    - Bucket is NOT deleted (moto cleans up on context exit)
    """
    try:
        s3_client.head_bucket(Bucket=TEST_BUCKET)
    except ClientError:
        s3_client.create_bucket(Bucket=TEST_BUCKET)

    yield s3_client

    _cleanup_s3_objects(s3_client, TEST_BUCKET)


@pytest.fixture
def s3_list_keys(s3_client) -> Callable[[], list[str]]:
    """
    Helper to list every object key in the test bucket.

    Usage:
        keys = s3_list_keys()
    """

    def _list() -> list[str]:
        response = s3_client.list_objects_v2(Bucket=TEST_BUCKET)
        return [obj["Key"] for obj in response.get("Contents", [])]

    return _list


def _encode(image: Image.Image, fmt: str) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_noise_image() -> Callable[..., bytes]:
    """
    Build an image of random pixels; noise barely compresses, so sizes stay large.

    Usage:
        png = make_noise_image(300, 200)
        jpeg = make_noise_image(300, 200, fmt="JPEG")
    """

    def _make(width: int, height: int, *, fmt: str = "PNG", mode: str = "RGB") -> bytes:
        rng = random.Random(width * 31 + height)
        channels = len(mode)
        pixels = bytes(rng.getrandbits(8) for _ in range(width * height * channels))
        return _encode(Image.frombytes(mode, (width, height), pixels), fmt)

    return _make


@pytest.fixture
def small_png() -> bytes:
    """Solid 16x16 PNG, a few hundred bytes at most."""
    return _encode(Image.new("RGB", (16, 16), (200, 30, 30)), "PNG")


@pytest.fixture
def sample_image_binary() -> bytes:
    """Sample binary image data (1x1 PNG)."""
    import base64

    png_base64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
    return base64.b64decode(png_base64)


@pytest.fixture
def s3_put_object(s3_client):
    """
    Helper to upload objects to S3 in tests.

    Usage:
        s3_put_object("uploads/abc_file.txt", b"data", "text/plain")
    """

    def _put(key: str, body: bytes, content_type: str = "application/octet-stream") -> None:
        s3_client.put_object(Bucket=TEST_BUCKET, Key=key, Body=body, ContentType=content_type)

    return _put


@pytest.fixture
def s3_get_object(s3_client):
    """
    Helper to read object body from S3.

    Usage:
        body = s3_get_object("uploads/abc_file.txt")
    """

    def _get(key: str) -> bytes:
        response = s3_client.get_object(Bucket=TEST_BUCKET, Key=key)
        return response["Body"].read()

    return _get
