"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final


# ============================================================================
# Error Codes
# ============================================================================

# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_MAX_FILES_REACHED = "MAX_FILES_REACHED"
ERROR_CODE_TYPE_NOT_ALLOWED = "TYPE_NOT_ALLOWED"
ERROR_CODE_FILE_SIZE_EXCEEDED = "FILE_SIZE_EXCEEDED"
ERROR_CODE_TOO_LARGE = "TOO_LARGE"
ERROR_CODE_NO_IMAGE_DATA = "NO_IMAGE_DATA"

# Compression Errors
ERROR_CODE_COMPRESSION_FAILED = "COMPRESSION_FAILED"
ERROR_CODE_IMAGE_DECODE_FAILED = "IMAGE_DECODE_FAILED"
ERROR_CODE_BUDGET_NOT_MET = "BUDGET_NOT_MET"

# Not Found Errors
ERROR_CODE_RESOURCE_NOT_FOUND = "NOT_FOUND"
ERROR_CODE_FILE_NOT_FOUND = "FILE_NOT_FOUND"

# Storage Errors
ERROR_CODE_STORAGE = "STORAGE_ERROR"
ERROR_CODE_FILE_SAVE_FAILED = "FILE_SAVE_FAILED"
ERROR_CODE_FILE_READ_FAILED = "FILE_READ_FAILED"
ERROR_CODE_FILE_DELETE_FAILED = "DELETE_FAILED"
ERROR_CODE_UPLOAD_FAILED = "UPLOAD_FAILED"


# ============================================================================
# File Upload Constraints
# ============================================================================

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes
MAX_FILE_COUNT = 10

# Oversized images are read up to this multiple of MAX_FILE_SIZE before compression
COMPRESSION_READ_FACTOR = 10

DEFAULT_QUALITY_LEVELS: Final[tuple[float, ...]] = (0.9, 0.8, 0.7, 0.6, 0.5)
DEFAULT_MAX_IMAGE_DIMENSION = 1920

COMPRESSED_MIME_TYPE = "image/jpeg"
COMPRESSED_FORMAT = "JPEG"

IMAGE_MIME_PREFIX = "image/"
PDF_MIME_TYPE = "application/pdf"
DEFAULT_CLIPBOARD_MIME_TYPE = "image/png"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


# ============================================================================
# Storage Constraints
# ============================================================================

DEFAULT_UPLOAD_PATH = "uploads"
S3_KEY_PREFIX = "uploads"

# Longest token any backend accepts; mirrors the common filesystem name limit
MAX_TOKEN_LENGTH = 255
# In UTF-8 bytes; leaves room for the 33-byte token prefix and the ".{token}.part" temp name
MAX_SANITIZED_NAME_LENGTH = 200
FALLBACK_FILE_NAME = "file"

READ_CHUNK_SIZE = 64 * 1024

STORAGE_BACKEND_MEMORY = "memory"
STORAGE_BACKEND_LOCAL = "local"
STORAGE_BACKEND_S3 = "s3"


# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_STORAGE_BACKEND = "FILE_STORAGE_BACKEND"
ENV_STORAGE_BASE_PATH = "FILE_STORAGE_BASE_PATH"
ENV_STORAGE_MAX_FILE_SIZE = "FILE_STORAGE_MAX_FILE_SIZE"
ENV_S3_BUCKET_NAME = "FILE_STORAGE_S3_BUCKET_NAME"


# ============================================================================
# Helper Functions
# ============================================================================


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted file size string, e.g. ``"1.5 MB"``
    """
    size: float = float(size_bytes)

    for unit in ("B", "KB", "MB"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0

    return f"{size:.1f} GB"
