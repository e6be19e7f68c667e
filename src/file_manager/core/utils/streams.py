"""Helpers for reading candidate payloads in bounded chunks."""

import io
from collections.abc import Iterator
from typing import BinaryIO

from file_manager.core.models.errors import FileSizeError
from file_manager.core.utils.constants import READ_CHUNK_SIZE, format_file_size

BinarySource = bytes | bytearray | memoryview | BinaryIO


def open_source(source: BinarySource) -> BinaryIO:
    """Return a readable binary stream for bytes-like or stream sources."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(source))
    return source


def iter_limited_chunks(
    source: BinarySource,
    max_size: int,
    *,
    file_name: str | None = None,
) -> Iterator[bytes]:
    """Yield chunks of ``source``, failing once more than ``max_size`` bytes arrive.

    Raises:
        FileSizeError: As soon as the running total exceeds ``max_size``
    """
    stream = open_source(source)
    total = 0

    while True:
        chunk = stream.read(READ_CHUNK_SIZE)
        if not chunk:
            return

        total += len(chunk)
        if total > max_size:
            raise FileSizeError(
                message=f"File exceeds maximum size of {format_file_size(max_size)}",
                details={"file_name": file_name, "max_file_size": max_size},
            )

        yield chunk


def read_limited(
    source: BinarySource,
    max_size: int,
    *,
    file_name: str | None = None,
) -> bytes:
    """Read ``source`` fully into memory, bounded by ``max_size``."""
    return b"".join(iter_limited_chunks(source, max_size, file_name=file_name))
