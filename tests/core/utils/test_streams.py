import io

import pytest

from file_manager.core.models.errors import FileSizeError
from file_manager.core.utils.constants import ERROR_CODE_FILE_SIZE_EXCEEDED, READ_CHUNK_SIZE
from file_manager.core.utils.streams import iter_limited_chunks, open_source, read_limited


class TestOpenSource:
    @pytest.mark.parametrize("source", [b"abc", bytearray(b"abc"), memoryview(b"abc")])
    def test_bytes_like_sources(self, source) -> None:
        assert open_source(source).read() == b"abc"

    def test_stream_is_returned_as_is(self) -> None:
        stream = io.BytesIO(b"abc")

        assert open_source(stream) is stream


class TestReadLimited:
    def test_reads_everything_within_limit(self) -> None:
        assert read_limited(b"12345", 5) == b"12345"

    def test_over_limit_raises(self) -> None:
        with pytest.raises(FileSizeError) as exc:
            read_limited(io.BytesIO(b"123456"), 5, file_name="a.txt")

        assert exc.value.error_code == ERROR_CODE_FILE_SIZE_EXCEEDED
        assert exc.value.details == {"file_name": "a.txt", "max_file_size": 5}

    def test_empty_source(self) -> None:
        assert read_limited(b"", 5) == b""


class TestIterLimitedChunks:
    def test_stops_reading_once_limit_is_passed(self) -> None:
        stream = io.BytesIO(b"x" * (READ_CHUNK_SIZE * 4))
        received = 0

        with pytest.raises(FileSizeError):
            for chunk in iter_limited_chunks(stream, READ_CHUNK_SIZE + 1):
                received += len(chunk)

        assert received == READ_CHUNK_SIZE
        assert stream.tell() == READ_CHUNK_SIZE * 2
