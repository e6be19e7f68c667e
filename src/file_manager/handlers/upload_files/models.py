"""Pydantic models for upload candidates and batch outcomes."""

import base64
import binascii
from enum import Enum
from typing import Any, BinaryIO, Literal

from pydantic import BaseModel, ConfigDict, Field

from file_manager.core.models.errors import ValidationError
from file_manager.core.models.file_descriptor import FileDescriptor
from file_manager.core.utils.constants import (
    DEFAULT_CLIPBOARD_MIME_TYPE,
    DEFAULT_CONTENT_TYPE,
    ERROR_CODE_COMPRESSION_FAILED,
    ERROR_CODE_IMAGE_DECODE_FAILED,
    ERROR_CODE_MAX_FILES_REACHED,
    ERROR_CODE_NO_IMAGE_DATA,
    ERROR_CODE_STORAGE,
    ERROR_CODE_TOO_LARGE,
    ERROR_CODE_TYPE_NOT_ALLOWED,
    ERROR_CODE_UPLOAD_FAILED,
)
from file_manager.core.utils.mime import is_image_content_type, split_data_url
from file_manager.core.utils.streams import open_source
from file_manager.core.utils.time import utc_now_compact


class FileCandidate(BaseModel):
    """A file handed over by the file source, not yet validated or persisted.

    ``content_type`` and ``size`` are caller-declared and only checked by
    string comparison; ``source`` is bytes or a readable binary stream.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    file_name: str = Field(..., description="Declared file name")
    content_type: str = Field(DEFAULT_CONTENT_TYPE, description="Declared MIME type")
    size: int = Field(..., ge=0, description="Declared byte length")
    source: Any = Field(..., repr=False, exclude=True, description="Bytes or binary stream")

    @property
    def is_image(self) -> bool:
        return is_image_content_type(self.content_type)

    def open_read(self) -> BinaryIO:
        return open_source(self.source)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        *,
        file_name: str,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> "FileCandidate":
        return cls(file_name=file_name, content_type=content_type, size=len(data), source=data)

    @classmethod
    def from_data_url(cls, data_url: str, content_type: str | None = None) -> "FileCandidate":
        """Build a candidate from pasted clipboard image data.

        Accepts ``data:<type>;base64,<payload>`` or a bare base64 payload.
        The candidate is named ``clipboard-image-<timestamp>.png``.

        Raises:
            ValidationError: If no data is given or it is not valid base64
        """
        if not data_url or not data_url.strip():
            raise ValidationError(message="No image data received.", error_code=ERROR_CODE_NO_IMAGE_DATA)

        declared_type, payload = split_data_url(data_url.strip())

        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError(
                message=f"Error decoding image: {exc}",
                error_code=ERROR_CODE_IMAGE_DECODE_FAILED,
            ) from exc

        if not data:
            raise ValidationError(message="No image data received.", error_code=ERROR_CODE_NO_IMAGE_DATA)

        return cls.from_bytes(
            data,
            file_name=f"clipboard-image-{utc_now_compact()}.png",
            content_type=content_type or declared_type or DEFAULT_CLIPBOARD_MIME_TYPE,
        )


class RejectionReason(str, Enum):
    """Why a candidate was not accepted."""

    MAX_FILES_REACHED = ERROR_CODE_MAX_FILES_REACHED
    TYPE_NOT_ALLOWED = ERROR_CODE_TYPE_NOT_ALLOWED
    TOO_LARGE = ERROR_CODE_TOO_LARGE
    COMPRESSION_FAILED = ERROR_CODE_COMPRESSION_FAILED
    STORAGE_ERROR = ERROR_CODE_STORAGE
    UPLOAD_FAILED = ERROR_CODE_UPLOAD_FAILED


class Accepted(BaseModel):
    status: Literal["accepted"] = "accepted"
    file_name: str
    descriptor: FileDescriptor


class Staged(BaseModel):
    status: Literal["staged"] = "staged"
    file_name: str


class Rejected(BaseModel):
    status: Literal["rejected"] = "rejected"
    file_name: str
    reason: RejectionReason
    message: str


CandidateOutcome = Accepted | Staged | Rejected


class BatchOutcome(BaseModel):
    """Result of one submitted batch, reported to the caller once."""

    outcomes: list[CandidateOutcome] = Field(default_factory=list)
    files: list[FileDescriptor] = Field(default_factory=list, description="Current file collection")
    messages: list[str] = Field(default_factory=list, description="Rejection and compression messages")

    @property
    def accepted(self) -> list[Accepted]:
        return [o for o in self.outcomes if isinstance(o, Accepted)]

    @property
    def rejected(self) -> list[Rejected]:
        return [o for o in self.outcomes if isinstance(o, Rejected)]

    @property
    def staged(self) -> list[Staged]:
        return [o for o in self.outcomes if isinstance(o, Staged)]
