"""Shared file descriptor model."""

from pydantic import BaseModel, Field, StrictInt, StrictStr

from file_manager.core.utils.constants import format_file_size
from file_manager.core.utils.filenames import generate_file_id
from file_manager.core.utils.mime import (
    build_data_url,
    is_image_content_type,
    is_pdf_content_type,
)
from file_manager.core.utils.time import utc_now_iso


class FileDescriptor(BaseModel):
    """Record of one accepted file.

    ``storage_token`` is set only once a storage backend has persisted the
    file; only that backend interprets it. Files kept without a backend
    carry their bytes in ``data`` instead.
    """

    id: StrictStr = Field(default_factory=generate_file_id, description="Unique file identifier")
    file_name: StrictStr = Field(..., description="Original display file name")
    content_type: StrictStr = Field(..., description="Declared MIME type (e.g. image/jpeg)")
    file_size: StrictInt = Field(..., ge=0, description="Size in bytes of the stored representation")
    upload_date: StrictStr = Field(default_factory=utc_now_iso, description="ISO-8601 creation timestamp (UTC)")

    storage_token: StrictStr | None = Field(None, description="Backend-specific blob reference")
    data: bytes | None = Field(None, repr=False, exclude=True, description="Resident file bytes")
    thumbnail_source: StrictStr | None = Field(None, repr=False, description="Cached preview data URL")

    @property
    def is_image(self) -> bool:
        return is_image_content_type(self.content_type)

    @property
    def is_pdf(self) -> bool:
        return is_pdf_content_type(self.content_type)

    @property
    def is_persisted(self) -> bool:
        return self.storage_token is not None

    @property
    def formatted_file_size(self) -> str:
        return format_file_size(self.file_size)

    @property
    def preview_source(self) -> str:
        """Return the cached thumbnail, or a data URL for resident image bytes."""
        if self.thumbnail_source:
            return self.thumbnail_source

        if self.data and self.is_image:
            return build_data_url(self.content_type, self.data)

        return ""
