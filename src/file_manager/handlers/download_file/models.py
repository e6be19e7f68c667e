"""Pydantic models for file download."""

from pydantic import BaseModel, Field

from file_manager.core.utils.mime import build_data_url


class DownloadedFile(BaseModel):
    """File content handed to the presentation layer for download."""

    file_id: str = Field(..., description="Descriptor identifier")
    file_name: str = Field(..., description="Suggested download file name")
    content_type: str = Field(..., description="MIME type of the content")
    data: bytes = Field(..., repr=False, description="File content")

    @property
    def data_url(self) -> str:
        return build_data_url(self.content_type, self.data)
