"""Compression outcome model."""

from pydantic import BaseModel, Field, StrictBool, StrictInt, StrictStr


class CompressionResult(BaseModel):
    """Outcome of one compression run. Consumed immediately, never persisted."""

    success: StrictBool = Field(..., description="Whether the budget was met")
    data: bytes | None = Field(None, repr=False, description="Encoded image bytes")
    original_size: StrictInt = Field(..., description="Size of the source bytes")
    compressed_size: StrictInt = Field(0, description="Size of the best encoding produced")
    quality: float | None = Field(None, description="Quality level of the returned encoding")
    content_type: StrictStr | None = Field(None, description="MIME type of the encoded bytes")
    width: StrictInt | None = None
    height: StrictInt | None = None
    message: StrictStr = ""
    error_code: StrictStr | None = None
