"""Upload policy and message template models."""

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator

from file_manager.core.utils.constants import (
    DEFAULT_MAX_IMAGE_DIMENSION,
    DEFAULT_QUALITY_LEVELS,
    MAX_FILE_COUNT,
    MAX_FILE_SIZE,
)


class UploadOptions(BaseModel):
    """Validation and compression policy consumed by the upload pipeline."""

    model_config = ConfigDict(validate_assignment=True)

    max_file_count: int = Field(
        MAX_FILE_COUNT,
        ge=0,
        description="Maximum number of files; 0 means unlimited",
    )
    max_file_size: int = Field(MAX_FILE_SIZE, gt=0, description="Maximum file size in bytes")
    allowed_file_types: list[str] = Field(
        default_factory=list,
        description="Allowed MIME types; empty allows every type",
    )
    auto_compress_images: StrictBool = Field(
        False,
        description="Compress images that exceed max_file_size",
    )
    compression_quality_levels: list[float] = Field(
        default_factory=lambda: list(DEFAULT_QUALITY_LEVELS),
        description="Quality levels tried in order, highest first by convention",
    )
    max_image_dimension: int = Field(
        DEFAULT_MAX_IMAGE_DIMENSION,
        gt=0,
        description="Larger images are downscaled to this width/height",
    )
    auto_upload: StrictBool = Field(
        True,
        description="Process files immediately instead of staging them",
    )

    @field_validator("compression_quality_levels")
    @classmethod
    def validate_quality_levels(cls, value: list[float]) -> list[float]:
        if not value:
            raise ValueError("At least one compression quality level is required")

        for level in value:
            if not 0.0 < level <= 1.0:
                raise ValueError(f"Quality level {level} must be in (0, 1]")

        return value

    @field_validator("allowed_file_types")
    @classmethod
    def normalize_allowed_types(cls, value: list[str]) -> list[str]:
        # remove blanks + deduplicate while preserving order
        return list(dict.fromkeys(t.strip() for t in value if t and t.strip()))


class UploadLabels(BaseModel):
    """Message templates for every user-visible outcome.

    Pass a translated instance to localize the pipeline's messages.
    """

    error_max_files_reached: str = "Maximum number of files ({max_files}) reached."
    error_file_too_large: str = "File '{file_name}' exceeds maximum size of {max_size}."
    error_file_type_not_allowed: str = "File type '{content_type}' is not allowed for file '{file_name}'."
    error_no_files_to_upload: str = "No files to upload."
    error_upload_in_progress: str = "Upload already in progress."
    error_uploading_file: str = "Error uploading file '{file_name}': {reason}"
    error_deleting_file: str = "Failed to delete file '{file_name}' from storage."
    error_deleting_file_exception: str = "Error deleting file '{file_name}': {reason}"
    error_downloading_file: str = "Error downloading file '{file_name}': {reason}"
    image_compressed: str = "Image '{file_name}' was compressed: {original_size} → {compressed_size}"
    image_compression_failed: str = "Image '{file_name}' could not be compressed sufficiently. {reason}"
    error_during_compression: str = "Error compressing '{file_name}': {reason}"
