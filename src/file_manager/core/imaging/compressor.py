"""Re-encode images until they fit a byte budget.

Quality levels are tried in the order given; the first encoding whose size is
within the budget wins. If the last level still does not fit, the result is a
failure that reports the smallest size reached.
"""

import asyncio
import io
from collections.abc import Sequence

from aws_lambda_powertools import Logger
from PIL import Image, ImageOps

from file_manager.core.models.compression import CompressionResult
from file_manager.core.models.errors import ValidationError
from file_manager.core.utils.constants import (
    COMPRESSED_FORMAT,
    COMPRESSED_MIME_TYPE,
    ERROR_CODE_BUDGET_NOT_MET,
    ERROR_CODE_IMAGE_DECODE_FAILED,
    format_file_size,
)

logger = Logger(UTC=True)


class SizeBudgetCompressor:
    """Lossy JPEG re-encoder with an optional one-time downscale."""

    def compress(
        self,
        source: bytes,
        mime_hint: str | None,
        target_max_bytes: int,
        quality_levels: Sequence[float],
        max_dimension: int,
    ) -> CompressionResult:
        """Compress ``source`` to at most ``target_max_bytes``.

        Args:
            source: Raw image bytes
            mime_hint: Declared MIME type, used for diagnostics only
            target_max_bytes: Byte budget the encoding must not exceed
            quality_levels: Levels in (0, 1], tried in the given order
            max_dimension: Largest allowed width/height in pixels

        Returns:
            A successful result with the encoded bytes, or a failure result
            when the image cannot be decoded or no level meets the budget

        Raises:
            ValidationError: If the arguments are out of range
        """
        self._validate_arguments(target_max_bytes, quality_levels, max_dimension)

        original_size = len(source)

        try:
            image = self._decode(source)
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
            logger.warning(
                "Image could not be decoded",
                extra={"mime_hint": mime_hint, "size": original_size, "error": str(exc)},
            )
            return CompressionResult(
                success=False,
                original_size=original_size,
                message=f"The data is not a valid image ({mime_hint or 'unknown type'}).",
                error_code=ERROR_CODE_IMAGE_DECODE_FAILED,
            )

        image = self._fit_within(image, max_dimension)
        width, height = image.size

        best_size: int | None = None
        best_quality: float | None = None

        for quality in quality_levels:
            encoded = self._encode(image, quality)
            size = len(encoded)

            logger.debug(
                "Compression attempt",
                extra={"quality": quality, "size": size, "target": target_max_bytes},
            )

            if size <= target_max_bytes:
                logger.info(
                    "Compression successful",
                    extra={
                        "original_size": original_size,
                        "compressed_size": size,
                        "quality": quality,
                    },
                )
                return CompressionResult(
                    success=True,
                    data=encoded,
                    original_size=original_size,
                    compressed_size=size,
                    quality=quality,
                    content_type=COMPRESSED_MIME_TYPE,
                    width=width,
                    height=height,
                )

            if best_size is None or size < best_size:
                best_size = size
                best_quality = quality

        logger.info(
            "Compression budget not met",
            extra={"original_size": original_size, "best_size": best_size, "target": target_max_bytes},
        )
        return CompressionResult(
            success=False,
            original_size=original_size,
            compressed_size=best_size or 0,
            quality=best_quality,
            content_type=COMPRESSED_MIME_TYPE,
            width=width,
            height=height,
            message=(
                f"Smallest result was {format_file_size(best_size or 0)}, "
                f"limit is {format_file_size(target_max_bytes)}."
            ),
            error_code=ERROR_CODE_BUDGET_NOT_MET,
        )

    async def compress_async(
        self,
        source: bytes,
        mime_hint: str | None,
        target_max_bytes: int,
        quality_levels: Sequence[float],
        max_dimension: int,
    ) -> CompressionResult:
        """Run :meth:`compress` in a worker thread."""
        return await asyncio.to_thread(
            self.compress,
            source,
            mime_hint,
            target_max_bytes,
            quality_levels,
            max_dimension,
        )

    @staticmethod
    def _validate_arguments(
        target_max_bytes: int,
        quality_levels: Sequence[float],
        max_dimension: int,
    ) -> None:
        if target_max_bytes <= 0:
            raise ValidationError(
                message="Target size must be positive",
                details={"target_max_bytes": target_max_bytes},
            )

        if not quality_levels:
            raise ValidationError(message="At least one quality level is required")

        invalid = [level for level in quality_levels if not 0.0 < level <= 1.0]
        if invalid:
            raise ValidationError(
                message="Quality levels must be in (0, 1]",
                details={"invalid_levels": invalid},
            )

        if max_dimension <= 0:
            raise ValidationError(
                message="Maximum dimension must be positive",
                details={"max_dimension": max_dimension},
            )

    @staticmethod
    def _decode(source: bytes) -> Image.Image:
        image = Image.open(io.BytesIO(source))
        image.load()
        image = ImageOps.exif_transpose(image)

        # JPEG has no alpha channel; flatten transparent images onto white
        if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background

        return image.convert("RGB")

    @staticmethod
    def _fit_within(image: Image.Image, max_dimension: int) -> Image.Image:
        width, height = image.size

        if width <= max_dimension and height <= max_dimension:
            return image

        if width > height:
            new_width = max_dimension
            new_height = max(1, round(height * max_dimension / width))
        else:
            new_height = max_dimension
            new_width = max(1, round(width * max_dimension / height))

        logger.debug(
            "Downscaling image",
            extra={"from": [width, height], "to": [new_width, new_height]},
        )
        return image.resize((new_width, new_height), Image.Resampling.LANCZOS)

    @staticmethod
    def _encode(image: Image.Image, quality: float) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format=COMPRESSED_FORMAT, quality=round(quality * 100), optimize=True)
        return buffer.getvalue()
