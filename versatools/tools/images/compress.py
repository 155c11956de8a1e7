"""Engine re-encoding images at a target format and quality."""

from __future__ import annotations

from enum import Enum
from io import BytesIO
from typing import Any

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field

from ...core.utils import get_logger, iter_bytes, strip_extension
from ...errors import ProcessingError
from ..common.interfaces import (
    EngineInput,
    EngineKind,
    ExecutionMode,
    ExecutionResult,
    as_tool_input,
    estimate_duration,
    validate_options,
)
from .utils import has_alpha, open_image, select_image

LOGGER = get_logger("versatools.tools.image_compress")

PNG_COMPRESS_LEVEL = 9


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    AVIF = "avif"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageFormat.JPEG else self.value


class CompressOptions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    quality: int = Field(80, ge=1, le=100)
    format: ImageFormat = ImageFormat.JPEG


def _palette_colors(quality: int) -> int:
    return max(2, min(256, round(256 * quality / 100)))


def compress_image(image: Image.Image, image_format: ImageFormat, quality: int) -> bytes:
    """Encode ``image`` as ``image_format`` at ``quality`` (1-100)."""

    buffer = BytesIO()
    if image_format is ImageFormat.JPEG:
        image.convert("RGB").save(buffer, format="JPEG", quality=quality, optimize=True, progressive=True)
    elif image_format is ImageFormat.PNG:
        source = image.convert("RGBA" if has_alpha(image) else "RGB")
        method = Image.Quantize.FASTOCTREE if source.mode == "RGBA" else Image.Quantize.MEDIANCUT
        quantized = source.quantize(colors=_palette_colors(quality), method=method)
        quantized.save(buffer, format="PNG", optimize=True, compress_level=PNG_COMPRESS_LEVEL)
    else:
        source = image.convert("RGBA" if has_alpha(image) else "RGB")
        source.save(buffer, format=image_format.value.upper(), quality=quality)
    return buffer.getvalue()


class ImageCompressor:
    kind = EngineKind.IMAGE_COMPRESSOR
    tool_id = kind.value
    execution_mode = ExecutionMode.BATCH
    processing_rate = 2.0
    options_model = CompressOptions

    def validate(self, raw_options: Any) -> CompressOptions:
        return validate_options(self.options_model, raw_options)

    def estimate_duration(self, size_mb: float) -> float:
        return estimate_duration(self.processing_rate, size_mb)

    def process(self, data: EngineInput, options: CompressOptions) -> ExecutionResult:
        upload = select_image(as_tool_input(data, self.tool_id))
        image = open_image(upload)

        try:
            output = compress_image(image, options.format, options.quality)
        except (OSError, ValueError, KeyError) as exc:
            raise ProcessingError(f"Failed to compress image: {exc}") from exc

        LOGGER.debug(
            "Compressed %s from %d to %d bytes as %s",
            upload.filename,
            upload.size,
            len(output),
            options.format.value,
        )

        return ExecutionResult(
            output_stream=iter_bytes(output),
            metadata={
                "originalName": upload.filename,
                "originalSize": upload.size,
                "outputSize": len(output),
                "width": image.width,
                "height": image.height,
                "mimeType": f"image/{options.format.value}",
                "fileName": f"{strip_extension(upload.filename)}-compressed.{options.format.extension}",
            },
        )
