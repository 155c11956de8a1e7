"""Engine hiding a watermark by blurring a rectangle of the image."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from io import BytesIO
from typing import Any

from PIL import Image, ImageFilter
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
from .utils import js_round, open_image, select_image

LOGGER = get_logger("versatools.tools.watermark")

BLUR_RADIUS = 20


class WatermarkOptions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    x: float = Field(..., ge=0)
    y: float = Field(..., ge=0)
    width: float = Field(..., ge=1)
    height: float = Field(..., ge=1)


@dataclass(frozen=True)
class Region:
    x: int
    y: int
    width: int
    height: int

    def box(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def clamp_region(
    x: float, y: float, width: float, height: float, *, image_width: int, image_height: int
) -> Region:
    """Clamp a rectangle to the image bounds, one edge at a time.

    >>> clamp_region(90, 90, 50, 50, image_width=100, image_height=100)
    Region(x=90, y=90, width=10, height=10)
    """

    left = max(0.0, min(x, image_width - 1))
    top = max(0.0, min(y, image_height - 1))
    region_width = max(1.0, min(width, image_width - left))
    region_height = max(1.0, min(height, image_height - top))
    left_px, top_px = js_round(left), js_round(top)
    # Rounding can push the far edge past the image; keep the box inside it.
    width_px = max(1, min(js_round(region_width), image_width - left_px))
    height_px = max(1, min(js_round(region_height), image_height - top_px))
    return Region(left_px, top_px, width_px, height_px)


def blur_region(image: Image.Image, region: Region, radius: float = BLUR_RADIUS) -> Image.Image:
    """Return a copy of ``image`` with ``region`` replaced by a blurred version of itself."""

    base = image.convert("RGBA") if image.mode not in ("RGB", "RGBA") else image.copy()
    patch = base.crop(region.box()).filter(ImageFilter.GaussianBlur(radius))
    base.paste(patch, (region.x, region.y))
    return base


class WatermarkRemover:
    kind = EngineKind.WATERMARK_REMOVER
    tool_id = kind.value
    execution_mode = ExecutionMode.BATCH
    processing_rate = 3.0
    options_model = WatermarkOptions

    def validate(self, raw_options: Any) -> WatermarkOptions:
        return validate_options(self.options_model, raw_options)

    def estimate_duration(self, size_mb: float) -> float:
        return estimate_duration(self.processing_rate, size_mb)

    def process(self, data: EngineInput, options: WatermarkOptions) -> ExecutionResult:
        upload = select_image(as_tool_input(data, self.tool_id))
        image = open_image(upload)

        if not image.width or not image.height:
            raise ProcessingError("Unable to read image dimensions")

        region = clamp_region(
            options.x,
            options.y,
            options.width,
            options.height,
            image_width=image.width,
            image_height=image.height,
        )
        LOGGER.debug("Blurring region %s of %s", region, upload.filename)

        buffer = BytesIO()
        try:
            blur_region(image, region).save(buffer, format="PNG")
        except (OSError, ValueError) as exc:
            raise ProcessingError(f"Failed to remove watermark: {exc}") from exc
        output = buffer.getvalue()

        return ExecutionResult(
            output_stream=iter_bytes(output),
            metadata={
                "originalName": upload.filename,
                "outputSize": len(output),
                "mimeType": "image/png",
                "fileName": f"{strip_extension(upload.filename)}-watermark-removed.png",
                "region": region.as_dict(),
            },
        )
